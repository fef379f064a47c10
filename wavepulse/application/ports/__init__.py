"""Application ports - Interfaces to infrastructure."""
from wavepulse.application.ports.candle_source import ICandleSource

__all__ = ["ICandleSource"]
