"""Domain entities."""
from wavepulse.domain.entities.candle import Candle, CandleSeries, build_series
from wavepulse.domain.entities.signal import Signal, SignalType, SignalLevel
from wavepulse.domain.entities.engine_state import EngineState

__all__ = [
    "Candle",
    "CandleSeries",
    "build_series",
    "Signal",
    "SignalType",
    "SignalLevel",
    "EngineState",
]
