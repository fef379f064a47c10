"""External systems - Exchange APIs."""

from wavepulse.infrastructure.external.bybit_adapter import BybitKlineAdapter

__all__ = ["BybitKlineAdapter"]
