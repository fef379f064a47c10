"""Application use cases - Business logic orchestration."""

from wavepulse.application.use_cases.signal_pipeline import FetchSeries, SignalPipeline

__all__ = ["FetchSeries", "SignalPipeline"]
