"""Application services - Background orchestration."""
from wavepulse.application.services.signal_poller import SignalPoller

__all__ = ["SignalPoller"]
