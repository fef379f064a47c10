"""Domain repository interfaces (ABCs)."""
from wavepulse.domain.repositories.signal_repository import ISignalRepository

__all__ = ["ISignalRepository"]
