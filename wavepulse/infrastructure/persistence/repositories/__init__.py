"""Repository implementations."""

from wavepulse.infrastructure.persistence.repositories.in_memory_signal_repository import (
    InMemorySignalRepository,
)
from wavepulse.infrastructure.persistence.repositories.signal_repository_impl import (
    SqlSignalRepository,
)

__all__ = [
    "InMemorySignalRepository",
    "SqlSignalRepository",
]
