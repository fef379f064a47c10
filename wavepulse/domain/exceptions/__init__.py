"""Domain exceptions."""
from wavepulse.domain.exceptions.domain_errors import (
    DomainError,
    ValidationError,
    InsufficientDataError,
    IndicatorDivergenceError,
    CandleFetchError,
    SignalPersistenceError,
)

__all__ = [
    "DomainError",
    "ValidationError",
    "InsufficientDataError",
    "IndicatorDivergenceError",
    "CandleFetchError",
    "SignalPersistenceError",
]
