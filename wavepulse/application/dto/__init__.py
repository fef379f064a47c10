"""Application DTOs - Data Transfer Objects for the API."""
from wavepulse.application.dto.signal_dto import EngineStatusDTO, SignalResponseDTO

__all__ = ["EngineStatusDTO", "SignalResponseDTO"]
