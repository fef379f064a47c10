"""
WavePulse – Application DTO: Signal
=====================================
Data Transfer Objects para la API.

Los DTOs sirven como contratos entre capas.
Son estructuras simples sin lógica de negocio.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from wavepulse.domain.entities.signal import Signal


@dataclass
class SignalResponseDTO:
    """DTO de respuesta con una señal emitida."""

    symbol: str
    signal_type: str
    level: str
    price: float
    time: int
    stop_loss: Optional[float]
    take_profit: Optional[float]
    strategy: str
    conditions: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "type": self.signal_type,
            "level": self.level,
            "price": self.price,
            "time": self.time,
            "stop_loss": round(self.stop_loss, 6) if self.stop_loss is not None else None,
            "take_profit": round(self.take_profit, 6) if self.take_profit is not None else None,
            "strategy": self.strategy,
            "conditions": self.conditions,
        }

    @classmethod
    def from_entity(cls, signal: Signal, symbol: str) -> "SignalResponseDTO":
        return cls(
            symbol=symbol,
            signal_type=signal.signal_type.value,
            level=signal.level.value,
            price=signal.price,
            time=signal.time,
            stop_loss=signal.stop_loss,
            take_profit=signal.take_profit,
            strategy=signal.strategy,
            conditions=list(signal.conditions),
        )


@dataclass
class EngineStatusDTO:
    """Estado agregado del motor para /api/status."""

    pipeline: Dict[str, Any]
    poller: Dict[str, Any]
    last_emitted_signal: Optional[Dict[str, Any]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pipeline": self.pipeline,
            "poller": self.poller,
            "last_emitted_signal": self.last_emitted_signal,
        }
