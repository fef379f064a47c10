"""
WavePulse – Domain Entity: Signal
===================================
Señal de trading inmutable generada por un evaluador de señales.

DECISIONES DE DISEÑO:
- frozen=True → inmutable una vez generada, EVITA REPAINTING.
  Nadie puede alterar una señal emitida retroactivamente.
- time == time de la vela que la produjo. Es la ÚNICA clave de
  deduplicación (ver DedupGate).
- conditions es tuple (inmutable) → registro auditable de qué
  factores confirmaron la señal.

CAMPOS:
- signal_type:  BUY | SELL
- level:        High | Medium | Low (confianza)
- price:        close de la vela evaluada
- time:         epoch ms de la vela evaluada
- stop_loss:    nivel ATR informativo (None si ATR indefinido)
- take_profit:  nivel ATR informativo (None si ATR indefinido)
- strategy:     nombre del evaluador que la produjo
- conditions:   ("macd", "rsi", "volume_spike", ...)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SignalType(str, Enum):
    """Dirección de la señal."""

    BUY = "BUY"
    SELL = "SELL"


class SignalLevel(str, Enum):
    """Nivel de confianza de la señal."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


@dataclass(frozen=True, slots=True)
class Signal:
    """Señal direccional inmutable emitida desde la última vela de una serie."""

    signal_type: SignalType
    level: SignalLevel
    price: float
    time: int
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    strategy: str = ""
    conditions: tuple = ()

    def to_dict(self) -> dict:
        """Serialización para API / persistencia."""
        return {
            "type": self.signal_type.value,
            "level": self.level.value,
            "price": self.price,
            "time": self.time,
            "stop_loss": self.stop_loss,
            "take_profit": self.take_profit,
            "strategy": self.strategy,
            "conditions": list(self.conditions),
        }

