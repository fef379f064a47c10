"""
WavePulse – Signal Mapper
===========================
Mapea entre Signal (domain entity) y SignalModel (ORM).

- El domain NO conoce SQLAlchemy
- El ORM Model NO tiene lógica de negocio
- El mapper traduce entre ambos mundos
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

from wavepulse.domain.entities.signal import Signal, SignalLevel, SignalType


def _to_decimal(value: Optional[float]) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(round(value, 8)))


def _to_float(value) -> Optional[float]:
    return float(value) if value is not None else None


class SignalMapper:
    """
    Mapper bidireccional Signal ↔ SignalModel.

    USO:
        mapper = SignalMapper()
        model = SignalModel(**mapper.to_model(signal, "DOGEUSDT"))
        entity = mapper.to_entity(model)
    """

    def to_model(self, signal: Signal, symbol: str) -> Dict[str, Any]:
        """
        Convierte Signal entity a dict para crear SignalModel.

        Retorna dict en lugar de SignalModel para no importar el modelo
        en este archivo.
        """
        return {
            "symbol": symbol,
            "signal_type": signal.signal_type.value,
            "level": signal.level.value,
            "price": _to_decimal(signal.price),
            "candle_time": int(signal.time),
            "stop_loss": _to_decimal(signal.stop_loss),
            "take_profit": _to_decimal(signal.take_profit),
            "strategy": signal.strategy,
            "conditions": list(signal.conditions),
        }

    def to_entity(self, model) -> Signal:
        """Convierte un SignalModel (o cualquier objeto con sus atributos) a Signal."""
        return Signal(
            signal_type=SignalType(model.signal_type),
            level=SignalLevel(model.level),
            price=float(model.price),
            time=int(model.candle_time),
            stop_loss=_to_float(model.stop_loss),
            take_profit=_to_float(model.take_profit),
            strategy=model.strategy or "",
            conditions=tuple(model.conditions or ()),
        )
