"""
WavePulse – Signal ORM Model
==============================
Modelo para la tabla `signals` (historial de señales emitidas).

DECISIONES DE DISEÑO:

- UNIQUE (symbol, candle_time): una vela produce como mucho una señal.
  Un reintento at-least-once choca con la restricción y el repositorio
  lo trata como éxito.
- DECIMAL(20,8) para precios.
- JSON para conditions: array de condiciones que activaron la señal.

RELACIÓN CON ENTIDAD DE DOMINIO:
- La conversión se hace en SignalMapper (no aquí).
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    JSON,
    BigInteger,
    DateTime,
    Enum as SQLEnum,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from wavepulse.infrastructure.persistence.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SignalModel(Base):
    """Modelo ORM para señales."""

    __tablename__ = "signals"

    # ─── Primary Key ──────────────────────────────────────────────────
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True, autoincrement=True,
    )

    # ─── Señal ────────────────────────────────────────────────────────
    symbol: Mapped[str] = mapped_column(String(32), nullable=False)
    signal_type: Mapped[str] = mapped_column(
        SQLEnum("BUY", "SELL", name="signal_type_enum"),
        nullable=False,
    )
    level: Mapped[str] = mapped_column(
        SQLEnum("High", "Medium", "Low", name="signal_level_enum"),
        nullable=False,
    )
    price: Mapped[Decimal] = mapped_column(
        Numeric(20, 8), nullable=False,
        comment="Close de la vela que generó la señal",
    )
    candle_time: Mapped[int] = mapped_column(
        BigInteger, nullable=False,
        comment="Epoch ms de apertura de la vela",
    )

    # ─── Niveles informativos ─────────────────────────────────────────
    stop_loss: Mapped[Optional[Decimal]] = mapped_column(Numeric(20, 8), default=None)
    take_profit: Mapped[Optional[Decimal]] = mapped_column(Numeric(20, 8), default=None)

    # ─── Auditoría ────────────────────────────────────────────────────
    strategy: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    conditions: Mapped[list] = mapped_column(
        JSON, nullable=False,
        comment="Array de condiciones que activaron la señal",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("symbol", "candle_time", name="uq_signals_symbol_candle_time"),
        Index("idx_signals_symbol_id", "symbol", "id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Signal(id={self.id}, symbol='{self.symbol}', "
            f"type={self.signal_type}, candle_time={self.candle_time})>"
        )
