"""
WavePulse – Value Object: IndicatorFrame
==========================================
Conjunto de series de indicadores alineadas 1:1 con una CandleSeries.

INVARIANTE:
  Todas las series tienen la misma longitud que la serie de velas y el
  índice i de cada una corresponde a la vela i. Los valores son None
  mientras el indicador está en warm-up.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Optional, Tuple

from wavepulse.domain.exceptions.domain_errors import ValidationError

Series = Tuple[Optional[float], ...]


@dataclass(frozen=True)
class IndicatorFrame:
    """Bundle inmutable de indicadores por índice de vela."""

    ema_fast: Series
    ema_trend: Series
    rsi: Series
    atr: Series
    volume_sma: Series
    wt1: Series
    wt2: Series
    macd_line: Series
    macd_signal: Series

    def __post_init__(self) -> None:
        lengths = {f.name: len(getattr(self, f.name)) for f in fields(self)}
        if len(set(lengths.values())) > 1:
            raise ValidationError(
                f"Series de indicadores desalineadas: {lengths}",
                field="indicator_frame", value=lengths,
            )

    def __len__(self) -> int:
        return len(self.ema_fast)

    def value_at(self, name: str, index: int) -> Optional[float]:
        """
        Valor del indicador `name` en `index`, o None si no está definido.

        NaN se normaliza a None para que ninguna comparación posterior
        reciba un NaN (toda comparación con NaN es False en silencio).
        """
        value = getattr(self, name)[index]
        if value is None or math.isnan(value):
            return None
        return value

    def snapshot(self, index: int = -1) -> dict:
        """Valores de todos los indicadores en un índice (para log / API)."""
        return {f.name: self.value_at(f.name, index) for f in fields(self)}
