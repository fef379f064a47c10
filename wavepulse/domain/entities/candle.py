"""
WavePulse – Domain Entity: Candle
===================================
Vela OHLCV inmutable de intervalo fijo.

Decisiones de diseño:
- frozen=True → inmutable una vez construida, EVITA REPAINTING.
- Se usa dataclass por rendimiento (más ligera que Pydantic para hot-path).
- La coherencia OHLC se valida al construir: high ≥ max(open, close, low)
  y low ≤ min(open, close, high).

CandleSeries es una tupla ordenada por tiempo (ascendente, sin
duplicados). build_series() es el único constructor validado.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

from wavepulse.domain.exceptions.domain_errors import ValidationError


@dataclass(frozen=True, slots=True)
class Candle:
    """Vela OHLCV con timestamp de apertura en epoch ms."""

    time: int            # epoch ms de apertura
    open: float
    high: float
    low: float
    close: float
    volume: float

    def __post_init__(self) -> None:
        if self.high < max(self.open, self.close, self.low):
            raise ValidationError(
                f"high={self.high} por debajo de open/close/low en t={self.time}",
                field="high", value=self.high,
            )
        if self.low > min(self.open, self.close, self.high):
            raise ValidationError(
                f"low={self.low} por encima de open/close/high en t={self.time}",
                field="low", value=self.low,
            )

    @classmethod
    def from_kline(cls, row: Sequence) -> "Candle":
        """
        Construye una vela desde la tupla nativa del exchange.

        Formato Bybit v5: [startTime, open, high, low, close, volume, turnover]
        con todos los campos como strings. turnover se ignora.
        """
        if len(row) < 6:
            raise ValidationError(
                f"Kline con {len(row)} campos, se esperaban al menos 6",
                field="kline", value=list(row),
            )
        try:
            return cls(
                time=int(row[0]),
                open=float(row[1]),
                high=float(row[2]),
                low=float(row[3]),
                close=float(row[4]),
                volume=float(row[5]),
            )
        except (TypeError, ValueError) as e:
            raise ValidationError(
                f"Kline no numérica: {e}", field="kline", value=list(row),
            ) from e

    def to_dict(self) -> dict:
        """Serialización para API."""
        return {
            "time": self.time,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }


CandleSeries = Tuple[Candle, ...]


def build_series(candles: Iterable[Candle]) -> CandleSeries:
    """
    Congela una secuencia de velas en una CandleSeries validada.

    Requiere orden cronológico estrictamente creciente: un timestamp
    repetido o desordenado indica un adaptador defectuoso.
    """
    series = tuple(candles)
    for prev, curr in zip(series, series[1:]):
        if curr.time <= prev.time:
            raise ValidationError(
                f"Serie no estrictamente creciente: {prev.time} → {curr.time}",
                field="time", value=curr.time,
            )
    return series
