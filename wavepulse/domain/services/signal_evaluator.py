"""
WavePulse – Domain Service: Signal Evaluator (interfaz)
=========================================================
Contrato común de las estrategias de señal.

    evaluate(series) -> Signal | None

Cada estrategia es una implementación intercambiable de ISignalEvaluator
(patrón strategy). El pipeline solo conoce la interfaz; el container
elige la implementación según settings.signal_strategy.

CONTRATO:
- Solo se evalúa la ÚLTIMA vela (índice n−1), usando n−2 para cruces.
  Nunca se re-evalúan velas históricas.
- Serie más corta que required_lookback → None (warm-up, no es error).
- Indicador None/NaN en n−1 o n−2 → None (divergencia tratada como
  datos insuficientes; nunca entra un NaN en una comparación).
- Función pura: sin memoria entre llamadas. La deduplicación es
  responsabilidad de DedupGate.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from wavepulse.domain.entities.candle import CandleSeries
from wavepulse.domain.entities.signal import Signal
from wavepulse.domain.exceptions.domain_errors import (
    IndicatorDivergenceError,
    InsufficientDataError,
)
from wavepulse.domain.services.indicator_calculator import IndicatorParams
from wavepulse.domain.value_objects.indicator_frame import IndicatorFrame


@dataclass(frozen=True)
class SignalRulesConfig:
    """Umbrales de las reglas de señal."""

    high_confirmations: int = 2      # confirmaciones para nivel High
    rsi_midline: float = 50.0
    volume_spike_factor: float = 1.5
    rsi_pullback_buy: float = 40.0
    rsi_pullback_sell: float = 60.0

    @classmethod
    def from_settings(cls, settings) -> "SignalRulesConfig":
        return cls(
            high_confirmations=settings.signal_high_confirmations,
            rsi_midline=settings.signal_rsi_midline,
            volume_spike_factor=settings.signal_volume_spike_factor,
            rsi_pullback_buy=settings.signal_rsi_pullback_buy,
            rsi_pullback_sell=settings.signal_rsi_pullback_sell,
        )


class ISignalEvaluator(ABC):
    """Interfaz de una estrategia de generación de señales."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Identificador de la estrategia (se guarda en Signal.strategy)."""
        pass

    @property
    @abstractmethod
    def params(self) -> IndicatorParams:
        """Periodos de los indicadores que usa la estrategia."""
        pass

    @property
    @abstractmethod
    def required_lookback(self) -> int:
        """Velas mínimas para intentar una evaluación."""
        pass

    @abstractmethod
    def evaluate(self, series: CandleSeries) -> Optional[Signal]:
        """
        Calcula indicadores sobre la serie y evalúa la última vela.

        Returns:
            Signal candidata o None
        """
        pass

    @abstractmethod
    def evaluate_frame(
        self,
        series: CandleSeries,
        frame: IndicatorFrame,
    ) -> Optional[Signal]:
        """
        Evalúa la última vela con un frame ya calculado.

        Permite al pipeline (o a los tests) reutilizar un frame.
        """
        pass


# ════════════════════════════════════════════════════════════════════
#  HELPERS COMPARTIDOS POR LAS ESTRATEGIAS
# ════════════════════════════════════════════════════════════════════

def require_lookback(series: CandleSeries, required: int) -> None:
    """Lanza InsufficientDataError si la serie no cubre el lookback."""
    if len(series) < max(required, 2):
        raise InsufficientDataError(
            f"Serie de {len(series)} velas < lookback {required}",
            required=required,
            available=len(series),
        )


def require_values(
    frame: IndicatorFrame,
    names: Iterable[str],
    index: int,
) -> Dict[str, float]:
    """
    Lee los indicadores `names` en `index`.

    Lanza IndicatorDivergenceError en el primero que no esté definido.
    """
    values: Dict[str, float] = {}
    for name in names:
        value = frame.value_at(name, index)
        if value is None:
            raise IndicatorDivergenceError(
                f"Indicador '{name}' indefinido en índice {index}",
                indicator=name,
                index=index,
            )
        values[name] = value
    return values
