"""
WavePulse – Domain Service: Risk Calculator
=============================================
Niveles de stop loss / take profit basados en ATR.

FÓRMULAS:
  BUY:  SL = price − ATR × stop_mult     TP = price + ATR × profit_mult
  SELL: SL = price + ATR × stop_mult     TP = price − ATR × profit_mult

Los niveles son INFORMATIVOS: acompañan a la señal para el trader pero
NUNCA bloquean su emisión. Sin ATR definido los niveles quedan en None.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from wavepulse.domain.entities.signal import SignalType


@dataclass(frozen=True)
class RiskConfig:
    """Multiplicadores ATR."""

    atr_stop_multiplier: float = 1.5
    atr_profit_multiplier: float = 2.5

    @classmethod
    def from_settings(cls, settings) -> "RiskConfig":
        return cls(
            atr_stop_multiplier=settings.signal_atr_stop_multiplier,
            atr_profit_multiplier=settings.signal_atr_profit_multiplier,
        )


@dataclass(frozen=True)
class RiskLevels:
    """Resultado del cálculo de niveles de riesgo."""

    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None


class RiskCalculator:
    """
    Calculadora de niveles de riesgo.

    NO tiene dependencias externas ni estado.
    """

    def __init__(self, config: RiskConfig = None):
        self._config = config or RiskConfig()

    @property
    def config(self) -> RiskConfig:
        return self._config

    def calculate_levels(
        self,
        signal_type: SignalType,
        price: float,
        atr: Optional[float],
    ) -> RiskLevels:
        """
        Calcula SL y TP alrededor del precio de entrada.

        Args:
            signal_type: BUY o SELL
            price: close de la vela que generó la señal
            atr: ATR en esa vela (None durante warm-up)
        """
        if atr is None or atr <= 0:
            return RiskLevels()

        stop_distance = atr * self._config.atr_stop_multiplier
        profit_distance = atr * self._config.atr_profit_multiplier

        if signal_type is SignalType.BUY:
            return RiskLevels(
                stop_loss=price - stop_distance,
                take_profit=price + profit_distance,
            )
        return RiskLevels(
            stop_loss=price + stop_distance,
            take_profit=price - profit_distance,
        )
