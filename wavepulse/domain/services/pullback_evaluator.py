"""
WavePulse – Domain Service: Pullback Evaluator
================================================
Estrategia alternativa: retroceso a la EMA rápida dentro de tendencia,
confirmado por el rebote del RSI.

  BUY:
    close > EMA_trend            (tendencia alcista)
    close < EMA_fast             (retroceso bajo la EMA rápida)
    RSI[n−2] ≤ buy_level < RSI[n]  (RSI sale de la zona de retroceso)

  SELL (espejo):
    close < EMA_trend
    close > EMA_fast
    RSI[n−2] ≥ sell_level > RSI[n]

NIVEL:
  High   → retroceso profundo (low < EMA_fast − ATR) y pico de volumen
  Medium → resto

Igual que la estrategia WaveTrend: rama BUY primero, edge-triggered
por el cruce del RSI, y sin memoria entre llamadas.
"""

from __future__ import annotations

from typing import Optional

from wavepulse.domain.entities.candle import CandleSeries
from wavepulse.domain.entities.signal import Signal, SignalLevel, SignalType
from wavepulse.domain.exceptions.domain_errors import (
    IndicatorDivergenceError,
    InsufficientDataError,
    ValidationError,
)
from wavepulse.domain.services.indicator_calculator import (
    IndicatorCalculator,
    IndicatorParams,
)
from wavepulse.domain.services.risk_calculator import RiskCalculator
from wavepulse.domain.services.signal_evaluator import (
    ISignalEvaluator,
    SignalRulesConfig,
    require_lookback,
    require_values,
)
from wavepulse.domain.value_objects.indicator_frame import IndicatorFrame
from wavepulse.shared.logging.logger import get_logger

logger = get_logger("pullback_evaluator")

COND_PULLBACK = "pullback"
COND_RSI_CROSS = "rsi_cross"
COND_DEEP_PULLBACK = "deep_pullback"
COND_VOLUME_SPIKE = "volume_spike"

_LAST_INDICATORS = ("ema_trend", "ema_fast", "rsi", "atr", "volume_sma")
_PREV_INDICATORS = ("rsi",)


class PullbackEvaluator(ISignalEvaluator):
    """Evaluador de retrocesos EMA + RSI."""

    def __init__(
        self,
        params: IndicatorParams = None,
        config: SignalRulesConfig = None,
        risk_calculator: RiskCalculator = None,
    ) -> None:
        self._params = params or IndicatorParams()
        self._config = config or SignalRulesConfig()
        self._risk = risk_calculator or RiskCalculator()

    @property
    def name(self) -> str:
        return "pullback"

    @property
    def params(self) -> IndicatorParams:
        return self._params

    @property
    def required_lookback(self) -> int:
        p = self._params
        return max(p.required_lookback, p.ema_fast_period, p.atr_period + 1)

    def evaluate(self, series: CandleSeries) -> Optional[Signal]:
        if len(series) < self.required_lookback:
            return None
        frame = IndicatorCalculator.build_frame(series, self._params)
        return self.evaluate_frame(series, frame)

    def evaluate_frame(
        self,
        series: CandleSeries,
        frame: IndicatorFrame,
    ) -> Optional[Signal]:
        if len(frame) != len(series):
            raise ValidationError(
                f"Frame de {len(frame)} valores para serie de {len(series)} velas",
                field="indicator_frame", value=len(frame),
            )

        n = len(series)
        try:
            require_lookback(series, self.required_lookback)
            last = require_values(frame, _LAST_INDICATORS, n - 1)
            prev = require_values(frame, _PREV_INDICATORS, n - 2)
        except (InsufficientDataError, IndicatorDivergenceError) as e:
            logger.debug("Sin evaluación: %s", e.message)
            return None

        candle = series[-1]
        cfg = self._config
        volume_spike = candle.volume > last["volume_sma"] * cfg.volume_spike_factor

        signal_type = None
        deep = False
        if (
            candle.close > last["ema_trend"]
            and candle.close < last["ema_fast"]
            and prev["rsi"] <= cfg.rsi_pullback_buy < last["rsi"]
        ):
            signal_type = SignalType.BUY
            deep = candle.low < last["ema_fast"] - last["atr"]
        elif (
            candle.close < last["ema_trend"]
            and candle.close > last["ema_fast"]
            and prev["rsi"] >= cfg.rsi_pullback_sell > last["rsi"]
        ):
            signal_type = SignalType.SELL
            deep = candle.high > last["ema_fast"] + last["atr"]

        if signal_type is None:
            return None

        conditions = [COND_PULLBACK, COND_RSI_CROSS]
        if deep:
            conditions.append(COND_DEEP_PULLBACK)
        if volume_spike:
            conditions.append(COND_VOLUME_SPIKE)
        level = SignalLevel.HIGH if deep and volume_spike else SignalLevel.MEDIUM

        levels = self._risk.calculate_levels(signal_type, candle.close, last["atr"])
        return Signal(
            signal_type=signal_type,
            level=level,
            price=candle.close,
            time=candle.time,
            stop_loss=levels.stop_loss,
            take_profit=levels.take_profit,
            strategy=self.name,
            conditions=tuple(conditions),
        )
