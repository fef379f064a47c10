"""
WavePulse – Domain Service: WaveTrend Confluence Evaluator
============================================================
Estrategia por defecto: cruce WaveTrend a favor de tendencia con
confirmaciones de MACD, RSI y volumen.

═══════════════════════════════════════════════════════════════
                CONDICIÓN PRIMARIA (obligatoria)
═══════════════════════════════════════════════════════════════

  BUY:  close > EMA_trend  AND  wt1[n−2] < wt2[n−2]  AND  wt1[n−1] > wt2[n−1]
  SELL: close < EMA_trend  AND  wt1[n−2] > wt2[n−2]  AND  wt1[n−1] < wt2[n−1]

  El cruce es EDGE-TRIGGERED: solo dispara en la vela donde el orden
  relativo de las líneas cambia, no mientras siguen cruzadas.

═══════════════════════════════════════════════════════════════
                CONFIRMACIONES Y NIVEL
═══════════════════════════════════════════════════════════════

  macd: línea MACD > señal (BUY) / < señal (SELL)
  rsi:  RSI > 50 (BUY) / < 50 (SELL)

  confirmaciones ≥ high_confirmations AND pico de volumen → High
  confirmaciones ≥ 1                                       → Medium
  sin confirmaciones                                       → Low

  Pico de volumen: volume[n−1] > SMA(volume)[n−1] × spike_factor

TIE-BREAK:
  La rama BUY se evalúa primero; SELL solo si BUY no disparó.
"""

from __future__ import annotations

from typing import List, Optional

from wavepulse.domain.entities.candle import Candle, CandleSeries
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

logger = get_logger("wavetrend_evaluator")

# ─── Nombres de condiciones (para log y auditoría) ─────────────────
COND_WAVETREND_CROSS = "wavetrend_cross"
COND_MACD = "macd"
COND_RSI = "rsi"
COND_VOLUME_SPIKE = "volume_spike"

_LAST_INDICATORS = (
    "ema_trend", "wt1", "wt2", "macd_line", "macd_signal", "rsi", "volume_sma",
)
_PREV_INDICATORS = ("wt1", "wt2")


class WaveTrendConfluenceEvaluator(ISignalEvaluator):
    """
    Evaluador WaveTrend + MACD + RSI + volumen.

    Recibe: CandleSeries completa.
    Genera: Signal (BUY/SELL) o None. NO deduplica. NO persiste.
    """

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
        return "wavetrend"

    @property
    def required_lookback(self) -> int:
        return self._params.required_lookback

    @property
    def params(self) -> IndicatorParams:
        return self._params

    # ════════════════════════════════════════════════════════════════
    #  PUNTO DE ENTRADA PRINCIPAL
    # ════════════════════════════════════════════════════════════════

    def evaluate(self, series: CandleSeries) -> Optional[Signal]:
        if len(series) < self.required_lookback:
            logger.debug(
                "Warm-up: %d velas < lookback %d", len(series), self.required_lookback,
            )
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
        volume_spike = candle.volume > last["volume_sma"] * self._config.volume_spike_factor

        # ── 1. Rama BUY (se evalúa primero: tie-break) ─────────────
        is_uptrend = candle.close > last["ema_trend"]
        is_buy_cross = prev["wt1"] < prev["wt2"] and last["wt1"] > last["wt2"]
        if is_uptrend and is_buy_cross:
            confirmations = []
            if last["macd_line"] > last["macd_signal"]:
                confirmations.append(COND_MACD)
            if last["rsi"] > self._config.rsi_midline:
                confirmations.append(COND_RSI)
            return self._build_signal(
                SignalType.BUY, candle, confirmations, volume_spike, frame, n - 1,
            )

        # ── 2. Rama SELL ───────────────────────────────────────────
        is_downtrend = candle.close < last["ema_trend"]
        is_sell_cross = prev["wt1"] > prev["wt2"] and last["wt1"] < last["wt2"]
        if is_downtrend and is_sell_cross:
            confirmations = []
            if last["macd_line"] < last["macd_signal"]:
                confirmations.append(COND_MACD)
            if last["rsi"] < self._config.rsi_midline:
                confirmations.append(COND_RSI)
            return self._build_signal(
                SignalType.SELL, candle, confirmations, volume_spike, frame, n - 1,
            )

        return None

    # ════════════════════════════════════════════════════════════════
    #  NIVEL Y CONSTRUCCIÓN
    # ════════════════════════════════════════════════════════════════

    def _level(self, confirmations: int, volume_spike: bool) -> SignalLevel:
        if confirmations >= self._config.high_confirmations and volume_spike:
            return SignalLevel.HIGH
        if confirmations >= 1:
            return SignalLevel.MEDIUM
        return SignalLevel.LOW

    def _build_signal(
        self,
        signal_type: SignalType,
        candle: Candle,
        confirmations: List[str],
        volume_spike: bool,
        frame: IndicatorFrame,
        index: int,
    ) -> Signal:
        level = self._level(len(confirmations), volume_spike)
        conditions = [COND_WAVETREND_CROSS, *confirmations]
        if volume_spike:
            conditions.append(COND_VOLUME_SPIKE)

        levels = self._risk.calculate_levels(
            signal_type, candle.close, frame.value_at("atr", index),
        )
        logger.debug(
            "Candidata %s [%s] t=%d close=%.6f condiciones=%s",
            signal_type.value, level.value, candle.time, candle.close, conditions,
        )
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
