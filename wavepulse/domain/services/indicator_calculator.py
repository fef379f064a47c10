"""
WavePulse – Domain Service: Indicator Calculator
==================================================
Cálculos de indicadores técnicos puros sobre series completas.

Cada función recibe una serie ordenada (más antiguo primero) y retorna
una lista ALINEADA con la entrada: mismo largo, None al inicio mientras
no hay lookback suficiente. Sin estado, sin dependencias externas:
misma entrada → misma salida, testeable con fixtures literales.

═══════════════════════════════════════════════════════════════════
                    CONVENCIONES FIJAS
═══════════════════════════════════════════════════════════════════

SEED DE EMA:
  Toda EMA de la librería usa como seed la SMA de los primeros
  `period` valores definidos. El primer valor aparece en el índice
  first_defined + period − 1. Cambiar la convención desplaza todas las
  trayectorias posteriores, por eso es única para todo el set.

ENCADENAMIENTO:
  ema() y sma() ignoran los None iniciales de su entrada, lo que
  permite encadenar indicadores (EMA de EMA en WaveTrend, EMA del MACD).
  Un None DESPUÉS del primer valor definido es un hueco interno y se
  rechaza con ValidationError.

SUAVIZADO DE WILDER (RSI, ATR):
  avg_t = (avg_{t-1} × (period − 1) + x_t) / period
  Seed = promedio simple de los primeros `period` valores.

RECÁLCULO COMPLETO:
  El pipeline recalcula todo el frame en cada tick (~200 velas).
  Es O(N) por tick, despreciable frente a la latencia de red.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from wavepulse.domain.entities.candle import Candle
from wavepulse.domain.exceptions.domain_errors import ValidationError
from wavepulse.domain.value_objects.indicator_frame import IndicatorFrame

# Constante clásica de WaveTrend (LazyBear): escala el canal a ~±100
WAVETREND_SCALE = 0.015

# d por debajo de este umbral relativo al precio se considera cero
_ZERO_DEVIATION_REL = 1e-12


@dataclass(frozen=True)
class IndicatorParams:
    """Períodos de todos los indicadores del frame."""

    ema_fast_period: int = 21
    ema_trend_period: int = 50
    rsi_period: int = 14
    atr_period: int = 14
    volume_avg_period: int = 20
    wt_channel_length: int = 10
    wt_average_length: int = 21
    wt_signal_length: int = 4
    macd_fast_period: int = 12
    macd_slow_period: int = 26
    macd_signal_period: int = 9

    @property
    def required_lookback(self) -> int:
        """Velas mínimas antes de intentar evaluar la última vela."""
        return max(
            self.wt_channel_length + self.wt_average_length,
            self.macd_slow_period,
            self.rsi_period + 1,
            self.ema_trend_period,
            self.volume_avg_period,
        )

    @classmethod
    def from_settings(cls, settings) -> "IndicatorParams":
        return cls(
            ema_fast_period=settings.ema_fast_period,
            ema_trend_period=settings.ema_trend_period,
            rsi_period=settings.rsi_period,
            atr_period=settings.atr_period,
            volume_avg_period=settings.volume_avg_period,
            wt_channel_length=settings.wt_channel_length,
            wt_average_length=settings.wt_average_length,
            wt_signal_length=settings.wt_signal_length,
            macd_fast_period=settings.macd_fast_period,
            macd_slow_period=settings.macd_slow_period,
            macd_signal_period=settings.macd_signal_period,
        )


def _check_period(period: int) -> None:
    if period < 1:
        raise ValidationError(f"Período inválido: {period}", field="period", value=period)


def _first_defined(data: Sequence[Optional[float]]) -> Optional[int]:
    """Índice del primer valor no-None; valida que no haya huecos internos."""
    start = next((i for i, v in enumerate(data) if v is not None), None)
    if start is None:
        return None
    for i in range(start, len(data)):
        if data[i] is None:
            raise ValidationError(
                f"Hueco interno en la serie (índice {i})", field="data", value=i,
            )
    return start


class IndicatorCalculator:
    """
    Calculadora de indicadores técnicos puros.

    RESPONSABILIDAD:
    Implementar las fórmulas matemáticas de indicadores sobre series.
    NO mantiene estado (stateless). Todos los métodos son estáticos.
    """

    # ════════════════════════════════════════════════════════════════
    #  MEDIAS MÓVILES
    # ════════════════════════════════════════════════════════════════

    @staticmethod
    def ema(
        data: Sequence[Optional[float]],
        period: int,
    ) -> List[Optional[float]]:
        """
        EMA (Exponential Moving Average) alineada con la entrada.

        FÓRMULA:
        EMA_t = x_t × k + EMA_{t-1} × (1 − k)
        k = 2 / (period + 1)

        INICIALIZACIÓN:
        EMA inicial = SMA de los primeros `period` valores definidos.
        """
        _check_period(period)
        n = len(data)
        result: List[Optional[float]] = [None] * n
        start = _first_defined(data)
        if start is None or n - start < period:
            return result

        seed_index = start + period - 1
        result[seed_index] = math.fsum(data[start:seed_index + 1]) / period

        k = 2.0 / (period + 1)
        for i in range(seed_index + 1, n):
            result[i] = data[i] * k + result[i - 1] * (1.0 - k)
        return result

    @staticmethod
    def sma(
        data: Sequence[Optional[float]],
        period: int,
    ) -> List[Optional[float]]:
        """
        SMA (Simple Moving Average) con ventana de suma acumulada.

        Definida para i ≥ first_defined + period − 1.
        Complejidad: O(N).
        """
        _check_period(period)
        n = len(data)
        result: List[Optional[float]] = [None] * n
        start = _first_defined(data)
        if start is None or n - start < period:
            return result

        window_sum = math.fsum(data[start:start + period])
        result[start + period - 1] = window_sum / period
        for i in range(start + period, n):
            window_sum += data[i] - data[i - period]
            result[i] = window_sum / period
        return result

    # ════════════════════════════════════════════════════════════════
    #  OSCILADORES / VOLATILIDAD (WILDER)
    # ════════════════════════════════════════════════════════════════

    @staticmethod
    def rsi(
        data: Sequence[float],
        period: int = 14,
    ) -> List[Optional[float]]:
        """
        RSI con suavizado de Wilder.

        Paso 1 – deltas: gain = max(Δ, 0), loss = |min(Δ, 0)|
        Paso 2 – seed: promedio simple de los primeros `period` deltas
        Paso 3 – avg_t = (avg_{t-1} × (period − 1) + x_t) / period
        Paso 4 – RSI = 100 − 100 / (1 + avg_gain / avg_loss)

        Edge case: avg_loss == 0 → RSI = 100.
        Primer valor definido en el índice `period` (period + 1 velas).
        """
        _check_period(period)
        n = len(data)
        result: List[Optional[float]] = [None] * n
        if n < period + 1:
            return result

        avg_gain = 0.0
        avg_loss = 0.0
        for i in range(1, period + 1):
            change = data[i] - data[i - 1]
            if change > 0:
                avg_gain += change
            else:
                avg_loss -= change
        avg_gain /= period
        avg_loss /= period
        result[period] = IndicatorCalculator._rsi_value(avg_gain, avg_loss)

        for i in range(period + 1, n):
            change = data[i] - data[i - 1]
            gain = change if change > 0 else 0.0
            loss = -change if change < 0 else 0.0
            avg_gain = (avg_gain * (period - 1) + gain) / period
            avg_loss = (avg_loss * (period - 1) + loss) / period
            result[i] = IndicatorCalculator._rsi_value(avg_gain, avg_loss)
        return result

    @staticmethod
    def _rsi_value(avg_gain: float, avg_loss: float) -> float:
        if avg_loss == 0:
            return 100.0
        rs = avg_gain / avg_loss
        return 100.0 - (100.0 / (1.0 + rs))

    @staticmethod
    def atr(
        candles: Sequence[Candle],
        period: int = 14,
    ) -> List[Optional[float]]:
        """
        ATR (Average True Range) con suavizado de Wilder.

        FÓRMULA:
        TR_i  = max(high − low, |high − prev_close|, |low − prev_close|)
        ATR   = seed: promedio de los primeros `period` TR (índice `period`)
                luego: (ATR_{t-1} × (period − 1) + TR_t) / period
        """
        _check_period(period)
        n = len(candles)
        result: List[Optional[float]] = [None] * n
        if n < period + 1:
            return result

        true_ranges = []
        for i in range(1, n):
            high = candles[i].high
            low = candles[i].low
            prev_close = candles[i - 1].close
            true_ranges.append(max(high - low, abs(high - prev_close), abs(low - prev_close)))

        atr = math.fsum(true_ranges[:period]) / period
        result[period] = atr
        for j in range(period, len(true_ranges)):
            atr = (atr * (period - 1) + true_ranges[j]) / period
            result[j + 1] = atr
        return result

    # ════════════════════════════════════════════════════════════════
    #  WAVETREND / MACD
    # ════════════════════════════════════════════════════════════════

    @staticmethod
    def wavetrend(
        candles: Sequence[Candle],
        channel_length: int = 10,
        average_length: int = 21,
        signal_length: int = 4,
    ) -> Tuple[List[Optional[float]], List[Optional[float]]]:
        """
        Oscilador WaveTrend (línea 1 y línea 2).

        ap  = (high + low + close) / 3
        esa = EMA(ap, channel)
        d   = EMA(|ap − esa|, channel)
        ci  = (ap − esa) / (0.015 × d)     ← 0 si d == 0
        wt1 = EMA(ci, average)
        wt2 = SMA(wt1, signal)

        DIVISIÓN POR CERO:
        d == 0 (mercado plano) fija ci = 0. Es la política de estabilidad
        numérica del indicador, no un error. Un d residual de redondeo
        (≤ 1e-12 × |esa|) cuenta como cero.
        """
        calc = IndicatorCalculator
        ap = [(c.high + c.low + c.close) / 3.0 for c in candles]
        esa = calc.ema(ap, channel_length)
        deviation = [
            abs(a - e) if e is not None else None
            for a, e in zip(ap, esa)
        ]
        d = calc.ema(deviation, channel_length)

        ci: List[Optional[float]] = []
        for a, e, dd in zip(ap, esa, d):
            if dd is None:
                ci.append(None)
            elif dd <= _ZERO_DEVIATION_REL * max(1.0, abs(e)):
                ci.append(0.0)
            else:
                ci.append((a - e) / (WAVETREND_SCALE * dd))

        wt1 = calc.ema(ci, average_length)
        wt2 = calc.sma(wt1, signal_length)
        return wt1, wt2

    @staticmethod
    def macd(
        data: Sequence[float],
        fast_period: int = 12,
        slow_period: int = 26,
        signal_period: int = 9,
    ) -> Tuple[List[Optional[float]], List[Optional[float]]]:
        """
        MACD = EMA(fast) − EMA(slow); señal = EMA(MACD, signal).

        Returns:
            (macd_line, signal_line) alineadas con `data`
        """
        calc = IndicatorCalculator
        fast = calc.ema(data, fast_period)
        slow = calc.ema(data, slow_period)
        line = [
            f - s if f is not None and s is not None else None
            for f, s in zip(fast, slow)
        ]
        signal = calc.ema(line, signal_period)
        return line, signal

    # ════════════════════════════════════════════════════════════════
    #  FRAME COMPLETO
    # ════════════════════════════════════════════════════════════════

    @staticmethod
    def build_frame(
        candles: Sequence[Candle],
        params: IndicatorParams,
    ) -> IndicatorFrame:
        """Calcula todos los indicadores del engine sobre una serie."""
        calc = IndicatorCalculator
        closes = [c.close for c in candles]
        volumes = [c.volume for c in candles]

        wt1, wt2 = calc.wavetrend(
            candles,
            params.wt_channel_length,
            params.wt_average_length,
            params.wt_signal_length,
        )
        macd_line, macd_signal = calc.macd(
            closes,
            params.macd_fast_period,
            params.macd_slow_period,
            params.macd_signal_period,
        )

        return IndicatorFrame(
            ema_fast=tuple(calc.ema(closes, params.ema_fast_period)),
            ema_trend=tuple(calc.ema(closes, params.ema_trend_period)),
            rsi=tuple(calc.rsi(closes, params.rsi_period)),
            atr=tuple(calc.atr(candles, params.atr_period)),
            volume_sma=tuple(calc.sma(volumes, params.volume_avg_period)),
            wt1=tuple(wt1),
            wt2=tuple(wt2),
            macd_line=tuple(macd_line),
            macd_signal=tuple(macd_signal),
        )
