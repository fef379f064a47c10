"""Pullback evaluator (alternate strategy behind the same interface)."""

import pytest

from wavepulse.domain.entities.signal import SignalLevel, SignalType
from wavepulse.domain.services.indicator_calculator import IndicatorParams
from wavepulse.domain.services.pullback_evaluator import PullbackEvaluator
from wavepulse.domain.services.signal_evaluator import ISignalEvaluator

N = 50

BUY_LAST = {"ema_trend": 90.0, "ema_fast": 105.0, "rsi": 42.0, "atr": 2.0, "volume_sma": 1000.0}
BUY_PREV = {"rsi": 38.0}
SELL_LAST = {"ema_trend": 110.0, "ema_fast": 95.0, "rsi": 58.0, "atr": 2.0, "volume_sma": 1000.0}
SELL_PREV = {"rsi": 62.0}


@pytest.fixture
def evaluator():
    return PullbackEvaluator()


def _series(candle_factory, last_volume=1000.0):
    return tuple(candle_factory([100.0] * N, [1000.0] * (N - 1) + [last_volume]))


def test_is_a_signal_evaluator(evaluator):
    assert isinstance(evaluator, ISignalEvaluator)
    assert evaluator.name == "pullback"
    assert evaluator.required_lookback == 50


def test_lookback_covers_fast_ema_and_atr():
    params = IndicatorParams(ema_fast_period=80, ema_trend_period=60)
    assert PullbackEvaluator(params=params).required_lookback == 80


def test_deep_pullback_with_spike_is_high_buy(evaluator, candle_factory, frame_factory):
    series = _series(candle_factory, last_volume=2000.0)
    signal = evaluator.evaluate_frame(series, frame_factory(N, BUY_LAST, BUY_PREV))
    assert signal.signal_type is SignalType.BUY
    assert signal.level is SignalLevel.HIGH
    assert signal.conditions == ("pullback", "rsi_cross", "deep_pullback", "volume_spike")
    assert signal.stop_loss == pytest.approx(97.0)
    assert signal.take_profit == pytest.approx(105.0)
    assert signal.strategy == "pullback"


def test_deep_pullback_without_spike_is_medium(evaluator, candle_factory, frame_factory):
    signal = evaluator.evaluate_frame(_series(candle_factory), frame_factory(N, BUY_LAST, BUY_PREV))
    assert signal.level is SignalLevel.MEDIUM


def test_shallow_pullback_is_medium(evaluator, candle_factory, frame_factory):
    last = dict(BUY_LAST, ema_fast=100.5)  # low 99 no baja de 100.5 - 2
    signal = evaluator.evaluate_frame(
        _series(candle_factory, last_volume=2000.0), frame_factory(N, last, BUY_PREV),
    )
    assert signal.level is SignalLevel.MEDIUM
    assert "deep_pullback" not in signal.conditions


def test_rsi_starting_on_threshold_fires(evaluator, candle_factory, frame_factory):
    signal = evaluator.evaluate_frame(
        _series(candle_factory), frame_factory(N, BUY_LAST, {"rsi": 40.0}),
    )
    assert signal is not None


def test_rsi_already_above_threshold_does_not_fire(evaluator, candle_factory, frame_factory):
    assert evaluator.evaluate_frame(
        _series(candle_factory), frame_factory(N, BUY_LAST, {"rsi": 41.0}),
    ) is None


def test_rsi_ending_on_threshold_does_not_fire(evaluator, candle_factory, frame_factory):
    last = dict(BUY_LAST, rsi=40.0)
    assert evaluator.evaluate_frame(_series(candle_factory), frame_factory(N, last, BUY_PREV)) is None


def test_close_above_fast_ema_is_not_a_pullback(evaluator, candle_factory, frame_factory):
    last = dict(BUY_LAST, ema_fast=95.0)
    assert evaluator.evaluate_frame(_series(candle_factory), frame_factory(N, last, BUY_PREV)) is None


def test_sell_mirror(evaluator, candle_factory, frame_factory):
    signal = evaluator.evaluate_frame(
        _series(candle_factory, last_volume=2000.0), frame_factory(N, SELL_LAST, SELL_PREV),
    )
    assert signal.signal_type is SignalType.SELL
    assert signal.level is SignalLevel.HIGH
    assert signal.stop_loss == pytest.approx(103.0)
    assert signal.take_profit == pytest.approx(95.0)


def test_undefined_atr_returns_none(evaluator, candle_factory, frame_factory):
    last = dict(BUY_LAST)
    del last["atr"]
    assert evaluator.evaluate_frame(_series(candle_factory), frame_factory(N, last, BUY_PREV)) is None


def test_short_series_returns_none(evaluator, candle_factory):
    assert evaluator.evaluate(tuple(candle_factory([100.0] * (N - 1)))) is None


def test_flat_market_returns_none(evaluator, candle_factory):
    assert evaluator.evaluate(tuple(candle_factory([100.0] * 120))) is None
