"""Shared fixtures: candle/frame factories, stub sources and repositories."""

from dataclasses import fields

import pytest

from wavepulse.application.ports.candle_source import ICandleSource
from wavepulse.domain.entities.candle import Candle
from wavepulse.domain.entities.signal import Signal, SignalLevel, SignalType
from wavepulse.domain.repositories.signal_repository import ISignalRepository
from wavepulse.domain.services.indicator_calculator import IndicatorParams
from wavepulse.domain.services.signal_evaluator import ISignalEvaluator
from wavepulse.domain.value_objects.indicator_frame import IndicatorFrame
from wavepulse.shared.config.settings import Settings

START_MS = 1_700_000_000_000
STEP_MS = 60_000


def make_candles(closes, volumes=None, spread=1.0, start=START_MS):
    """Velas con high/low a ±spread del close y open == close."""
    volumes = volumes or [1000.0] * len(closes)
    return [
        Candle(
            time=start + i * STEP_MS,
            open=close,
            high=close + spread,
            low=close - spread,
            close=close,
            volume=volume,
        )
        for i, (close, volume) in enumerate(zip(closes, volumes))
    ]


def make_frame(n, last, prev=None):
    """IndicatorFrame de longitud n con valores solo en n-2 (prev) y n-1 (last)."""
    columns = {f.name: [None] * n for f in fields(IndicatorFrame)}
    for name, value in (prev or {}).items():
        columns[name][n - 2] = value
    for name, value in last.items():
        columns[name][n - 1] = value
    return IndicatorFrame(**{name: tuple(values) for name, values in columns.items()})


class StubCandleSource(ICandleSource):
    """Fuente que devuelve la lista configurada (o lanza el error configurado)."""

    def __init__(self, candles=None, error=None, symbol="DOGEUSDT"):
        self.candles = list(candles or [])
        self.error = error
        self.calls = 0
        self.closed = False
        self._symbol = symbol

    @property
    def symbol(self):
        return self._symbol

    async def fetch_candles(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.candles)

    async def close(self):
        self.closed = True


class AlwaysBuy(ISignalEvaluator):
    """Emite BUY en la última vela de cualquier serie con 3+ velas."""

    name = "always_buy"
    params = IndicatorParams()
    required_lookback = 3

    def evaluate(self, series):
        last = series[-1]
        return Signal(SignalType.BUY, SignalLevel.MEDIUM, last.close, last.time, strategy=self.name)

    def evaluate_frame(self, series, frame):
        return self.evaluate(series)


class FlakyRepository(ISignalRepository):
    """Repositorio que falla las primeras `failures` llamadas a append()."""

    def __init__(self, failures=1, raise_error=False):
        self.failures = failures
        self.raise_error = raise_error
        self.saved = []

    async def append(self, signal):
        if self.failures > 0:
            self.failures -= 1
            if self.raise_error:
                raise ConnectionError("db down")
            return False
        self.saved.append(signal)
        return True

    async def latest(self, n=1):
        return self.saved[-n:] if n > 0 else []


@pytest.fixture
def candle_factory():
    return make_candles


@pytest.fixture
def frame_factory():
    return make_frame


@pytest.fixture
def test_settings():
    return Settings(
        poller_enabled=False,
        db_enabled=False,
        poll_interval_seconds=0.01,
    )
