"""SignalPoller: el loop sobrevive a cualquier fallo de tick."""

import asyncio

from conftest import AlwaysBuy, FlakyRepository, StubCandleSource, make_candles
from wavepulse.application.services.signal_poller import SignalPoller
from wavepulse.application.use_cases.signal_pipeline import SignalPipeline
from wavepulse.infrastructure.persistence.repositories.in_memory_signal_repository import (
    InMemorySignalRepository,
)


def _poller(source, repository=None, interval=0.01):
    pipeline = SignalPipeline(
        evaluator=AlwaysBuy(),
        repository=repository or InMemorySignalRepository(),
        candle_source=source,
    )
    return SignalPoller(pipeline, interval_seconds=interval)


class TestRunOnce:

    def test_successful_tick(self):
        poller = _poller(StubCandleSource(make_candles([1.0, 2.0, 3.0])))
        asyncio.run(poller.run_once())

        assert poller.stats["runs"] == 1
        assert poller.stats["failures"] == 0
        assert poller.stats["last_error"] is None

    def test_fetch_failure_is_recorded(self):
        poller = _poller(StubCandleSource(error=ConnectionError("timeout")))
        asyncio.run(poller.run_once())

        error = poller.stats["last_error"]
        assert poller.stats["failures"] == 1
        assert error["error"] == "FETCH_FAILURE"
        assert error["stage"] == "fetch"

    def test_persistence_failure_is_recorded_then_recovers(self):
        repository = FlakyRepository(failures=1)
        poller = _poller(StubCandleSource(make_candles([1.0, 2.0, 3.0])), repository)

        asyncio.run(poller.run_once())
        assert poller.stats["last_error"]["error"] == "PERSISTENCE_FAILURE"
        assert poller.stats["last_error"]["stage"] == "persist"
        assert poller.stats["last_error"]["symbol"] == "DOGEUSDT"

        asyncio.run(poller.run_once())
        assert len(repository.saved) == 1
        assert poller.stats["failures"] == 1

    def test_unexpected_error_is_recorded(self):
        class Exploding(AlwaysBuy):
            def evaluate(self, series):
                raise ZeroDivisionError("bug")

        pipeline = SignalPipeline(
            evaluator=Exploding(),
            repository=InMemorySignalRepository(),
            candle_source=StubCandleSource(make_candles([1.0, 2.0, 3.0])),
        )
        poller = SignalPoller(pipeline, interval_seconds=0.01)
        asyncio.run(poller.run_once())

        assert poller.stats["last_error"] == {"error": "UNEXPECTED", "message": "bug"}


class TestLifecycle:

    def test_start_runs_ticks_until_stopped(self):
        source = StubCandleSource(error=ConnectionError("down"))
        poller = _poller(source)

        async def scenario():
            await poller.start()
            await poller.start()  # idempotente
            assert poller.is_running
            await asyncio.sleep(0.05)
            await poller.stop()

        asyncio.run(scenario())

        assert not poller.is_running
        assert source.calls >= 2
        assert poller.stats["failures"] == poller.stats["runs"]

    def test_stop_without_start(self):
        poller = _poller(StubCandleSource())
        asyncio.run(poller.stop())
        assert not poller.is_running
