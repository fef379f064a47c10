"""SignalPipeline: idempotence, failures, supersession, rollback, rehydration."""

import asyncio
import math

import pytest

from conftest import AlwaysBuy, FlakyRepository, StubCandleSource, make_candles
from wavepulse.application.use_cases.signal_pipeline import SignalPipeline
from wavepulse.domain.entities.signal import SignalType
from wavepulse.domain.exceptions.domain_errors import CandleFetchError, SignalPersistenceError
from wavepulse.domain.services.wavetrend_evaluator import WaveTrendConfluenceEvaluator
from wavepulse.infrastructure.persistence.repositories.in_memory_signal_repository import (
    InMemorySignalRepository,
)


def _pipeline(source=None, repository=None, evaluator=None):
    return SignalPipeline(
        evaluator=evaluator or AlwaysBuy(),
        repository=repository if repository is not None else InMemorySignalRepository(),
        candle_source=source or StubCandleSource(make_candles([1.0, 2.0, 3.0])),
    )


class TestTick:

    def test_emits_signal_for_last_candle(self):
        source = StubCandleSource(make_candles([1.0, 2.0, 3.0]))
        repository = InMemorySignalRepository()
        pipeline = _pipeline(source, repository)

        signal = asyncio.run(pipeline.tick())

        assert signal.time == source.candles[-1].time
        assert signal.price == 3.0
        assert pipeline.state.last_emitted_signal is signal
        assert asyncio.run(repository.latest(5)) == [signal]

    def test_same_series_twice_emits_once(self):
        repository = InMemorySignalRepository()
        pipeline = _pipeline(repository=repository)

        first = asyncio.run(pipeline.tick())
        second = asyncio.run(pipeline.tick())

        assert first is not None
        assert second is None
        assert len(repository) == 1
        assert pipeline.stats["duplicates"] == 1

    def test_new_candle_same_direction_emits_again(self):
        candles = make_candles([1.0, 2.0, 3.0, 4.0])
        pipeline = _pipeline()

        first = asyncio.run(pipeline.tick(lambda: candles[:3]))
        second = asyncio.run(pipeline.tick(lambda: candles))

        assert first.signal_type is second.signal_type is SignalType.BUY
        assert second.time > first.time

    def test_accepts_sync_and_async_fetchers(self):
        candles = make_candles([1.0, 2.0, 3.0])

        async def async_fetch():
            return candles

        assert asyncio.run(_pipeline().tick(lambda: candles)) is not None
        assert asyncio.run(_pipeline().tick(async_fetch)) is not None

    def test_insufficient_data_returns_none(self):
        repository = InMemorySignalRepository()
        pipeline = _pipeline(StubCandleSource(make_candles([1.0, 2.0])), repository)

        assert asyncio.run(pipeline.tick()) is None
        assert len(repository) == 0
        assert pipeline.stats["insufficient"] == 1

    def test_empty_fetch_returns_none(self):
        pipeline = _pipeline(StubCandleSource([]))
        assert asyncio.run(pipeline.tick()) is None
        assert pipeline.last_series == ()

    def test_last_series_cached(self):
        source = StubCandleSource(make_candles([1.0, 2.0, 3.0]))
        pipeline = _pipeline(source)
        asyncio.run(pipeline.tick())
        assert pipeline.last_series == tuple(source.candles)

    def test_last_frame_aligned_with_last_series(self):
        pipeline = _pipeline()
        assert pipeline.last_frame is None
        asyncio.run(pipeline.tick())
        assert len(pipeline.last_frame) == len(pipeline.last_series) == 3


class TestFetchFailures:

    def test_network_error_wrapped_with_context(self):
        pipeline = _pipeline(StubCandleSource(error=ConnectionError("boom")))

        with pytest.raises(CandleFetchError) as exc_info:
            asyncio.run(pipeline.tick())

        error = exc_info.value
        assert error.symbol == "DOGEUSDT"
        assert error.stage == "fetch"
        assert error.tick_time is not None
        assert isinstance(error.__cause__, ConnectionError)
        assert pipeline.state.last_emitted_signal is None
        assert pipeline.stats["errors"] == 1

    def test_source_fetch_error_gets_tick_time(self):
        pipeline = _pipeline(StubCandleSource(error=CandleFetchError("HTTP 502", stage="fetch")))

        with pytest.raises(CandleFetchError) as exc_info:
            asyncio.run(pipeline.tick())
        assert exc_info.value.tick_time is not None
        assert exc_info.value.symbol == "DOGEUSDT"

    def test_unordered_candles_fail_validation(self):
        candles = make_candles([1.0, 2.0, 3.0])
        pipeline = _pipeline(StubCandleSource(list(reversed(candles))))

        with pytest.raises(CandleFetchError) as exc_info:
            asyncio.run(pipeline.tick())
        assert exc_info.value.stage == "validate"

    def test_failure_does_not_touch_existing_state(self):
        source = StubCandleSource(make_candles([1.0, 2.0, 3.0]))
        pipeline = _pipeline(source)
        emitted = asyncio.run(pipeline.tick())

        source.error = ConnectionError("down")
        with pytest.raises(CandleFetchError):
            asyncio.run(pipeline.tick())
        assert pipeline.state.last_emitted_signal is emitted

    def test_missing_source(self):
        pipeline = SignalPipeline(evaluator=AlwaysBuy(), repository=InMemorySignalRepository())
        with pytest.raises(CandleFetchError):
            asyncio.run(pipeline.tick())


class TestPersistence:

    @pytest.mark.parametrize("raise_error", [False, True])
    def test_failed_append_rolls_back_and_retries(self, raise_error):
        repository = FlakyRepository(failures=1, raise_error=raise_error)
        pipeline = _pipeline(repository=repository)

        with pytest.raises(SignalPersistenceError) as exc_info:
            asyncio.run(pipeline.tick())
        assert pipeline.state.last_emitted_signal is None
        assert repository.saved == []

        retried = asyncio.run(pipeline.tick())
        assert retried is not None
        assert exc_info.value.signal_time == retried.time
        assert exc_info.value.symbol == "DOGEUSDT"
        assert exc_info.value.stage == "persist"
        assert exc_info.value.tick_time is not None
        assert exc_info.value.to_dict()["stage"] == "persist"
        assert repository.saved == [retried]

    def test_rollback_keeps_previous_signal(self):
        candles = make_candles([1.0, 2.0, 3.0, 4.0])
        repository = FlakyRepository(failures=0)
        pipeline = _pipeline(repository=repository)
        first = asyncio.run(pipeline.tick(lambda: candles[:3]))

        repository.failures = 1
        with pytest.raises(SignalPersistenceError):
            asyncio.run(pipeline.tick(lambda: candles))
        assert pipeline.state.last_emitted_signal is first


class TestRehydration:

    def test_restored_signal_blocks_reemission(self):
        source = StubCandleSource(make_candles([1.0, 2.0, 3.0]))
        repository = InMemorySignalRepository()
        earlier = _pipeline(source, repository)
        asyncio.run(earlier.tick())

        restarted = _pipeline(source, repository)
        restored = asyncio.run(restarted.restore_state())

        assert restored.time == source.candles[-1].time
        assert asyncio.run(restarted.tick()) is None
        assert len(repository) == 1

    def test_empty_repository(self):
        pipeline = _pipeline()
        assert asyncio.run(pipeline.restore_state()) is None
        assert pipeline.state.last_emitted_signal is None

    def test_unavailable_repository_starts_empty(self):
        class Broken(FlakyRepository):
            async def latest(self, n=1):
                raise ConnectionError("db down")

        pipeline = _pipeline(repository=Broken())
        assert asyncio.run(pipeline.restore_state()) is None


class TestConcurrency:

    def test_newer_tick_supersedes_slow_fetch(self):
        old = make_candles([1.0, 2.0, 3.0])
        new = make_candles([1.0, 2.0, 3.0, 4.0])
        repository = InMemorySignalRepository()
        pipeline = _pipeline(repository=repository)

        async def scenario():
            release = asyncio.Event()

            async def slow_fetch():
                await release.wait()
                return old

            async def fast_fetch():
                return new

            slow = asyncio.create_task(pipeline.tick(slow_fetch))
            await asyncio.sleep(0)
            fast_result = await pipeline.tick(fast_fetch)
            release.set()
            slow_result = await slow
            return slow_result, fast_result

        slow_result, fast_result = asyncio.run(scenario())

        assert slow_result is None
        assert fast_result.time == new[-1].time
        assert pipeline.state.last_emitted_signal is fast_result
        assert pipeline.stats["superseded"] == 1
        assert len(repository) == 1

    def test_overlapping_slow_fetches_keep_emitting(self):
        candles = make_candles([float(v) for v in range(1, 13)])
        repository = InMemorySignalRepository()
        pipeline = _pipeline(repository=repository)

        async def scenario():
            ticks = []
            for k in range(8):
                window = candles[:3 + k]

                async def slow_fetch(window=window):
                    await asyncio.sleep(0.025)
                    return window

                ticks.append(asyncio.create_task(pipeline.tick(slow_fetch)))
                await asyncio.sleep(0.01)
            return await asyncio.gather(*ticks)

        results = asyncio.run(scenario())
        emitted = [r for r in results if r is not None]
        stored = asyncio.run(repository.latest(20))

        assert emitted
        assert results[-1].time == candles[9].time
        assert pipeline.state.last_emitted_signal is results[-1]
        assert [s.time for s in stored] == sorted(s.time for s in stored)
        assert pipeline.stats["signals"] == len(stored)

    def test_stale_result_after_newer_applied_is_dropped(self):
        old = make_candles([1.0, 2.0, 3.0, 4.0])
        new = make_candles([1.0, 2.0, 3.0, 4.0, 5.0])
        pipeline = _pipeline()

        async def scenario():
            release = asyncio.Event()

            async def slow_fetch():
                await release.wait()
                return old

            slow = asyncio.create_task(pipeline.tick(slow_fetch))
            await asyncio.sleep(0)
            await pipeline.tick(lambda: new)
            release.set()
            return await slow

        assert asyncio.run(scenario()) is None
        assert pipeline.last_series[-1].time == new[-1].time

    def test_concurrent_ticks_emit_at_most_once(self):
        candles = make_candles([1.0, 2.0, 3.0])
        repository = InMemorySignalRepository()
        pipeline = _pipeline(repository=repository)

        async def fetch():
            await asyncio.sleep(0)
            return candles

        async def scenario():
            return await asyncio.gather(*(pipeline.tick(fetch) for _ in range(5)))

        results = asyncio.run(scenario())
        assert sum(r is not None for r in results) == 1
        assert len(repository) == 1


class TestWithWaveTrend:

    def test_replay_persists_each_evaluated_signal_once(self):
        closes = [100 + 0.5 * i + 3 * math.sin(i / 4) for i in range(220)]
        candles = make_candles(closes)
        evaluator = WaveTrendConfluenceEvaluator()
        repository = InMemorySignalRepository()
        pipeline = _pipeline(repository=repository, evaluator=evaluator)

        expected = 0
        for end in range(1, len(candles) + 1):
            window = candles[:end]
            if evaluator.evaluate(tuple(window)) is not None:
                expected += 1
            asyncio.run(pipeline.tick(lambda: window))
            # el mismo tick repetido nunca añade nada
            asyncio.run(pipeline.tick(lambda: window))

        assert expected > 0
        assert len(repository) == expected
