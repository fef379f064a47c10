"""
WavePulse – Use Case: Signal Pipeline
=======================================
Orquesta un ciclo completo por tick:

    fetch → validate → evaluate → dedup → persist → emit

FLUJO:
  1. Se abre una nueva "generación" y se piden las velas a la fuente
     (callable sync o async; por defecto el ICandleSource configurado).
     Un fallo de red/parseo se envuelve en CandleFetchError con símbolo,
     momento del tick y etapa, y se propaga. No se toca el estado.
  2. Si mientras se descargaba ya se aplicó el resultado de un tick más
     nuevo, este se abandona (gana el último). Un tick lento que termina
     antes que los posteriores SÍ se aplica: con fetches más lentos que
     la cadencia los ticks se solapan pero el motor sigue evaluando.
  3. Bajo un asyncio.Lock (single-flight):
       validate → build_series (serie malformada → CandleFetchError "validate")
       evaluate → IndicatorFrame + ISignalEvaluator.evaluate_frame
                  (None en warm-up o sin cruce)
       dedup    → DedupGate.admit (None si la vela ya emitió señal)
       persist  → ISignalRepository.append; si falla se revierte el
                  EngineState y se lanza SignalPersistenceError
  4. Devuelve la señal emitida, o None.

IDEMPOTENCIA:
  Dos ticks con la misma serie emiten como mucho una señal: el segundo
  cae en el DedupGate por timestamp de vela.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from typing import Awaitable, Callable, Optional, Sequence, Union

from wavepulse.application.ports.candle_source import ICandleSource
from wavepulse.domain.entities.candle import Candle, CandleSeries, build_series
from wavepulse.domain.entities.engine_state import EngineState
from wavepulse.domain.entities.signal import Signal
from wavepulse.domain.exceptions.domain_errors import (
    CandleFetchError,
    SignalPersistenceError,
    ValidationError,
)
from wavepulse.domain.repositories.signal_repository import ISignalRepository
from wavepulse.domain.services.dedup_gate import DedupGate
from wavepulse.domain.services.indicator_calculator import IndicatorCalculator
from wavepulse.domain.services.signal_evaluator import ISignalEvaluator
from wavepulse.domain.value_objects.indicator_frame import IndicatorFrame
from wavepulse.shared.logging.logger import get_logger

logger = get_logger("signal_pipeline")

FetchSeries = Callable[[], Union[Sequence[Candle], Awaitable[Sequence[Candle]]]]


class SignalPipeline:
    """
    Caso de uso: producir a lo sumo una señal nueva por tick.

    Dueño del EngineState (una instancia por símbolo/sesión).
    """

    def __init__(
        self,
        evaluator: ISignalEvaluator,
        repository: ISignalRepository,
        candle_source: Optional[ICandleSource] = None,
        dedup_gate: Optional[DedupGate] = None,
        state: Optional[EngineState] = None,
        symbol: Optional[str] = None,
    ) -> None:
        self._evaluator = evaluator
        self._repository = repository
        self._candle_source = candle_source
        self._dedup = dedup_gate or DedupGate()
        self._state = state or EngineState()
        if symbol is None and candle_source is not None:
            symbol = candle_source.symbol
        self._symbol = symbol or ""

        self._lock = asyncio.Lock()
        self._generation = 0
        self._applied_generation = 0
        self._last_series: CandleSeries = ()
        self._last_frame: Optional[IndicatorFrame] = None

        # Estadísticas de monitoreo
        self._ticks = 0
        self._signals = 0
        self._duplicates = 0
        self._insufficient = 0
        self._superseded = 0
        self._errors = 0
        self._last_signal_at: float = 0.0

    # ════════════════════════════════════════════════════════════════
    #  TICK
    # ════════════════════════════════════════════════════════════════

    async def tick(self, fetch_series: Optional[FetchSeries] = None) -> Optional[Signal]:
        """
        Ejecuta un ciclo fetch → evaluate → dedup → persist.

        Args:
            fetch_series: callable (sync o async) que devuelve las velas.
                          Por defecto, la fuente de velas configurada.

        Returns:
            La señal emitida en este tick, o None

        Raises:
            CandleFetchError: la fuente falló o devolvió velas inválidas
            SignalPersistenceError: la señal no pudo guardarse
        """
        self._generation += 1
        generation = self._generation
        self._ticks += 1
        tick_time = int(time.time() * 1000)

        raw = await self._fetch(fetch_series, tick_time)

        async with self._lock:
            if generation < self._applied_generation:
                self._superseded += 1
                logger.debug(
                    "[%s] Tick %d abandonado: ya se aplicó el tick %d",
                    self._symbol, generation, self._applied_generation,
                )
                return None
            self._applied_generation = generation

            try:
                series = build_series(raw)
            except ValidationError as e:
                self._errors += 1
                raise CandleFetchError(
                    f"Velas malformadas: {e.message}",
                    symbol=self._symbol, stage="validate", tick_time=tick_time,
                ) from e
            self._last_series = series
            frame = (
                IndicatorCalculator.build_frame(series, self._evaluator.params)
                if series else None
            )
            self._last_frame = frame

            if len(series) < self._evaluator.required_lookback:
                self._insufficient += 1
                logger.debug(
                    "[%s] Datos insuficientes: %d velas (mínimo %d)",
                    self._symbol, len(series), self._evaluator.required_lookback,
                )
                return None

            candidate = self._evaluator.evaluate_frame(series, frame)
            if candidate is None:
                return None

            previous = self._state.last_emitted_signal
            signal = self._dedup.admit(candidate, self._state)
            if signal is None:
                self._duplicates += 1
                logger.debug(
                    "[%s] Señal duplicada descartada: %s t=%d",
                    self._symbol, candidate.signal_type.value, candidate.time,
                )
                return None

            await self._persist(signal, previous, tick_time)

            self._signals += 1
            self._last_signal_at = time.time()
            logger.info(
                "⚡ SEÑAL %s [%s] %s @ %.6f | SL=%s TP=%s | %s",
                signal.signal_type.value, signal.level.value, self._symbol,
                signal.price, _fmt(signal.stop_loss), _fmt(signal.take_profit),
                ", ".join(signal.conditions),
            )
            return signal

    async def _fetch(self, fetch_series: Optional[FetchSeries], tick_time: int):
        fetch = fetch_series or self._default_fetch
        try:
            raw = fetch()
            if inspect.isawaitable(raw):
                raw = await raw
        except CandleFetchError as e:
            self._errors += 1
            if e.tick_time is None:
                e.tick_time = tick_time
            if e.symbol is None:
                e.symbol = self._symbol
            raise
        except Exception as e:
            self._errors += 1
            raise CandleFetchError(
                f"Error obteniendo velas: {e}",
                symbol=self._symbol, stage="fetch", tick_time=tick_time,
            ) from e
        return raw

    async def _default_fetch(self):
        if self._candle_source is None:
            raise CandleFetchError(
                "No hay fuente de velas configurada", symbol=self._symbol,
            )
        return await self._candle_source.fetch_candles()

    async def _persist(
        self,
        signal: Signal,
        previous: Optional[Signal],
        tick_time: int,
    ) -> None:
        """Persiste la señal admitida; si falla revierte el EngineState."""
        try:
            stored = await self._repository.append(signal)
        except Exception as e:
            self._dedup.rollback(self._state, previous)
            self._errors += 1
            raise SignalPersistenceError(
                f"Error persistiendo señal t={signal.time}: {e}",
                signal_time=signal.time, symbol=self._symbol, tick_time=tick_time,
            ) from e

        if not stored:
            self._dedup.rollback(self._state, previous)
            self._errors += 1
            raise SignalPersistenceError(
                f"El repositorio rechazó la señal t={signal.time}",
                signal_time=signal.time, symbol=self._symbol, tick_time=tick_time,
            )

    # ════════════════════════════════════════════════════════════════
    #  ESTADO
    # ════════════════════════════════════════════════════════════════

    async def restore_state(self) -> Optional[Signal]:
        """
        Rehidrata EngineState desde la última señal persistida.

        Evita re-emitir tras un reinicio la señal de una vela que ya
        quedó guardada. Si el repositorio no responde se arranca vacío.
        """
        try:
            recent = await self._repository.latest(1)
        except Exception as e:
            logger.warning("[%s] No se pudo rehidratar EngineState: %s", self._symbol, e)
            return None

        if not recent:
            return None
        self._state.last_emitted_signal = recent[-1]
        logger.info(
            "[%s] EngineState rehidratado: última señal %s t=%d",
            self._symbol, recent[-1].signal_type.value, recent[-1].time,
        )
        return recent[-1]

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def evaluator(self) -> ISignalEvaluator:
        return self._evaluator

    @property
    def last_series(self) -> CandleSeries:
        """Última serie validada (para la API)."""
        return self._last_series

    @property
    def last_frame(self) -> Optional[IndicatorFrame]:
        """Indicadores de la última serie validada (para la API)."""
        return self._last_frame

    @property
    def stats(self) -> dict:
        return {
            "symbol": self._symbol,
            "strategy": self._evaluator.name,
            "ticks": self._ticks,
            "signals": self._signals,
            "duplicates": self._duplicates,
            "insufficient": self._insufficient,
            "superseded": self._superseded,
            "errors": self._errors,
            "last_signal_at": self._last_signal_at,
        }


def _fmt(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.6f}"
