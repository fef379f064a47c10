"""
WavePulse – Application Service: Signal Poller
================================================
Dispara SignalPipeline.tick() a cadencia fija en una task de asyncio.

Cualquier error de un tick (red, datos, persistencia) se registra con
su contexto y el loop sigue vivo hasta la siguiente cadencia. Un tick
fallido no deja estado a medias: el pipeline ya lo revirtió.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

from wavepulse.application.use_cases.signal_pipeline import SignalPipeline
from wavepulse.domain.exceptions.domain_errors import (
    CandleFetchError,
    DomainError,
    SignalPersistenceError,
)
from wavepulse.shared.logging.logger import get_logger

logger = get_logger("signal_poller")


class SignalPoller:
    """Scheduler en background del pipeline."""

    def __init__(self, pipeline: SignalPipeline, interval_seconds: float = 10.0) -> None:
        self._pipeline = pipeline
        self._interval = interval_seconds
        self._running = False
        self._task: Optional[asyncio.Task] = None

        self._runs = 0
        self._failures = 0
        self._last_run_at: float = 0.0
        self._last_error: Optional[dict] = None

    # ──────────────────────── Lifecycle ──────────────────────────────────

    async def start(self) -> None:
        """Iniciar el loop. Idempotente."""
        if self._running:
            logger.warning("SignalPoller ya está corriendo, ignorando start()")
            return

        self._running = True
        self._task = asyncio.create_task(self._poll_loop(), name="signal-poller")
        logger.info(
            "SignalPoller iniciado (%s cada %.1fs)",
            self._pipeline.symbol, self._interval,
        )

    async def stop(self) -> None:
        """Detener el loop y esperar a la task."""
        self._running = False
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("SignalPoller detenido. Ticks ejecutados: %d", self._runs)

    # ──────────────────────── Loop ───────────────────────────────────────

    async def _poll_loop(self) -> None:
        while self._running:
            await self.run_once()
            await asyncio.sleep(self._interval)

    async def run_once(self) -> None:
        """Ejecuta un tick y registra cualquier error sin propagarlo."""
        self._runs += 1
        self._last_run_at = time.time()
        try:
            await self._pipeline.tick()
        except CandleFetchError as e:
            self._record_failure(e)
            logger.warning(
                "[%s] Fallo de velas (etapa=%s, tick=%s): %s",
                e.symbol, e.stage, e.tick_time, e.message,
            )
        except SignalPersistenceError as e:
            self._record_failure(e)
            logger.error(
                "[%s] Señal t=%s no persistida (etapa=%s, tick=%s), se reintentará: %s",
                e.symbol, e.signal_time, e.stage, e.tick_time, e.message,
            )
        except DomainError as e:
            self._record_failure(e)
            logger.error("[%s] Error de dominio: %s", self._pipeline.symbol, e.message)
        except Exception as e:
            self._failures += 1
            self._last_error = {"error": "UNEXPECTED", "message": str(e)}
            logger.exception("[%s] Error inesperado en tick: %s", self._pipeline.symbol, e)

    def _record_failure(self, error: DomainError) -> None:
        self._failures += 1
        self._last_error = error.to_dict()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def stats(self) -> dict:
        return {
            "running": self._running,
            "interval_seconds": self._interval,
            "runs": self._runs,
            "failures": self._failures,
            "last_run_at": self._last_run_at,
            "last_error": self._last_error,
        }
