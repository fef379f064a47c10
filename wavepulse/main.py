"""
WavePulse – Main Application Entry Point
==========================================
Orquesta el motor de señales: Bybit REST → Pipeline → Repositorio → API.

ARQUITECTURA DE ARRANQUE:
  1. Configurar logging
  2. Crear el container (evaluador, repositorio, fuente de velas, pipeline)
  3. FastAPI lifespan startup:
     a. Inicializar la base de datos (si db_enabled)
     b. Rehidratar EngineState desde la última señal persistida
     c. Inyectar dependencias en las rutas
     d. Iniciar SignalPoller (tick cada poll_interval_seconds)
  4. FastAPI lifespan shutdown:
     a. Detener todo en orden inverso

FLUJO DE DATOS:
  Bybit /v5/market/kline → BybitKlineAdapter → SignalPipeline.tick()
       → IndicatorCalculator (EMA, RSI, ATR, WaveTrend, MACD, SMA vol)
       → ISignalEvaluator (WaveTrend confluence | pullback)
       → DedupGate (una señal por vela)
       → ISignalRepository (MySQL | memoria)
  uvicorn wavepulse.main:app --host 0.0.0.0 --port 8888
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wavepulse.container import init_container
from wavepulse.presentation.api.routes import init_routes, router
from wavepulse.shared.config.settings import settings
from wavepulse.shared.logging.logger import get_logger, setup_logging

# ─── Logging ────────────────────────────────────────────────────────────
setup_logging(settings.log_level)
logger = get_logger("main")

# ─── Contenedor de Dependencias ─────────────────────────────────────────
container = init_container(settings)


# ─── FastAPI Lifespan ───────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle de la aplicación."""
    s = container.settings
    logger.info("=" * 60)
    logger.info("  WavePulse - Signal Engine v1.0")
    logger.info("  Símbolo: %s (%s, intervalo %s)", s.symbol, s.bybit_category, s.candle_interval)
    logger.info("  Fuente: %s  ventana=%d velas", s.bybit_base_url, s.candle_limit)
    logger.info("  Estrategia: %s  (lookback %d velas)",
                s.signal_strategy, container.signal_evaluator.required_lookback)
    logger.info("  Poll: cada %.1fs", s.poll_interval_seconds)
    logger.info("=" * 60)

    # Inicializar base de datos (opcional)
    if s.db_enabled:
        await container.db_manager.initialize()
        logger.info("  Database: conectada")
    else:
        logger.info("  Database: deshabilitada (historial en memoria)")

    pipeline = container.signal_pipeline
    await pipeline.restore_state()

    # Inyectar dependencias al router (desde container)
    init_routes(pipeline, container.signal_poller, container.signal_repository)

    if s.poller_enabled:
        await container.signal_poller.start()

    logger.info("✓ Todos los componentes iniciados correctamente")

    yield  # ← La app está corriendo aquí

    # ── SHUTDOWN ──
    logger.info("Iniciando shutdown...")
    await container.signal_poller.stop()
    await container.candle_source.close()

    if s.db_enabled:
        await container.db_manager.close()
        logger.info("  Database: conexión cerrada")

    logger.info("✓ Shutdown completo")


def create_app() -> FastAPI:
    """Construye la aplicación FastAPI."""
    application = FastAPI(
        title="WavePulse - Signal Engine",
        description="Motor de señales BUY/SELL sobre velas de Bybit: WaveTrend, MACD, RSI, ATR",
        version="1.0.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(router)
    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "wavepulse.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
