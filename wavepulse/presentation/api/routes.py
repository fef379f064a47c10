"""
WavePulse – API Routes (FastAPI)
==================================
Endpoints REST de consulta del motor de señales.

Endpoints disponibles:
  GET  /api/health             → health check
  GET  /api/status             → pipeline + poller + EngineState
  GET  /api/signals/recent     → últimas señales persistidas
  GET  /api/candles            → última ventana de velas evaluada
  GET  /api/indicators         → indicadores en la última vela
"""

from __future__ import annotations

from fastapi import APIRouter, Query

from wavepulse.application.dto.signal_dto import EngineStatusDTO, SignalResponseDTO
from wavepulse.shared.logging.logger import get_logger

logger = get_logger("api.routes")

router = APIRouter()

# Referencias a componentes inyectados desde main.py
_pipeline = None
_poller = None
_repository = None


def init_routes(pipeline, poller=None, repository=None) -> None:
    """Inyectar dependencias desde main.py al arrancar."""
    global _pipeline, _poller, _repository
    _pipeline = pipeline
    _poller = poller
    _repository = repository


# ─── REST endpoints de estado ──────────────────────────────────────────

@router.get("/api/health")
async def health_check() -> dict:
    """Health check para monitoreo."""
    return {"status": "ok", "service": "wavepulse"}


@router.get("/api/status")
async def system_status() -> dict:
    """Estadísticas del pipeline y del poller, y última señal emitida."""
    if _pipeline is None:
        return {"error": "Pipeline not ready"}

    status = EngineStatusDTO(
        pipeline=_pipeline.stats,
        poller=_poller.stats if _poller else {},
        last_emitted_signal=_pipeline.state.to_dict()["last_emitted_signal"],
    )
    return status.to_dict()


# ─── REST endpoints de señales ─────────────────────────────────────────

@router.get("/api/signals/recent")
async def recent_signals(
    limit: int = Query(default=20, ge=1, le=200, description="Número de señales"),
) -> dict:
    """Últimas señales persistidas, de la más antigua a la más reciente."""
    if _repository is None or _pipeline is None:
        return {"error": "Repository not ready", "signals": []}

    signals = await _repository.latest(limit)
    return {
        "count": len(signals),
        "signals": [
            SignalResponseDTO.from_entity(s, _pipeline.symbol).to_dict()
            for s in signals
        ],
    }


# ─── REST endpoints de mercado ─────────────────────────────────────────

@router.get("/api/candles")
async def get_candles(
    count: int = Query(default=50, ge=1, le=1000, description="Número de velas"),
) -> dict:
    """Últimas N velas de la ventana evaluada en el último tick."""
    if _pipeline is None:
        return {"error": "Pipeline not ready", "candles": []}

    candles = _pipeline.last_series[-count:]
    return {
        "symbol": _pipeline.symbol,
        "count": len(candles),
        "candles": [c.to_dict() for c in candles],
    }


@router.get("/api/indicators")
async def get_indicators() -> dict:
    """Valores de todos los indicadores en la última vela evaluada."""
    if _pipeline is None:
        return {"error": "Pipeline not ready"}

    series = _pipeline.last_series
    frame = _pipeline.last_frame
    if not series or frame is None:
        return {"symbol": _pipeline.symbol, "status": "no_data"}

    return {
        "symbol": _pipeline.symbol,
        "time": series[-1].time,
        "indicators": frame.snapshot(-1),
    }
