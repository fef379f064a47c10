"""
WavePulse – Domain Layer
==========================
Núcleo puro del sistema. CERO dependencias de frameworks.

Este módulo contiene:
- entities/: Entidades de negocio (Candle, Signal, EngineState)
- value_objects/: Objetos inmutables (IndicatorFrame)
- services/: Indicadores, evaluadores de señal, dedup y riesgo
- repositories/: Interfaces abstractas (ABCs)
- exceptions/: Excepciones de dominio

REGLA DE DEPENDENCIA:
Este módulo NO puede importar de:
- infrastructure/
- presentation/
- application/
- Frameworks externos (SQLAlchemy, FastAPI, aiohttp, etc.)
"""

from wavepulse.domain.entities.candle import Candle, CandleSeries, build_series
from wavepulse.domain.entities.engine_state import EngineState
from wavepulse.domain.entities.signal import Signal, SignalLevel, SignalType
from wavepulse.domain.value_objects.indicator_frame import IndicatorFrame

__all__ = [
    "Candle",
    "CandleSeries",
    "build_series",
    "EngineState",
    "Signal",
    "SignalLevel",
    "SignalType",
    "IndicatorFrame",
]
