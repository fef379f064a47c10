"""
WavePulse – Application Layer
===============================
Capa de casos de uso y orquestación.

Este módulo contiene:
- use_cases/: SignalPipeline (fetch → evaluate → dedup → persist)
- ports/: Interfaces hacia infraestructura (ICandleSource)
- dto/: Data Transfer Objects
- services/: SignalPoller (scheduler en background)

REGLA DE DEPENDENCIA:
Esta capa puede importar de:
- domain/ (entidades, servicios, interfaces)
- ports/ propios (interfaces hacia infra)

NO puede importar de:
- infrastructure/ (implementaciones concretas)
- presentation/ (API)
"""

from wavepulse.application.use_cases.signal_pipeline import SignalPipeline

__all__ = ["SignalPipeline"]
