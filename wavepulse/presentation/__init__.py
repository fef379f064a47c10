"""
WavePulse – Presentation Layer
================================
API HTTP.

Este módulo contiene:
- api/: FastAPI routes

REGLA DE DEPENDENCIA:
Esta capa SOLO llama a use cases / services de application/.
"""

from wavepulse.presentation.api.routes import init_routes, router

__all__ = [
    "router",
    "init_routes",
]
