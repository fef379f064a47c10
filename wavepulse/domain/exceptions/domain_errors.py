"""
WavePulse – Domain Exceptions
===============================
Excepciones específicas del dominio de señales.

JERARQUÍA:
    DomainError (base)
    ├── ValidationError            vela / serie / frame mal formados
    ├── InsufficientDataError      serie más corta que el lookback
    ├── IndicatorDivergenceError   NaN/None en el índice evaluado
    ├── CandleFetchError           fuente de velas caída o respuesta inválida
    └── SignalPersistenceError     el repositorio rechazó la señal

InsufficientDataError e IndicatorDivergenceError NO salen del evaluador:
son el estado normal de warm-up y se traducen a "sin señal". Existen para
que los servicios internos puedan describir el motivo en logs.
"""

from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Excepción base para errores de dominio."""

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(DomainError):
    """Error de validación general de datos de dominio."""

    def __init__(self, message: str, field: str = None, value: Any = None):
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field
        self.value = value


class InsufficientDataError(DomainError):
    """Error cuando no hay suficientes datos para un cálculo."""

    def __init__(self, message: str, required: int = None, available: int = None):
        super().__init__(message, code="INSUFFICIENT_DATA")
        self.required = required
        self.available = available


class IndicatorDivergenceError(DomainError):
    """Un indicador quedó indefinido (None/NaN) en el índice evaluado."""

    def __init__(self, message: str, indicator: str = None, index: int = None):
        super().__init__(message, code="INDICATOR_DIVERGENCE")
        self.indicator = indicator
        self.index = index


class CandleFetchError(DomainError):
    """
    La fuente de velas no respondió o devolvió datos inválidos.

    Lleva el contexto necesario para observabilidad: símbolo, momento
    del tick (epoch ms) y etapa que falló ("fetch", "parse", "validate").
    """

    def __init__(
        self,
        message: str,
        symbol: str = None,
        stage: str = "fetch",
        tick_time: Optional[int] = None,
    ):
        super().__init__(message, code="FETCH_FAILURE")
        self.symbol = symbol
        self.stage = stage
        self.tick_time = tick_time

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "symbol": self.symbol,
            "stage": self.stage,
            "tick_time": self.tick_time,
        })
        return data


class SignalPersistenceError(DomainError):
    """El colaborador de persistencia no pudo guardar la señal."""

    def __init__(
        self,
        message: str,
        signal_time: int = None,
        symbol: str = None,
        tick_time: Optional[int] = None,
    ):
        super().__init__(message, code="PERSISTENCE_FAILURE")
        self.signal_time = signal_time
        self.symbol = symbol
        self.stage = "persist"
        self.tick_time = tick_time

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "symbol": self.symbol,
            "stage": self.stage,
            "tick_time": self.tick_time,
            "signal_time": self.signal_time,
        })
        return data
