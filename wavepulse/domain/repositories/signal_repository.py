"""
WavePulse – Domain Repository Interface: Signal
=================================================
Interfaz abstracta para persistencia de señales emitidas.

Esta interfaz define el CONTRATO que debe cumplir cualquier
implementación (MySQL, SQLite, InMemory para tests, etc.)

SEMÁNTICA: at-least-once.
  El pipeline solo considera una señal emitida cuando append()
  devuelve True. Si falla, el pipeline revierte su estado y la
  señal se reintentará en el siguiente tick. Por eso un append de
  una señal ya guardada (misma vela y símbolo) debe tratarse como
  éxito y no como error.

REGLA DE CLEAN ARCHITECTURE:
- Esta interfaz vive en domain/ (capa interna)
- Las implementaciones viven en infrastructure/ (capa externa)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from wavepulse.domain.entities.signal import Signal


class ISignalRepository(ABC):
    """
    Interfaz abstracta para repositorio de señales.

    Todas las operaciones son async para no bloquear el event loop.
    """

    @abstractmethod
    async def append(self, signal: Signal) -> bool:
        """
        Persiste una señal.

        Returns:
            True si quedó guardada (o ya lo estaba), False si falló
        """
        pass

    @abstractmethod
    async def latest(self, n: int = 1) -> List[Signal]:
        """
        Obtiene las últimas n señales.

        Returns:
            Lista ordenada de la más antigua a la más reciente
        """
        pass
