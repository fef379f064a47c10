"""
WavePulse – Application Port: Candle Source
=============================================
Interfaz para obtener la ventana de velas de mercado.

El pipeline solicita velas; la infraestructura decide CÓMO obtenerlas
(API REST de Bybit, fichero histórico, fixture de tests, etc.)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from wavepulse.domain.entities.candle import Candle


class ICandleSource(ABC):
    """
    Interfaz para proveer velas OHLCV.

    IMPLEMENTACIONES:
    - BybitKlineAdapter (REST, producción)
    - Stubs en memoria (testing)
    """

    @property
    @abstractmethod
    def symbol(self) -> str:
        """Símbolo que sirve esta fuente (e.g. "DOGEUSDT")."""
        pass

    @abstractmethod
    async def fetch_candles(self) -> List[Candle]:
        """
        Obtiene la ventana de velas más reciente.

        Returns:
            Lista de velas ordenadas por time ASC

        Raises:
            CandleFetchError: red, HTTP, respuesta malformada
        """
        pass

    async def close(self) -> None:
        """Libera recursos (sesiones HTTP). Por defecto no hace nada."""
        return None
