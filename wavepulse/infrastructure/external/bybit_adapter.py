"""
Bybit Kline Adapter.

Implementa ICandleSource contra la API REST v5 de Bybit:

    GET {base_url}/v5/market/kline?category=linear&symbol=DOGEUSDT&interval=1&limit=200

Respuesta:
    {"retCode": 0, "retMsg": "OK",
     "result": {"list": [[startTime, open, high, low, close, volume, turnover], ...]}}

Bybit devuelve las velas de la más reciente a la más antigua y con todos
los campos como strings; aquí se convierten a Candle y se ordenan ASC.
Cualquier fallo (red, HTTP, retCode, JSON, filas malformadas) se
convierte en CandleFetchError. No hay reintentos: el siguiente tick del
poller es el reintento.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional

import aiohttp

from wavepulse.application.ports.candle_source import ICandleSource
from wavepulse.domain.entities.candle import Candle
from wavepulse.domain.exceptions.domain_errors import CandleFetchError, ValidationError
from wavepulse.shared.config.settings import Settings
from wavepulse.shared.logging.logger import get_logger

logger = get_logger("bybit_adapter")

KLINE_PATH = "/v5/market/kline"


class BybitKlineAdapter(ICandleSource):
    """
    Fuente de velas Bybit (endpoint público, sin firma).

    La sesión aiohttp se crea de forma perezosa y se reutiliza entre
    ticks; se puede inyectar una propia (tests).
    """

    def __init__(
        self,
        settings: Settings,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._settings = settings
        self._session = session
        self._owns_session = session is None

        # Stats
        self._requests = 0
        self._failures = 0

    @property
    def symbol(self) -> str:
        return self._settings.symbol

    @property
    def url(self) -> str:
        return self._settings.bybit_base_url.rstrip("/") + KLINE_PATH

    @property
    def params(self) -> dict:
        s = self._settings
        return {
            "category": s.bybit_category,
            "symbol": s.symbol,
            "interval": s.candle_interval,
            "limit": s.candle_limit,
        }

    # ════════════════════════════════════════════════════════════════
    #  ICandleSource
    # ════════════════════════════════════════════════════════════════

    async def fetch_candles(self) -> List[Candle]:
        self._requests += 1
        try:
            rows = await self._request()
            candles = self._parse(rows)
        except CandleFetchError:
            self._failures += 1
            raise

        logger.debug("%s: %d velas recibidas", self.symbol, len(candles))
        return candles

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    # ════════════════════════════════════════════════════════════════
    #  HTTP
    # ════════════════════════════════════════════════════════════════

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def _request(self) -> list:
        session = self._get_session()
        timeout = aiohttp.ClientTimeout(total=self._settings.fetch_timeout_seconds)
        try:
            async with session.get(self.url, params=self.params, timeout=timeout) as response:
                if response.status != 200:
                    raise CandleFetchError(
                        f"Bybit HTTP {response.status}",
                        symbol=self.symbol, stage="fetch",
                    )
                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    raise CandleFetchError(
                        f"Respuesta no JSON: {e}", symbol=self.symbol, stage="parse",
                    ) from e
        except aiohttp.ClientError as e:
            raise CandleFetchError(
                f"Error de red: {e}", symbol=self.symbol, stage="fetch",
            ) from e
        except asyncio.TimeoutError as e:
            raise CandleFetchError(
                f"Timeout tras {self._settings.fetch_timeout_seconds}s",
                symbol=self.symbol, stage="fetch",
            ) from e

        if not isinstance(data, dict) or data.get("retCode") != 0:
            ret_msg = data.get("retMsg") if isinstance(data, dict) else data
            ret_code = data.get("retCode") if isinstance(data, dict) else None
            raise CandleFetchError(
                f"Bybit retCode={ret_code}: {ret_msg}", symbol=self.symbol, stage="fetch",
            )

        rows = (data.get("result") or {}).get("list")
        if not isinstance(rows, list):
            raise CandleFetchError(
                "Respuesta sin result.list", symbol=self.symbol, stage="parse",
            )
        return rows

    def _parse(self, rows: list) -> List[Candle]:
        try:
            candles = [Candle.from_kline(row) for row in rows]
        except ValidationError as e:
            raise CandleFetchError(
                f"Kline malformada: {e.message}", symbol=self.symbol, stage="parse",
            ) from e
        except TypeError as e:
            raise CandleFetchError(
                f"Kline no es una lista: {e}", symbol=self.symbol, stage="parse",
            ) from e
        candles.sort(key=lambda c: c.time)
        return candles

    @property
    def stats(self) -> dict:
        return {
            "requests": self._requests,
            "failures": self._failures,
        }
