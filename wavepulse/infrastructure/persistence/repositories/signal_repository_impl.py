"""
Signal Repository Implementation.

Implementación concreta del repositorio de señales usando SQLAlchemy.
Implementa la interfaz ISignalRepository del dominio.

Clean Architecture: Esta clase está en infrastructure y depende de domain.
El dominio NO conoce esta implementación.
"""

from __future__ import annotations

from typing import List

from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from wavepulse.domain.entities.signal import Signal
from wavepulse.domain.repositories.signal_repository import ISignalRepository
from wavepulse.infrastructure.persistence.database import DatabaseManager
from wavepulse.infrastructure.persistence.mappers.signal_mapper import SignalMapper
from wavepulse.infrastructure.persistence.models import SignalModel
from wavepulse.shared.logging.logger import get_logger

logger = get_logger("infrastructure.signal_repository")


class SqlSignalRepository(ISignalRepository):
    """
    Implementación async del repositorio de señales.

    Cada operación abre su propia sesión: el pipeline no gestiona
    transacciones y una señal cuenta como emitida solo tras el commit.
    """

    def __init__(self, db: DatabaseManager, symbol: str):
        self._db = db
        self._symbol = symbol
        self._mapper = SignalMapper()

    async def append(self, signal: Signal) -> bool:
        """Inserta la señal. Una fila existente para la misma vela cuenta como éxito."""
        try:
            async with self._db.session() as session:
                session.add(SignalModel(**self._mapper.to_model(signal, self._symbol)))
                await session.commit()
        except IntegrityError:
            if await self._exists(signal.time):
                logger.debug("Señal t=%d ya persistida (reintento)", signal.time)
                return True
            logger.error("Violación de integridad guardando señal t=%d", signal.time)
            return False
        except SQLAlchemyError as e:
            logger.error("Error guardando señal t=%d: %s", signal.time, e)
            return False

        logger.debug("Signal guardada: %s t=%d", self._symbol, signal.time)
        return True

    async def latest(self, n: int = 1) -> List[Signal]:
        """Últimas n señales del símbolo, de la más antigua a la más reciente."""
        if n <= 0:
            return []
        async with self._db.session() as session:
            result = await session.execute(
                select(SignalModel)
                .where(SignalModel.symbol == self._symbol)
                .order_by(desc(SignalModel.candle_time))
                .limit(n)
            )
            models = result.scalars().all()
        return [self._mapper.to_entity(m) for m in reversed(models)]

    async def _exists(self, candle_time: int) -> bool:
        async with self._db.session() as session:
            result = await session.execute(
                select(SignalModel.id).where(
                    SignalModel.symbol == self._symbol,
                    SignalModel.candle_time == candle_time,
                )
            )
            return result.scalar_one_or_none() is not None
