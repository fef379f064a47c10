"""
In-Memory Signal Repository.

Buffer acotado (deque) usado cuando la base de datos está deshabilitada
y en los tests. Misma semántica que SqlSignalRepository: un append de
una vela ya guardada devuelve True sin duplicar.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, List

from wavepulse.domain.entities.signal import Signal
from wavepulse.domain.repositories.signal_repository import ISignalRepository


class InMemorySignalRepository(ISignalRepository):
    """Historial de señales en memoria, limitado a `maxlen` entradas."""

    def __init__(self, maxlen: int = 500):
        self._signals: Deque[Signal] = deque(maxlen=maxlen)

    async def append(self, signal: Signal) -> bool:
        if any(s.time == signal.time for s in self._signals):
            return True
        self._signals.append(signal)
        return True

    async def latest(self, n: int = 1) -> List[Signal]:
        if n <= 0:
            return []
        return list(self._signals)[-n:]

    def __len__(self) -> int:
        return len(self._signals)
