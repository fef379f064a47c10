"""
WavePulse – Domain Service: Dedup Gate
========================================
Evita re-emitir una señal para una vela que ya produjo una.

POLÍTICA: igualdad de timestamp de vela.
  candidate.time == last_emitted.time  → descartada (None)
  cualquier otro caso                  → admitida, pasa a ser last_emitted

Dos señales consecutivas en la misma dirección pero en velas distintas
SÍ se admiten.

Este es el ÚNICO punto que muta EngineState. Solo el pipeline llama a
rollback(), cuando la persistencia de la señal admitida falla.
"""

from __future__ import annotations

from typing import Optional

from wavepulse.domain.entities.engine_state import EngineState
from wavepulse.domain.entities.signal import Signal


class DedupGate:
    """Filtro de señales duplicadas por timestamp de vela."""

    @staticmethod
    def is_duplicate(candidate: Signal, state: EngineState) -> bool:
        last = state.last_emitted_signal
        return last is not None and last.time == candidate.time

    def admit(self, candidate: Optional[Signal], state: EngineState) -> Optional[Signal]:
        """
        Admite o descarta una señal candidata.

        Returns:
            La señal si es nueva (y el estado queda actualizado), None si
            no había candidata o ya se emitió una para esa vela.
        """
        if candidate is None or self.is_duplicate(candidate, state):
            return None
        state.last_emitted_signal = candidate
        return candidate

    @staticmethod
    def rollback(state: EngineState, previous: Optional[Signal]) -> None:
        """Restaura last_emitted_signal al valor previo a admit()."""
        state.last_emitted_signal = previous
