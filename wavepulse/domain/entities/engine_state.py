"""
WavePulse – Domain Entity: EngineState
========================================
Estado mínimo que el pipeline conserva entre ticks.

POR QUÉ NO VARIABLES GLOBALES:
- El estado vive en una instancia propiedad del SignalPipeline
  (una por símbolo/sesión) y se reinicia al reiniciar el proceso.
- Opcionalmente se rehidrata desde el repositorio (latest(1)).
- SOLO DedupGate lo muta.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from wavepulse.domain.entities.signal import Signal


@dataclass
class EngineState:
    """Última señal emitida (clave de deduplicación)."""

    last_emitted_signal: Optional[Signal] = None

    def to_dict(self) -> dict:
        return {
            "last_emitted_signal": (
                self.last_emitted_signal.to_dict()
                if self.last_emitted_signal is not None else None
            ),
        }
