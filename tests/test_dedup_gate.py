"""Dedup gate: timestamp-equality policy and rollback."""

import pytest

from wavepulse.domain.entities.engine_state import EngineState
from wavepulse.domain.entities.signal import Signal, SignalLevel, SignalType
from wavepulse.domain.services.dedup_gate import DedupGate


def _signal(time, signal_type=SignalType.BUY):
    return Signal(signal_type=signal_type, level=SignalLevel.MEDIUM, price=1.0, time=time)


@pytest.fixture
def gate():
    return DedupGate()


def test_first_signal_admitted_and_recorded(gate):
    state = EngineState()
    signal = _signal(1000)
    assert gate.admit(signal, state) is signal
    assert state.last_emitted_signal is signal


def test_same_candle_rejected(gate):
    state = EngineState()
    gate.admit(_signal(1000), state)
    assert gate.admit(_signal(1000), state) is None


def test_same_candle_opposite_direction_rejected(gate):
    state = EngineState()
    gate.admit(_signal(1000, SignalType.BUY), state)
    assert gate.admit(_signal(1000, SignalType.SELL), state) is None


def test_consecutive_same_direction_on_new_candle_admitted(gate):
    state = EngineState()
    gate.admit(_signal(1000), state)
    second = _signal(2000)
    assert gate.admit(second, state) is second
    assert state.last_emitted_signal is second


def test_none_candidate_leaves_state_untouched(gate):
    first = _signal(1000)
    state = EngineState(last_emitted_signal=first)
    assert gate.admit(None, state) is None
    assert state.last_emitted_signal is first


def test_rollback_restores_previous(gate):
    first = _signal(1000)
    state = EngineState(last_emitted_signal=first)
    gate.admit(_signal(2000), state)
    gate.rollback(state, first)
    assert state.last_emitted_signal is first


def test_state_serialisation():
    state = EngineState(last_emitted_signal=_signal(1000))
    assert state.to_dict()["last_emitted_signal"]["time"] == 1000
    assert EngineState().to_dict() == {"last_emitted_signal": None}
