"""Tests for the PipelineStateMachine — linear transitions, terminal states."""

from __future__ import annotations

import pytest

from toolcheck.core.state_machine import InvalidTransitionError, PipelineStateMachine
from toolcheck.models.states import TERMINAL_STATES, VALID_TRANSITIONS, PipelineState

HAPPY_PATH = [
    PipelineState.MANIFEST_LOADED,
    PipelineState.DIGEST_VERIFIED,
    PipelineState.PROJECT_MATERIALIZED,
    PipelineState.BUILD_RAN,
    PipelineState.PASSED,
]


class TestPipelineStateMachine:
    def test_starts_in_init(self):
        machine = PipelineStateMachine()
        assert machine.state == PipelineState.INIT
        assert machine.history == []
        assert not machine.is_terminal

    def test_happy_path(self):
        machine = PipelineStateMachine()
        for target in HAPPY_PATH:
            machine.transition(target)
        assert machine.state == PipelineState.PASSED
        assert machine.is_terminal
        assert [t.to_state for t in machine.history] == HAPPY_PATH

    def test_history_records_from_and_detail(self):
        machine = PipelineStateMachine()
        record = machine.transition(PipelineState.MANIFEST_LOADED, "5.0.0")
        assert record.from_state == PipelineState.INIT
        assert record.to_state == PipelineState.MANIFEST_LOADED
        assert record.detail == "5.0.0"
        assert machine.history == [record]

    def test_history_is_a_copy(self):
        machine = PipelineStateMachine()
        machine.transition(PipelineState.MANIFEST_LOADED)
        machine.history.clear()
        assert len(machine.history) == 1

    def test_cannot_skip_states(self):
        machine = PipelineStateMachine()
        with pytest.raises(InvalidTransitionError, match="init to digest_verified"):
            machine.transition(PipelineState.DIGEST_VERIFIED)
        assert machine.state == PipelineState.INIT

    def test_cannot_pass_before_build(self):
        machine = PipelineStateMachine()
        for target in HAPPY_PATH[:3]:
            machine.transition(target)
        assert not machine.can_transition(PipelineState.PASSED)
        with pytest.raises(InvalidTransitionError):
            machine.transition(PipelineState.PASSED)

    @pytest.mark.parametrize("steps", range(len(HAPPY_PATH)))
    def test_every_non_terminal_state_can_fail(self, steps: int):
        machine = PipelineStateMachine()
        for target in HAPPY_PATH[:steps]:
            machine.transition(target)
        machine.transition(PipelineState.FAILED, "transport")
        assert machine.state == PipelineState.FAILED
        assert machine.is_terminal

    @pytest.mark.parametrize("terminal", sorted(TERMINAL_STATES, key=lambda s: s.value))
    def test_terminal_states_are_final(self, terminal: PipelineState):
        assert VALID_TRANSITIONS[terminal] == set()
        machine = PipelineStateMachine()
        if terminal == PipelineState.PASSED:
            for target in HAPPY_PATH:
                machine.transition(target)
        else:
            machine.transition(PipelineState.FAILED)
        for target in PipelineState:
            assert not machine.can_transition(target)
        with pytest.raises(InvalidTransitionError):
            machine.transition(PipelineState.FAILED)

    def test_table_covers_every_state(self):
        assert set(VALID_TRANSITIONS) == set(PipelineState)
