"""Deterministic pipeline state machine.

Enforces:
- Valid state transitions only (VALID_TRANSITIONS table)
- Terminal states (PASSED, FAILED) are final
- Every transition recorded, in order, for the run report
"""

from __future__ import annotations

import logging

from toolcheck.models.states import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    PipelineState,
    StateTransition,
)

logger = logging.getLogger(__name__)


class InvalidTransitionError(RuntimeError):
    """Raised when a requested state transition is not valid."""


class PipelineStateMachine:
    """Tracks the current state of one verification run."""

    def __init__(self) -> None:
        self._state = PipelineState.INIT
        self._history: list[StateTransition] = []

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def history(self) -> list[StateTransition]:
        """A copy of every transition taken so far."""
        return list(self._history)

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    def can_transition(self, target: PipelineState) -> bool:
        return target in VALID_TRANSITIONS.get(self._state, set())

    def transition(self, target: PipelineState, detail: str = "") -> StateTransition:
        """Move to *target*, recording the transition.

        Raises ``InvalidTransitionError`` if the table does not allow it.
        """
        if not self.can_transition(target):
            allowed = sorted(s.value for s in VALID_TRANSITIONS.get(self._state, set()))
            raise InvalidTransitionError(
                f"Cannot transition from {self._state.value} to {target.value}. "
                f"Allowed: {allowed}"
            )
        record = StateTransition(from_state=self._state, to_state=target, detail=detail)
        self._history.append(record)
        logger.info("%s -> %s%s", self._state.value, target.value, f" ({detail})" if detail else "")
        self._state = target
        return record
