"""Pipeline state machine models — strictly linear transitions."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PipelineState(str, Enum):
    """States a verification run moves through, in order."""

    INIT = "init"
    MANIFEST_LOADED = "manifest_loaded"
    DIGEST_VERIFIED = "digest_verified"
    PROJECT_MATERIALIZED = "project_materialized"
    BUILD_RAN = "build_ran"
    PASSED = "passed"
    FAILED = "failed"


TERMINAL_STATES: frozenset[PipelineState] = frozenset(
    {PipelineState.PASSED, PipelineState.FAILED}
)

# Valid state transitions, enforced by PipelineStateMachine.
# Every non-terminal state may fail; terminal states have no outgoing edges.
VALID_TRANSITIONS: dict[PipelineState, set[PipelineState]] = {
    PipelineState.INIT: {PipelineState.MANIFEST_LOADED, PipelineState.FAILED},
    PipelineState.MANIFEST_LOADED: {PipelineState.DIGEST_VERIFIED, PipelineState.FAILED},
    PipelineState.DIGEST_VERIFIED: {PipelineState.PROJECT_MATERIALIZED, PipelineState.FAILED},
    PipelineState.PROJECT_MATERIALIZED: {PipelineState.BUILD_RAN, PipelineState.FAILED},
    PipelineState.BUILD_RAN: {PipelineState.PASSED, PipelineState.FAILED},
    PipelineState.PASSED: set(),  # terminal
    PipelineState.FAILED: set(),  # terminal
}


class StateTransition(BaseModel):
    """Records a single state transition for the run report."""

    model_config = ConfigDict(frozen=True)

    from_state: PipelineState
    to_state: PipelineState
    detail: str = ""
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
