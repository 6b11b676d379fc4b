"""Verification report — the orchestrator's single result value."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from toolcheck.core.errors import ErrorKind
from toolcheck.models.manifest import ArtifactManifest
from toolcheck.models.outcome import BuildOutcome
from toolcheck.models.project import MaterializedProject
from toolcheck.models.states import PipelineState, StateTransition


class FailureInfo(BaseModel):
    """Why a run ended in FAILED."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    failed_in: PipelineState  # state the run was in when the error occurred
    message: str


class VerificationReport(BaseModel):
    """A frozen summary of one verification run."""

    model_config = ConfigDict(frozen=True)

    final_state: PipelineState
    transitions: list[StateTransition] = []
    manifest: ArtifactManifest | None = None
    project: MaterializedProject | None = None
    outcome: BuildOutcome | None = None
    failure: FailureInfo | None = None
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    finished_at: datetime | None = None

    @property
    def passed(self) -> bool:
        return self.final_state == PipelineState.PASSED
