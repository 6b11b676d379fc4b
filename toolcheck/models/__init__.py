"""toolcheck data models — all Pydantic v2, all frozen (immutable)."""

from toolcheck.models.config import (
    DEFAULT_PAYLOAD_FILES,
    INSTANCE_NAME_FORMAT,
    RunConfig,
    validate_instance_name,
)
from toolcheck.models.manifest import ArtifactManifest
from toolcheck.models.outcome import BuildOutcome, OutcomeKind
from toolcheck.models.project import MaterializedProject
from toolcheck.models.report import FailureInfo, VerificationReport
from toolcheck.models.states import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    PipelineState,
    StateTransition,
)

__all__ = [
    # config
    "DEFAULT_PAYLOAD_FILES",
    "INSTANCE_NAME_FORMAT",
    "RunConfig",
    "validate_instance_name",
    # manifest
    "ArtifactManifest",
    # outcome
    "BuildOutcome",
    "OutcomeKind",
    # project
    "MaterializedProject",
    # report
    "FailureInfo",
    "VerificationReport",
    # states
    "PipelineState",
    "StateTransition",
    "TERMINAL_STATES",
    "VALID_TRANSITIONS",
]
