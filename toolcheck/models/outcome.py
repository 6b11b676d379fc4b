"""Build outcome model — the classified result of one external command."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class OutcomeKind(str, Enum):
    """How an external command ended."""

    SUCCESS = "success"
    BUILD_FAILED = "build_failed"
    TIMED_OUT = "timed_out"


class BuildOutcome(BaseModel):
    """Terminal result of a bounded subprocess run. Never retried.

    ``output`` is the combined stdout/stderr; it is always empty for a
    timed-out run because the killed process's output is discarded.
    ``exit_code`` is ``None`` for a timed-out run.
    """

    model_config = ConfigDict(frozen=True)

    kind: OutcomeKind
    exit_code: int | None = None
    output: str = ""
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS

    @classmethod
    def success(cls, output: str = "", duration_seconds: float = 0.0) -> BuildOutcome:
        return cls(
            kind=OutcomeKind.SUCCESS,
            exit_code=0,
            output=output,
            duration_seconds=duration_seconds,
        )

    @classmethod
    def build_failed(
        cls, exit_code: int, output: str, duration_seconds: float = 0.0
    ) -> BuildOutcome:
        return cls(
            kind=OutcomeKind.BUILD_FAILED,
            exit_code=exit_code,
            output=output,
            duration_seconds=duration_seconds,
        )

    @classmethod
    def timed_out(cls, duration_seconds: float = 0.0) -> BuildOutcome:
        return cls(kind=OutcomeKind.TIMED_OUT, duration_seconds=duration_seconds)
