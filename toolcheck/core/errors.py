"""Error taxonomy for the verification pipeline.

Every failure in toolcheck is terminal: there is no supervisor to hand a
recoverable error to, so each error is raised once, carries the operation
that failed plus identifying context (URL, path, digests), and is surfaced
verbatim by the orchestrator.

Hierarchy::

    ToolcheckError
    ├── ParameterInvalidError
    ├── TransportError
    ├── DecodeError
    ├── ManifestIncompleteError
    ├── DigestMismatchError
    ├── FilesystemError
    ├── SubprocessLaunchError
    ├── BuildFailedError
    └── TimedOutError
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Failure classes reported in a ``VerificationReport``."""

    PARAMETER_INVALID = "parameter_invalid"
    TRANSPORT = "transport"
    DECODE = "decode"
    MANIFEST_INCOMPLETE = "manifest_incomplete"
    DIGEST_MISMATCH = "digest_mismatch"
    FILESYSTEM = "filesystem"
    SUBPROCESS_LAUNCH = "subprocess_launch"
    BUILD_FAILED = "build_failed"
    TIMED_OUT = "timed_out"


class ToolcheckError(RuntimeError):
    """Base class for every terminal pipeline failure.

    Parameters
    ----------
    message:
        Human-readable description of what went wrong.
    operation:
        Name of the operation that failed (e.g. ``"load_manifest"``).
    context:
        Identifying values (URL, path, digests) rendered after the message.
    """

    kind: ErrorKind = ErrorKind.PARAMETER_INVALID

    def __init__(
        self,
        message: str,
        *,
        operation: str = "",
        context: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.operation = operation
        self.context = dict(context or {})
        super().__init__(self._render())

    def _render(self) -> str:
        parts = [self.message]
        if self.operation:
            parts.insert(0, f"[{self.operation}]")
        if self.context:
            details = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            parts.append(f"({details})")
        return " ".join(parts)


class ParameterInvalidError(ToolcheckError):
    """An operator-supplied parameter is missing or malformed."""

    kind = ErrorKind.PARAMETER_INVALID

    def __init__(self, parameter: str, message: str) -> None:
        self.parameter = parameter
        super().__init__(
            f"--{parameter.replace('_', '-')}: {message}",
            operation="validate_parameters",
        )


class TransportError(ToolcheckError):
    """A network (or file URL) read failed."""

    kind = ErrorKind.TRANSPORT


class DecodeError(ToolcheckError):
    """A fetched document could not be decoded."""

    kind = ErrorKind.DECODE


class ManifestIncompleteError(ToolcheckError):
    """A manifest decoded fine but a required field is empty."""

    kind = ErrorKind.MANIFEST_INCOMPLETE


class DigestMismatchError(ToolcheckError):
    """The bundle bytes do not hash to the digest the manifest claims."""

    kind = ErrorKind.DIGEST_MISMATCH

    def __init__(self, expected: str, actual: str, url: str) -> None:
        self.expected = expected
        self.actual = actual
        self.url = url
        super().__init__(
            f"digest {expected} specified in the manifest did not match digest "
            f"{actual} computed by downloading the configs tarball",
            operation="verify_digest",
            context={"url": url},
        )


class FilesystemError(ToolcheckError):
    """A file or directory operation during materialization failed."""

    kind = ErrorKind.FILESYSTEM

    def __init__(
        self,
        message: str,
        *,
        step: str,
        path: str = "",
        operation: str = "materialize_project",
    ) -> None:
        self.step = step
        self.path = path
        context: dict[str, Any] = {"step": step}
        if path:
            context["path"] = path
        super().__init__(message, operation=operation, context=context)


class SubprocessLaunchError(ToolcheckError):
    """The build-tool launcher could not be started."""

    kind = ErrorKind.SUBPROCESS_LAUNCH


class BuildFailedError(ToolcheckError):
    """The build ran to completion and exited non-zero."""

    kind = ErrorKind.BUILD_FAILED

    def __init__(self, exit_code: int | None, output: str, *, context: dict[str, Any] | None = None) -> None:
        self.exit_code = exit_code
        self.output = output
        super().__init__(
            f"bazel build failed with exit code {exit_code}",
            operation="run_test_build",
            context=context,
        )


class TimedOutError(ToolcheckError):
    """The build was killed because the deadline elapsed."""

    kind = ErrorKind.TIMED_OUT

    def __init__(self, timeout_seconds: float, *, context: dict[str, Any] | None = None) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"bazel build was killed because the timeout of {timeout_seconds}s was reached",
            operation="run_test_build",
            context=context,
        )
