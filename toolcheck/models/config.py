"""Run configuration — the operator's parameters, captured once and frozen."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from toolcheck.core.errors import ParameterInvalidError

INSTANCE_NAME_FORMAT = "projects/<GCP project ID>/instances/<instance ID>"

# Files copied from the source root into the materialized project.
DEFAULT_PAYLOAD_FILES: tuple[str, ...] = (
    # C++ Hello World example.
    "examples/remotebuildexecution/hello_world/cc/BUILD",
    "examples/remotebuildexecution/hello_world/cc/hello_world.cc",
    "examples/remotebuildexecution/hello_world/cc/say_hello_test.cc",
    "examples/remotebuildexecution/hello_world/cc/say_hello.cc",
    "examples/remotebuildexecution/hello_world/cc/say_hello.h",
    # Java Hello World example.
    "examples/remotebuildexecution/hello_world/java/BUILD",
    "examples/remotebuildexecution/hello_world/java/HelloWorld.java",
)


def validate_instance_name(name: str) -> str:
    """Check that *name* looks like ``projects/<id>/instances/<id>``.

    Returns the name unchanged. Raises ``ValueError`` describing the first
    rule that was broken.
    """
    segments = name.split("/")
    if len(segments) != 4:
        raise ValueError(
            f"{name!r} did not conform to format {INSTANCE_NAME_FORMAT!r} because it "
            f"split into {len(segments)} elements by '/' instead of 4"
        )
    if segments[0] != "projects":
        raise ValueError(
            f"{name!r} did not conform to format {INSTANCE_NAME_FORMAT!r} because the "
            f"first element was {segments[0]!r} instead of 'projects'"
        )
    if segments[2] != "instances":
        raise ValueError(
            f"{name!r} did not conform to format {INSTANCE_NAME_FORMAT!r} because the "
            f"third element was {segments[2]!r} instead of 'instances'"
        )
    return name


class RunConfig(BaseModel):
    """Everything one verification run needs, validated at construction.

    Build instances through :meth:`create` to get ``ParameterInvalidError``
    instead of a pydantic ``ValidationError``.
    """

    model_config = ConfigDict(frozen=True)

    manifest_url: str
    configs_url: str
    src_root: Path
    dest_root: Path
    rbe_instance: str
    timeout_seconds: int
    payload_files: tuple[str, ...] = DEFAULT_PAYLOAD_FILES

    @field_validator(
        "manifest_url", "configs_url", "src_root", "dest_root", "rbe_instance",
        mode="before",
    )
    @classmethod
    def _required(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("was not specified")
        return value

    @field_validator("rbe_instance")
    @classmethod
    def _instance_shape(cls, value: str) -> str:
        return validate_instance_name(value)

    @field_validator("timeout_seconds", mode="before")
    @classmethod
    def _positive_timeout(cls, value: Any) -> Any:
        if value is None or isinstance(value, bool):
            raise ValueError("was either not specified or not a whole number of seconds")
        return value

    @field_validator("timeout_seconds")
    @classmethod
    def _timeout_after(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"was either not specified or not positive, got {value}")
        return value

    @field_validator("payload_files")
    @classmethod
    def _relative_payload(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for rel in value:
            p = Path(rel)
            if p.is_absolute() or ".." in p.parts:
                raise ValueError(f"payload path {rel!r} must be relative to the source root")
        return value

    @classmethod
    def create(cls, **params: Any) -> RunConfig:
        """Validate operator parameters, naming the first bad one on failure."""
        try:
            return cls(**params)
        except ValidationError as exc:
            first = exc.errors()[0]
            parameter = str(first["loc"][0]) if first["loc"] else "parameters"
            message = first["msg"].removeprefix("Value error, ")
            raise ParameterInvalidError(parameter, message) from exc

    def describe(self) -> dict[str, str]:
        """Flat mapping used to log the parameters once at startup."""
        return {
            "manifest_url": self.manifest_url,
            "configs_url": self.configs_url,
            "src_root": str(self.src_root),
            "dest_root": str(self.dest_root),
            "rbe_instance": self.rbe_instance,
            "timeout_seconds": str(self.timeout_seconds),
        }
