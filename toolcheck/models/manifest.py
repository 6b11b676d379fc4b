"""Manifest model — the descriptor published alongside a configs tarball."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class ArtifactManifest(BaseModel):
    """Metadata about a toolchain configs tarball under test.

    Required fields are checked by the manifest loader rather than by the
    model so that a missing key, a ``null`` and an empty value all fail the
    same way. Fields added by the uploader (upload timestamps, bucket names)
    are ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    bazel_version: str = ""
    configs_tarball_digest: str = ""  # hex sha256 of the tarball bytes
    toolchain_container: str = ""
    image_digest: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _null_is_empty(cls, value: Any) -> Any:
        # JSON null reads as an absent field.
        return "" if value is None else value

    @property
    def missing_optional_fields(self) -> list[str]:
        """Names of optional fields that were absent or empty."""
        return [
            name
            for name in ("toolchain_container", "image_digest")
            if not getattr(self, name)
        ]
