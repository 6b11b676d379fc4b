"""Manifest loading — fetch, decode and validate the configs manifest.

Fields the uploader adds on top of the generator's manifest (bucket paths,
upload timestamps) are ignored; they serve no functional purpose here.
"""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from toolcheck.config import ToolcheckSettings
from toolcheck.core.errors import DecodeError, ManifestIncompleteError
from toolcheck.core.java_toolchain import VersionParseError, parse_bazel_version
from toolcheck.core.transport import read_bytes
from toolcheck.models.manifest import ArtifactManifest

logger = logging.getLogger(__name__)

_OPERATION = "load_manifest"


def decode_manifest(body: bytes, url: str) -> ArtifactManifest:
    """Decode and validate a manifest document already in memory.

    Raises ``DecodeError`` for anything that is not a JSON object with
    string (or null) fields, and ``ManifestIncompleteError`` when the Bazel
    version or the tarball digest is empty or null.
    """
    try:
        raw = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DecodeError(
            f"failed to parse the manifest as JSON: {exc}",
            operation=_OPERATION,
            context={"url": url},
        ) from exc
    if not isinstance(raw, dict):
        raise DecodeError(
            f"expected a JSON object, got {type(raw).__name__}",
            operation=_OPERATION,
            context={"url": url},
        )

    try:
        manifest = ArtifactManifest.model_validate(raw, strict=True)
    except ValidationError as exc:
        raise DecodeError(
            f"manifest fields have unexpected types: {exc.errors()[0]['msg']}",
            operation=_OPERATION,
            context={"url": url},
        ) from exc

    if not manifest.bazel_version:
        raise ManifestIncompleteError(
            "manifest did not specify a Bazel version",
            operation=_OPERATION,
            context={"url": url},
        )
    if not manifest.configs_tarball_digest:
        raise ManifestIncompleteError(
            "manifest did not specify a configs tarball digest",
            operation=_OPERATION,
            context={"url": url},
        )
    try:
        parse_bazel_version(manifest.bazel_version)
    except VersionParseError as exc:
        raise DecodeError(
            str(exc), operation=_OPERATION, context={"url": url}
        ) from exc

    for name in manifest.missing_optional_fields:
        logger.warning("Manifest from %s has no %s; it will be left empty", url, name)
    return manifest


def load_manifest(
    url: str, *, settings: ToolcheckSettings | None = None
) -> ArtifactManifest:
    """Download the JSON manifest at *url* and validate it. One attempt."""
    settings = settings or ToolcheckSettings()
    body = read_bytes(url, timeout=settings.http_timeout_seconds, operation=_OPERATION)
    manifest = decode_manifest(body, url)
    logger.info(
        "Loaded manifest from %s: Bazel %s, configs sha256 %s",
        url,
        manifest.bazel_version,
        manifest.configs_tarball_digest,
    )
    return manifest
