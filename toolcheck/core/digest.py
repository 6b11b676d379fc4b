"""Digest verification for the configs tarball.

Streams the tarball through SHA-256 and compares the hex digest with the
one the manifest claims. The bytes are not checked to be a valid tarball:
only that they are exactly the bytes that were described.
"""

from __future__ import annotations

import hashlib
import logging

from toolcheck.config import ToolcheckSettings
from toolcheck.core.errors import DigestMismatchError
from toolcheck.core.transport import iter_chunks

logger = logging.getLogger(__name__)


def compute_digest(url: str, *, settings: ToolcheckSettings | None = None) -> str:
    """Download *url* and return the lowercase hex SHA-256 of its body."""
    settings = settings or ToolcheckSettings()
    h = hashlib.sha256()
    size = 0
    for chunk in iter_chunks(
        url,
        timeout=settings.http_timeout_seconds,
        chunk_size=settings.chunk_size,
        operation="verify_digest",
    ):
        h.update(chunk)
        size += len(chunk)
    digest = h.hexdigest()
    logger.debug("Hashed %d bytes from %s: %s", size, url, digest)
    return digest


def digests_match(expected: str, actual: str) -> bool:
    """Exact, case-sensitive comparison of two hex digests."""
    return expected == actual


def verify_digest(
    expected: str, url: str, *, settings: ToolcheckSettings | None = None
) -> str:
    """Check that the bytes at *url* hash to *expected*.

    Returns the computed digest. Raises ``DigestMismatchError`` carrying
    both digests on mismatch, or ``TransportError`` if the download fails.
    """
    actual = compute_digest(url, settings=settings)
    if not digests_match(expected, actual):
        raise DigestMismatchError(expected=expected, actual=actual, url=url)
    logger.info("Configs tarball at %s matches digest %s", url, expected)
    return actual
