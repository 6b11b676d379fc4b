"""Single-attempt URL reads for manifests, tarballs and the launcher.

Uses ``urllib.request`` so that ``https://``, ``http://`` and ``file://``
URLs all work. There are no retries: the first failure is terminal and is
reported as ``TransportError`` with the URL attached.
"""

from __future__ import annotations

import http.client
import logging
import urllib.error
import urllib.request
from collections.abc import Iterator
from contextlib import contextmanager
from typing import BinaryIO

from toolcheck.core.errors import TransportError

logger = logging.getLogger(__name__)

_USER_AGENT = "toolcheck"


@contextmanager
def open_url(url: str, *, timeout: float, operation: str) -> Iterator[BinaryIO]:
    """Open *url* for reading, translating failures to ``TransportError``.

    HTTP error statuses (4xx/5xx) are failures even though the server
    answered: a 404 page is not a manifest.
    """
    request = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
    try:
        response = urllib.request.urlopen(request, timeout=timeout)  # noqa: S310
    except urllib.error.HTTPError as exc:
        raise TransportError(
            f"server answered HTTP {exc.code}",
            operation=operation,
            context={"url": url},
        ) from exc
    except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as exc:
        raise TransportError(
            f"unable to open URL: {exc}",
            operation=operation,
            context={"url": url},
        ) from exc
    logger.debug("Opened %s for %s", url, operation)
    with response:
        yield response


def iter_chunks(
    url: str, *, timeout: float, chunk_size: int, operation: str
) -> Iterator[bytes]:
    """Stream the body of *url* in chunks of at most *chunk_size* bytes."""
    with open_url(url, timeout=timeout, operation=operation) as stream:
        while True:
            try:
                chunk = stream.read(chunk_size)
            except (http.client.HTTPException, OSError) as exc:
                raise TransportError(
                    f"error while reading the response body: {exc}",
                    operation=operation,
                    context={"url": url},
                ) from exc
            if not chunk:
                return
            yield chunk


def read_bytes(url: str, *, timeout: float, operation: str) -> bytes:
    """Read the whole body of *url* into memory."""
    with open_url(url, timeout=timeout, operation=operation) as stream:
        try:
            return stream.read()
        except (http.client.HTTPException, OSError) as exc:
            raise TransportError(
                f"error while reading the response body: {exc}",
                operation=operation,
                context={"url": url},
            ) from exc
