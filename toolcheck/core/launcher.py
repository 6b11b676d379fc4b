"""Bazelisk launcher download.

Bazelisk is a thin wrapper that downloads and runs the Bazel release named
by ``USE_BAZEL_VERSION``. Its own version is pinned in settings; the asset
name depends on the host OS.
"""

from __future__ import annotations

import logging
import os
import platform
import stat
from enum import Enum
from pathlib import Path

from toolcheck.config import ToolcheckSettings
from toolcheck.core.errors import FilesystemError, ParameterInvalidError
from toolcheck.core.transport import iter_chunks

logger = logging.getLogger(__name__)


class HostOS(str, Enum):
    LINUX = "linux"
    WINDOWS = "windows"
    DARWIN = "darwin"


# Release asset name per host OS.
LAUNCHER_ASSETS: dict[HostOS, str] = {
    HostOS.LINUX: "bazelisk-linux-amd64",
    HostOS.WINDOWS: "bazelisk-windows-amd64.exe",
    HostOS.DARWIN: "bazelisk-darwin-amd64",
}


def current_os() -> HostOS:
    """Map ``platform.system()`` onto a supported ``HostOS``."""
    system = platform.system().lower()
    try:
        return HostOS(system)
    except ValueError:
        raise ParameterInvalidError(
            "host_os", f"unsupported host OS {platform.system()!r} for the Bazelisk launcher"
        ) from None


def launcher_download_info(
    host: HostOS, settings: ToolcheckSettings | None = None
) -> tuple[str, str]:
    """Return ``(url, filename)`` of the pinned Bazelisk release for *host*."""
    settings = settings or ToolcheckSettings()
    filename = LAUNCHER_ASSETS[host]
    base = settings.bazelisk_base_url.rstrip("/")
    return f"{base}/{settings.bazelisk_version}/{filename}", filename


def download_launcher(
    dest_dir: Path,
    *,
    host: HostOS | None = None,
    settings: ToolcheckSettings | None = None,
) -> Path:
    """Download Bazelisk into *dest_dir*, mark it executable, return its path."""
    settings = settings or ToolcheckSettings()
    url, filename = launcher_download_info(host or current_os(), settings)
    path = Path(dest_dir) / filename
    logger.info("Downloading Bazelisk from %s to %s", url, path)

    chunks = iter_chunks(
        url,
        timeout=settings.http_timeout_seconds,
        chunk_size=settings.chunk_size,
        operation="download_launcher",
    )
    try:
        with path.open("wb") as out:
            for chunk in chunks:
                out.write(chunk)
    except OSError as exc:
        raise FilesystemError(
            f"unable to write the Bazelisk binary: {exc}",
            step="download_launcher",
            path=str(path),
            operation="download_launcher",
        ) from exc

    try:
        mode = path.stat().st_mode
        os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH | stat.S_IRUSR)
    except OSError as exc:
        raise FilesystemError(
            f"unable to make the downloaded Bazelisk binary executable: {exc}",
            step="download_launcher",
            path=str(path),
            operation="download_launcher",
        ) from exc
    return path
