"""Project materialization — build the Bazel test repository on disk.

Steps, in order:

1. ``reset``     — delete the destination directory and recreate it empty.
2. ``copy``      — copy the C++ and Java hello-world payload byte-for-byte.
3. ``workspace`` — write ``WORKSPACE`` pinning the verified configs tarball.
4. ``bazelrc``   — write ``.bazelrc`` with the remote execution config.

The destination is scratch space: anything already in it is destroyed.
Given identical inputs the resulting tree is byte-identical on every run.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Sequence
from pathlib import Path

from toolcheck.config import ToolcheckSettings
from toolcheck.core.errors import DecodeError, FilesystemError
from toolcheck.core.java_toolchain import VersionParseError
from toolcheck.core.templates import render_bazelrc, render_workspace
from toolcheck.models.manifest import ArtifactManifest
from toolcheck.models.project import MaterializedProject

logger = logging.getLogger(__name__)

WORKSPACE_FILENAME = "WORKSPACE"
BAZELRC_FILENAME = ".bazelrc"


def reset_directory(path: Path) -> None:
    """Remove *path* (and everything under it) and recreate it empty."""
    logger.warning("DELETING the contents of output directory %s", path)
    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.exists():
            shutil.rmtree(path)
        path.mkdir(parents=True)
    except OSError as exc:
        raise FilesystemError(
            f"unable to recreate output directory: {exc}",
            step="reset",
            path=str(path),
        ) from exc


def copy_file(dst: Path, src: Path) -> None:
    """Copy a regular file, creating parent directories as needed."""
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)
    except OSError as exc:
        raise FilesystemError(
            f"failed to copy {src} to {dst}: {exc}",
            step="copy",
            path=str(src),
        ) from exc


def copy_payload(src_root: Path, dest_root: Path, payload_files: Sequence[str]) -> tuple[str, ...]:
    """Copy every relative path in *payload_files* from *src_root* to *dest_root*."""
    copied: list[str] = []
    for rel in payload_files:
        copy_file(dest_root / rel, src_root / rel)
        logger.debug("Copied %s from %s to %s", rel, src_root, dest_root)
        copied.append(rel)
    logger.info("Copied %d payload files into %s", len(copied), dest_root)
    return tuple(copied)


def _write(path: Path, text: str, step: str) -> None:
    try:
        # Bytes, not text mode, so line endings are identical on every host.
        path.write_bytes(text.encode("utf-8"))
    except OSError as exc:
        raise FilesystemError(
            f"unable to write {path.name}: {exc}", step=step, path=str(path)
        ) from exc
    logger.info("Generated %s in %s", path.name, path.parent)


def materialize_project(
    manifest: ArtifactManifest,
    configs_url: str,
    rbe_instance: str,
    dest_root: Path,
    payload_files: Sequence[str],
    src_root: Path,
    *,
    settings: ToolcheckSettings | None = None,
) -> MaterializedProject:
    """Create a Bazel repository configured to build remotely with the configs.

    Parameters
    ----------
    manifest:
        The validated manifest; its digest is embedded in ``WORKSPACE``.
    configs_url:
        URL of the (already digest-checked) configs tarball.
    rbe_instance:
        Full remote instance name, written into ``.bazelrc``.
    dest_root:
        Output directory. Deleted and recreated.
    payload_files:
        Paths relative to *src_root* to copy verbatim.
    src_root:
        Root of the checkout holding the example sources.
    """
    settings = settings or ToolcheckSettings()
    dest_root = Path(dest_root)
    src_root = Path(src_root)

    # Render before touching the disk so a bad version cannot leave a
    # half-populated tree behind.
    workspace_text = render_workspace(configs_url, manifest.configs_tarball_digest)
    try:
        bazelrc_text, flag_set = render_bazelrc(
            manifest, configs_url, rbe_instance, settings=settings
        )
    except VersionParseError as exc:
        raise DecodeError(
            f"unable to determine the Java toolchain rules used by Bazel "
            f"{manifest.bazel_version!r}: {exc}",
            operation="materialize_project",
        ) from exc

    reset_directory(dest_root)
    copied = copy_payload(src_root, dest_root, payload_files)

    workspace_file = dest_root / WORKSPACE_FILENAME
    _write(workspace_file, workspace_text, step="workspace")

    bazelrc_file = dest_root / BAZELRC_FILENAME
    _write(bazelrc_file, bazelrc_text, step="bazelrc")
    logger.info("Selected Java flag set %s for Bazel %s", flag_set.value, manifest.bazel_version)

    return MaterializedProject(
        root=dest_root,
        copied_files=copied,
        workspace_file=workspace_file,
        bazelrc_file=bazelrc_file,
        java_flag_set=flag_set,
    )
