"""Build driver — run the remote test build with a pinned Bazel.

Downloads Bazelisk into the materialized project, then runs::

    bazelisk --output_base=<dir>/.bazelcache build --config=remote \\
        --noremote_accept_cached //examples/...

with ``USE_BAZEL_VERSION`` pinning the Bazel release from the manifest.
The private output base means every run starts from a clean local cache;
``--noremote_accept_cached`` makes every action really execute remotely,
so a pass proves the toolchain configs compile, link and run.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from toolcheck.config import ToolcheckSettings
from toolcheck.core.command_runner import run_command
from toolcheck.core.launcher import download_launcher
from toolcheck.models.outcome import BuildOutcome, OutcomeKind

logger = logging.getLogger(__name__)

OUTPUT_BASE_DIRNAME = ".bazelcache"
LAUNCHER_CACHE_DIRNAME = ".bazeliskcache"

# Host variables passed through so the launcher can find tools and a home.
_PASSTHROUGH_ENV = ("PATH", "HOME", "SYSTEMROOT", "TEMP", "TMP")


def build_arguments(work_dir: Path, settings: ToolcheckSettings) -> list[str]:
    """Fixed Bazel argument list for the test build."""
    return [
        # Custom output base so Bazel runs with a clean local cache.
        f"--output_base={work_dir / OUTPUT_BASE_DIRNAME}",
        "build",
        # Selects every build:remote option from the generated .bazelrc.
        "--config=remote",
        # Remote cache hits would prove nothing about the configs.
        "--noremote_accept_cached",
        settings.target_pattern,
    ]


def build_environment(work_dir: Path, bazel_version: str) -> dict[str, str]:
    """Environment for the launcher: pinned Bazel and an isolated download cache."""
    env = {k: os.environ[k] for k in _PASSTHROUGH_ENV if k in os.environ}
    env["USE_BAZEL_VERSION"] = bazel_version
    # Bazelisk downloads Bazel under $XDG_CACHE_HOME.
    env["XDG_CACHE_HOME"] = str(work_dir / LAUNCHER_CACHE_DIRNAME)
    return env


def run_test_build(
    work_dir: Path,
    bazel_version: str,
    timeout_seconds: float,
    *,
    settings: ToolcheckSettings | None = None,
    launcher_path: Path | None = None,
) -> BuildOutcome:
    """Download Bazelisk and run the remote build in *work_dir*.

    Parameters
    ----------
    work_dir:
        The materialized project; also the working directory of the build.
    bazel_version:
        Bazel release for Bazelisk to fetch and run.
    timeout_seconds:
        Hard deadline for the build subprocess.
    launcher_path:
        Use an existing launcher instead of downloading one.

    Returns the classified ``BuildOutcome``. Download and launch failures
    raise instead; they are not build outcomes.
    """
    settings = settings or ToolcheckSettings()
    work_dir = Path(work_dir).resolve()
    launcher = launcher_path or download_launcher(work_dir, settings=settings)

    args = build_arguments(work_dir, settings)
    env = build_environment(work_dir, bazel_version)
    logger.info(
        "Running test build for Bazel %s with timeout set to %s seconds",
        bazel_version,
        timeout_seconds,
    )
    outcome = run_command(
        [str(launcher), *args],
        cwd=work_dir,
        env=env,
        timeout_seconds=timeout_seconds,
    )
    if outcome.kind == OutcomeKind.BUILD_FAILED:
        logger.error("Output from Bazel:\n%s", outcome.output)
    return outcome
