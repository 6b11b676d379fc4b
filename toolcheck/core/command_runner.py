"""Run an external command under a deadline and classify how it ended.

This is the one place with real cancellation semantics. The child runs in
its own session so that on timeout the whole process group (the launcher
plus anything it spawned, e.g. the Bazel server) is killed, and its output
is discarded.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import time
from collections.abc import Mapping, Sequence
from pathlib import Path

from toolcheck.core.errors import SubprocessLaunchError
from toolcheck.models.outcome import BuildOutcome

logger = logging.getLogger(__name__)

_POSIX = os.name == "posix"


def _kill_tree(proc: subprocess.Popen[bytes]) -> None:
    if _POSIX:
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
    else:
        proc.kill()


def run_command(
    argv: Sequence[str],
    *,
    cwd: Path,
    env: Mapping[str, str] | None,
    timeout_seconds: float,
) -> BuildOutcome:
    """Run *argv* to completion or until *timeout_seconds* elapse.

    Returns a ``BuildOutcome``: ``success`` on exit status 0,
    ``build_failed`` with combined stdout/stderr on any other status,
    ``timed_out`` if the deadline fired first. Raises
    ``SubprocessLaunchError`` if the command cannot be started at all.
    """
    logger.info(
        "Running '%s' in %s with env %s (timeout %ss)",
        " ".join(argv),
        cwd,
        dict(env) if env is not None else "<inherited>",
        timeout_seconds,
    )
    t0 = time.monotonic()
    try:
        proc = subprocess.Popen(  # noqa: S603
            list(argv),
            cwd=str(cwd),
            env=dict(env) if env is not None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            start_new_session=_POSIX,
        )
    except OSError as exc:
        raise SubprocessLaunchError(
            f"unable to start command: {exc}",
            operation="run_command",
            context={"argv0": argv[0] if argv else "", "cwd": str(cwd)},
        ) from exc

    try:
        raw, _ = proc.communicate(timeout=timeout_seconds)
    except subprocess.TimeoutExpired:
        _kill_tree(proc)
        proc.communicate()
        duration = time.monotonic() - t0
        logger.error("Command killed after %.1fs: deadline of %ss reached", duration, timeout_seconds)
        return BuildOutcome.timed_out(duration_seconds=duration)

    duration = time.monotonic() - t0
    output = raw.decode("utf-8", errors="replace") if raw else ""
    if proc.returncode == 0:
        logger.info("Command succeeded in %.1fs", duration)
        return BuildOutcome.success(output=output, duration_seconds=duration)

    logger.error("Command exited with status %d after %.1fs", proc.returncode, duration)
    return BuildOutcome.build_failed(
        exit_code=proc.returncode, output=output, duration_seconds=duration
    )
