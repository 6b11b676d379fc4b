"""``toolcheck verify`` and ``toolcheck materialize``.

Both commands take the same run parameters, so a command line can be
switched between a full verification and a dry materialization by changing
only the subcommand. Exit codes: 0 passed, 1 pipeline failure, 2 bad
parameters.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from toolcheck.cli.renderer import ReportRenderer
from toolcheck.config import settings
from toolcheck.core.errors import ParameterInvalidError
from toolcheck.core.orchestrator import Orchestrator
from toolcheck.models.config import RunConfig
from toolcheck.models.report import VerificationReport
from toolcheck.models.states import PipelineState

console = Console()

# Defaults are empty so that RunConfig, not Typer, names a missing parameter.
_MANIFEST_URL = typer.Option(
    "", "--manifest-url", help="Public URL to the JSON manifest of the configs tarball."
)
_CONFIGS_URL = typer.Option(
    "", "--configs-url", help="Public URL to the toolchain configs tarball."
)
_SRC_ROOT = typer.Option(
    "", "--src-root", help="Root of the checkout holding the hello-world examples."
)
_DEST_ROOT = typer.Option(
    "",
    "--dest-root",
    help="Output directory for the test repository. Its contents are DELETED.",
)
_RBE_INSTANCE = typer.Option(
    "",
    "--rbe-instance",
    help="Remote instance, as projects/<GCP project ID>/instances/<instance ID>.",
)
_TIMEOUT_SECONDS = typer.Option(
    0, "--timeout-seconds", help="Seconds before the build is killed and a timeout declared."
)


def _build_run_config(**params: object) -> RunConfig:
    try:
        return RunConfig.create(**params)
    except ParameterInvalidError as exc:
        console.print(f"[bold red]Invalid parameter:[/bold red] {escape(exc.message)}")
        raise typer.Exit(code=2) from exc


def _finish(report: VerificationReport, success_state: PipelineState) -> None:
    ReportRenderer(console=console).print_report(report)
    if report.final_state != success_state:
        raise typer.Exit(code=1)


def verify_cmd(
    manifest_url: str = _MANIFEST_URL,
    configs_url: str = _CONFIGS_URL,
    src_root: str = _SRC_ROOT,
    dest_root: str = _DEST_ROOT,
    rbe_instance: str = _RBE_INSTANCE,
    timeout_seconds: int = _TIMEOUT_SECONDS,
    launcher: Path = typer.Option(
        None,
        "--launcher",
        help="Use this Bazelisk binary instead of downloading the pinned release.",
    ),
) -> None:
    """Verify a configs tarball end to end with a remote Bazel build."""
    run_config = _build_run_config(
        manifest_url=manifest_url,
        configs_url=configs_url,
        src_root=src_root,
        dest_root=dest_root,
        rbe_instance=rbe_instance,
        timeout_seconds=timeout_seconds,
    )
    orchestrator = Orchestrator(run_config, settings=settings, launcher_path=launcher)
    _finish(orchestrator.run(), PipelineState.PASSED)


def materialize_cmd(
    manifest_url: str = _MANIFEST_URL,
    configs_url: str = _CONFIGS_URL,
    src_root: str = _SRC_ROOT,
    dest_root: str = _DEST_ROOT,
    rbe_instance: str = _RBE_INSTANCE,
    timeout_seconds: int = _TIMEOUT_SECONDS,
) -> None:
    """Load, digest-check and materialize the test repository without building."""
    run_config = _build_run_config(
        manifest_url=manifest_url,
        configs_url=configs_url,
        src_root=src_root,
        dest_root=dest_root,
        rbe_instance=rbe_instance,
        timeout_seconds=timeout_seconds,
    )
    orchestrator = Orchestrator(run_config, settings=settings)
    _finish(orchestrator.run(build=False), PipelineState.PROJECT_MATERIALIZED)
