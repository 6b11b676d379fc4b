"""Rich terminal renderer for verification reports.

Color scheme
------------
- green     : PASSED
- bold red  : FAILED
- cyan      : intermediate states
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from toolcheck.models.outcome import OutcomeKind
from toolcheck.models.report import VerificationReport
from toolcheck.models.states import PipelineState

_STATE_STYLES: dict[PipelineState, str] = {
    PipelineState.INIT: "dim",
    PipelineState.MANIFEST_LOADED: "cyan",
    PipelineState.DIGEST_VERIFIED: "cyan",
    PipelineState.PROJECT_MATERIALIZED: "cyan",
    PipelineState.BUILD_RAN: "cyan",
    PipelineState.PASSED: "bold green",
    PipelineState.FAILED: "bold red",
}

_OUTCOME_LABELS: dict[OutcomeKind, str] = {
    OutcomeKind.SUCCESS: "[green]SUCCESS[/green]",
    OutcomeKind.BUILD_FAILED: "[bold red]BUILD FAILED[/bold red]",
    OutcomeKind.TIMED_OUT: "[bold yellow]TIMED OUT[/bold yellow]",
}


class ReportRenderer:
    """Renders a ``VerificationReport`` as Rich terminal output."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_report(self, report: VerificationReport) -> Panel:
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("#", justify="right", width=3)
        table.add_column("From")
        table.add_column("To")
        table.add_column("Detail", overflow="fold")
        for i, t in enumerate(report.transitions, start=1):
            style = _STATE_STYLES.get(t.to_state, "")
            table.add_row(
                str(i),
                t.from_state.value,
                Text(t.to_state.value, style=style),
                Text(t.detail),
            )

        summary: list[str] = []
        if report.manifest is not None:
            summary.append(f"[bold]Bazel:[/bold] {escape(report.manifest.bazel_version)}")
            summary.append(f"[bold]Configs sha256:[/bold] {escape(report.manifest.configs_tarball_digest)}")
        if report.project is not None:
            summary.append(f"[bold]Project:[/bold] {escape(str(report.project.root))}")
            summary.append(f"[bold]Java flags:[/bold] {report.project.java_flag_set.value}")
        if report.outcome is not None:
            summary.append(
                f"[bold]Build:[/bold] {_OUTCOME_LABELS[report.outcome.kind]} "
                f"in {report.outcome.duration_seconds:.1f}s"
            )
        if report.failure is not None:
            summary.append(
                f"[bold red]Failure ({report.failure.kind.value}):[/bold red] "
                f"{escape(report.failure.message)}"
            )

        border = _STATE_STYLES.get(report.final_state, "white").replace("bold ", "")
        return Panel(
            Group(table, Text(""), Text.from_markup("\n".join(summary))),
            title=f"[bold]toolcheck[/bold] - {report.final_state.value.upper()}",
            border_style=border,
            padding=(1, 2),
        )

    def print_report(self, report: VerificationReport) -> None:
        self.console.print(self.render_report(report))
