"""Main Typer application — imports and registers all CLI commands.

Entry point: ``toolcheck`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from toolcheck.cli.commands.verify import materialize_cmd, verify_cmd
from toolcheck.config import settings
from toolcheck.core.java_toolchain import VersionParseError, java_flag_lines
from toolcheck.models.config import validate_instance_name

app = typer.Typer(
    name="toolcheck",
    help="toolcheck: end-to-end verification of remote build toolchain configs.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()


def configure_logging(level: str) -> None:
    """Route stdlib logging through Rich at *level*."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Log level (defaults to TOOLCHECK_LOG_LEVEL or INFO).",
    ),
) -> None:
    """Configure logging before any subcommand runs."""
    configure_logging(log_level or settings.log_level)


# Register subcommands
app.command(name="verify", help="Verify a configs tarball end to end.")(verify_cmd)
app.command(name="materialize", help="Create the test repository without building it.")(materialize_cmd)


@app.command(name="java-flags", help="Show the Java toolchain flags used for a Bazel version.")
def java_flags_cmd(
    bazel_version: str = typer.Argument(..., help="Bazel version, e.g. 5.0.0."),
) -> None:
    """Print the Java flag variant and its .bazelrc lines."""
    try:
        flag_set, lines = java_flag_lines(bazel_version)
    except VersionParseError as exc:
        console.print(f"[bold red]{escape(str(exc))}[/bold red]")
        raise typer.Exit(code=2)
    console.print(f"[bold]{flag_set.value}[/bold]")
    for line in lines:
        console.print(line, markup=False, highlight=False)


@app.command(name="check-instance", help="Validate a remote instance name.")
def check_instance_cmd(
    name: str = typer.Argument(..., help="projects/<GCP project ID>/instances/<instance ID>"),
) -> None:
    """Exit 0 if *name* is a well-formed remote instance name, 2 otherwise."""
    try:
        validate_instance_name(name)
    except ValueError as exc:
        console.print(f"[bold red]Invalid:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2)
    console.print(f"[green]OK[/green] {escape(name)}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
