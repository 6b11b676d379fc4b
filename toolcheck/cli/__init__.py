"""toolcheck CLI — Typer-based command-line interface.

Provides the ``toolcheck`` command with subcommands for running a full
verification, materializing the test repository only, and inspecting the
Java flag table and remote instance names.

All output uses Rich for formatted terminal display.
"""
