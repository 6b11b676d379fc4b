"""Materialized project model."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict

from toolcheck.core.java_toolchain import JavaFlagSet


class MaterializedProject(BaseModel):
    """The on-disk Bazel repository generated for one run.

    The directory is recreated from scratch on every materialization and is
    left behind after the run for post-mortem inspection.
    """

    model_config = ConfigDict(frozen=True)

    root: Path
    copied_files: tuple[str, ...] = ()
    workspace_file: Path
    bazelrc_file: Path
    java_flag_set: JavaFlagSet
