"""Environment-driven settings for toolcheck.

Centralized config using pydantic-settings. Reads from a .env file and
TOOLCHECK_* environment variables. Operator-supplied run parameters (URLs,
paths, instance, timeout) are NOT settings; they live in ``RunConfig``.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ToolcheckSettings(BaseSettings):
    """Tunables with environment variable overrides.

    Examples
    --------
    Override via environment::

        export TOOLCHECK_LOG_LEVEL=DEBUG
        export TOOLCHECK_BAZELISK_VERSION=v1.11.0
        export TOOLCHECK_HTTP_TIMEOUT_SECONDS=120
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TOOLCHECK_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    # Transport
    http_timeout_seconds: float = Field(default=60.0, gt=0)
    chunk_size: int = Field(default=64 * 1024, gt=0)

    # Build-tool launcher pin
    bazelisk_version: str = "v1.10.1"
    bazelisk_base_url: str = "https://github.com/bazelbuild/bazelisk/releases/download"

    # Remote execution
    remote_executor: str = "grpcs://remotebuildexecution.googleapis.com"
    remote_jobs: int = Field(default=6, gt=0)
    target_pattern: str = "//examples/..."


# Module-level instance for the CLI; library code takes settings explicitly.
settings = ToolcheckSettings()
