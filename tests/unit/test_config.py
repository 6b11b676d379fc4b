"""Tests for settings — env-driven tunables."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from toolcheck.config import ToolcheckSettings


class TestToolcheckSettings:
    def test_defaults(self):
        s = ToolcheckSettings()
        assert s.log_level == "INFO"
        assert s.remote_jobs == 6
        assert s.target_pattern == "//examples/..."
        assert s.remote_executor == "grpcs://remotebuildexecution.googleapis.com"

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("TOOLCHECK_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("TOOLCHECK_BAZELISK_VERSION", "v1.11.0")
        s = ToolcheckSettings()
        assert s.log_level == "DEBUG"
        assert s.bazelisk_version == "v1.11.0"

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValidationError):
            ToolcheckSettings(http_timeout_seconds=0)

    def test_rejects_non_positive_chunk_size(self):
        with pytest.raises(ValidationError):
            ToolcheckSettings(chunk_size=0)
