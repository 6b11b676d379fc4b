"""End-to-end integration tests — manifest to build verdict.

These tests exercise the Orchestrator, manifest loader, digest verifier,
materializer, launcher download and build driver working together. The
manifest, tarball and launcher are all served over ``file://`` URLs; the
launcher is a shell script that inspects the generated project the way a
real remote build would depend on it.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from toolcheck.config import ToolcheckSettings
from toolcheck.core.errors import ErrorKind
from toolcheck.core.java_toolchain import JavaFlagSet
from toolcheck.core.orchestrator import Orchestrator
from toolcheck.models.config import DEFAULT_PAYLOAD_FILES, RunConfig
from toolcheck.models.outcome import OutcomeKind
from toolcheck.models.states import PipelineState

pytestmark = pytest.mark.skipif(
    sys.platform == "win32", reason="fake launchers are POSIX shell scripts"
)

# Fails unless the generated files are where Bazel expects them.
CHECKING_LAUNCHER = """\
test -f WORKSPACE || { echo "no WORKSPACE"; exit 7; }
grep -q "remote_instance_name=$EXPECT_INSTANCE" .bazelrc || { echo "no instance"; exit 8; }
test -f examples/remotebuildexecution/hello_world/cc/BUILD || { echo "no payload"; exit 9; }
echo "INFO: Build completed successfully, Bazel $USE_BAZEL_VERSION"
"""


class TestFullPipeline:
    """Full run: load -> verify digest -> materialize -> download launcher -> build."""

    def test_passes_end_to_end(
        self,
        make_run_config: Callable[..., RunConfig],
        settings: ToolcheckSettings,
        publish_launcher: Callable[[str], Path],
        rbe_instance: str,
        dest_root: Path,
        snapshot_tree: Callable[[Path], dict[str, bytes]],
        src_root: Path,
    ):
        publish_launcher(f'EXPECT_INSTANCE="{rbe_instance}"\n' + CHECKING_LAUNCHER)
        orch = Orchestrator(make_run_config(), settings=settings)
        report = orch.run()

        assert report.final_state == PipelineState.PASSED, report.failure
        assert [t.to_state for t in report.transitions] == [
            PipelineState.MANIFEST_LOADED,
            PipelineState.DIGEST_VERIFIED,
            PipelineState.PROJECT_MATERIALIZED,
            PipelineState.BUILD_RAN,
            PipelineState.PASSED,
        ]
        assert report.outcome is not None
        assert report.outcome.kind == OutcomeKind.SUCCESS
        assert "Bazel 5.0.0" in report.outcome.output
        assert report.project is not None
        assert report.project.java_flag_set == JavaFlagSet.LOCAL_JAVA_RUNTIME

        tree = snapshot_tree(dest_root)
        for rel in DEFAULT_PAYLOAD_FILES:
            assert tree[rel] == (src_root / rel).read_bytes()

    def test_legacy_bazel_gets_legacy_java_flags(
        self,
        make_run_config: Callable[..., RunConfig],
        publish: Callable[[str, bytes], str],
        make_manifest_doc: Callable[..., dict[str, Any]],
        settings: ToolcheckSettings,
        make_script: Callable[[str, str], Path],
        dest_root: Path,
    ):
        doc = make_manifest_doc(bazel_version="4.0.0")
        rc = make_run_config(manifest_url=publish("m-4.0.0.json", json.dumps(doc).encode()))
        launcher = make_script("bazelisk", 'echo "bazel=$USE_BAZEL_VERSION"')
        report = Orchestrator(rc, settings=settings, launcher_path=launcher).run()

        assert report.passed
        assert "bazel=4.0.0" in report.outcome.output
        bazelrc = (dest_root / ".bazelrc").read_text()
        assert "--host_javabase=@rbe_default//java:jdk" in bazelrc
        assert "--java_runtime_version" not in bazelrc

    def test_digest_mismatch_never_touches_destination(
        self,
        make_run_config: Callable[..., RunConfig],
        publish: Callable[[str, bytes], str],
        tarball_bytes: bytes,
        settings: ToolcheckSettings,
        make_script: Callable[[str, str], Path],
        dest_root: Path,
    ):
        other = publish("other.tar", tarball_bytes + b"\x00")
        marker = dest_root.parent / "launcher-ran"
        launcher = make_script("bazelisk", f"touch {marker}")
        orch = Orchestrator(make_run_config(configs_url=other), settings=settings, launcher_path=launcher)
        report = orch.run()

        assert report.failure is not None
        assert report.failure.kind == ErrorKind.DIGEST_MISMATCH
        assert not dest_root.exists()
        assert not marker.exists()

    def test_timeout_is_reported_as_timeout(
        self,
        make_run_config: Callable[..., RunConfig],
        settings: ToolcheckSettings,
        make_script: Callable[[str, str], Path],
        dest_root: Path,
    ):
        launcher = make_script("bazelisk", "exec sleep 10")
        orch = Orchestrator(make_run_config(timeout_seconds=1), settings=settings, launcher_path=launcher)
        report = orch.run()

        assert report.failure is not None
        assert report.failure.kind == ErrorKind.TIMED_OUT
        assert report.outcome is not None
        assert report.outcome.kind == OutcomeKind.TIMED_OUT
        # Materialized project is kept for post-mortem.
        assert (dest_root / "WORKSPACE").is_file()

    def test_rerun_is_idempotent(
        self,
        make_run_config: Callable[..., RunConfig],
        settings: ToolcheckSettings,
        dest_root: Path,
        snapshot_tree: Callable[[Path], dict[str, bytes]],
    ):
        rc = make_run_config()
        Orchestrator(rc, settings=settings).run(build=False)
        first = snapshot_tree(dest_root)
        Orchestrator(rc, settings=settings).run(build=False)
        assert snapshot_tree(dest_root) == first
