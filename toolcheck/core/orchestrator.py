"""Pipeline orchestrator — sequences one end-to-end verification run.

    INIT -> MANIFEST_LOADED -> DIGEST_VERIFIED -> PROJECT_MATERIALIZED
         -> BUILD_RAN -> PASSED | FAILED

Each arrow is a single component call. Any ``ToolcheckError`` moves the run
straight to FAILED with the originating error kept verbatim; there is no
recovery and no rollback, so the materialized directory stays on disk for
post-mortem. Parameter validation happens earlier, when the ``RunConfig``
is built, so a bad operator input never reaches the network.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from toolcheck.config import ToolcheckSettings
from toolcheck.core.build_driver import run_test_build
from toolcheck.core.digest import verify_digest
from toolcheck.core.errors import BuildFailedError, TimedOutError, ToolcheckError
from toolcheck.core.manifest_loader import load_manifest
from toolcheck.core.materializer import materialize_project
from toolcheck.core.state_machine import PipelineStateMachine
from toolcheck.models.config import RunConfig
from toolcheck.models.manifest import ArtifactManifest
from toolcheck.models.outcome import BuildOutcome, OutcomeKind
from toolcheck.models.project import MaterializedProject
from toolcheck.models.report import FailureInfo, VerificationReport
from toolcheck.models.states import PipelineState

logger = logging.getLogger(__name__)


class Orchestrator:
    """Runs the verification pipeline for one ``RunConfig``.

    Parameters
    ----------
    run_config:
        Validated operator parameters.
    settings:
        Tunables (timeouts, launcher pin, remote flags). Defaults if omitted.
    launcher_path:
        Pre-provisioned build-tool launcher; skips the download when set.
    """

    def __init__(
        self,
        run_config: RunConfig,
        *,
        settings: ToolcheckSettings | None = None,
        launcher_path: Path | None = None,
    ) -> None:
        self.run_config = run_config
        self.settings = settings or ToolcheckSettings()
        self.launcher_path = launcher_path
        self.machine = PipelineStateMachine()
        self.last_error: ToolcheckError | None = None

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def run(self, *, build: bool = True) -> VerificationReport:
        """Execute the pipeline and return its report. Does not raise.

        With ``build=False`` the run stops after materialization, leaving
        the report in PROJECT_MATERIALIZED. Each call starts from INIT.
        """
        self.machine = PipelineStateMachine()
        self.last_error = None
        rc = self.run_config
        started_at = datetime.now(timezone.utc)
        manifest: ArtifactManifest | None = None
        project: MaterializedProject | None = None
        outcome: BuildOutcome | None = None
        failure: FailureInfo | None = None

        for key, value in rc.describe().items():
            logger.info("--%s=%s", key.replace("_", "-"), value)

        try:
            manifest = load_manifest(rc.manifest_url, settings=self.settings)
            self.machine.transition(PipelineState.MANIFEST_LOADED, manifest.bazel_version)

            verify_digest(manifest.configs_tarball_digest, rc.configs_url, settings=self.settings)
            self.machine.transition(PipelineState.DIGEST_VERIFIED, manifest.configs_tarball_digest)

            logger.info("Creating a new Bazel test repository at %s", rc.dest_root)
            project = materialize_project(
                manifest,
                rc.configs_url,
                rc.rbe_instance,
                rc.dest_root,
                rc.payload_files,
                rc.src_root,
                settings=self.settings,
            )
            self.machine.transition(PipelineState.PROJECT_MATERIALIZED, project.java_flag_set.value)

            if build:
                outcome = run_test_build(
                    rc.dest_root,
                    manifest.bazel_version,
                    rc.timeout_seconds,
                    settings=self.settings,
                    launcher_path=self.launcher_path,
                )
                self.machine.transition(PipelineState.BUILD_RAN, outcome.kind.value)
                self._check_outcome(outcome, manifest)
                self.machine.transition(PipelineState.PASSED)
                logger.info(
                    "End to end test for toolchain configs for Bazel %s downloaded from %s "
                    "passed on RBE Instance %s",
                    manifest.bazel_version,
                    rc.configs_url,
                    rc.rbe_instance,
                )
        except ToolcheckError as exc:
            self.last_error = exc
            failure = FailureInfo(kind=exc.kind, failed_in=self.machine.state, message=str(exc))
            logger.error("Verification failed in state %s: %s", self.machine.state.value, exc)
            self.machine.transition(PipelineState.FAILED, exc.kind.value)

        return VerificationReport(
            final_state=self.machine.state,
            transitions=self.machine.history,
            manifest=manifest,
            project=project,
            outcome=outcome,
            failure=failure,
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
        )

    def run_or_raise(self, *, build: bool = True) -> VerificationReport:
        """Like :meth:`run`, but re-raise the originating error on failure."""
        report = self.run(build=build)
        if self.last_error is not None:
            raise self.last_error
        return report

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_outcome(self, outcome: BuildOutcome, manifest: ArtifactManifest) -> None:
        """Turn a non-success outcome into its terminal error."""
        context = {
            "bazel_version": manifest.bazel_version,
            "configs_url": self.run_config.configs_url,
            "rbe_instance": self.run_config.rbe_instance,
        }
        if outcome.kind == OutcomeKind.TIMED_OUT:
            raise TimedOutError(self.run_config.timeout_seconds, context=context)
        if outcome.kind == OutcomeKind.BUILD_FAILED:
            raise BuildFailedError(outcome.exit_code, outcome.output, context=context)
