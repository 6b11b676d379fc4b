"""toolcheck: end-to-end verification of remote build toolchain configs.

Fetches a configs tarball and its manifest, cross-checks the tarball's
SHA-256 against the manifest, materializes a hello-world Bazel repository
wired to the tarball, and runs a deadline-bounded remote build with a
pinned Bazel to prove the configs actually work.
"""

__version__ = "0.1.0"
__description__ = "End-to-end verification of remote build toolchain configs"

from toolcheck.core.orchestrator import Orchestrator
from toolcheck.models.config import RunConfig

__all__ = ["Orchestrator", "RunConfig", "__version__"]
