"""Rendering of the generated ``WORKSPACE`` and ``.bazelrc`` files.

Both renderers are pure: identical inputs produce identical text, which
keeps materialization byte-for-byte reproducible across runs.
"""

from __future__ import annotations

from toolcheck.config import ToolcheckSettings
from toolcheck.core.java_toolchain import JavaFlagSet, java_flag_lines
from toolcheck.models.manifest import ArtifactManifest

# Name of the http_archive the .bazelrc selectors point into.
CONFIGS_REPO_NAME = "rbe_default"

_WORKSPACE_TEMPLATE = """
load("@bazel_tools//tools/build_defs/repo:http.bzl", "http_archive")

http_archive(
    name = "{repo}",
    urls = ["{url}"],
    sha256 = "{digest}",
)

"""

_PREAMBLE_TEMPLATE = """
# .bazelrc generated for:
#   Bazel {bazel_version}
#   Toolchain Container {container} (sha256:{image_digest})
#   Configs Tarball URL {configs_url} (sha256:{configs_digest})
"""

_REMOTE_FLAGS_TEMPLATE = """
build:remote --jobs={jobs}
build:remote --define=EXECUTOR=remote
build:remote --remote_executor={executor}

# Enforce stricter environment rules, which eliminates some non-hermetic
# behavior and therefore improves both the remote cache hit rate and the
# correctness and repeatability of the build.
build:remote --incompatible_strict_action_env=true

build:remote --remote_timeout=3600

# Enable authentication. This will pick up application default credentials by
# default. You can use --google_credentials=some_file.json to use a service
# account credential instead.
build:remote --google_default_credentials=true

# C++ toolchain & default platform configuration.
build:remote --crosstool_top=@{repo}//cc:toolchain
build:remote --action_env=BAZEL_DO_NOT_DETECT_CPP_TOOLCHAIN=1
build:remote --extra_toolchains=@{repo}//config:cc-toolchain
build:remote --extra_execution_platforms=@{repo}//config:platform
build:remote --host_platform=@{repo}//config:platform
build:remote --platforms=@{repo}//config:platform
"""


def render_workspace(configs_url: str, configs_digest: str) -> str:
    """Render a WORKSPACE pinning the configs tarball by URL and sha256."""
    return _WORKSPACE_TEMPLATE.format(
        repo=CONFIGS_REPO_NAME, url=configs_url, digest=configs_digest
    )


def render_bazelrc(
    manifest: ArtifactManifest,
    configs_url: str,
    rbe_instance: str,
    *,
    settings: ToolcheckSettings | None = None,
) -> tuple[str, JavaFlagSet]:
    """Render the ``.bazelrc`` and report which Java flag block it carries."""
    settings = settings or ToolcheckSettings()
    flag_set, java_lines = java_flag_lines(manifest.bazel_version)

    parts = [
        _PREAMBLE_TEMPLATE.format(
            bazel_version=manifest.bazel_version,
            container=manifest.toolchain_container,
            image_digest=manifest.image_digest,
            configs_url=configs_url,
            configs_digest=manifest.configs_tarball_digest,
        ),
        f"\nbuild:remote --remote_instance_name={rbe_instance}\n",
        _REMOTE_FLAGS_TEMPLATE.format(
            jobs=settings.remote_jobs,
            executor=settings.remote_executor,
            repo=CONFIGS_REPO_NAME,
        ),
        "\n" + "\n".join(java_lines) + "\n",
    ]
    return "".join(parts), flag_set
