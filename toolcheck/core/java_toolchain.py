"""Java toolchain flag selection, keyed by Bazel version.

Bazel changed the Java toolchain rules the generated configs use: newer
releases resolve the remote JDK through ``local_java_runtime`` and the
``--java_runtime_version`` family of flags, older releases need
``--javabase``/``--host_javabase`` plus the hostjdk8 toolchains.

Selection is a table lookup so that a future Bazel release that changes
the rules again only needs a new row::

    JAVA_FLAG_TABLE = [
        ((4, 1, 0), JavaFlagSet.LOCAL_JAVA_RUNTIME),
        ((0, 0, 0), JavaFlagSet.LEGACY_JAVABASE),
    ]
"""

from __future__ import annotations

import re
from enum import Enum

Version = tuple[int, int, int]

# MAJOR[.MINOR[.PATCH]] followed by an optional pre-release suffix such as
# "rc4" or "-pre.20210708.4".
_VERSION_RE = re.compile(r"^\s*(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:[-.]?[0-9A-Za-z][0-9A-Za-z.\-]*)?\s*$")


class VersionParseError(ValueError):
    """Raised when a Bazel version string cannot be parsed."""


class JavaFlagSet(str, Enum):
    """The two mutually exclusive Java flag blocks for ``.bazelrc``."""

    LOCAL_JAVA_RUNTIME = "local_java_runtime"
    LEGACY_JAVABASE = "legacy_javabase"


# Minimum version (inclusive) -> flag set. Kept sorted newest first; the
# (0, 0, 0) row makes the lookup total.
JAVA_FLAG_TABLE: list[tuple[Version, JavaFlagSet]] = [
    ((4, 1, 0), JavaFlagSet.LOCAL_JAVA_RUNTIME),
    ((0, 0, 0), JavaFlagSet.LEGACY_JAVABASE),
]

JAVA_FLAG_BLOCKS: dict[JavaFlagSet, list[str]] = {
    JavaFlagSet.LOCAL_JAVA_RUNTIME: [
        "build:remote --java_runtime_version=rbe_jdk",
        "build:remote --tool_java_runtime_version=rbe_jdk",
        "build:remote --extra_toolchains=@rbe_default//java:all",
    ],
    JavaFlagSet.LEGACY_JAVABASE: [
        "build:remote --host_javabase=@rbe_default//java:jdk",
        "build:remote --javabase=@rbe_default//java:jdk",
        "build:remote --host_java_toolchain=@bazel_tools//tools/jdk:toolchain_hostjdk8",
        "build:remote --java_toolchain=@bazel_tools//tools/jdk:toolchain_hostjdk8",
    ],
}


def parse_bazel_version(version: str) -> Version:
    """Parse a Bazel release string into ``(major, minor, patch)``.

    Pre-release suffixes are dropped, so ``"4.1.0rc4"`` parses as
    ``(4, 1, 0)``. Missing minor/patch components default to zero.
    """
    match = _VERSION_RE.match(version or "")
    if match is None:
        raise VersionParseError(f"unable to parse Bazel version {version!r}")
    major, minor, patch = match.groups()
    return int(major), int(minor or 0), int(patch or 0)


def select_java_flag_set(bazel_version: str) -> JavaFlagSet:
    """Return the Java flag variant for *bazel_version*. Pure."""
    parsed = parse_bazel_version(bazel_version)
    for minimum, flag_set in JAVA_FLAG_TABLE:
        if parsed >= minimum:
            return flag_set
    # Unreachable while the table ends with a (0, 0, 0) row.
    raise VersionParseError(f"no Java flag set covers Bazel version {bazel_version!r}")


def java_flag_lines(bazel_version: str) -> tuple[JavaFlagSet, list[str]]:
    """Return the selected variant and a copy of its ``.bazelrc`` lines."""
    flag_set = select_java_flag_set(bazel_version)
    return flag_set, list(JAVA_FLAG_BLOCKS[flag_set])
