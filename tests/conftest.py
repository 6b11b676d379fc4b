"""Shared test fixtures for toolcheck.

Network reads go through ``file://`` URLs, which ``urllib.request`` serves
exactly like HTTP bodies, so the transport is exercised for real. The build
tool is replaced by small shell scripts.
"""

from __future__ import annotations

import hashlib
import json
import os
import socket
import stat
import threading
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from toolcheck.config import ToolcheckSettings
from toolcheck.core.launcher import current_os, launcher_download_info
from toolcheck.models.config import DEFAULT_PAYLOAD_FILES, RunConfig
from toolcheck.models.manifest import ArtifactManifest

TARBALL_BYTES = b"\x1f\x8b\x08\x00fake-rbe-configs-tarball" * 64
RBE_INSTANCE = "projects/test-project/instances/default_instance"


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def publish(tmp_dir: Path) -> Callable[[str, bytes], str]:
    """Factory fixture: write bytes under a "published" dir, return a file:// URL."""
    published = tmp_dir / "published"

    def _publish(name: str, data: bytes) -> str:
        path = published / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path.as_uri()

    return _publish


@pytest.fixture
def tarball_url(publish: Callable[[str, bytes], str]) -> str:
    """URL of a published fake configs tarball."""
    return publish("rbe-configs.tar", TARBALL_BYTES)


@pytest.fixture
def tarball_digest() -> str:
    return hashlib.sha256(TARBALL_BYTES).hexdigest()


@pytest.fixture
def make_manifest_doc(tarball_digest: str) -> Callable[..., dict[str, Any]]:
    """Factory fixture: a manifest document with sensible defaults."""

    def _factory(**overrides: Any) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "bazel_version": "5.0.0",
            "configs_tarball_digest": tarball_digest,
            "toolchain_container": "l.gcr.io/google/rbe-ubuntu16-04",
            "image_digest": "f6568d8168b14aafd1b707019927a63c2d37113a03bcee188218f99bd0327ea1",
            "upload_time": "2021-06-01T00:00:00Z",
        }
        doc.update(overrides)
        return {k: v for k, v in doc.items() if v is not None}

    return _factory


@pytest.fixture
def manifest_url(
    publish: Callable[[str, bytes], str],
    make_manifest_doc: Callable[..., dict[str, Any]],
) -> str:
    return publish("manifest.json", json.dumps(make_manifest_doc()).encode())


@pytest.fixture
def manifest(tarball_digest: str) -> ArtifactManifest:
    return ArtifactManifest(
        bazel_version="5.0.0",
        configs_tarball_digest=tarball_digest,
        toolchain_container="l.gcr.io/google/rbe-ubuntu16-04",
        image_digest="f6568d8168b14aafd1b707019927a63c2d37113a03bcee188218f99bd0327ea1",
    )


@pytest.fixture
def src_root(tmp_dir: Path) -> Path:
    """A fake bazel-toolchains checkout holding the hello-world payload."""
    root = tmp_dir / "bazel-toolchains"
    for rel in DEFAULT_PAYLOAD_FILES:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(f"// {rel}\n".encode() + bytes(range(256)))
    return root


@pytest.fixture
def dest_root(tmp_dir: Path) -> Path:
    return tmp_dir / "out"


@pytest.fixture
def settings(tmp_dir: Path) -> ToolcheckSettings:
    """Settings pointing the launcher download at a local directory."""
    return ToolcheckSettings(
        http_timeout_seconds=5,
        chunk_size=97,
        bazelisk_base_url=(tmp_dir / "bazelisk-releases").as_uri(),
        bazelisk_version="v0.0.0-test",
    )


@pytest.fixture
def make_script(tmp_dir: Path) -> Callable[[str, str], Path]:
    """Factory fixture: write an executable /bin/sh script and return its path."""

    def _factory(name: str, body: str) -> Path:
        path = tmp_dir / "scripts" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("#!/bin/sh\n" + body + "\n")
        os.chmod(path, path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _factory


@pytest.fixture
def make_run_config(
    manifest_url: str,
    tarball_url: str,
    src_root: Path,
    dest_root: Path,
) -> Callable[..., RunConfig]:
    """Factory fixture: a valid RunConfig wired to the published fixtures."""

    def _factory(**overrides: Any) -> RunConfig:
        params: dict[str, Any] = {
            "manifest_url": manifest_url,
            "configs_url": tarball_url,
            "src_root": src_root,
            "dest_root": dest_root,
            "rbe_instance": RBE_INSTANCE,
            "timeout_seconds": 30,
        }
        params.update(overrides)
        return RunConfig.create(**params)

    return _factory


@pytest.fixture
def snapshot_tree() -> Callable[[Path], dict[str, bytes]]:
    """Map every file under a root (relative posix path) to its bytes."""

    def _snapshot(root: Path) -> dict[str, bytes]:
        return {
            p.relative_to(root).as_posix(): p.read_bytes()
            for p in sorted(root.rglob("*"))
            if p.is_file()
        }

    return _snapshot


@pytest.fixture
def tarball_bytes() -> bytes:
    return TARBALL_BYTES


@pytest.fixture
def rbe_instance() -> str:
    return RBE_INSTANCE


@pytest.fixture
def publish_launcher(
    tmp_dir: Path, settings: ToolcheckSettings
) -> Callable[[str], Path]:
    """Factory fixture: publish a fake Bazelisk script where settings point.

    Returns the path of the published asset (not the downloaded copy).
    """

    def _factory(body: str) -> Path:
        _, filename = launcher_download_info(current_os(), settings)
        path = tmp_dir / "bazelisk-releases" / settings.bazelisk_version / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        # Published without the executable bit; the download must add it.
        path.write_text("#!/bin/sh\n" + body + "\n")
        return path

    return _factory


@pytest.fixture
def serve_raw_http(monkeypatch: pytest.MonkeyPatch) -> Iterator[Callable[[bytes], str]]:
    """Factory fixture: serve one connection with a canned raw response.

    The server reads the request head, writes the bytes verbatim and closes
    the socket, which lets tests send malformed status lines or bodies
    shorter than their Content-Length.
    """
    monkeypatch.setenv("no_proxy", "*")
    monkeypatch.setenv("NO_PROXY", "*")
    servers: list[tuple[socket.socket, threading.Thread]] = []

    def _factory(response: bytes) -> str:
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.bind(("127.0.0.1", 0))
        listener.listen(1)
        listener.settimeout(10)

        def _serve() -> None:
            try:
                conn, _ = listener.accept()
            except OSError:
                return
            with conn:
                request = b""
                while b"\r\n\r\n" not in request:
                    data = conn.recv(4096)
                    if not data:
                        break
                    request += data
                conn.sendall(response)

        thread = threading.Thread(target=_serve, daemon=True)
        thread.start()
        servers.append((listener, thread))
        host, port = listener.getsockname()
        return f"http://{host}:{port}/manifest.json"

    yield _factory
    for listener, thread in servers:
        listener.close()
        thread.join(timeout=5)
