"""Tests for pubgate.npm.fingerprint module."""

from __future__ import annotations

import io
import json
import tarfile

from pubgate.core.result import Err, Ok
from pubgate.npm.fingerprint import fingerprint_files, fingerprint_tarball


def _tgz(files: dict[str, bytes], *, root: str = "package", mtime: int = 0) -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for path, data in files.items():
            info = tarfile.TarInfo(f"{root}/{path}")
            info.size = len(data)
            info.mtime = mtime
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def test_strips_root_directory() -> None:
    result = fingerprint_tarball(_tgz({"index.js": b"x", "lib/a.js": b"y"}))

    assert isinstance(result, Ok)
    assert sorted(result.value.files) == ["index.js", "lib/a.js"]


def test_root_name_does_not_matter() -> None:
    files = {"index.js": b"module.exports = 1\n"}
    a = fingerprint_tarball(_tgz(files, root="package"))
    b = fingerprint_tarball(_tgz(files, root="left-pad"))

    assert isinstance(a, Ok) and isinstance(b, Ok)
    assert a.value == b.value


def test_same_content_different_archive_bytes() -> None:
    files = {"index.js": b"module.exports = 1\n"}
    first = _tgz(files, mtime=0)
    second = _tgz(files, mtime=1_700_000_000)
    assert first != second

    a = fingerprint_tarball(first)
    b = fingerprint_tarball(second)

    assert isinstance(a, Ok) and isinstance(b, Ok)
    assert a.value == b.value


def test_changed_paths() -> None:
    local = fingerprint_files({"index.js": b"new", "README.md": b"same", "added.js": b"+"})
    remote = fingerprint_files({"index.js": b"old", "README.md": b"same", "removed.js": b"-"})

    assert local.changed_paths(remote) == ["added.js", "index.js", "removed.js"]
    assert local.changed_paths(local) == []


def test_manifest_ignores_injected_fields() -> None:
    local = json.dumps({"name": "left-pad", "version": "1.0.0"}, indent=2).encode()
    remote = json.dumps(
        {"version": "1.0.0", "name": "left-pad", "gitHead": "abc123", "_id": "left-pad@1.0.0"}
    ).encode()

    a = fingerprint_files({"package.json": local})
    b = fingerprint_files({"package.json": remote})

    assert a.changed_paths(b) == []


def test_manifest_real_change_detected() -> None:
    a = fingerprint_files({"package.json": b'{"name": "x", "version": "1.0.0", "main": "a.js"}'})
    b = fingerprint_files({"package.json": b'{"name": "x", "version": "1.0.0", "main": "b.js"}'})

    assert a.changed_paths(b) == ["package.json"]


def test_garbage_is_error() -> None:
    result = fingerprint_tarball(b"definitely not a tarball")

    assert isinstance(result, Err)
    assert "cannot read tarball" in result.error.message
