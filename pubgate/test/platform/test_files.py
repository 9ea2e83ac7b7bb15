"""Tests for pubgate.platform.files module."""

from __future__ import annotations

from pathlib import Path

from pubgate.core.result import Ok
from pubgate.platform.files import safe_rm


def test_removes_directory_tree(tmp_path: Path) -> None:
    target = tmp_path / "node_modules"
    (target / "left-pad" / "lib").mkdir(parents=True)
    (target / "left-pad" / "lib" / "index.js").write_text("module.exports = 1")

    assert safe_rm(target) == Ok(None)
    assert not target.exists()


def test_removes_single_file(tmp_path: Path) -> None:
    target = tmp_path / "stale.tgz"
    target.write_bytes(b"x")

    assert safe_rm(target) == Ok(None)
    assert not target.exists()


def test_missing_path_is_ok(tmp_path: Path) -> None:
    assert safe_rm(tmp_path / "node_modules") == Ok(None)


def test_removes_symlink_not_target(tmp_path: Path) -> None:
    real = tmp_path / "real"
    real.mkdir()
    (real / "keep.txt").write_text("keep")
    link = tmp_path / "node_modules"
    link.symlink_to(real, target_is_directory=True)

    assert safe_rm(link) == Ok(None)
    assert not link.exists()
    assert (real / "keep.txt").exists()
