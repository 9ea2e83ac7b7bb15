"""Filesystem helpers."""

from __future__ import annotations

import os
import shutil
import stat
from collections.abc import Callable
from pathlib import Path

from pubgate.core.result import Err, Ok, Result

__all__ = ["safe_rm"]


def _remove_readonly(_func: Callable[[str], object], path: str, exc: BaseException) -> None:
    """Handle read-only files on Windows (e.g. packed git objects in node_modules)."""
    if isinstance(exc, PermissionError):
        os.chmod(path, stat.S_IWRITE)
        os.unlink(path)
    else:
        raise exc


def safe_rm(path: Path) -> Result[None, str]:
    """Remove a file or directory tree. A missing path is not an error."""
    try:
        if path.is_symlink() or path.is_file():
            path.unlink(missing_ok=True)
        elif path.exists():
            shutil.rmtree(path, onexc=_remove_readonly)
    except OSError as e:
        return Err(f"cannot remove {path}: {e}")
    return Ok(None)
