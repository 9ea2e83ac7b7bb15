"""Content fingerprints of package tarballs.

Two tarballs with the same files and contents get the same fingerprint even
when their compressed bytes differ (different npm or zlib versions produce
different gzip streams for identical content).
"""

from __future__ import annotations

import hashlib
import io
import json
import tarfile
from dataclasses import dataclass

from pubgate.core.result import Err, Ok, Result
from pubgate.core.structured import as_str_dict

__all__ = ["Fingerprint", "FingerprintError", "fingerprint_files", "fingerprint_tarball"]

# Fields npm or the registry may inject into package.json on publish.
_INJECTED_MANIFEST_KEYS = frozenset({"gitHead"})


@dataclass(frozen=True, slots=True)
class FingerprintError:
    message: str


@dataclass(frozen=True, slots=True)
class Fingerprint:
    """Per-file sha256 digests keyed by path inside the package."""

    files: dict[str, str]

    def changed_paths(self, other: Fingerprint) -> list[str]:
        """Paths added, removed or modified between the two fingerprints."""
        paths = set(self.files) | set(other.files)
        return sorted(p for p in paths if self.files.get(p) != other.files.get(p))


def _canonical_manifest(data: bytes) -> bytes:
    try:
        doc = as_str_dict(json.loads(data.decode("utf-8")))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return data
    if doc is None:
        return data
    kept = {
        k: v for k, v in doc.items() if not k.startswith("_") and k not in _INJECTED_MANIFEST_KEYS
    }
    return json.dumps(kept, sort_keys=True, separators=(",", ":")).encode("utf-8")


def _file_digest(path: str, data: bytes) -> str:
    if path == "package.json":
        data = _canonical_manifest(data)
    return hashlib.sha256(data).hexdigest()


def fingerprint_files(files: dict[str, bytes]) -> Fingerprint:
    """Fingerprint a mapping of package-relative path to content."""
    return Fingerprint(files={path: _file_digest(path, data) for path, data in files.items()})


def _strip_root(name: str) -> str | None:
    # npm tarballs nest everything under one directory, usually "package/"
    parts = [p for p in name.replace("\\", "/").split("/") if p and p != "."]
    if len(parts) < 2:
        return None
    return "/".join(parts[1:])


def fingerprint_tarball(data: bytes) -> Result[Fingerprint, FingerprintError]:
    """Fingerprint the regular files of a gzipped package tarball."""
    files: dict[str, bytes] = {}
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:*") as tar:
            for member in tar.getmembers():
                if not member.isreg():
                    continue
                rel_path = _strip_root(member.name)
                if rel_path is None:
                    continue
                src = tar.extractfile(member)
                if src is None:
                    continue
                with src:
                    files[rel_path] = src.read()
    except tarfile.TarError as e:
        return Err(FingerprintError(f"cannot read tarball: {e}"))
    except OSError as e:
        return Err(FingerprintError(f"cannot read tarball: {e}"))

    return Ok(fingerprint_files(files))
