"""package.json loading."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from pubgate.core.result import Err, Ok, Result
from pubgate.core.structured import as_str_dict, get_bool, get_str

__all__ = ["MANIFEST_FILE", "ManifestError", "PackageManifest", "load_manifest"]

MANIFEST_FILE = "package.json"


@dataclass(frozen=True, slots=True)
class ManifestError:
    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class PackageManifest:
    """The fields of package.json the publish pipeline cares about."""

    name: str
    version: str
    private: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> PackageManifest | None:
        """Build from parsed JSON; None when name or version is missing."""
        name = get_str(data, "name")
        version = get_str(data, "version")
        if name is None or version is None:
            return None
        return cls(name=name, version=version, private=get_bool(data, "private"))


def load_manifest(cwd: Path) -> Result[PackageManifest, ManifestError]:
    """Read `<cwd>/package.json`.

    Returns:
        Ok(PackageManifest), or Err(ManifestError) when the file is missing,
        is not valid JSON, or lacks `name`/`version`.
    """
    path = cwd / MANIFEST_FILE
    try:
        data_obj: object = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(ManifestError(f"{MANIFEST_FILE} not found in {cwd}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ManifestError(f"Error reading {path}: {e}", path=path))
    except json.JSONDecodeError as e:
        return Err(ManifestError(f"Invalid JSON in {path}: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ManifestError(f"{path} must contain a JSON object", path=path))

    manifest = PackageManifest.from_dict(data)
    if manifest is None:
        return Err(ManifestError(f"{path} must declare a name and a version", path=path))
    return Ok(manifest)
