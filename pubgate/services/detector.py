"""Change detection: does the local package differ from the published one?

Two checks, the first short-circuits the second:

1. Version: local package.json version vs the registry's `latest` dist-tag.
   Any difference (ahead or behind) means publish.
2. Content: with equal versions, pack the local package and compare it with
   the published tarball, first by registry integrity hash, then by a
   per-file content fingerprint when the hashes differ.

A package the registry has never seen is a first publish, not an error.
Every other lookup failure is an error: an ambiguous answer never counts
as "unchanged".
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from pubgate.core.config import load_registry_config
from pubgate.core.result import Err, Ok, Result
from pubgate.npm.fingerprint import fingerprint_tarball
from pubgate.npm.manifest import PackageManifest, load_manifest
from pubgate.npm.pack import NpmPacker, Packer, PackResult
from pubgate.npm.registry import NpmRegistryClient, RegistryClient, RegistryDist
from pubgate.services.errors import PipelineError

__all__ = ["NOT_FOUND_REASON", "UNCHANGED_REASON", "ChangeResult", "detect"]

NOT_FOUND_REASON = "Package not found in registry - first publish"
UNCHANGED_REASON = "No changes detected"


@dataclass(frozen=True, slots=True)
class ChangeResult:
    """Verdict of the change detector."""

    changed: bool
    reason: str


def _lookup_error(message: str, hint: str | None = None) -> Err[PipelineError]:
    return Err(PipelineError(kind="lookup", message=message, hint=hint))


def _hashes_match(dist: RegistryDist, packed: PackResult) -> bool:
    if dist.integrity and packed.integrity:
        return dist.integrity == packed.integrity
    if dist.shasum and packed.shasum:
        return dist.shasum == packed.shasum
    return False


def _compare_content(
    manifest: PackageManifest,
    dist: RegistryDist,
    *,
    cwd: Path,
    registry: RegistryClient,
    packer: Packer,
) -> Result[ChangeResult, PipelineError]:
    packed = packer.pack(cwd)
    if isinstance(packed, Err):
        return _lookup_error(f"cannot pack {manifest.name}: {packed.error.message}", packed.error.hint)

    if _hashes_match(dist, packed.value):
        return Ok(ChangeResult(changed=False, reason=UNCHANGED_REASON))

    published = registry.tarball(dist)
    if isinstance(published, Err):
        return _lookup_error(
            f"cannot download {manifest.name}@{manifest.version} from registry",
            published.error.message,
        )

    remote = fingerprint_tarball(published.value)
    if isinstance(remote, Err):
        return _lookup_error(f"published tarball is unreadable: {remote.error.message}")
    local = fingerprint_tarball(packed.value.tarball)
    if isinstance(local, Err):
        return _lookup_error(f"local tarball is unreadable: {local.error.message}")

    changed_paths = local.value.changed_paths(remote.value)
    if not changed_paths:
        return Ok(ChangeResult(changed=False, reason=UNCHANGED_REASON))
    return Ok(
        ChangeResult(
            changed=True,
            reason=(
                f"Content differs from registry at version {manifest.version}: "
                f"{len(changed_paths)} file(s) changed"
            ),
        )
    )


def detect(
    cwd: Path | None = None,
    *,
    manifest: PackageManifest | None = None,
    registry: RegistryClient | None = None,
    packer: Packer | None = None,
    environ: Mapping[str, str] | None = None,
) -> Result[ChangeResult, PipelineError]:
    """Decide whether the package in `cwd` needs publishing.

    Args:
        cwd: Package directory (defaults to the current directory)
        manifest: Already loaded package.json, skips a read
        registry: Registry port (defaults to the npm registry from .npmrc)
        packer: Packer port (defaults to `npm pack`)
        environ: Environment for config resolution and npm

    Returns:
        Ok(ChangeResult), or Err(PipelineError) of kind `lookup` (or
        `manifest_read` when package.json is unusable)
    """
    root = cwd or Path(os.getcwd())

    if manifest is None:
        loaded = load_manifest(root)
        if isinstance(loaded, Err):
            return Err(PipelineError(kind="manifest_read", message=loaded.error.message))
        manifest = loaded.value

    if registry is None:
        config = load_registry_config(root, environ)
        if isinstance(config, Err):
            return _lookup_error(config.error.message)
        registry = NpmRegistryClient(config.value)
    if packer is None:
        packer = NpmPacker(env=environ)

    found = registry.package(manifest.name)
    if isinstance(found, Err):
        if found.error.kind == "not_found":
            return Ok(ChangeResult(changed=True, reason=NOT_FOUND_REASON))
        return _lookup_error(f"registry lookup failed for {manifest.name}", found.error.message)
    published = found.value

    if manifest.version != published.latest:
        return Ok(
            ChangeResult(
                changed=True,
                reason=f"Version differs: local={manifest.version} registry={published.latest}",
            )
        )

    dist = published.dist_for(manifest.version)
    if dist is None:
        return _lookup_error(f"registry has no tarball for {manifest.name}@{manifest.version}")

    return _compare_content(manifest, dist, cwd=root, registry=registry, packer=packer)
