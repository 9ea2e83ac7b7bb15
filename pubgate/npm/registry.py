"""Read-only npm registry access.

The registry is asked for the package's packument (abbreviated metadata:
dist-tags plus per-version `dist`) and, when needed, a published tarball.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol

from pubgate.core.config import RegistryConfig
from pubgate.core.result import Err, Ok, Result
from pubgate.core.structured import StrDict, as_str_dict, get_str, get_table
from pubgate.npm.http import HttpClient, HttpError, RealHttpClient

__all__ = [
    "NpmRegistryClient",
    "RegistryClient",
    "RegistryDist",
    "RegistryError",
    "RegistryPackage",
    "parse_packument",
]

_PACKUMENT_ACCEPT = "application/vnd.npm.install-v1+json; q=1.0, application/json; q=0.8, */*"


@dataclass(frozen=True, slots=True)
class RegistryError:
    """Registry lookup failure.

    `not_found` is the only kind callers may treat as an answer (the package
    has never been published); every other kind is a real failure.
    """

    kind: Literal["not_found", "network", "invalid"]
    message: str
    url: str = ""


@dataclass(frozen=True, slots=True)
class RegistryDist:
    tarball: str
    integrity: str | None = None
    shasum: str | None = None


@dataclass(frozen=True, slots=True)
class RegistryPackage:
    """Published state of one package.

    Attributes:
        name: Package name
        latest: Version behind the `latest` dist-tag
        versions: Published versions and their dist info
    """

    name: str
    latest: str
    versions: dict[str, RegistryDist]

    def dist_for(self, version: str) -> RegistryDist | None:
        return self.versions.get(version)


class RegistryClient(Protocol):
    """Port for registry queries used by the change detector."""

    def package(self, name: str) -> Result[RegistryPackage, RegistryError]: ...

    def tarball(self, dist: RegistryDist) -> Result[bytes, RegistryError]: ...


def _parse_dist(version_doc: StrDict) -> RegistryDist | None:
    dist = get_table(version_doc, "dist")
    if dist is None:
        return None
    tarball = get_str(dist, "tarball")
    if tarball is None:
        return None
    return RegistryDist(
        tarball=tarball,
        integrity=get_str(dist, "integrity"),
        shasum=get_str(dist, "shasum"),
    )


def parse_packument(name: str, doc: StrDict) -> Result[RegistryPackage, RegistryError]:
    """Extract latest version and dists from a packument.

    A packument without any published version (fully unpublished package)
    counts as not found.
    """
    versions_doc = get_table(doc, "versions") or {}
    versions: dict[str, RegistryDist] = {}
    for version, version_obj in versions_doc.items():
        version_doc = as_str_dict(version_obj)
        if version_doc is None:
            continue
        dist = _parse_dist(version_doc)
        if dist is not None:
            versions[version] = dist

    if not versions:
        return Err(RegistryError(kind="not_found", message=f"{name} has no published versions"))

    dist_tags = get_table(doc, "dist-tags") or {}
    latest = get_str(dist_tags, "latest")
    if latest is None:
        return Err(RegistryError(kind="invalid", message=f"{name} has no latest dist-tag"))

    return Ok(RegistryPackage(name=name, latest=latest, versions=versions))


def _error_from_http(error: HttpError) -> RegistryError:
    if error.status == 404:
        return RegistryError(kind="not_found", message=str(error), url=error.url)
    return RegistryError(kind="network", message=str(error), url=error.url)


class NpmRegistryClient:
    """RegistryClient speaking the npm registry HTTP API.

    Resolves the registry per package name, so scoped packages follow their
    `@scope:registry` setting, and sends the matching auth token.
    """

    def __init__(self, config: RegistryConfig, http: HttpClient | None = None) -> None:
        self.config = config
        self.http: HttpClient = http or RealHttpClient()

    def packument_url(self, name: str) -> str:
        # Scoped names keep the @ but escape the slash: @scope%2fname
        return self.config.registry_for(name) + name.replace("/", "%2f")

    def _headers(self, url: str, accept: str | None = None) -> dict[str, str]:
        headers: dict[str, str] = {}
        if accept:
            headers["Accept"] = accept
        token = self.config.token_for(url)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def package(self, name: str) -> Result[RegistryPackage, RegistryError]:
        url = self.packument_url(name)
        result = self.http.get_json(url, self._headers(url, _PACKUMENT_ACCEPT))
        if isinstance(result, Err):
            return Err(_error_from_http(result.error))
        return parse_packument(name, result.value)

    def tarball(self, dist: RegistryDist) -> Result[bytes, RegistryError]:
        result = self.http.get_bytes(dist.tarball, self._headers(dist.tarball))
        if isinstance(result, Err):
            e = result.error
            return Err(RegistryError(kind="network", message=str(e), url=e.url))
        return result
