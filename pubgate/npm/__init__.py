"""npm-facing adapters: package.json, registry, packing, fingerprints."""

from pubgate.npm.fingerprint import Fingerprint, fingerprint_files, fingerprint_tarball
from pubgate.npm.http import HttpClient, HttpError, MockHttpClient, RealHttpClient
from pubgate.npm.manifest import MANIFEST_FILE, ManifestError, PackageManifest, load_manifest
from pubgate.npm.pack import NpmPacker, PackError, Packer, PackResult
from pubgate.npm.registry import (
    NpmRegistryClient,
    RegistryClient,
    RegistryDist,
    RegistryError,
    RegistryPackage,
)

__all__ = [
    # fingerprint
    "Fingerprint",
    "fingerprint_files",
    "fingerprint_tarball",
    # http
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    # manifest
    "MANIFEST_FILE",
    "ManifestError",
    "PackageManifest",
    "load_manifest",
    # pack
    "NpmPacker",
    "PackError",
    "PackResult",
    "Packer",
    # registry
    "NpmRegistryClient",
    "RegistryClient",
    "RegistryDist",
    "RegistryError",
    "RegistryPackage",
]
