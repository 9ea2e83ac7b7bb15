"""Registry configuration resolved from npm's `.npmrc` files.

Precedence (highest first):
- environment (`npm_config_registry` / `NPM_CONFIG_REGISTRY`)
- project `.npmrc` in the package directory
- user `.npmrc` (`$NPM_CONFIG_USERCONFIG` or `~/.npmrc`)
- builtin default registry

Scoped packages (`@scope/name`) resolve through `@scope:registry` when set.
Auth tokens are keyed by registry URL without the scheme, e.g.
`//npm.pkg.github.com/:_authToken=...`.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result

__all__ = [
    "DEFAULT_REGISTRY",
    "TEST_ENV_VALUE",
    "TEST_ENV_VAR",
    "NpmrcError",
    "RegistryConfig",
    "is_test_environment",
    "load_npmrc",
    "load_registry_config",
    "parse_npmrc",
]

DEFAULT_REGISTRY = "https://registry.npmjs.org/"

# Real publishes are refused while this variable holds this value.
TEST_ENV_VAR = "NODE_ENV"
TEST_ENV_VALUE = "test"

_ENV_REF_RE = re.compile(r"\$\{([^${}]+)\}")
_TOKEN_SUFFIX = ":_authToken"


@dataclass(frozen=True, slots=True)
class NpmrcError:
    """Error when an `.npmrc` file cannot be read or expanded."""

    message: str
    path: Path | None = None


def _normalize_registry(url: str) -> str:
    return url if url.endswith("/") else url + "/"


def _nerf_dart(url: str) -> str:
    """Strip the scheme: `https://host/path/` -> `//host/path/`."""
    _, sep, rest = url.partition("//")
    return "//" + (rest if sep else url)


@dataclass(frozen=True, slots=True)
class RegistryConfig:
    """Resolved registry endpoints and credentials."""

    registry: str = DEFAULT_REGISTRY
    scopes: dict[str, str] = field(default_factory=dict)
    tokens: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_entries(cls, entries: Mapping[str, str]) -> RegistryConfig:
        """Build from flattened npmrc key/value pairs."""
        registry = DEFAULT_REGISTRY
        scopes: dict[str, str] = {}
        tokens: dict[str, str] = {}

        for key, value in entries.items():
            if key == "registry":
                registry = _normalize_registry(value)
            elif key.startswith("@") and key.endswith(":registry"):
                scopes[key[: -len(":registry")]] = _normalize_registry(value)
            elif key.startswith("//") and key.endswith(_TOKEN_SUFFIX):
                tokens[key[: -len(_TOKEN_SUFFIX)]] = value

        return cls(registry=registry, scopes=scopes, tokens=tokens)

    def registry_for(self, package_name: str) -> str:
        """Registry URL serving `package_name`."""
        if package_name.startswith("@") and "/" in package_name:
            scope = package_name.split("/", 1)[0]
            if scope in self.scopes:
                return self.scopes[scope]
        return self.registry

    def token_for(self, registry_url: str) -> str | None:
        """Auth token for `registry_url` (longest matching key wins)."""
        target = _nerf_dart(_normalize_registry(registry_url))
        best: str | None = None
        for key in self.tokens:
            prefix = _normalize_registry(key)
            if target.startswith(prefix) and (best is None or len(prefix) > len(best)):
                best = prefix
        if best is None:
            return None
        return self.tokens.get(best) or self.tokens.get(best.rstrip("/"))


def _expand(value: str, environ: Mapping[str, str]) -> Result[str, str]:
    missing: list[str] = []

    def replace(m: re.Match[str]) -> str:
        name = m.group(1)
        optional = name.endswith("?")
        name = name.rstrip("?")
        if name in environ:
            return environ[name]
        if not optional:
            missing.append(name)
        return ""

    expanded = _ENV_REF_RE.sub(replace, value)
    if missing:
        return Err(missing[0])
    return Ok(expanded)


def parse_npmrc(text: str, environ: Mapping[str, str]) -> Result[dict[str, str], str]:
    """Parse npmrc text into key/value pairs.

    Lines are `key = value`; `#` and `;` start comments. Values may be
    quoted and may reference `${VAR}` (required) or `${VAR?}` (optional).
    Returns Err(message) when a required variable is unset.
    """
    entries: dict[str, str] = {}
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line[0] in "#;":
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]

        expanded_key = _expand(key, environ)
        expanded_value = _expand(value, environ)
        for part in (expanded_key, expanded_value):
            if isinstance(part, Err):
                return Err(f"line {lineno}: environment variable {part.error} is not set")
        entries[expanded_key.unwrap()] = expanded_value.unwrap()
    return Ok(entries)


def load_npmrc(path: Path, environ: Mapping[str, str]) -> Result[dict[str, str], NpmrcError]:
    """Load one npmrc file. A missing file is an empty config."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Ok({})
    except (OSError, UnicodeDecodeError) as e:
        return Err(NpmrcError(f"Error reading {path}: {e}", path=path))

    parsed = parse_npmrc(text, environ)
    if isinstance(parsed, Err):
        return Err(NpmrcError(f"Invalid npmrc {path}: {parsed.error}", path=path))
    return parsed


def _user_npmrc(environ: Mapping[str, str]) -> Path:
    override = environ.get("NPM_CONFIG_USERCONFIG") or environ.get("npm_config_userconfig")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".npmrc"


def load_registry_config(
    cwd: Path,
    environ: Mapping[str, str] | None = None,
) -> Result[RegistryConfig, NpmrcError]:
    """Resolve registry config for the package in `cwd`.

    Args:
        cwd: Package directory (its `.npmrc` is the project config)
        environ: Environment to read; defaults to os.environ

    Returns:
        Ok(RegistryConfig) on success, Err(NpmrcError) on unreadable files
    """
    env = os.environ if environ is None else environ

    merged: dict[str, str] = {}
    for path in (_user_npmrc(env), cwd / ".npmrc"):
        loaded = load_npmrc(path, env)
        if isinstance(loaded, Err):
            return loaded
        merged.update(loaded.value)

    env_registry = env.get("npm_config_registry") or env.get("NPM_CONFIG_REGISTRY")
    if env_registry:
        merged["registry"] = env_registry

    return Ok(RegistryConfig.from_entries(merged))


def is_test_environment(environ: Mapping[str, str] | None = None) -> bool:
    """True when running inside an automated test environment."""
    env = os.environ if environ is None else environ
    return env.get(TEST_ENV_VAR) == TEST_ENV_VALUE
