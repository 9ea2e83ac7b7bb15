"""Local packing: what `npm publish` would upload right now."""

from __future__ import annotations

import json
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from pubgate.core.result import Err, Ok, Result
from pubgate.core.structured import StrDict, as_obj_list, as_str_dict, get_list, get_str
from pubgate.platform.process import ProcessError, ProcessRunner
from pubgate.platform.process import run as run_process

__all__ = ["NpmPacker", "PackError", "PackResult", "Packer", "parse_pack_output"]


@dataclass(frozen=True, slots=True)
class PackError:
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class PackResult:
    """Summary of a local `npm pack`.

    Attributes:
        name: Package name as packed
        version: Package version as packed
        integrity: SRI hash of the tarball (sha512)
        shasum: sha1 hex of the tarball
        files: Paths included in the tarball
        tarball: The tarball bytes
    """

    name: str
    version: str
    integrity: str | None
    shasum: str | None
    files: tuple[str, ...]
    tarball: bytes


class Packer(Protocol):
    """Port producing the artifact the registry would receive."""

    def pack(self, cwd: Path) -> Result[PackResult, PackError]: ...


def parse_pack_output(stdout: str) -> Result[StrDict, PackError]:
    """Return the first entry of `npm pack --json` output.

    Lifecycle scripts may print before the JSON array, so parsing starts at
    the first line opening an array that decodes to the end of the output.
    """
    lines = stdout.splitlines()
    starts = [i for i, line in enumerate(lines) if line.lstrip().startswith("[")]
    if not starts:
        return Err(PackError("npm pack produced no JSON output", hint=stdout.strip() or None))

    error: json.JSONDecodeError | None = None
    for i in starts:
        try:
            entries = as_obj_list(json.loads("\n".join(lines[i:])))
        except json.JSONDecodeError as e:
            error = error or e
            continue
        entry = as_str_dict(entries[0]) if entries else None
        if entry is None:
            return Err(PackError("npm pack produced an empty result"))
        return Ok(entry)

    return Err(PackError(f"npm pack produced invalid JSON: {error}"))


def _file_paths(entry: StrDict) -> tuple[str, ...]:
    paths: list[str] = []
    for item in get_list(entry, "files") or []:
        file_doc = as_str_dict(item)
        if file_doc is None:
            continue
        path = get_str(file_doc, "path")
        if path:
            paths.append(path)
    return tuple(sorted(paths))


def _capture(
    cmd: list[str],
    *,
    cwd: Path,
    env: Mapping[str, str] | None = None,
) -> Result[str, ProcessError]:
    return run_process(cmd, cwd=cwd, env=env)


class NpmPacker:
    """Packer running `npm pack` into a temporary directory.

    Lifecycle scripts (`prepack`, `prepare`, `postpack`) run like they do
    for `npm publish`, so the tarball matches what would be uploaded.
    `ignore_scripts=True` packs the working tree as it is, without running
    any build.
    """

    def __init__(
        self,
        *,
        runner: ProcessRunner | None = None,
        env: Mapping[str, str] | None = None,
        ignore_scripts: bool = False,
    ) -> None:
        self._runner: ProcessRunner = runner or _capture
        self._env = env
        self._ignore_scripts = ignore_scripts

    def command(self, destination: str) -> list[str]:
        cmd = ["npm", "pack", "--json"]
        if self._ignore_scripts:
            cmd.append("--ignore-scripts")
        cmd.extend(["--pack-destination", destination])
        return cmd

    def pack(self, cwd: Path) -> Result[PackResult, PackError]:
        with tempfile.TemporaryDirectory(prefix="pubgate-pack-") as tmp:
            result = self._runner(self.command(tmp), cwd=cwd, env=self._env)
            if isinstance(result, Err):
                return Err(PackError("npm pack failed", hint=result.error.detail))

            parsed = parse_pack_output(result.value)
            if isinstance(parsed, Err):
                return parsed
            entry = parsed.value

            filename = get_str(entry, "filename")
            if filename is None:
                return Err(PackError("npm pack did not report a tarball filename"))
            try:
                tarball = (Path(tmp) / Path(filename).name).read_bytes()
            except OSError as e:
                return Err(PackError(f"cannot read packed tarball: {e}"))

        return Ok(
            PackResult(
                name=get_str(entry, "name") or "",
                version=get_str(entry, "version") or "",
                integrity=get_str(entry, "integrity"),
                shasum=get_str(entry, "shasum"),
                files=_file_paths(entry),
                tarball=tarball,
            )
        )
