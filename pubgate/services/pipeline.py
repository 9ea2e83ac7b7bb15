"""The publish pipeline.

    load manifest -> private? skip -> changed? else skip
    -> [rm node_modules, npm ci, npm test]   (unless --yolo)
    -> npm version <bump> (reload manifest)
    -> safety gate (test environment needs --dry-run)
    -> npm publish [--dry-run] [--otp=...]
    -> git add . ; git commit -m <version>   (best effort, skipped when clean)

Everything up to and including publish is fail-fast. The commit runs after
the package is already public, so a failed commit is reported as a warning
outcome (`published_not_committed`) rather than an error.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pubgate.core.config import TEST_ENV_VALUE, TEST_ENV_VAR, is_test_environment
from pubgate.core.result import Err, Ok, Result
from pubgate.git.repository import Repository, VersionControl
from pubgate.npm.manifest import PackageManifest, load_manifest
from pubgate.npm.pack import Packer
from pubgate.npm.registry import RegistryClient
from pubgate.output.console import ConsoleProtocol, RichConsole, Style
from pubgate.platform.files import safe_rm
from pubgate.platform.process import ProcessRunner, SubprocessRunner
from pubgate.services.detector import detect
from pubgate.services.errors import PipelineError, PipelineErrorKind
from pubgate.services.flags import Flags, parse_flags
from pubgate.services.steps import Step, run_steps

__all__ = [
    "SAFETY_GATE_MESSAGE",
    "PipelineOptions",
    "PublishOutcome",
    "PublishStatus",
    "publish",
    "publish_args",
]

SAFETY_GATE_MESSAGE = "Cannot publish in test environment without --dry-run"

PublishStatus = Literal[
    "skipped_private",
    "skipped_unchanged",
    "published",
    "published_not_committed",
]


@dataclass(frozen=True, slots=True)
class PipelineOptions:
    """Per-invocation options.

    Attributes:
        cwd: Package directory (defaults to the current directory)
        package: Already loaded package.json, skips the first read
        env: Environment for every subprocess (defaults to os.environ);
            the safety gate checks it on top of os.environ
        stream_output: Let npm write to the terminal
    """

    cwd: Path | None = None
    package: PackageManifest | None = None
    env: Mapping[str, str] | None = None
    stream_output: bool = True


@dataclass(frozen=True, slots=True)
class PublishOutcome:
    status: PublishStatus
    manifest: PackageManifest
    reason: str = ""
    warnings: tuple[str, ...] = ()

    @property
    def skipped(self) -> bool:
        return self.status in ("skipped_private", "skipped_unchanged")


@dataclass
class _Run:
    """Mutable state shared by the steps of one run."""

    cwd: Path
    flags: Flags
    manifest: PackageManifest
    env: Mapping[str, str] | None
    runner: ProcessRunner
    console: ConsoleProtocol


def _read_manifest(cwd: Path) -> Result[PackageManifest, PipelineError]:
    loaded = load_manifest(cwd)
    if isinstance(loaded, Err):
        return Err(PipelineError(kind="manifest_read", message=loaded.error.message))
    return loaded


def _command(run: _Run, kind: PipelineErrorKind, cmd: list[str]) -> Result[None, PipelineError]:
    run.console.print(f"$ {' '.join(cmd)}", Style.DIM)
    result = run.runner(cmd, cwd=run.cwd, env=run.env)
    if isinstance(result, Err):
        e = result.error
        return Err(
            PipelineError(
                kind=kind,
                message=f"{' '.join(cmd)} failed (exit {e.returncode})",
                hint=e.detail,
            )
        )
    return Ok(None)


def _remove_node_modules(run: _Run) -> Result[None, PipelineError]:
    target = run.cwd / "node_modules"
    run.console.print(f"$ rm -rf {target}", Style.DIM)
    removed = safe_rm(target)
    if isinstance(removed, Err):
        return Err(PipelineError(kind="test", message=removed.error))
    return Ok(None)


def _bump_version(run: _Run) -> Result[None, PipelineError]:
    bumped = _command(run, "version", ["npm", "version", run.flags.bump])
    if isinstance(bumped, Err):
        return bumped

    # npm version rewrote package.json on disk
    reloaded = _read_manifest(run.cwd)
    if isinstance(reloaded, Err):
        return Err(PipelineError(kind="version", message=reloaded.error.message))
    run.manifest = reloaded.value
    return Ok(None)


def _safety_gate(run: _Run) -> Result[None, PipelineError]:
    # the process environment counts even when options.env replaces it
    in_test = any(is_test_environment(env) for env in (os.environ, run.env or {}))
    if in_test and not run.flags.dry_run:
        return Err(
            PipelineError(
                kind="safety_gate",
                message=SAFETY_GATE_MESSAGE,
                hint=f"{TEST_ENV_VAR}={TEST_ENV_VALUE} is set; pass --dry-run",
            )
        )
    return Ok(None)


def _publish_command(flags: Flags) -> list[str]:
    cmd = ["npm", "publish"]
    if flags.dry_run:
        cmd.append("--dry-run")
    if flags.otp:
        cmd.append(f"--otp={flags.otp}")
    return cmd


def _build_steps(run: _Run) -> list[Step]:
    steps: list[Step] = []
    if not run.flags.yolo:
        steps.extend(
            [
                Step("remove node_modules", lambda: _remove_node_modules(run)),
                Step("npm ci", lambda: _command(run, "test", ["npm", "ci"])),
                Step("npm test", lambda: _command(run, "test", ["npm", "test"])),
            ]
        )
    steps.extend(
        [
            Step("npm version", lambda: _bump_version(run)),
            Step("safety gate", lambda: _safety_gate(run)),
            Step("npm publish", lambda: _command(run, "publish", _publish_command(run.flags))),
        ]
    )
    return steps


def _commit(run: _Run, vcs: VersionControl) -> str | None:
    """Record the release in git. Returns a warning instead of failing."""
    message = run.manifest.version
    clean = vcs.is_clean()
    if isinstance(clean, Ok) and clean.value:
        # npm version already committed and tagged the bump
        run.console.info(f"nothing to commit, {message} is already recorded in git")
        return None

    run.console.print("$ git add .", Style.DIM)
    added = vcs.add_all()
    if isinstance(added, Err):
        return f"published {run.manifest.name}@{message} but git add failed: {added.error.message}"

    run.console.print(f"$ git commit -m {message}", Style.DIM)
    committed = vcs.commit(message)
    if isinstance(committed, Err):
        return f"published {run.manifest.name}@{message} but git commit failed: {committed.error.message}"
    return None


def publish(
    flags: Flags,
    options: PipelineOptions | None = None,
    *,
    console: ConsoleProtocol | None = None,
    runner: ProcessRunner | None = None,
    registry: RegistryClient | None = None,
    packer: Packer | None = None,
    vcs: VersionControl | None = None,
) -> Result[PublishOutcome, PipelineError]:
    """Publish the package in `options.cwd` if it changed.

    Skips (private package, nothing changed) are successful outcomes.

    Args:
        flags: Parsed publish flags
        options: Directory, preloaded manifest, subprocess environment
        console: Output sink (defaults to a RichConsole)
        runner: Runs npm and git (defaults to real subprocesses)
        registry: Registry port for change detection
        packer: Packer port for change detection
        vcs: Version control port (defaults to git in `cwd`)

    Returns:
        Ok(PublishOutcome), or Err(PipelineError) for the first failed stage
    """
    opts = options or PipelineOptions()
    cwd = opts.cwd or Path(os.getcwd())
    out = console or RichConsole()

    manifest = opts.package
    if manifest is None:
        loaded = _read_manifest(cwd)
        if isinstance(loaded, Err):
            return loaded
        manifest = loaded.value

    if manifest.private:
        out.print(f"Skipping {manifest.name}. Private")
        return Ok(PublishOutcome(status="skipped_private", manifest=manifest, reason="Private"))

    detected = detect(cwd, manifest=manifest, registry=registry, packer=packer, environ=opts.env)
    if isinstance(detected, Err):
        return detected
    verdict = detected.value

    if not verdict.changed:
        out.print(f"Skipping {manifest.name}. {verdict.reason}")
        return Ok(PublishOutcome(status="skipped_unchanged", manifest=manifest, reason=verdict.reason))

    out.print(f"Publishing {manifest.name}. {verdict.reason}")

    run = _Run(
        cwd=cwd,
        flags=flags,
        manifest=manifest,
        env=opts.env,
        runner=runner or SubprocessRunner(stream_output=opts.stream_output),
        console=out,
    )
    done = run_steps(_build_steps(run))
    if isinstance(done, Err):
        return done

    warning = _commit(run, vcs or Repository(cwd, runner=runner, env=opts.env))
    if warning is not None:
        out.warning(warning)
        return Ok(
            PublishOutcome(
                status="published_not_committed",
                manifest=run.manifest,
                reason=verdict.reason,
                warnings=(warning,),
            )
        )

    out.success(f"{run.manifest.name}@{run.manifest.version}")
    return Ok(PublishOutcome(status="published", manifest=run.manifest, reason=verdict.reason))


def publish_args(
    args: Sequence[str],
    options: PipelineOptions | None = None,
    *,
    console: ConsoleProtocol | None = None,
    runner: ProcessRunner | None = None,
    registry: RegistryClient | None = None,
    packer: Packer | None = None,
    vcs: VersionControl | None = None,
) -> Result[PublishOutcome, PipelineError]:
    """publish() taking CLI-style tokens, e.g. ["minor", "--dry-run"]."""
    flags = parse_flags(args)
    if isinstance(flags, Err):
        return flags
    return publish(
        flags.value,
        options,
        console=console,
        runner=runner,
        registry=registry,
        packer=packer,
        vcs=vcs,
    )
