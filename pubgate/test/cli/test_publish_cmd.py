from __future__ import annotations

from pathlib import Path

import pytest
import typer

from pubgate.cli.context import CLIContext
from pubgate.core.errors import ErrorCode
from pubgate.core.result import Err, Ok, Result
from pubgate.npm.manifest import PackageManifest
from pubgate.output.console import MockConsole
from pubgate.services.errors import PipelineError
from pubgate.services.flags import Flags
from pubgate.services.pipeline import PipelineOptions, PublishOutcome


def _ctx(tmp_path: Path, console: MockConsole) -> CLIContext:
    return CLIContext(cwd=tmp_path, env={"NODE_ENV": "test"}, console=console)


def _patch(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    console: MockConsole,
    result: Result[PublishOutcome, PipelineError],
) -> list[tuple[Flags, PipelineOptions]]:
    import pubgate.cli.commands.publish_cmd as publish_cmd

    calls: list[tuple[Flags, PipelineOptions]] = []

    def fake_publish(
        flags: Flags, options: PipelineOptions, **_: object
    ) -> Result[PublishOutcome, PipelineError]:
        calls.append((flags, options))
        return result

    monkeypatch.setattr(publish_cmd, "build_context", lambda cwd, quiet=False: _ctx(tmp_path, console))
    monkeypatch.setattr(publish_cmd, "run_publish", fake_publish)
    return calls


def test_publish_passes_flags_and_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import pubgate.cli.commands.publish_cmd as publish_cmd

    console = MockConsole()
    outcome = PublishOutcome(status="published", manifest=PackageManifest("left-pad", "1.0.1"))
    calls = _patch(monkeypatch, tmp_path, console, Ok(outcome))

    publish_cmd.publish(
        bump="minor", yolo=True, dry_run=True, otp="123456", cwd=None, quiet=False
    )

    flags, options = calls[0]
    assert flags == Flags(bump="minor", yolo=True, dry_run=True, otp="123456")
    assert options.cwd == tmp_path
    assert options.env == {"NODE_ENV": "test"}
    assert options.stream_output is True


def test_safety_gate_exits_with_env_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    import pubgate.cli.commands.publish_cmd as publish_cmd

    console = MockConsole()
    error = PipelineError(
        kind="safety_gate",
        message="Cannot publish in test environment without --dry-run",
        hint="NODE_ENV=test is set; pass --dry-run",
    )
    _patch(monkeypatch, tmp_path, console, Err(error))

    with pytest.raises(typer.Exit) as exc:
        publish_cmd.publish(bump="patch", yolo=False, dry_run=False, otp=None, cwd=None, quiet=False)

    assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)
    assert console.find("Cannot publish in test environment")


def test_test_failure_exits_with_build_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    import pubgate.cli.commands.publish_cmd as publish_cmd

    console = MockConsole()
    _patch(
        monkeypatch,
        tmp_path,
        console,
        Err(PipelineError(kind="test", message="npm test failed (exit 1)")),
    )

    with pytest.raises(typer.Exit) as exc:
        publish_cmd.publish(bump="patch", yolo=False, dry_run=False, otp=None, cwd=None, quiet=True)

    assert exc.value.exit_code == int(ErrorCode.BUILD_ERROR)
    assert console.has_error()


def test_skip_is_success(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import pubgate.cli.commands.publish_cmd as publish_cmd

    console = MockConsole()
    outcome = PublishOutcome(
        status="skipped_private",
        manifest=PackageManifest("left-pad", "1.0.0", private=True),
        reason="Private",
    )
    _patch(monkeypatch, tmp_path, console, Ok(outcome))

    publish_cmd.publish(bump="patch", yolo=False, dry_run=False, otp=None, cwd=None, quiet=True)

    assert not console.has_error()
