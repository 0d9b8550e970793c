from __future__ import annotations

import asyncio
import io
import subprocess
import threading
from pathlib import Path
from typing import Any

import pytest

from shellout.arguments import Quoted, SafeString, Verbatim
from shellout.command import ShellOutCommand
from shellout.config import Settings
from shellout.errors import ProcessSpawnError, ShellOutError, UnsafeCommandError
from shellout.runner import ShellRunner, shell_out, shell_out_async


class _RecordingSink(io.BytesIO):
    """BytesIO that keeps its contents readable after close()."""

    def close(self) -> None:
        if not self.closed:
            self.final = self.getvalue()
        super().close()


def test_success_strips_single_trailing_newline(runner: ShellRunner) -> None:
    assert runner.run("printf 'hello\\n'") == "hello"


def test_only_one_trailing_newline_is_removed(runner: ShellRunner) -> None:
    assert runner.run("printf 'hello\\n\\n'") == "hello\n"
    assert runner.run("printf 'hello'") == "hello"


def test_empty_output_is_empty_string(runner: ShellRunner) -> None:
    assert runner.run("true") == ""


def test_invalid_utf8_output_degrades_to_empty_string(runner: ShellRunner) -> None:
    assert runner.run("printf '\\377\\376'") == ""


def test_nonzero_exit_raises_with_both_streams(runner: ShellRunner) -> None:
    with pytest.raises(ShellOutError) as exc_info:
        runner.run("printf oops >&2; exit 7")

    error = exc_info.value
    assert error.termination_status == 7
    assert error.message == "oops"
    assert error.output == ""
    assert error.error_data == b"oops"
    assert error.output_data == b""


def test_error_rendering_lists_status_message_then_output(runner: ShellRunner) -> None:
    with pytest.raises(ShellOutError) as exc_info:
        runner.run("echo partial; echo broken >&2; exit 3")

    assert str(exc_info.value) == (
        'ShellOut encountered an error\nStatus code: 3\nMessage: "broken"\nOutput: "partial"'
    )
    assert exc_info.value.output_data == b"partial\n"


def test_environment_replaces_inherited_environment(runner: ShellRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHELLOUT_PARENT_VALUE", "parent")
    output = runner.run(
        'printf "%s|%s" "$SHELLOUT_TEST_VALUE" "${SHELLOUT_PARENT_VALUE:-unset}"',
        environment={"SHELLOUT_TEST_VALUE": "42"},
    )
    assert output == "42|unset"


def test_environment_is_inherited_when_not_given(runner: ShellRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHELLOUT_TEST_VALUE", "inherited")
    assert runner.run('printf "%s" "$SHELLOUT_TEST_VALUE"') == "inherited"


def test_sinks_receive_every_byte_and_are_closed(runner: ShellRunner) -> None:
    output_sink = _RecordingSink()
    error_sink = _RecordingSink()
    script = "for i in $(seq 1 200); do echo out $i; echo err $i >&2; done"

    output = runner.run(script, output_sink=output_sink, error_sink=error_sink)

    expected_out = "".join(f"out {i}\n" for i in range(1, 201)).encode()
    expected_err = "".join(f"err {i}\n" for i in range(1, 201)).encode()
    assert output_sink.final == expected_out
    assert error_sink.final == expected_err
    assert output == expected_out.decode()[:-1]
    assert output_sink.closed and error_sink.closed


def test_sinks_are_closed_on_failure(runner: ShellRunner) -> None:
    error_sink = _RecordingSink()
    with pytest.raises(ShellOutError):
        runner.run("echo bad >&2; exit 1", error_sink=error_sink)
    assert error_sink.final == b"bad\n"
    assert error_sink.closed


def test_spawn_failure_is_distinct_from_nonzero_exit(settings: Settings) -> None:
    runner = ShellRunner(shell="/nonexistent/shell", settings=settings)
    sink = _RecordingSink()

    with pytest.raises(ProcessSpawnError) as exc_info:
        runner.run("echo hi", output_sink=sink)

    assert not isinstance(exc_info.value, ShellOutError)
    assert exc_info.value.termination_status == -1
    assert exc_info.value.shell == "/nonexistent/shell"
    assert sink.closed


def test_runner_uses_injected_process_factory(settings: Settings) -> None:
    observed: dict[str, Any] = {}

    def _popen(args: list[str], **kwargs: Any) -> subprocess.Popen[bytes]:
        observed["args"] = args
        observed["kwargs"] = kwargs
        return subprocess.Popen(["/bin/sh", "-c", "printf factory"], **kwargs)  # noqa: S603

    runner = ShellRunner(popen=_popen, settings=settings)

    assert runner.run("echo ignored") == "factory"
    assert observed["args"] == ["/bin/bash", "-c", "echo ignored"]
    assert observed["kwargs"]["stdout"] is subprocess.PIPE
    assert observed["kwargs"]["stderr"] is subprocess.PIPE
    assert observed["kwargs"]["env"] is None


def test_large_output_is_captured_in_full(runner: ShellRunner) -> None:
    output = runner.run("head -c 3000000 /dev/zero | tr '\\0' a; head -c 3000000 /dev/zero | tr '\\0' b >&2")
    assert output == "a" * 3_000_000


def test_interleaved_output_is_never_truncated() -> None:
    script = "for i in $(seq 1 300); do echo out-$i; echo err-$i >&2; done; exit 5"
    expected_out = "".join(f"out-{i}\n" for i in range(1, 301)).encode()
    expected_err = "".join(f"err-{i}\n" for i in range(1, 301)).encode()
    runners = [ShellRunner(settings=Settings(_env_file=None, drain_mode=mode)) for mode in ("selector", "thread")]

    for attempt in range(1000):
        with pytest.raises(ShellOutError) as exc_info:
            runners[attempt % 2].run(script)
        assert exc_info.value.output_data == expected_out
        assert exc_info.value.error_data == expected_err


@pytest.mark.parametrize(
    "text",
    [
        'quote " inside',
        "back\\slash",
        "trailing\\",
        "$HOME and ${PATH}",
        "`whoami` $(id)",
        "a && b || c; d | e > f < g",
        "it's *.py ~ !bang",
        "  leading and trailing  ",
        "tab\there\nnewline",
        "",
    ],
)
def test_quoted_arguments_reach_the_program_unchanged(text: str, runner: ShellRunner) -> None:
    output = shell_out("printf", ["[%s]", text], runner=runner)
    assert output == f"[{text}]"


def test_verbatim_arguments_are_interpreted_by_the_shell(runner: ShellRunner) -> None:
    output = shell_out("echo", [Quoted("one"), Verbatim("&& echo two")], runner=runner)
    assert output == "one\ntwo"


def test_shell_out_runs_inside_directory_with_spaces(tmp_path: Path, runner: ShellRunner) -> None:
    folder = tmp_path / "with space"
    folder.mkdir()
    (folder / "marker.txt").write_text("found", encoding="utf-8")

    assert shell_out("cat", ["marker.txt"], at=folder, runner=runner) == "found"


def test_shell_out_accepts_predefined_command(tmp_path: Path, runner: ShellRunner) -> None:
    command = ShellOutCommand.safe("mkdir", ["New Folder"])
    shell_out(command, at=str(tmp_path), runner=runner)
    assert (tmp_path / "New Folder").is_dir()


def test_shell_out_rejects_arguments_with_predefined_command(runner: ShellRunner) -> None:
    with pytest.raises(TypeError):
        shell_out(ShellOutCommand.safe("ls"), ["-la"], runner=runner)


def test_shell_out_validates_plain_command_names(runner: ShellRunner) -> None:
    with pytest.raises(UnsafeCommandError):
        shell_out("ls; rm -rf /", runner=runner)


def test_shell_out_accepts_safe_string(runner: ShellRunner) -> None:
    assert shell_out(SafeString("echo"), ["safe"], runner=runner) == "safe"


@pytest.mark.asyncio
async def test_async_success_and_sinks(settings: Settings) -> None:
    runner = ShellRunner(settings=settings)
    sink = _RecordingSink()

    output = await runner.run_async("echo hello; echo noise >&2", error_sink=sink)

    assert output == "hello"
    assert sink.final == b"noise\n"
    assert sink.closed


@pytest.mark.asyncio
async def test_async_failure_carries_streams(settings: Settings) -> None:
    runner = ShellRunner(settings=settings)
    with pytest.raises(ShellOutError) as exc_info:
        await shell_out_async("sh", [Verbatim("-c 'printf oops >&2; exit 7'")], runner=runner)

    assert exc_info.value.termination_status == 7
    assert exc_info.value.message == "oops"
    assert exc_info.value.output == ""


@pytest.mark.asyncio
async def test_async_spawn_failure(settings: Settings) -> None:
    runner = ShellRunner(shell="/nonexistent/shell", settings=settings)
    with pytest.raises(ProcessSpawnError):
        await runner.run_async("true")


class _FailingSink:
    def write(self, data: bytes) -> None:
        raise OSError("sink unavailable")

    def close(self) -> None:
        return None


def test_sink_error_with_full_pipe_raises_instead_of_hanging(runner: ShellRunner) -> None:
    outcome: list[BaseException] = []

    def _target() -> None:
        try:
            runner.run("head -c 1000000 /dev/zero; echo done >&2", output_sink=_FailingSink())
        except BaseException as exc:
            outcome.append(exc)

    worker = threading.Thread(target=_target, daemon=True)
    worker.start()
    worker.join(timeout=30)

    assert not worker.is_alive()
    assert len(outcome) == 1
    assert isinstance(outcome[0], OSError)
    assert str(outcome[0]) == "sink unavailable"


@pytest.mark.asyncio
async def test_async_sink_error_reaps_the_child(settings: Settings, monkeypatch: pytest.MonkeyPatch) -> None:
    spawned: list[asyncio.subprocess.Process] = []
    create_subprocess_exec = asyncio.create_subprocess_exec

    async def _recording_exec(*args: Any, **kwargs: Any) -> asyncio.subprocess.Process:
        process = await create_subprocess_exec(*args, **kwargs)
        spawned.append(process)
        return process

    monkeypatch.setattr("shellout.runner.asyncio.create_subprocess_exec", _recording_exec)
    runner = ShellRunner(settings=settings)

    with pytest.raises(OSError, match="sink unavailable"):
        await runner.run_async("head -c 1000000 /dev/zero", output_sink=_FailingSink())

    assert len(spawned) == 1
    assert spawned[0].returncode is not None


def test_explicit_zero_chunk_size_is_rejected(settings: Settings) -> None:
    with pytest.raises(ValueError, match="chunk_size"):
        ShellRunner(chunk_size=0, settings=settings)
