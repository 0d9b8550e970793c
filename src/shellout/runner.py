"""Run command lines through the shell and capture their output."""

from __future__ import annotations

import asyncio
import contextlib
import os
import subprocess
from collections.abc import Callable, Iterable, Mapping
from typing import BinaryIO

from loguru import logger

from shellout.arguments import ArgumentLike, SafeString, build_invocation
from shellout.buffers import CapturedOutput, OutputSink, shell_output
from shellout.command import ShellOutCommand
from shellout.config import Settings, get_settings
from shellout.drains import OutputDrain, select_drain
from shellout.errors import ProcessSpawnError, ShellOutError

type Sink = OutputSink | BinaryIO
type PopenFactory = Callable[..., subprocess.Popen[bytes]]


class ShellRunner:
    """Runs a finished command line as ``<shell> -c <command line>``.

    Both output pipes are drained concurrently into one ``CapturedOutput``.
    The call returns only once the child has exited and every byte has been
    captured. A zero exit status returns the STDOUT text, anything else
    raises ``ShellOutError`` carrying both raw streams.
    """

    def __init__(
        self,
        *,
        shell: str | None = None,
        drain: OutputDrain | None = None,
        popen: PopenFactory = subprocess.Popen,
        chunk_size: int | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.shell = shell or settings.shell
        self.chunk_size = chunk_size if chunk_size is not None else settings.chunk_size
        self.drain = drain or select_drain(settings.drain_mode, self.chunk_size)
        self._popen = popen

    def run(
        self,
        command_line: str,
        *,
        environment: Mapping[str, str] | None = None,
        output_sink: Sink | None = None,
        error_sink: Sink | None = None,
    ) -> str:
        buffers = CapturedOutput(output_sink, error_sink)
        try:
            status = self._execute(command_line, environment, buffers)
        finally:
            buffers.close_sinks()
        return self._finish(status, buffers)

    async def run_async(
        self,
        command_line: str,
        *,
        environment: Mapping[str, str] | None = None,
        output_sink: Sink | None = None,
        error_sink: Sink | None = None,
    ) -> str:
        """Awaitable variant of ``run`` built on asyncio subprocesses."""
        buffers = CapturedOutput(output_sink, error_sink)
        try:
            status = await self._execute_async(command_line, environment, buffers)
        finally:
            buffers.close_sinks()
        return self._finish(status, buffers)

    def _execute(self, command_line: str, environment: Mapping[str, str] | None, buffers: CapturedOutput) -> int:
        logger.debug("shell.spawn shell={} command={}", self.shell, command_line)
        try:
            process = self._popen(
                [self.shell, "-c", command_line],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=None if environment is None else dict(environment),
            )
        except OSError as exc:
            logger.warning("shell.spawn.error shell={} error={}", self.shell, exc)
            raise ProcessSpawnError(self.shell, str(exc)) from exc

        with process:
            assert process.stdout is not None and process.stderr is not None
            try:
                self.drain.drain(process.stdout, process.stderr, buffers)
            except BaseException:
                process.kill()
                raise
            status = process.wait()
        logger.debug("shell.exit pid={} status={}", process.pid, status)
        return status

    async def _execute_async(
        self, command_line: str, environment: Mapping[str, str] | None, buffers: CapturedOutput
    ) -> int:
        logger.debug("shell.spawn shell={} command={}", self.shell, command_line)
        try:
            process = await asyncio.create_subprocess_exec(
                self.shell,
                "-c",
                command_line,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=None if environment is None else dict(environment),
            )
        except OSError as exc:
            logger.warning("shell.spawn.error shell={} error={}", self.shell, exc)
            raise ProcessSpawnError(self.shell, str(exc)) from exc

        assert process.stdout is not None and process.stderr is not None
        drains = [
            asyncio.create_task(self._drain_stream(process.stdout, buffers.append_output)),
            asyncio.create_task(self._drain_stream(process.stderr, buffers.append_error)),
        ]
        try:
            await asyncio.gather(*drains)
        except BaseException:
            for task in drains:
                task.cancel()
            await asyncio.gather(*drains, return_exceptions=True)
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            raise
        status = await process.wait()
        logger.debug("shell.exit pid={} status={}", process.pid, status)
        return status

    async def _drain_stream(self, stream: asyncio.StreamReader, append: Callable[[bytes], None]) -> None:
        while chunk := await stream.read(self.chunk_size):
            append(chunk)

    @staticmethod
    def _finish(status: int, buffers: CapturedOutput) -> str:
        output_data, error_data = buffers.snapshot()
        if status != 0:
            raise ShellOutError(status, output_data, error_data)
        return shell_output(output_data)


def _resolve_command(
    command: str | SafeString | ShellOutCommand, arguments: Iterable[ArgumentLike]
) -> ShellOutCommand:
    if isinstance(command, ShellOutCommand):
        if tuple(arguments):
            raise TypeError("arguments cannot be combined with a pre-defined ShellOutCommand")
        return command
    if isinstance(command, str):
        return ShellOutCommand.create(command, arguments)
    return ShellOutCommand.safe(command.value, arguments)


def shell_out(
    command: str | SafeString | ShellOutCommand,
    arguments: Iterable[ArgumentLike] = (),
    *,
    at: str | os.PathLike[str] = ".",
    output_sink: Sink | None = None,
    error_sink: Sink | None = None,
    environment: Mapping[str, str] | None = None,
    runner: ShellRunner | None = None,
) -> str:
    """Run ``command`` with ``arguments`` inside the directory ``at``.

    Returns the command's STDOUT with one trailing newline removed. Raises
    ``ShellOutError`` for a non-zero exit status and ``ProcessSpawnError`` if
    the shell could not be started. Plain string arguments are quoted.

    Example: ``shell_out("mkdir", ["NewFolder"], at="~/CurrentFolder")``
    """
    resolved = _resolve_command(command, arguments)
    command_line = build_invocation(resolved.command, resolved.arguments, os.fspath(at))
    return (runner or ShellRunner()).run(
        command_line, environment=environment, output_sink=output_sink, error_sink=error_sink
    )


async def shell_out_async(
    command: str | SafeString | ShellOutCommand,
    arguments: Iterable[ArgumentLike] = (),
    *,
    at: str | os.PathLike[str] = ".",
    output_sink: Sink | None = None,
    error_sink: Sink | None = None,
    environment: Mapping[str, str] | None = None,
    runner: ShellRunner | None = None,
) -> str:
    resolved = _resolve_command(command, arguments)
    command_line = build_invocation(resolved.command, resolved.arguments, os.fspath(at))
    return await (runner or ShellRunner()).run_async(
        command_line, environment=environment, output_sink=output_sink, error_sink=error_sink
    )
