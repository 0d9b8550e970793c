"""Exception types for shellout."""

from __future__ import annotations

from shellout.buffers import shell_output


class ShellOutBaseError(Exception):
    """Base exception for shellout."""


class UnsafeCommandError(ShellOutBaseError, ValueError):
    """Raised when a command name could be used to inject extra shell commands."""


class ProcessSpawnError(ShellOutBaseError):
    """Raised when the shell process could not be started at all."""

    termination_status = -1

    def __init__(self, shell: str, reason: str) -> None:
        super().__init__(f"failed to launch {shell}: {reason}")
        self.shell = shell
        self.reason = reason


class ShellOutError(ShellOutBaseError):
    """Raised when a command ran and exited with a non-zero status."""

    def __init__(self, termination_status: int, output_data: bytes, error_data: bytes) -> None:
        self.termination_status = termination_status
        self.output_data = output_data
        self.error_data = error_data
        super().__init__(self.description)

    @property
    def message(self) -> str:
        """The STDERR text of the command."""
        return shell_output(self.error_data)

    @property
    def output(self) -> str:
        """The STDOUT text of the command."""
        return shell_output(self.output_data)

    @property
    def description(self) -> str:
        return (
            "ShellOut encountered an error\n"
            f"Status code: {self.termination_status}\n"
            f'Message: "{self.message}"\n'
            f'Output: "{self.output}"'
        )

    def __str__(self) -> str:
        return self.description
