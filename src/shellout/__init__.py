"""shellout - run shell commands with safely composed arguments."""

from .arguments import Quoted, SafeString, Verbatim, build_command_line, build_invocation, quoted, verbatim
from .command import ShellOutCommand
from .errors import ProcessSpawnError, ShellOutBaseError, ShellOutError, UnsafeCommandError
from .runner import ShellRunner, shell_out, shell_out_async

__version__ = "0.1.0"

__all__ = [
    "ProcessSpawnError",
    "Quoted",
    "SafeString",
    "ShellOutBaseError",
    "ShellOutCommand",
    "ShellOutError",
    "ShellRunner",
    "UnsafeCommandError",
    "Verbatim",
    "build_command_line",
    "build_invocation",
    "quoted",
    "shell_out",
    "shell_out_async",
    "verbatim",
]
