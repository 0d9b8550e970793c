"""Pre-defined command value type."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from shellout.arguments import Argument, ArgumentLike, SafeString, as_argument, build_command_line


@dataclass(frozen=True)
class ShellOutCommand:
    """A program name plus the argument tokens to run it with."""

    command: SafeString
    arguments: tuple[Argument, ...] = field(default_factory=tuple)

    @classmethod
    def create(cls, command: str, arguments: Iterable[ArgumentLike] = ()) -> ShellOutCommand:
        """Build a command, validating its name."""
        return cls(SafeString(command), tuple(as_argument(arg) for arg in arguments))

    @classmethod
    def safe(cls, command: str, arguments: Iterable[ArgumentLike] = ()) -> ShellOutCommand:
        """Build a command from a trusted name."""
        return cls(SafeString.unchecked(command), tuple(as_argument(arg) for arg in arguments))

    @property
    def string(self) -> str:
        return build_command_line(self.command, self.arguments)

    def appending(self, *arguments: ArgumentLike) -> ShellOutCommand:
        return ShellOutCommand(self.command, self.arguments + tuple(as_argument(arg) for arg in arguments))
