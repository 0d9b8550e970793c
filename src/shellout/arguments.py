"""Argument tokens and shell command line composition."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from shellout.errors import UnsafeCommandError

# Sequences that would let a program name chain, pipe or substitute commands.
FORBIDDEN_SEQUENCES: tuple[str, ...] = ("&&", "||", ";", "|", "&", "`", "$(", ">", "<", "\n", "\r")

# Characters that keep their special meaning inside bash double quotes.
_DOUBLE_QUOTE_SPECIALS = ("\\", '"', "$", "`")


@dataclass(frozen=True, slots=True)
class Quoted:
    """Text that is escaped and double quoted before reaching the shell."""

    text: str


@dataclass(frozen=True, slots=True)
class Verbatim:
    """Text that is handed to the shell as-is."""

    text: str


type Argument = Quoted | Verbatim
type ArgumentLike = Argument | str


def quoted(*texts: str) -> list[Argument]:
    return [Quoted(text) for text in texts]


def verbatim(*texts: str) -> list[Argument]:
    return [Verbatim(text) for text in texts]


def as_argument(value: ArgumentLike) -> Argument:
    """Coerce a plain string to a quoted token, leaving tokens untouched."""
    if isinstance(value, Quoted | Verbatim):
        return value
    if isinstance(value, str):
        return Quoted(value)
    raise TypeError(f"expected Quoted, Verbatim or str, got {type(value).__name__}")


class SafeString:
    """A program name that cannot smuggle additional shell commands."""

    __slots__ = ("value",)

    def __init__(self, value: str) -> None:
        if not value.strip():
            raise UnsafeCommandError("command name must not be empty")
        for sequence in FORBIDDEN_SEQUENCES:
            if sequence in value:
                raise UnsafeCommandError(f"command name must not contain {sequence!r}: {value!r}")
        self.value = value

    @classmethod
    def unchecked(cls, value: str) -> SafeString:
        """Wrap a trusted name without validation."""
        instance = cls.__new__(cls)
        instance.value = value
        return instance

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"SafeString({self.value!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SafeString):
            return NotImplemented
        return self.value == other.value

    def __hash__(self) -> int:
        return hash(self.value)


def escape_double_quoted(text: str) -> str:
    for char in _DOUBLE_QUOTE_SPECIALS:
        text = text.replace(char, f"\\{char}")
    return text


def render_argument(argument: Argument) -> str:
    match argument:
        case Quoted(text):
            return f'"{escape_double_quoted(text)}"'
        case Verbatim(text):
            return text
    raise TypeError(f"not an argument token: {argument!r}")


def build_command_line(name: SafeString, arguments: Iterable[ArgumentLike] = ()) -> str:
    """Render the program name and its arguments as a single command line.

    The name is emitted verbatim, quoted tokens are escaped for bash double
    quotes, verbatim tokens are inserted unchanged. Tokens are separated by a
    single space.
    """
    parts = [render_argument(Verbatim(name.value))]
    parts.extend(render_argument(as_argument(argument)) for argument in arguments)
    return " ".join(parts)


def escape_spaces(path: str) -> str:
    """Backslash-escape spaces in a path. Other shell characters pass through."""
    return path.replace(" ", "\\ ")


def build_invocation(name: SafeString, arguments: Iterable[ArgumentLike] = (), at: str = ".") -> str:
    """Prefix the command line with a change into ``at``."""
    return f"cd {escape_spaces(at)} && {build_command_line(name, arguments)}"
