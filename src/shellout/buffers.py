"""Captured output accumulators shared between drains and the runner."""

from __future__ import annotations

import sys
import threading
from typing import BinaryIO, Protocol

STANDARD_FILENOS = frozenset({0, 1, 2})


class OutputSink(Protocol):
    def write(self, data: bytes, /) -> object: ...

    def close(self) -> None: ...


def shell_output(data: bytes) -> str:
    """Decode captured bytes as UTF-8 and drop a single trailing newline.

    Malformed UTF-8 yields an empty string.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return ""
    if text.endswith("\n"):
        return text[:-1]
    return text


def is_standard_handle(sink: OutputSink) -> bool:
    """Whether ``sink`` is one of the process's own standard streams."""
    for stream in (sys.stdin, sys.stdout, sys.stderr, sys.__stdin__, sys.__stdout__, sys.__stderr__):
        if stream is None:
            continue
        if sink is stream or sink is getattr(stream, "buffer", None):
            return True
    fileno = getattr(sink, "fileno", None)
    if fileno is None:
        return False
    try:
        return fileno() in STANDARD_FILENOS
    except (OSError, ValueError):
        return False


class CapturedOutput:
    """STDOUT and STDERR accumulators behind a single lock.

    Every append and the final snapshot go through the same lock, so bytes
    written by drain threads are visible to whoever takes the snapshot.
    """

    def __init__(
        self, output_sink: OutputSink | BinaryIO | None = None, error_sink: OutputSink | BinaryIO | None = None
    ) -> None:
        self._lock = threading.Lock()
        self._output = bytearray()
        self._error = bytearray()
        self.output_sink = output_sink
        self.error_sink = error_sink

    def append_output(self, chunk: bytes) -> None:
        with self._lock:
            self._output += chunk
            if self.output_sink is not None:
                self.output_sink.write(chunk)

    def append_error(self, chunk: bytes) -> None:
        with self._lock:
            self._error += chunk
            if self.error_sink is not None:
                self.error_sink.write(chunk)

    def snapshot(self) -> tuple[bytes, bytes]:
        with self._lock:
            return bytes(self._output), bytes(self._error)

    def close_sinks(self) -> None:
        """Close caller supplied sinks, leaving standard streams open."""
        with self._lock:
            for sink in (self.output_sink, self.error_sink):
                if sink is None:
                    continue
                if is_standard_handle(sink):
                    flush = getattr(sink, "flush", None)
                    if flush is not None:
                        flush()
                    continue
                sink.close()
