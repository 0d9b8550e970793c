"""Strategies for reading a child's STDOUT and STDERR pipes to completion."""

from __future__ import annotations

import contextlib
import os
import selectors
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import IO, Literal

from loguru import logger

from shellout.buffers import CapturedOutput

DrainMode = Literal["auto", "selector", "thread"]
DEFAULT_CHUNK_SIZE = 64 * 1024


class OutputDrain(ABC):
    """Reads both pipes until end-of-stream, feeding a ``CapturedOutput``."""

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size

    @abstractmethod
    def drain(self, stdout: IO[bytes], stderr: IO[bytes], buffers: CapturedOutput) -> None:
        """Block until both pipes have reached end-of-stream."""


class SelectorDrain(OutputDrain):
    """Readiness-driven drain multiplexing both pipes on one thread."""

    def drain(self, stdout: IO[bytes], stderr: IO[bytes], buffers: CapturedOutput) -> None:
        with selectors.DefaultSelector() as selector:
            selector.register(stdout, selectors.EVENT_READ, buffers.append_output)
            selector.register(stderr, selectors.EVENT_READ, buffers.append_error)
            while selector.get_map():
                for key, _ in selector.select():
                    chunk = os.read(key.fd, self.chunk_size)
                    if not chunk:
                        selector.unregister(key.fileobj)
                        continue
                    key.data(chunk)


class ThreadDrain(OutputDrain):
    """Blocking drain with one reader thread per pipe."""

    def drain(self, stdout: IO[bytes], stderr: IO[bytes], buffers: CapturedOutput) -> None:
        errors: list[BaseException] = []
        threads = [
            threading.Thread(
                target=self._read_to_end, args=(stdout, buffers.append_output, errors), name="shellout-stdout"
            ),
            threading.Thread(
                target=self._read_to_end, args=(stderr, buffers.append_error, errors), name="shellout-stderr"
            ),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        if errors:
            raise errors[0]

    def _read_to_end(
        self, pipe: IO[bytes], append: Callable[[bytes], None], errors: list[BaseException]
    ) -> None:
        fd = pipe.fileno()
        try:
            while chunk := os.read(fd, self.chunk_size):
                append(chunk)
        except BaseException as exc:
            logger.exception("shell.drain.error pipe={}", threading.current_thread().name)
            errors.append(exc)
            # Discard the rest so the child never blocks on a full pipe.
            with contextlib.suppress(OSError):
                while os.read(fd, self.chunk_size):
                    pass


def supports_selector_drain() -> bool:
    """Whether ``select`` can wait on pipes on this platform."""
    return os.name == "posix"


def select_drain(mode: DrainMode = "auto", chunk_size: int = DEFAULT_CHUNK_SIZE) -> OutputDrain:
    if mode == "auto":
        mode = "selector" if supports_selector_drain() else "thread"
    if mode == "selector":
        return SelectorDrain(chunk_size)
    if mode == "thread":
        return ThreadDrain(chunk_size)
    raise ValueError(f"unknown drain mode: {mode!r}")
