# SPDX-License-Identifier: GPL-3.0-or-later OR LicenseRef-Commercial
"""Push-style front-end: feed bytes in, get matches out.

The cursor pulls from its source, so a producer that pushes bytes needs a
handoff. `Pipe` is a synchronous in-memory pipe: each write blocks until the
reader has consumed all of it, which gives backpressure without any
intermediate buffering. `RegexWriter` puts a pipe in front of a `RegexReader`;
the producer writes from one thread while the scan runs on another.
"""

from __future__ import annotations

import concurrent.futures
import logging
import re
import threading
from collections.abc import Iterable, Iterator
from typing import BinaryIO

from .cursor import DEFAULT_BUFFER_SIZE, Match, SourceError
from .engine import DEFAULT_PATTERN, MatchEngine
from .reader import RegexReader

logger = logging.getLogger(__name__)

_COPY_CHUNK_SIZE = 32 * 1024


class Pipe:
    """Rendezvous handoff between exactly one writer and one reader."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._write_lock = threading.Lock()
        self._pending = memoryview(b"")
        self._write_closed = False
        self._write_error: BaseException | None = None
        self._read_closed = False

    def write(self, data: bytes) -> int:
        """Hand `data` to the reader, blocking until it has been consumed.

        Raises:
            BrokenPipeError: If the read side closed before consuming everything.
            ValueError: If the write side is already closed.
        """
        with self._write_lock, self._cond:
            if self._write_closed:
                raise ValueError("write to closed pipe")
            if self._read_closed:
                raise BrokenPipeError("read side of pipe is closed")
            self._pending = memoryview(bytes(data))
            self._cond.notify_all()
            while self._pending and not self._read_closed:
                self._cond.wait()
            if self._pending:
                written = len(data) - len(self._pending)
                self._pending = memoryview(b"")
                raise BrokenPipeError(f"read side closed after {written} of {len(data)} bytes")
            return len(data)

    def readinto(self, buffer) -> int:
        """Block until data arrives; 0 once the write side is closed and drained."""
        with self._cond:
            while not self._pending:
                if self._read_closed:
                    raise SourceError("read from closed pipe")
                if self._write_closed:
                    if self._write_error is not None:
                        raise SourceError(f"producer failed: {self._write_error}") from self._write_error
                    return 0
                self._cond.wait()
            n = min(len(buffer), len(self._pending))
            buffer[:n] = self._pending[:n]
            self._pending = self._pending[n:]
            if not self._pending:
                self._cond.notify_all()
            return n

    def close(self, error: BaseException | None = None) -> None:
        """Close the write side; the reader sees end-of-stream, or `error` if given."""
        with self._cond:
            self._write_closed = True
            self._write_error = error
            self._cond.notify_all()

    def close_reader(self) -> None:
        """Close the read side, releasing a blocked writer with `BrokenPipeError`."""
        with self._cond:
            self._read_closed = True
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        return self._write_closed


class RegexWriter(RegexReader):
    """Match a pattern against bytes pushed in by a producer."""

    def __init__(
        self,
        pattern: str | re.Pattern[str] = DEFAULT_PATTERN,
        size: int = DEFAULT_BUFFER_SIZE,
        engine: MatchEngine | None = None,
    ):
        self.pipe = Pipe()
        super().__init__(self.pipe, pattern, size, engine)

    def write(self, data: bytes) -> int:
        """Write data, blocking until the scan has consumed it."""
        return self.pipe.write(data)

    def close(self, error: BaseException | None = None) -> None:
        """Signal that no more data will be written."""
        self.pipe.close(error)

    def copy_from(self, producer: BinaryIO | Iterable[bytes]) -> concurrent.futures.Future:
        """Copy a binary stream or iterable of chunks into the pipe in the background.

        The pipe is closed once the producer is exhausted, or closed with the
        producer's error so the scan fails instead of ending early. The returned
        future resolves to the number of bytes copied.

        Callers own the future and should collect it after the scan, whether
        the scan succeeded or not: when the scan stops reading early, the copy
        ends with `BrokenPipeError`.
        """
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="rexamine-copy")
        try:
            return executor.submit(self._copy, producer)
        finally:
            executor.shutdown(wait=False)

    def _copy(self, producer: BinaryIO | Iterable[bytes]) -> int:
        total = 0
        try:
            for chunk in _iter_chunks(producer):
                total += self.write(chunk)
        except BrokenPipeError:
            logger.debug("scan stopped reading after %d bytes", total)
            raise
        except Exception as error:
            self.close(error)
            raise
        self.close()
        logger.debug("copied %d bytes into the pipe", total)
        return total

    def iter_matches(self) -> Iterator[Match]:
        try:
            yield from super().iter_matches()
        finally:
            # Release a producer still blocked in write() once nobody reads.
            self.pipe.close_reader()


def _iter_chunks(producer: BinaryIO | Iterable[bytes]) -> Iterator[bytes]:
    if hasattr(producer, "read"):
        while True:
            chunk = producer.read(_COPY_CHUNK_SIZE)
            if not chunk:
                return
            yield chunk
    else:
        for chunk in producer:
            if chunk:
                yield chunk
