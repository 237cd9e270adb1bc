# SPDX-License-Identifier: GPL-3.0-or-later OR LicenseRef-Commercial
"""Windowed cursor that lets a pull-based matcher scan an unbounded stream.

The cursor owns a `Window` (two fixed buffers), pulls bytes from a source on
demand, and hands them to a matching engine one codepoint at a time. Once the
engine reports a match, the cursor copies the matched bytes out of the window
(or from the source directly, when it supports positional reads) and rewinds
its decode position to the end of the match, undoing whatever lookahead the
engine consumed past it.

Offsets come in two flavours:
  - absolute: bytes from the very start of the stream,
  - decode-space: bytes delivered since the end of the previous match. The
    engine only ever sees decode-space offsets.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .source import ByteSource, RandomAccessSource
from .utf8 import UTF_MAX, decode_codepoint, is_full_codepoint
from .window import Window

logger = logging.getLogger(__name__)

MIN_BUFFER_SIZE = 16
DEFAULT_BUFFER_SIZE = 4096
MAX_CONSECUTIVE_EMPTY_READS = 100


class StreamRegexError(RuntimeError):
    """Base exception for streaming scan failures.

    `matches` holds whatever was delivered before the failure when the error
    escapes a collect-all call.
    """

    def __init__(self, *args: object):
        super().__init__(*args)
        self.matches: list[str] = []


class SourceError(StreamRegexError):
    """Raised when the underlying source fails to read."""


class NoProgressError(StreamRegexError):
    """Raised when the source keeps returning no data without ending."""


class OutOfWindowError(StreamRegexError):
    """Raised when a match starts before the bytes the window still retains."""


class BookkeepingError(StreamRegexError):
    """Raised when cursor positions become inconsistent."""


@dataclass(frozen=True)
class Match:
    """Literal match bytes plus their absolute offset in the stream."""

    offset: int
    data: bytes

    @property
    def end(self) -> int:
        return self.offset + len(self.data)

    @property
    def text(self) -> str:
        return self.data.decode("utf-8", errors="replace")


class WindowedStreamCursor:
    """Bounded-memory cursor over a byte source.

    Not thread-safe; a cursor serves exactly one scan over exactly one source.
    """

    def __init__(self, source: ByteSource, size: int = DEFAULT_BUFFER_SIZE):
        if size < MIN_BUFFER_SIZE:
            size = MIN_BUFFER_SIZE
        self.source = source
        self.window = Window(size)
        self.source_read_total = 0
        self.delivered_total = 0
        self.last_match_end_total = 0
        self.read_pos = 0
        self.write_pos = 0
        self._eof = False
        self._error: StreamRegexError | None = None
        # Bytes older than current[0] that must be delivered again after a rewind.
        self._replay = memoryview(b"")

    @property
    def capacity(self) -> int:
        return self.window.capacity

    @property
    def buffer_lower(self) -> int:
        """Lowest absolute offset still held by the window."""
        return self.window.lower(self.source_read_total, self.write_pos)

    @property
    def buffer_upper(self) -> int:
        """Absolute offset one past the newest byte held by the window."""
        return self.source_read_total

    @property
    def terminated(self) -> bool:
        return self._eof or self._error is not None

    def next_codepoint(self) -> tuple[str, int] | None:
        """Decode the next codepoint, refilling as needed.

        Returns `(char, byte_length)`, or None once window and source are both
        exhausted. A latched source error is raised only after every buffered
        byte has been delivered.
        """
        if self._replay:
            return self._next_replayed()
        self._ensure_lookahead()
        if self.read_pos == self.write_pos:
            return self._end_of_stream()
        char, size = decode_codepoint(self._peek())
        self.read_pos += size
        self.delivered_total += size
        return char, size

    def readinto(self, buffer) -> int:
        """Copy as many buffered bytes as fit into `buffer`; 0 at end-of-stream."""
        if not len(buffer):
            return 0
        if self._replay:
            n = min(len(buffer), len(self._replay))
            buffer[:n] = self._replay[:n]
            self._replay = self._replay[n:]
            self.delivered_total += n
            return n
        while self.read_pos == self.write_pos and not self.terminated:
            self._fill()
        if self.read_pos == self.write_pos:
            self._end_of_stream()
            return 0
        n = min(len(buffer), self.write_pos - self.read_pos)
        buffer[:n] = self.window.current[self.read_pos : self.read_pos + n]
        self.read_pos += n
        self.delivered_total += n
        return n

    def extract_match(self, start: int, length: int) -> Match:
        """Return the bytes of a decode-space match and resume right after it."""
        if start < 0 or length < 0:
            raise BookkeepingError(f"invalid match location: start={start} length={length}")
        offset = self.last_match_end_total + start
        end = offset + length
        if end > self.delivered_total:
            raise BookkeepingError(
                f"match end {end} is beyond the decoded position {self.delivered_total}"
            )

        if isinstance(self.source, RandomAccessSource):
            try:
                data = self.source.read_at(offset, length)
            except OSError as error:
                raise SourceError(f"positional read at {offset} failed: {error}") from error
            if len(data) != length:
                raise SourceError(f"short positional read at {offset}: {len(data)} of {length} bytes")
        elif not self.window.contains(offset, self.source_read_total, self.write_pos):
            raise OutOfWindowError(
                f"match at offset {offset} starts outside the retained window [{self.buffer_lower}, "
                f"{self.buffer_upper}); matches may not span more than {2 * self.capacity} bytes"
            )
        else:
            data = self.window.slice(offset, length, self.source_read_total, self.write_pos)

        self.rewind(end)
        self.last_match_end_total = end
        logger.debug("extracted %d byte match at offset %d", length, offset)
        return Match(offset, data)

    def rewind(self, position: int) -> None:
        """Move the decode position back to absolute `position`."""
        if position > self.delivered_total:
            raise BookkeepingError(
                f"cannot rewind forward from {self.delivered_total} to {position}"
            )
        current_start = self.source_read_total - self.write_pos
        if position >= current_start:
            self._replay = memoryview(b"")
            self.read_pos = position - current_start
        else:
            if not self.window.contains(position, self.source_read_total, self.write_pos):
                raise BookkeepingError(
                    f"cannot rewind to {position}: window starts at {self.buffer_lower}"
                )
            self._replay = memoryview(
                self.window.slice(position, current_start - position, self.source_read_total, self.write_pos)
            )
            self.read_pos = 0
        self.delivered_total = position

    def skip(self) -> bool:
        """Step over one codepoint after an empty match; False at end-of-stream."""
        if self.next_codepoint() is None:
            return False
        self.last_match_end_total = self.delivered_total
        return True

    def _peek(self) -> bytes:
        end = min(self.read_pos + UTF_MAX, self.write_pos)
        return bytes(self.window.current[self.read_pos : end])

    def _ensure_lookahead(self) -> None:
        while (
            self.read_pos + UTF_MAX > self.write_pos
            and not is_full_codepoint(self._peek())
            and not self.terminated
            and self.write_pos - self.read_pos < self.capacity
        ):
            self._fill()

    def _next_replayed(self) -> tuple[str, int] | None:
        head = bytes(self._replay[:UTF_MAX])
        if not is_full_codepoint(head):
            # The sequence continues into the current buffer.
            self._ensure_lookahead()
            head += self._peek()
        char, size = decode_codepoint(head)
        from_replay = min(size, len(self._replay))
        self._replay = self._replay[from_replay:]
        self.read_pos += size - from_replay
        self.delivered_total += size
        return char, size

    def _end_of_stream(self) -> None:
        if self._error is not None:
            raise self._error
        return None

    def _fill(self) -> None:
        """Compact the current buffer, then read new data into its free tail."""
        if self.read_pos > 0:
            self.write_pos = self.window.compact(self.read_pos, self.write_pos)
            self.read_pos = 0
        if self.write_pos >= self.capacity:
            raise BookkeepingError("tried to fill a full buffer")
        if self.terminated:
            raise BookkeepingError("tried to fill after the source terminated")

        with memoryview(self.window.current) as view:
            tail = view[self.write_pos :]
            try:
                for _ in range(MAX_CONSECUTIVE_EMPTY_READS):
                    try:
                        n = self.source.readinto(tail)
                    except StreamRegexError as error:
                        self._error = error
                        return
                    except Exception as error:
                        failure = SourceError(f"read from source failed: {error}")
                        failure.__cause__ = error
                        self._error = failure
                        logger.debug("source failed after %d bytes: %s", self.source_read_total, error)
                        return
                    if n is None:
                        continue
                    if n < 0:
                        raise BookkeepingError(f"source returned a negative count: {n}")
                    if n == 0:
                        self._eof = True
                        logger.debug("source exhausted after %d bytes", self.source_read_total)
                        return
                    self.write_pos += n
                    self.source_read_total += n
                    return
                self._error = NoProgressError(
                    f"source returned no data {MAX_CONSECUTIVE_EMPTY_READS} times in a row"
                )
            finally:
                tail.release()
