# SPDX-License-Identifier: GPL-3.0-or-later OR LicenseRef-Commercial
"""Dual fixed-size byte window used by the streaming cursor.

The window is a pair of equally sized arrays:

  - `current` holds the bytes most recently pulled from the source. The cursor
    tracks its own read/write positions inside it.
  - `previous` holds the `capacity` bytes that immediately precede
    `current[0]` in the stream.

Neither array ever grows. Compaction slides consumed bytes of `current` into
the tail of `previous`, so together they always cover the newest
`capacity + write_pos` bytes of the stream.
"""

from __future__ import annotations


class Window:
    """Two fixed-capacity buffers holding the newest bytes of a stream."""

    def __init__(self, capacity: int):
        self.capacity = capacity
        self.current = bytearray(capacity)
        self.previous = bytearray(capacity)

    def compact(self, read_pos: int, write_pos: int) -> int:
        """Evict `current[:read_pos]` into `previous` and shift the unread tail left.

        Returns the new write position; the new read position is always zero.
        """
        if read_pos <= 0:
            return write_pos
        size = self.capacity
        if read_pos < size:
            self.previous[: size - read_pos] = self.previous[read_pos:]
        self.previous[size - read_pos :] = self.current[:read_pos]
        unread = write_pos - read_pos
        self.current[:unread] = self.current[read_pos:write_pos]
        return unread

    def lower(self, source_read_total: int, write_pos: int) -> int:
        """Lowest absolute offset still retained by the pair."""
        return max(source_read_total - write_pos - self.capacity, 0)

    def contains(self, offset: int, source_read_total: int, write_pos: int) -> bool:
        return self.lower(source_read_total, write_pos) <= offset <= source_read_total

    def slice(self, offset: int, length: int, source_read_total: int, write_pos: int) -> bytes:
        """Copy `length` bytes starting at absolute `offset` out of the pair.

        Callers check the offset against `lower()` first; this method assumes
        the range is retained.
        """
        size = self.capacity
        # Index into the virtual concatenation previous + current.
        base = offset - (source_read_total - write_pos - size)
        if base >= size:
            start = base - size
            return bytes(self.current[start : start + length])
        if base + length <= size:
            return bytes(self.previous[base : base + length])
        head = bytes(self.previous[base:])
        return head + bytes(self.current[: length - len(head)])
