"""# SPDX-License-Identifier: GPL-3.0-or-later OR LicenseRef-Commercial"""
from __future__ import annotations

"""In-memory byte source with a read cursor."""


class Buffer:
    """Sequential byte source over an in-memory payload.

    `chunk_size` caps how many bytes a single `readinto` hands out, which
    mimics a socket or pipe delivering short reads.
    """

    def __init__(self, data: bytes, chunk_size: int | None = None):
        self._data = bytes(data)
        self._pos = 0
        self.chunk_size = chunk_size

    def read(self, size: int | None = None) -> bytes:
        """Return up to `size` bytes (or the remainder if None) and advance the cursor."""
        if size is None or size < 0:
            size = len(self._data) - self._pos
        end = min(self._pos + size, len(self._data))
        chunk = self._data[self._pos : end]
        self._pos = end
        return chunk

    def readinto(self, buffer) -> int:
        """Fill `buffer` from the cursor; 0 signals the end of the payload."""
        size = len(buffer)
        if self.chunk_size is not None:
            size = min(size, self.chunk_size)
        chunk = self.read(size)
        buffer[: len(chunk)] = chunk
        return len(chunk)

    @property
    def remaining(self) -> int:
        """Bytes left unread."""
        return len(self._data) - self._pos

    def rewind(self) -> None:
        """Reset cursor to the start."""
        self._pos = 0


class RandomAccessBuffer(Buffer):
    """Buffer that also serves positional reads, bypassing any window lookup."""

    def read_at(self, offset: int, size: int) -> bytes:
        if offset < 0:
            raise ValueError(f"negative offset: {offset}")
        return self._data[offset : offset + size]
