"""# SPDX-License-Identifier: GPL-3.0-or-later OR LicenseRef-Commercial"""
from __future__ import annotations

"""Byte source capabilities consumed by the cursor, plus concrete sources.

A source follows raw-IO `readinto` semantics:

  - a positive count means that many bytes were written into the buffer,
  - `0` means the source is exhausted,
  - `None` means no data is available yet (a zero-byte, non-terminal read),
  - an exception is a source failure.

Sources that can also serve positional reads implement `read_at`; the cursor
prefers it over its own window when extracting match bytes.
"""

import os
import urllib.parse
import urllib.request
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import BinaryIO, Protocol, runtime_checkable


@runtime_checkable
class ByteSource(Protocol):
    def readinto(self, buffer: memoryview) -> int | None: ...


@runtime_checkable
class RandomAccessSource(Protocol):
    def read_at(self, offset: int, size: int) -> bytes: ...


def resolve_path(uri: str) -> str:
    """Turn a plain path or `file://` URI into a filesystem path."""
    if uri.startswith("file://"):
        parsed = urllib.parse.urlparse(uri)
        return urllib.request.url2pathname(parsed.path)
    return uri


class StreamSource:
    """Adapt a binary file object (socket file, pipe, stdin) to `ByteSource`.

    Objects without `readinto` are read through `read`, in which case an empty
    result is treated as end-of-stream.
    """

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def readinto(self, buffer: memoryview) -> int | None:
        if hasattr(self.stream, "readinto"):
            return self.stream.readinto(buffer)
        chunk = self.stream.read(len(buffer))
        if chunk is None:
            return None
        buffer[: len(chunk)] = chunk
        return len(chunk)


class IterSource:
    """Byte source over an iterable of chunks (e.g. a generator of network reads).

    Empty chunks count as zero-progress reads, not end-of-stream. Chunks larger
    than the caller's buffer are handed out across several reads.
    """

    def __init__(self, chunks: Iterable[bytes]):
        self._chunks: Iterator[bytes] = iter(chunks)
        self._pending = memoryview(b"")

    def readinto(self, buffer: memoryview) -> int | None:
        if not self._pending:
            chunk = next(self._chunks, None)
            if chunk is None:
                return 0
            if not chunk:
                return None
            self._pending = memoryview(bytes(chunk))
        n = min(len(buffer), len(self._pending))
        buffer[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        return n


@dataclass
class FileSource:
    """Regular file opened by path or `file://` URI.

    Positional reads go through `os.pread`, so extracting a match never moves
    the sequential read offset.
    """

    uri: str
    _file: BinaryIO | None = field(default=None, init=False, repr=False)

    @property
    def path(self) -> str:
        return resolve_path(self.uri)

    def open(self) -> "FileSource":
        if self._file is None:
            if not os.path.isfile(self.path):
                raise FileNotFoundError(f"resource does not exist: {self.uri}")
            self._file = open(self.path, "rb", buffering=0)
        return self

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "FileSource":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()

    def readinto(self, buffer: memoryview) -> int | None:
        self.open()
        return self._file.readinto(buffer)

    def read_at(self, offset: int, size: int) -> bytes:
        self.open()
        return os.pread(self._file.fileno(), size, offset)
