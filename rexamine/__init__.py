# SPDX-License-Identifier: GPL-3.0-or-later OR LicenseRef-Commercial

"""Regex matching over unbounded byte streams in constant memory."""

from .buffer import Buffer, RandomAccessBuffer
from .cursor import (
    DEFAULT_BUFFER_SIZE,
    MIN_BUFFER_SIZE,
    BookkeepingError,
    Match,
    NoProgressError,
    OutOfWindowError,
    SourceError,
    StreamRegexError,
    WindowedStreamCursor,
)
from .engine import DEFAULT_PATTERN, CodepointReader, MatchEngine, RegexEngine
from .reader import RegexReader
from .source import ByteSource, FileSource, IterSource, RandomAccessSource, StreamSource
from .window import Window
from .writer import Pipe, RegexWriter

__all__ = [
    "BookkeepingError",
    "Buffer",
    "ByteSource",
    "CodepointReader",
    "DEFAULT_BUFFER_SIZE",
    "DEFAULT_PATTERN",
    "FileSource",
    "IterSource",
    "MIN_BUFFER_SIZE",
    "Match",
    "MatchEngine",
    "NoProgressError",
    "OutOfWindowError",
    "Pipe",
    "RandomAccessBuffer",
    "RandomAccessSource",
    "RegexEngine",
    "RegexReader",
    "RegexWriter",
    "SourceError",
    "StreamRegexError",
    "StreamSource",
    "Window",
    "WindowedStreamCursor",
]
