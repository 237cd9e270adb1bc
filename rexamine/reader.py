"""# SPDX-License-Identifier: GPL-3.0-or-later OR LicenseRef-Commercial"""
from __future__ import annotations

"""Pull-style front-end: find every match in a byte source.

`RegexReader` binds a source, a `WindowedStreamCursor` and a matching engine.
It asks the engine for the next match, copies the matched bytes out of the
cursor, hands them to the caller and resumes scanning right after the match.
"""

import logging
import re
from collections.abc import Callable, Iterator

from .cursor import DEFAULT_BUFFER_SIZE, Match, StreamRegexError, WindowedStreamCursor
from .engine import DEFAULT_PATTERN, MatchEngine, RegexEngine
from .source import ByteSource

logger = logging.getLogger(__name__)


class RegexReader:
    """Find all matches of a pattern in a stream using bounded memory.

    Matches up to the buffer size are found exactly. A match attempt
    still open twice the buffer size past its start raises `OutOfWindowError`;
    patterns with unbounded quantifiers such as `.*` are the usual way to run
    into this.
    """

    def __init__(
        self,
        source: ByteSource,
        pattern: str | re.Pattern[str] = DEFAULT_PATTERN,
        size: int = DEFAULT_BUFFER_SIZE,
        engine: MatchEngine | None = None,
    ):
        self.cursor = WindowedStreamCursor(source, size)
        self.engine = engine or RegexEngine(pattern, window=self.cursor.capacity)

    def iter_matches(self) -> Iterator[Match]:
        """Yield matches in stream order; each is produced before scanning resumes."""
        count = 0
        while True:
            location = self.engine.find_next(self.cursor)
            if location is None:
                break
            start, end = location
            match = self.cursor.extract_match(start, end - start)
            count += 1
            yield match
            # An empty match would be found again at the same spot.
            if start == end and not self.cursor.skip():
                break
        logger.debug("scan finished with %d matches after %d bytes", count, self.cursor.source_read_total)

    def find_all_matches(self) -> list[str]:
        """Return every match as text. Blocks until the source is exhausted.

        Raises:
            StreamRegexError: On the first unrecoverable failure; the matches
                found before it are attached as `error.matches`.
        """
        results: list[str] = []
        try:
            self.find_all_matches_func(results.append)
        except StreamRegexError as error:
            error.matches = results
            raise
        return results

    def find_all_matches_func(self, deliver: Callable[[str], None]) -> None:
        """Call `deliver` with each match while the source is still being read."""
        for match in self.iter_matches():
            deliver(match.text)
