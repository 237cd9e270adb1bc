# SPDX-License-Identifier: GPL-3.0-or-later OR LicenseRef-Commercial
"""Pattern-matching engines that scan a codepoint reader.

Any object with `find_next(reader)` can drive a scan. The reader hands out one
decoded codepoint at a time together with its encoded length, and the engine
answers with the next match as a `[start, end)` byte range in decode space,
or None when the stream ends without one.

`RegexEngine` runs a `regex` pattern over a bounded slice of the decoded text.
Partial matching tells it which start positions could still turn into a match
once more text arrives; every other position is dropped right away. A match is
reported once no earlier position is still alive and the text seen reaches a
full window past its start, so nothing later in the stream can change it.
"""

from __future__ import annotations

import re
from typing import Protocol, runtime_checkable

import regex

from .cursor import DEFAULT_BUFFER_SIZE, MIN_BUFFER_SIZE, OutOfWindowError
from .utf8 import UTF_MAX

DEFAULT_PATTERN = r"[A-Za-z0-9.%+\-]+@[A-Za-z0-9\-]+\.[A-Za-z]{2,24}"

# Characters kept ahead of the oldest live position so lookbehind and \b still
# see what preceded it.
_CONTEXT = 8


@runtime_checkable
class CodepointReader(Protocol):
    def next_codepoint(self) -> tuple[str, int] | None: ...


class MatchEngine(Protocol):
    def find_next(self, reader: CodepointReader) -> tuple[int, int] | None: ...


class RegexEngine:
    """Leftmost-first regex matching over a stream of codepoints.

    Matches spanning at most `window` bytes come out exactly as a search over
    the whole text would find them. An attempt that is still undecided
    `limit` bytes after its start raises `OutOfWindowError`.
    """

    def __init__(
        self,
        pattern: str | re.Pattern[str] | regex.Pattern = DEFAULT_PATTERN,
        window: int = DEFAULT_BUFFER_SIZE,
    ):
        if isinstance(pattern, (re.Pattern, regex.Pattern)):
            source, flags = pattern.pattern, pattern.flags
        else:
            source, flags = pattern, 0
        if not isinstance(source, str):
            raise TypeError("RegexEngine needs a str pattern; input is matched as decoded text")
        self.pattern = regex.compile(source, flags)
        self.window = max(window, MIN_BUFFER_SIZE)
        self.step = max(1, self.window // 64)
        self.limit = 2 * self.window

    def find_next(self, reader: CodepointReader) -> tuple[int, int] | None:
        chars: list[str] = []
        # offsets[i] is the decode-space start of chars[i]; offsets[-1] is the frontier.
        offsets: list[int] = [0]
        # Positions before `keep` can no longer start a match.
        keep = 0
        while True:
            eof = self._pull(reader, chars, offsets, self._pull_count(offsets, keep))
            text = "".join(chars)
            frontier = offsets[-1]
            found = self.pattern.search(text, keep)
            if eof:
                if found is None:
                    return None
                return offsets[found.start()], offsets[found.end()]

            candidate = len(text) if found is None else found.start()
            keep = self._first_alive(text, keep, candidate)
            if keep < len(text) and frontier - offsets[keep] > self.limit:
                raise OutOfWindowError(
                    f"match attempt at decode offset {offsets[keep]} is still open after "
                    f"{frontier - offsets[keep]} bytes (limit {self.limit})"
                )
            if found is not None and keep == candidate:
                start, end = offsets[found.start()], offsets[found.end()]
                if found.end() < len(text) and frontier - start >= self.window:
                    return start, end
            keep = self._discard(chars, offsets, keep)

    def _first_alive(self, text: str, first: int, stop: int) -> int:
        """Index of the first position in [first, stop) a longer text could still match at."""
        for index in range(first, stop):
            if self.pattern.match(text, index, partial=True) is not None:
                return index
        return stop

    def _pull_count(self, offsets: list[int], keep: int) -> int:
        """Codepoints to read next.

        While the oldest open position is younger than a window, reads stay
        short enough that it never falls out of the bytes the cursor retains.
        """
        room = self.window - (offsets[-1] - offsets[keep])
        if room <= 0:
            return self.step
        return max(1, min(self.step, room // UTF_MAX))

    @staticmethod
    def _pull(reader: CodepointReader, chars: list[str], offsets: list[int], count: int) -> bool:
        """Read up to `count` codepoints; True once the reader is exhausted."""
        for _ in range(count):
            item = reader.next_codepoint()
            if item is None:
                return True
            char, size = item
            chars.append(char)
            offsets.append(offsets[-1] + size)
        return False

    @staticmethod
    def _discard(chars: list[str], offsets: list[int], first: int) -> int:
        """Drop characters before index `first`, minus a little context.

        Returns the index of `first` after the drop.
        """
        cut = max(first - _CONTEXT, 0)
        if cut:
            del chars[:cut]
            del offsets[:cut]
        return first - cut
