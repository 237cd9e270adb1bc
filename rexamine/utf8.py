# SPDX-License-Identifier: GPL-3.0-or-later OR LicenseRef-Commercial
"""Incremental UTF-8 helpers for decoding one codepoint at a time.

Bytes that do not form a valid sequence decode as U+FFFD with a length of one,
so a scan never stalls on corrupt input.
"""

from __future__ import annotations

UTF_MAX = 4
REPLACEMENT_CHAR = "�"

# Accepted range for the second byte, keyed by lead byte; everything else uses
# the plain continuation range.
_SECOND_BYTE = {
    0xE0: (0xA0, 0xBF),
    0xED: (0x80, 0x9F),
    0xF0: (0x90, 0xBF),
    0xF4: (0x80, 0x8F),
}


def sequence_length(lead: int) -> int:
    """Expected encoded length for a lead byte, 1 for ASCII and invalid leads."""
    if lead < 0xC2 or lead > 0xF4:
        return 1
    if lead < 0xE0:
        return 2
    if lead < 0xF0:
        return 3
    return 4


def is_full_codepoint(data: bytes | bytearray | memoryview) -> bool:
    """Return True if `data` begins with a complete (or definitely invalid) sequence."""
    n = len(data)
    if n == 0:
        return False
    size = sequence_length(data[0])
    if n >= size:
        return True
    if n > 1:
        low, high = _SECOND_BYTE.get(data[0], (0x80, 0xBF))
        if not low <= data[1] <= high:
            return True
    if n > 2 and not 0x80 <= data[2] <= 0xBF:
        return True
    return False


def decode_codepoint(data: bytes | bytearray | memoryview) -> tuple[str, int]:
    """Decode the first codepoint of `data`, returning it with its byte length."""
    lead = data[0]
    if lead < 0x80:
        return chr(lead), 1
    size = sequence_length(lead)
    if size == 1 or len(data) < size:
        return REPLACEMENT_CHAR, 1
    try:
        return bytes(data[:size]).decode("utf-8"), size
    except UnicodeDecodeError:
        return REPLACEMENT_CHAR, 1
