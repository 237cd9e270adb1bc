import pytest

from rexamine.utf8 import REPLACEMENT_CHAR, decode_codepoint, is_full_codepoint, sequence_length


@pytest.mark.parametrize(
    "char",
    ["a", "é", "€", "😀"],
)
def test_decode_valid_codepoints(char):
    encoded = char.encode("utf-8")
    assert is_full_codepoint(encoded)
    assert decode_codepoint(encoded + b"tail") == (char, len(encoded))


def test_sequence_length():
    assert sequence_length(ord("a")) == 1
    assert sequence_length(0xC3) == 2
    assert sequence_length(0xE2) == 3
    assert sequence_length(0xF0) == 4
    assert sequence_length(0x80) == 1
    assert sequence_length(0xFF) == 1


def test_incomplete_sequence_is_not_full():
    assert not is_full_codepoint(b"")
    assert not is_full_codepoint(b"\xe2")
    assert not is_full_codepoint(b"\xe2\x82")
    assert not is_full_codepoint(b"\xf0\x9f\x98")


def test_invalid_bytes_count_as_full():
    # A bad continuation byte settles the sequence early.
    assert is_full_codepoint(b"\xe2\x28")
    assert is_full_codepoint(b"\xf0\x9f\x28")
    assert is_full_codepoint(b"\xff")
    assert is_full_codepoint(b"\x80")


@pytest.mark.parametrize(
    "data",
    [b"\xff", b"\x80abc", b"\xc0\x80", b"\xe2\x28\xa1", b"\xed\xa0\x80", b"\xe2\x82"],
)
def test_invalid_bytes_decode_as_replacement(data):
    assert decode_codepoint(data) == (REPLACEMENT_CHAR, 1)
