import io
import os

import pytest

from rexamine.source import (
    ByteSource,
    FileSource,
    IterSource,
    RandomAccessSource,
    StreamSource,
    resolve_path,
)


def test_resolve_path_plain_and_file_uri():
    assert resolve_path("data/input.log") == "data/input.log"
    assert resolve_path("file:///tmp/input.log") == "/tmp/input.log"


def test_file_source_sequential_and_positional(tmp_path):
    path = tmp_path / "input.txt"
    path.write_bytes(b"0123456789")

    with FileSource(str(path)) as source:
        target = bytearray(4)
        assert source.readinto(target) == 4
        assert target == b"0123"

        assert source.read_at(6, 3) == b"678"

        # pread does not move the sequential offset
        assert source.readinto(target) == 4
        assert target == b"4567"


def test_file_source_accepts_file_uri(tmp_path):
    path = tmp_path / "input.txt"
    path.write_bytes(b"abc")

    with FileSource(path.as_uri()) as source:
        target = bytearray(8)
        assert source.readinto(target) == 3
        assert source.readinto(target) == 0


def test_file_source_missing_file(tmp_path):
    source = FileSource(os.path.join(str(tmp_path), "missing.txt"))
    with pytest.raises(FileNotFoundError):
        source.open()


def test_file_source_close_is_idempotent(tmp_path):
    path = tmp_path / "input.txt"
    path.write_bytes(b"abc")
    source = FileSource(str(path)).open()
    source.close()
    source.close()


def test_iter_source_splits_chunks_and_reports_empty_reads():
    source = IterSource([b"ab", b"", b"cdef"])
    target = bytearray(3)

    assert source.readinto(target) == 2
    assert target[:2] == b"ab"
    assert source.readinto(target) is None
    assert source.readinto(target) == 3
    assert target == b"cde"
    assert source.readinto(target) == 1
    assert target[:1] == b"f"
    assert source.readinto(target) == 0


def test_stream_source_uses_readinto():
    source = StreamSource(io.BytesIO(b"xyz"))
    target = bytearray(8)
    assert source.readinto(target) == 3
    assert target[:3] == b"xyz"
    assert source.readinto(target) == 0


def test_stream_source_falls_back_to_read():
    class ReadOnly:
        def __init__(self, data):
            self.data = data

        def read(self, size):
            chunk, self.data = self.data[:size], self.data[size:]
            return chunk

    source = StreamSource(ReadOnly(b"hello"))
    target = bytearray(3)
    assert source.readinto(target) == 3
    assert target == b"hel"
    assert source.readinto(target) == 2
    assert target[:2] == b"lo"
    assert source.readinto(target) == 0


def test_source_capabilities(tmp_path):
    path = tmp_path / "input.txt"
    path.write_bytes(b"")

    assert isinstance(FileSource(str(path)), RandomAccessSource)
    assert isinstance(FileSource(str(path)), ByteSource)
    assert not isinstance(IterSource([]), RandomAccessSource)
    assert not isinstance(StreamSource(io.BytesIO()), RandomAccessSource)
