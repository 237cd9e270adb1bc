from rexamine.window import Window


def _filled(previous: bytes, current: bytes) -> Window:
    window = Window(len(current))
    window.previous[:] = previous
    window.current[:] = current
    return window


def test_window_buffers_have_fixed_capacity():
    window = Window(8)
    assert len(window.current) == 8
    assert len(window.previous) == 8


def test_compact_moves_consumed_prefix_into_previous():
    window = _filled(b"ABCD", b"efgh")

    write_pos = window.compact(read_pos=3, write_pos=4)

    assert write_pos == 1
    assert window.current[:1] == b"h"
    assert window.previous == b"Defg"


def test_compact_full_buffer_replaces_previous():
    window = _filled(b"ABCD", b"efgh")

    write_pos = window.compact(read_pos=4, write_pos=4)

    assert write_pos == 0
    assert window.previous == b"efgh"
    assert len(window.current) == 4


def test_compact_without_consumed_bytes_is_noop():
    window = _filled(b"ABCD", b"efgh")
    assert window.compact(read_pos=0, write_pos=3) == 3
    assert window.previous == b"ABCD"
    assert window.current == b"efgh"


def test_lower_bound():
    window = Window(4)
    assert window.lower(source_read_total=8, write_pos=4) == 0
    assert window.lower(source_read_total=10, write_pos=4) == 2
    assert window.lower(source_read_total=10, write_pos=1) == 5
    assert window.lower(source_read_total=3, write_pos=3) == 0


def test_contains():
    window = Window(4)
    assert window.contains(5, source_read_total=10, write_pos=1)
    assert window.contains(10, source_read_total=10, write_pos=1)
    assert not window.contains(4, source_read_total=10, write_pos=1)


def test_slice_fully_in_current():
    # Stream bytes 0..7 are "abcdefgh": previous holds 0..3, current 4..7.
    window = _filled(b"abcd", b"efgh")
    assert window.slice(5, 3, source_read_total=8, write_pos=4) == b"fgh"


def test_slice_fully_in_previous():
    window = _filled(b"abcd", b"efgh")
    assert window.slice(0, 4, source_read_total=8, write_pos=4) == b"abcd"


def test_slice_split_across_buffers():
    window = _filled(b"abcd", b"efgh")
    assert window.slice(2, 4, source_read_total=8, write_pos=4) == b"cdef"


def test_slice_with_partially_filled_current():
    # Stream is "abcdef": current holds "ef" at offsets 4..5.
    window = Window(4)
    window.previous[:] = b"abcd"
    window.current[:2] = b"ef"
    assert window.slice(3, 3, source_read_total=6, write_pos=2) == b"def"


def test_slice_early_stream_reads_current_only():
    # Only 5 bytes read so far, nothing evicted yet.
    window = Window(8)
    window.current[:5] = b"hello"
    assert window.slice(1, 3, source_read_total=5, write_pos=5) == b"ell"
