import math

import pytest

from epd_uploader.config import MAX_CHUNK_SIZE, PACKED_ROW_CHARS, PANEL_HEIGHT
from epd_uploader.processing.packing import (
    FrameGeometryError,
    chunk_stream,
    pack_to_chars,
    reorder_for_device,
    restore_from_device_order,
)


def test_pack_to_chars_msb_first() -> None:
    assert pack_to_chars([0, 0, 0, 0]) == "a"
    assert pack_to_chars([1, 1, 1, 1]) == "p"
    assert pack_to_chars([1, 0, 0, 0, 0, 0, 0, 1]) == "ib"


def test_pack_to_chars_pads_trailing_partial_group() -> None:
    # 1, 1 -> 0b1100
    assert pack_to_chars([0, 0, 0, 0, 1, 1]) == "am"
    assert pack_to_chars([1]) == "i"
    assert pack_to_chars([]) == ""


def test_pack_length_is_ceil_of_bits() -> None:
    bits = bytearray([1]) * 1303
    assert len(pack_to_chars(bits)) == math.ceil(1303 / 4)


def _labelled_stream(width: int, height: int) -> str:
    row_chars = math.ceil(width / 4)
    return "".join(chr(ord("a") + (i % 16)) for i in range(row_chars * height))


def test_reorder_small_grid_block_order() -> None:
    # 8 px wide -> 2 chars per row; split 1/1; 4 rows -> 2 per half.
    stream = "ABCDEFGH"  # rows: AB CD EF GH

    frame = reorder_for_device(stream, width=8, height=4, left_chars=1)

    assert frame == "ACBDEGFH"
    assert restore_from_device_order(frame, width=8, height=4, left_chars=1) == stream


def test_reorder_full_panel_is_a_permutation_with_exact_inverse() -> None:
    stream = "".join(chr(0x100 + (i % 5000)) for i in range(PACKED_ROW_CHARS * PANEL_HEIGHT))

    frame = reorder_for_device(stream)

    assert len(frame) == len(stream) == 320784
    assert sorted(frame) == sorted(stream)
    assert frame[:162] == stream[:162]
    assert frame[162:324] == stream[326:326 + 162]
    assert restore_from_device_order(frame) == stream


def test_reorder_rejects_wrong_length() -> None:
    with pytest.raises(FrameGeometryError):
        reorder_for_device("a" * (PACKED_ROW_CHARS * PANEL_HEIGHT - 1))


def test_reorder_handles_odd_heights() -> None:
    stream = _labelled_stream(12, 5)

    frame = reorder_for_device(stream, width=12, height=5, left_chars=2)

    assert restore_from_device_order(frame, width=12, height=5, left_chars=2) == stream


def test_chunk_stream_reassembles_and_respects_limit() -> None:
    stream = "abcdefghijklmnop" * 20049  # 320784 chars

    chunks = chunk_stream(stream)

    assert "".join(chunks) == stream
    assert all(len(chunk) <= MAX_CHUNK_SIZE for chunk in chunks)
    assert len(chunks) == math.ceil(len(stream) / MAX_CHUNK_SIZE) == 11


def test_chunk_stream_edge_cases() -> None:
    assert chunk_stream("") == []
    assert chunk_stream("abcde", 2) == ["ab", "cd", "e"]
    with pytest.raises(ValueError):
        chunk_stream("abc", 0)
    with pytest.raises(ValueError):
        chunk_stream("abc", MAX_CHUNK_SIZE + 1)
