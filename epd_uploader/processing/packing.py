from __future__ import annotations

import math
from typing import List, Sequence

from ..config import LEFT_SPLIT_CHARS, MAX_CHUNK_SIZE, PANEL_HEIGHT, PANEL_WIDTH


NIBBLE_BASE = ord("a")


class FrameGeometryError(ValueError):
    pass


def pack_to_chars(bits: Sequence[int]) -> str:
    """Pack plane bits four at a time into ``'a'``..``'p'``.

    The first bit of each group is the most significant. A trailing partial
    group is still emitted, with its missing low bits left at zero.
    """

    out: List[str] = []
    acc = 0
    filled = 0
    for bit in bits:
        acc |= (bit & 1) << (3 - filled)
        filled += 1
        if filled == 4:
            out.append(chr(NIBBLE_BASE + acc))
            acc = 0
            filled = 0
    if filled:
        out.append(chr(NIBBLE_BASE + acc))
    return "".join(out)


def _row_chars(width: int) -> int:
    return math.ceil(width / 4)


def _check_length(stream: str, row_chars: int, height: int) -> None:
    expected = row_chars * height
    if len(stream) != expected:
        raise FrameGeometryError(
            f"Unexpected message length {len(stream)}, expected {expected}"
        )


def reorder_for_device(
    stream: str,
    width: int = PANEL_WIDTH,
    height: int = PANEL_HEIGHT,
    left_chars: int = LEFT_SPLIT_CHARS,
) -> str:
    """Permute a packed plane into the controller's frame-buffer order.

    The grid is cut into a top and bottom half and each half into a left and
    right column block. Output order: top-left, top-right, bottom-left,
    bottom-right, every block listed row by row.
    """

    row_chars = _row_chars(width)
    _check_length(stream, row_chars, height)
    top_rows = height // 2

    parts: List[str] = []
    for rows in (range(0, top_rows), range(top_rows, height)):
        parts.extend(stream[i * row_chars:i * row_chars + left_chars] for i in rows)
        parts.extend(stream[i * row_chars + left_chars:(i + 1) * row_chars] for i in rows)
    return "".join(parts)


def restore_from_device_order(
    frame: str,
    width: int = PANEL_WIDTH,
    height: int = PANEL_HEIGHT,
    left_chars: int = LEFT_SPLIT_CHARS,
) -> str:
    row_chars = _row_chars(width)
    _check_length(frame, row_chars, height)
    right_chars = row_chars - left_chars
    top_rows = height // 2

    rows: List[str] = []
    offset = 0
    for count in (top_rows, height - top_rows):
        left_block = frame[offset:offset + count * left_chars]
        offset += count * left_chars
        right_block = frame[offset:offset + count * right_chars]
        offset += count * right_chars
        for i in range(count):
            rows.append(
                left_block[i * left_chars:(i + 1) * left_chars]
                + right_block[i * right_chars:(i + 1) * right_chars]
            )
    return "".join(rows)


def chunk_stream(stream: str, size: int = MAX_CHUNK_SIZE) -> List[str]:
    if not 0 < size <= MAX_CHUNK_SIZE:
        raise ValueError(f"Chunk size must be between 1 and {MAX_CHUNK_SIZE}, got {size}")
    return [stream[i:i + size] for i in range(0, len(stream), size)]
