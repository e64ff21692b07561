from __future__ import annotations

from typing import List, Sequence

from PIL import Image

from ..config import RGB
from .palette import nearest_palette_index


ErrorRow = List[List[float]]

# Weights are divided by 32, not by their sum, to match the controller's
# reference renderer.
KERNEL_DIVISOR = 32.0


def _new_error_row(width: int) -> ErrorRow:
    return [[0.0, 0.0, 0.0] for _ in range(width)]


def _add_error(acc: List[float], error: Sequence[float], weight: int) -> None:
    factor = weight / KERNEL_DIVISOR
    acc[0] += error[0] * factor
    acc[1] += error[1] * factor
    acc[2] += error[2] * factor


def quantize_dither_web(img: Image.Image, palette: Sequence[RGB]) -> Image.Image:
    """Error-diffusion quantization using the upload page's kernel.

    Two rolling error rows carry the residual forward: ``current`` for the
    row being scanned and ``below`` for the next one. Edge columns use their
    own weight sets (left 7/2/7, right 7/9) instead of clipping the interior
    3/5/1/7 kernel.
    """

    src = img.convert("RGBA")
    width, height = src.size
    src_pixels = src.load()
    out = Image.new("RGBA", (width, height))
    out_pixels = out.load()

    below = _new_error_row(width)
    for y in range(height):
        current, below = below, _new_error_row(width)

        for x in range(width):
            pr, pg, pb = src_pixels[x, y][:3]
            carried = current[x]
            r = pr + carried[0]
            g = pg + carried[1]
            b = pb + carried[2]

            chosen = palette[nearest_palette_index((r, g, b), palette)]
            out_pixels[x, y] = chosen + (255,)
            error = (r - chosen[0], g - chosen[1], b - chosen[2])

            if x == 0:
                _add_error(below[x], error, 7)
                if x + 1 < width:
                    _add_error(below[x + 1], error, 2)
                    _add_error(current[x + 1], error, 7)
            elif x == width - 1:
                _add_error(below[x - 1], error, 7)
                _add_error(below[x], error, 9)
            else:
                _add_error(below[x - 1], error, 3)
                _add_error(below[x], error, 5)
                _add_error(below[x + 1], error, 1)
                _add_error(current[x + 1], error, 7)

    return out
