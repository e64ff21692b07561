from __future__ import annotations

from enum import IntEnum
from typing import Sequence, Tuple

from PIL import Image

from ..config import BLACK, RGB, WHITE, PanelModel


class QuantizeMode(IntEnum):
    """Quantization modes offered by the controller's own upload page.

    Bit 1 selects error diffusion, bit 0 selects a color render.
    """

    LEVEL_MONO = 0
    LEVEL_COLOR = 1
    DITHER_MONO = 2
    DITHER_COLOR = 3

    @property
    def is_dither(self) -> bool:
        return bool(self & 0x02)

    @property
    def is_color(self) -> bool:
        return bool(self & 0x01)


def coerce_mode(value: int | str | QuantizeMode) -> QuantizeMode:
    try:
        return QuantizeMode(int(value))
    except (TypeError, ValueError):
        raise ValueError(f"Unsupported mode: {value!r}. Use 0, 1, 2 or 3") from None


def palette_for_mode(model: PanelModel, mode: int) -> Tuple[RGB, ...]:
    palette = model.palette
    if not QuantizeMode(mode).is_color:
        # Mono requests drop the accent ink even on tri-color panels.
        return palette[:2]
    return palette


def nearest_palette_index(rgb: Sequence[float], palette: Sequence[RGB]) -> int:
    best_index = 0
    best_distance = float("inf")
    r, g, b = rgb[0], rgb[1], rgb[2]
    for index, (R, G, B) in enumerate(palette):
        distance = (r - R) ** 2 + (g - G) ** 2 + (b - B) ** 2
        if distance < best_distance:
            best_distance = distance
            best_index = index
    return best_index


NEAR_BLACK = 24
NEAR_WHITE = 232


def snap_to_palette(img: Image.Image, accent: RGB | None) -> Image.Image:
    """Force palette purity on a rendered image.

    Mostly-transparent pixels become white and neutral grays at either end of
    the range snap straight to black or white so anti-aliased text stays
    sharp. Everything else goes to the nearest of black, white and ``accent``.
    """

    palette: Tuple[RGB, ...] = (BLACK, WHITE) if accent is None else (BLACK, WHITE, accent)
    src = img.convert("RGBA")
    cache: dict[bytes, bytes] = {}
    data = src.tobytes()
    out = bytearray(len(data))
    for offset in range(0, len(data), 4):
        pixel = data[offset:offset + 4]
        snapped = cache.get(pixel)
        if snapped is None:
            r, g, b, a = pixel
            if a < 128:
                color = WHITE
            elif r == g == b and r <= NEAR_BLACK:
                color = BLACK
            elif r == g == b and r >= NEAR_WHITE:
                color = WHITE
            else:
                color = palette[nearest_palette_index((r, g, b), palette)]
            snapped = bytes(color + (255,))
            cache[pixel] = snapped
        out[offset:offset + 4] = snapped

    return Image.frombytes("RGBA", src.size, bytes(out))
