from __future__ import annotations

from typing import Dict, Sequence

from PIL import Image

from ..config import RGB, PanelModel
from .dither import quantize_dither_web
from .palette import QuantizeMode, coerce_mode, nearest_palette_index, palette_for_mode


def quantize_level(img: Image.Image, palette: Sequence[RGB]) -> Image.Image:
    src = img.convert("RGBA")
    # Flat quantization is stateless per pixel, so repeated colors share a lookup.
    lookup: Dict[bytes, bytes] = {}
    data = src.tobytes()
    out = bytearray(len(data))
    for offset in range(0, len(data), 4):
        rgb = data[offset:offset + 3]
        mapped = lookup.get(rgb)
        if mapped is None:
            mapped = bytes(palette[nearest_palette_index(rgb, palette)] + (255,))
            lookup[rgb] = mapped
        out[offset:offset + 4] = mapped

    return Image.frombytes("RGBA", src.size, bytes(out))


def quantize(img: Image.Image, model: PanelModel, mode: int | QuantizeMode) -> Image.Image:
    mode = coerce_mode(mode)
    palette = palette_for_mode(model, mode)
    if mode.is_dither:
        return quantize_dither_web(img, palette)
    return quantize_level(img, palette)
