from __future__ import annotations

from typing import NamedTuple

from PIL import Image

from ..config import PanelModel
from .palette import QuantizeMode


INK = 0
NO_INK = 1


class InkPlanes(NamedTuple):
    dark: bytearray
    accent: bytearray


def make_planes(img: Image.Image, model: PanelModel, mode: int | None = None) -> InkPlanes:
    """Split a quantized image into the dark and accent ink planes.

    Only exact black marks the dark plane and only the model's exact accent
    color marks the accent plane, so the planes never both carry ink for a
    pixel. Any other color, and fully transparent pixels, leave both planes
    without ink.
    """

    src = img.convert("RGBA")
    total = src.width * src.height
    dark = bytearray([NO_INK]) * total
    accent = bytearray([NO_INK]) * total

    wants_color = mode is None or QuantizeMode(mode).is_color
    accent_rgb = model.accent if model.is_color and wants_color else None

    data = src.tobytes()
    for index in range(total):
        r, g, b, a = data[index * 4:index * 4 + 4]
        if a == 0:
            continue
        if r == 0 and g == 0 and b == 0:
            dark[index] = INK
        elif accent_rgb is not None and (r, g, b) == accent_rgb:
            accent[index] = INK

    return InkPlanes(dark, accent)
