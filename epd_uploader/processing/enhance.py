from __future__ import annotations

from PIL import Image, ImageOps

from ..config import PANEL_HEIGHT, PANEL_WIDTH, SETTINGS, UploaderSettings


FIT_MODES = ("contain", "cover", "fill")


def flatten_on_white(img: Image.Image) -> Image.Image:
    rgba = img.convert("RGBA")
    background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
    return Image.alpha_composite(background, rgba).convert("RGB")


def apply_linear(img: Image.Image, contrast: float, offset: int) -> Image.Image:
    if abs(contrast - 1.0) < 1e-3 and offset == 0:
        return img
    lut = [min(255, max(0, int(round(value * contrast + offset)))) for value in range(256)]
    return img.point(lut * len(img.getbands()))


def fit_to_panel(img: Image.Image, fit: str) -> Image.Image:
    size = (PANEL_WIDTH, PANEL_HEIGHT)
    if fit == "fill":
        return img.resize(size, Image.Resampling.LANCZOS)
    if fit == "cover":
        return ImageOps.fit(img, size, Image.Resampling.LANCZOS)
    if fit == "contain":
        scaled = ImageOps.contain(img, size, Image.Resampling.LANCZOS)
        canvas = Image.new("RGB", size, (255, 255, 255))
        canvas.paste(scaled, ((size[0] - scaled.width) // 2, (size[1] - scaled.height) // 2))
        return canvas
    raise ValueError(f"Unsupported fit: {fit!r}. Use one of: {', '.join(FIT_MODES)}")


def rasterize(
    img: Image.Image,
    fit: str | None = None,
    settings: UploaderSettings = SETTINGS,
) -> Image.Image:
    """Bring an arbitrary image to an opaque panel-sized RGBA buffer.

    The contrast bump happens before resizing so letterbox bars stay pure
    white.
    """

    rgb = flatten_on_white(img)
    rgb = apply_linear(rgb, settings.contrast, settings.brightness_offset)
    rgb = fit_to_panel(rgb, (fit or settings.fit).lower())
    return rgb.convert("RGBA")
