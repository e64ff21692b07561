"""Image processing pipeline components for the e-paper uploader."""

from .dither import quantize_dither_web
from .enhance import rasterize
from .packing import (
    FrameGeometryError,
    chunk_stream,
    pack_to_chars,
    reorder_for_device,
    restore_from_device_order,
)
from .palette import QuantizeMode, coerce_mode, nearest_palette_index, palette_for_mode, snap_to_palette
from .pipeline import quantize, quantize_level
from .planes import InkPlanes, make_planes

__all__ = [
    "quantize_dither_web",
    "rasterize",
    "FrameGeometryError",
    "chunk_stream",
    "pack_to_chars",
    "reorder_for_device",
    "restore_from_device_order",
    "QuantizeMode",
    "coerce_mode",
    "nearest_palette_index",
    "palette_for_mode",
    "snap_to_palette",
    "quantize",
    "quantize_level",
    "InkPlanes",
    "make_planes",
]
