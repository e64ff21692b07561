from __future__ import annotations

import logging
from pathlib import Path
from typing import NamedTuple

from PIL import Image

from .config import PANEL_HEIGHT, PANEL_WIDTH, SETTINGS, PanelModel, UploaderSettings, resolve_model
from .infrastructure.network import EpdClient, UploadReport
from .processing.enhance import rasterize
from .processing.packing import FrameGeometryError, pack_to_chars, reorder_for_device
from .processing.palette import QuantizeMode, coerce_mode, snap_to_palette
from .processing.pipeline import quantize
from .processing.planes import make_planes


LOGGER = logging.getLogger(__name__)


class DeviceFrames(NamedTuple):
    dark: str
    accent: str | None


def check_geometry(img: Image.Image) -> None:
    if img.size != (PANEL_WIDTH, PANEL_HEIGHT):
        raise FrameGeometryError(
            f"Image is {img.width}x{img.height}, panel expects {PANEL_WIDTH}x{PANEL_HEIGHT}"
        )


def build_device_frames(quantized: Image.Image, model: PanelModel, mode: int | None = None) -> DeviceFrames:
    check_geometry(quantized)

    LOGGER.info("Building dark and accent planes")
    planes = make_planes(quantized, model, mode)

    LOGGER.info("Packing planes to 'a'..'p' nibbles")
    dark = reorder_for_device(pack_to_chars(planes.dark))
    accent = reorder_for_device(pack_to_chars(planes.accent)) if model.is_color else None
    return DeviceFrames(dark, accent)


def upload_image(
    img: Image.Image,
    *,
    model: str | None = None,
    mode: int | QuantizeMode | None = None,
    host: str | None = None,
    client: EpdClient | None = None,
    settings: UploaderSettings = SETTINGS,
) -> UploadReport:
    """Quantize a panel-sized RGBA image and push it to the controller.

    Size, model and mode are validated before any request is made. A
    transport failure raises ``UploadError`` and the caller has to start the
    whole sequence again.
    """

    panel = resolve_model(model or settings.epd_model)
    quantize_mode = coerce_mode(settings.epd_mode if mode is None else mode)
    check_geometry(img)

    LOGGER.info("Quantizing for %s, mode=%d", panel.name, int(quantize_mode))
    quantized = quantize(img, panel, quantize_mode)
    frames = build_device_frames(quantized, panel, quantize_mode)

    if client is None:
        with EpdClient(host or settings.epd_ip, timeout=settings.timeout, chunk_size=settings.chunk_size) as owned:
            report = owned.upload_frames(panel, frames.dark, frames.accent)
    else:
        report = client.upload_frames(panel, frames.dark, frames.accent)
    LOGGER.info("Done: %d requests", report.requests)
    return report


def prepare_image(
    img: Image.Image,
    *,
    model: str | None = None,
    fit: str | None = None,
    settings: UploaderSettings = SETTINGS,
) -> Image.Image:
    panel = resolve_model(model or settings.epd_model)
    prepared = rasterize(img, fit, settings=settings)
    if settings.presnap:
        prepared = snap_to_palette(prepared, panel.accent)
    return prepared


def upload_image_file(
    path: str | Path,
    *,
    model: str | None = None,
    mode: int | QuantizeMode | None = None,
    fit: str | None = None,
    host: str | None = None,
    client: EpdClient | None = None,
    settings: UploaderSettings = SETTINGS,
) -> UploadReport:
    image_path = Path(path).resolve()
    LOGGER.info("Rasterizing %s -> %dx%d, fit=%s", image_path, PANEL_WIDTH, PANEL_HEIGHT, fit or settings.fit)
    with Image.open(image_path) as source:
        prepared = prepare_image(source, model=model, fit=fit, settings=settings)
    return upload_image(prepared, model=model, mode=mode, host=host, client=client, settings=settings)
