import logging
import math
import os
from dataclasses import dataclass
from typing import Dict, Optional, Tuple


RGB = Tuple[int, int, int]


@dataclass
class UploaderSettings:
    epd_ip: str
    epd_model: str
    epd_mode: int
    fit: str
    timeout: float
    chunk_size: int
    contrast: float
    brightness_offset: int
    presnap: bool
    port: int
    log_level: str

    @classmethod
    def from_env(cls) -> "UploaderSettings":
        return cls(
            epd_ip=os.getenv("EPD_IP", ""),
            epd_model=os.getenv("EPD_MODEL", "12.48inch e-Paper (B)"),
            epd_mode=int(os.getenv("EPD_MODE", "2")),
            fit=os.getenv("EPD_FIT", "contain").lower(),
            timeout=float(os.getenv("EPD_TIMEOUT", "10.0")),
            chunk_size=int(os.getenv("EPD_CHUNK_SIZE", str(MAX_CHUNK_SIZE))),
            contrast=float(os.getenv("CONTRAST", "1.10")),
            brightness_offset=int(os.getenv("BRIGHTNESS_OFFSET", "-12")),
            presnap=os.getenv("EPD_PRESNAP", "false").lower() in ("1", "true", "yes"),
            port=int(os.getenv("PORT", "5500")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


# Panel geometry of the 12.48" controller frame buffer.
PANEL_WIDTH = 1304
PANEL_HEIGHT = 984
PACKED_ROW_CHARS = math.ceil(PANEL_WIDTH / 4)  # 326
TOP_HALF_ROWS = PANEL_HEIGHT // 2  # 492
LEFT_SPLIT_CHARS = 162
RIGHT_SPLIT_CHARS = PACKED_ROW_CHARS - LEFT_SPLIT_CHARS  # 164
MAX_CHUNK_SIZE = 30000


BLACK: RGB = (0, 0, 0)
WHITE: RGB = (255, 255, 255)
RED_ACCENT: RGB = (255, 0, 0)
YELLOW_ACCENT: RGB = (220, 180, 0)

MONO_PALETTE: Tuple[RGB, ...] = (BLACK, WHITE)


@dataclass(frozen=True)
class PanelModel:
    name: str
    color: int
    accent: Optional[RGB]

    @property
    def is_color(self) -> bool:
        return self.color != 0

    @property
    def palette(self) -> Tuple[RGB, ...]:
        if self.accent is None:
            return MONO_PALETTE
        return MONO_PALETTE + (self.accent,)


PANEL_MODELS: Dict[str, PanelModel] = {
    model.name: model
    for model in (
        PanelModel("12.48inch e-Paper", 0, None),
        PanelModel("12.48inch e-Paper (B)", 1, RED_ACCENT),
        PanelModel("12.48inch e-Paper (C)", 2, YELLOW_ACCENT),
    )
}


class UnsupportedModelError(ValueError):
    pass


def resolve_model(name: str) -> PanelModel:
    try:
        return PANEL_MODELS[name]
    except KeyError:
        supported = ", ".join(PANEL_MODELS)
        raise UnsupportedModelError(f"Unsupported model: {name}. Use one of: {supported}") from None


SETTINGS = UploaderSettings.from_env()


def configure_logging() -> logging.Logger:
    logging.basicConfig(level=SETTINGS.log_level)
    return logging.getLogger("epd-uploader")
