"""Infrastructure helpers for talking to the controller and serving images."""

from .network import EpdClient, UploadError, UploadReport
from .responses import send_png

__all__ = [
    "EpdClient",
    "UploadError",
    "UploadReport",
    "send_png",
]
