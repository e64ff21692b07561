"""Application package exports."""

from . import infrastructure, processing
from .uploader import DeviceFrames, build_device_frames, upload_image, upload_image_file

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "DeviceFrames",
    "build_device_frames",
    "infrastructure",
    "processing",
    "upload_image",
    "upload_image_file",
]
