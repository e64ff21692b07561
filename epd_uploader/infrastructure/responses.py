from __future__ import annotations

import io

from flask import send_file
from PIL import Image


def send_png(img: Image.Image):
    buffer = io.BytesIO()
    img.save(buffer, "PNG", optimize=True)
    buffer.seek(0)
    return send_file(buffer, mimetype="image/png")
