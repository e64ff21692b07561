from __future__ import annotations

import io
import logging
from dataclasses import asdict, fields

from flask import Flask, jsonify, request
from PIL import Image

from .config import MAX_CHUNK_SIZE, SETTINGS, configure_logging, resolve_model
from .infrastructure.network import UploadError
from .infrastructure.responses import send_png
from .processing.enhance import FIT_MODES
from .processing.palette import coerce_mode
from .processing.pipeline import quantize
from .uploader import prepare_image, upload_image

APP_VERSION = "1.0.0"

LOGGER = logging.getLogger(__name__)


def _read_request_image() -> Image.Image:
    upload = request.files.get("image")
    data = upload.read() if upload is not None else request.get_data()
    if not data:
        raise ValueError("No image supplied (send the body or an 'image' form field)")
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except OSError as exc:
        raise ValueError(f"Unreadable image: {exc}") from exc
    return img


def _coerce_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).lower() in ("1", "true", "yes", "on")


def create_app() -> Flask:
    configure_logging()
    app = Flask(__name__)

    @app.route("/preview", methods=["POST"])
    def preview():
        try:
            model = request.args.get("model") or SETTINGS.epd_model
            mode = coerce_mode(request.args.get("mode", SETTINGS.epd_mode))
            prepared = prepare_image(_read_request_image(), model=model, fit=request.args.get("fit"))
            return send_png(quantize(prepared, resolve_model(model), mode))
        except ValueError as exc:
            return jsonify(ok=False, error=str(exc)), 400

    @app.route("/upload", methods=["POST"])
    def upload():
        try:
            model = request.args.get("model") or SETTINGS.epd_model
            mode = coerce_mode(request.args.get("mode", SETTINGS.epd_mode))
            prepared = prepare_image(_read_request_image(), model=model, fit=request.args.get("fit"))
            report = upload_image(prepared, model=model, mode=mode, host=request.args.get("ip"))
        except UploadError as exc:
            return (
                jsonify(ok=False, error=str(exc), step=exc.step, status=exc.status, body=exc.body),
                502,
            )
        except ValueError as exc:
            return jsonify(ok=False, error=str(exc)), 400
        return jsonify(ok=True, **asdict(report))

    @app.route("/health")
    def health():
        return jsonify(
            ok=True,
            version=APP_VERSION,
            model=SETTINGS.epd_model,
            mode=SETTINGS.epd_mode,
            epd_ip=SETTINGS.epd_ip,
        )

    @app.route("/settings", methods=["GET", "PATCH"])
    def settings_view():
        if request.method == "GET":
            return jsonify(asdict(SETTINGS))

        payload = request.get_json(silent=True) or {}
        errors: dict[str, str] = {}
        applied: dict[str, object] = {}

        for field in fields(SETTINGS):
            if field.name not in payload:
                continue

            raw_value = payload[field.name]
            try:
                if field.type in (int, "int"):
                    coerced = int(raw_value)
                elif field.type in (float, "float"):
                    coerced = float(raw_value)
                elif field.type in (bool, "bool"):
                    coerced = _coerce_bool(raw_value)
                else:
                    coerced = str(raw_value)
                if field.name == "epd_model":
                    resolve_model(coerced)
                elif field.name == "epd_mode":
                    coerced = int(coerce_mode(coerced))
                elif field.name == "fit":
                    coerced = coerced.lower()
                    if coerced not in FIT_MODES:
                        raise ValueError(f"Unsupported fit: {coerced!r}. Use one of: {', '.join(FIT_MODES)}")
                elif field.name == "chunk_size" and not 0 < coerced <= MAX_CHUNK_SIZE:
                    raise ValueError(f"Chunk size must be between 1 and {MAX_CHUNK_SIZE}")
            except (TypeError, ValueError) as exc:
                errors[field.name] = str(exc)
                continue

            setattr(SETTINGS, field.name, coerced)
            applied[field.name] = coerced

        if applied:
            LOGGER.info("Settings updated: %s", applied)
        status = 400 if errors else 200
        return (
            jsonify(updated=applied, errors=errors, settings=asdict(SETTINGS)),
            status,
        )

    return app


app = create_app()
application = app
