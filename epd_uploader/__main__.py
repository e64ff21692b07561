"""Command line entry point: run the HTTP service or push one image."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from .config import PANEL_MODELS, SETTINGS, configure_logging
from .processing.enhance import FIT_MODES


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="epd_uploader",
        description='Waveshare 12.48" e-paper uploader for the ESP32 web server',
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("serve", help="Run the Flask service")

    upload = commands.add_parser("upload", help="Rasterize an image file and upload it")
    upload.add_argument("--ip", default=SETTINGS.epd_ip, required=not SETTINGS.epd_ip,
                        help="Controller address (e.g. 192.168.7.149)")
    upload.add_argument("--input", required=True, help="Path to image file (png/jpg/etc.)")
    upload.add_argument("--model", default=SETTINGS.epd_model, choices=list(PANEL_MODELS),
                        help="Model string sent to /EPD and /SHOW")
    upload.add_argument("--fit", default=SETTINGS.fit, choices=FIT_MODES,
                        help="Resize strategy to 1304x984")
    upload.add_argument("--mode", type=int, default=SETTINGS.epd_mode, choices=[0, 1, 2, 3],
                        help="0: level mono, 1: level color, 2: dither mono, 3: dither color")
    upload.add_argument("--timeout", type=float, default=SETTINGS.timeout,
                        help="Per-request timeout in seconds")
    upload.add_argument("--presnap", action="store_true", default=SETTINGS.presnap,
                        help="Snap near-black/near-white pixels to the palette before quantizing")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger = configure_logging()

    if args.command == "serve":
        from .app import create_app

        create_app().run(host="0.0.0.0", port=SETTINGS.port, debug=False)
        return 0

    from .infrastructure.network import UploadError
    from .uploader import upload_image_file

    SETTINGS.timeout = args.timeout
    SETTINGS.presnap = args.presnap
    try:
        report = upload_image_file(args.input, model=args.model, mode=args.mode, fit=args.fit, host=args.ip)
    except (UploadError, ValueError, OSError) as exc:
        logger.error("Upload failed: %s", exc)
        return 1
    logger.info("Uploaded %d dark and %d accent chunks", report.dark_chunks, report.accent_chunks)
    return 0


if __name__ == "__main__":
    sys.exit(main())
