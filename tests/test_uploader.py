import pytest
import requests
from PIL import Image

from epd_uploader.config import PANEL_HEIGHT, PANEL_MODELS, PANEL_WIDTH, UnsupportedModelError
from epd_uploader.infrastructure.network import EpdClient
from epd_uploader.processing.packing import FrameGeometryError
from epd_uploader.processing.pipeline import quantize
from epd_uploader.processing.planes import make_planes
from epd_uploader.uploader import build_device_frames, upload_image, upload_image_file

HALF = PANEL_WIDTH // 4 * PANEL_HEIGHT // 2
RED = PANEL_MODELS["12.48inch e-Paper (B)"]


def _client(session) -> EpdClient:
    return EpdClient("192.168.7.149", session_factory=lambda: session)


def _bodies(session, step: str) -> str:
    return "".join(body for url, body, _ in session.calls if url.endswith("/" + step))


def test_all_black_mono_panel_is_solid_dark_ink(fake_session) -> None:
    img = Image.new("RGBA", (PANEL_WIDTH, PANEL_HEIGHT), (0, 0, 0, 255))

    report = upload_image(img, model="12.48inch e-Paper", mode=0, client=_client(fake_session))

    assert fake_session.paths == ["EPD"] + ["LOADA"] * 11 + ["SHOW"]
    assert report.requests == 13
    dark = _bodies(fake_session, "LOADA")
    assert len(dark) == 320784
    assert set(dark) == {"a"}


def test_all_white_color_panel_has_no_ink(fake_session) -> None:
    img = Image.new("RGBA", (PANEL_WIDTH, PANEL_HEIGHT), (255, 255, 255, 255))

    report = upload_image(img, model="12.48inch e-Paper (B)", mode=1, client=_client(fake_session))

    assert fake_session.paths == ["EPD"] + ["LOADA"] * 11 + ["LOADB"] * 11 + ["SHOW"]
    assert report.requests == 24
    assert set(_bodies(fake_session, "LOADA")) == {"p"}
    assert set(_bodies(fake_session, "LOADB")) == {"p"}


def test_black_and_accent_halves_land_on_separate_planes() -> None:
    img = Image.new("RGBA", (PANEL_WIDTH, PANEL_HEIGHT), (255, 0, 0, 255))
    img.paste((0, 0, 0, 255), (0, 0, PANEL_WIDTH, PANEL_HEIGHT // 2))

    quantized = quantize(img, RED, 1)
    planes = make_planes(quantized, RED, 1)
    frames = build_device_frames(quantized, RED, 1)

    half_pixels = PANEL_WIDTH * PANEL_HEIGHT // 2
    assert set(planes.dark[:half_pixels]) == {0}
    assert set(planes.dark[half_pixels:]) == {1}
    assert set(planes.accent[:half_pixels]) == {1}
    assert set(planes.accent[half_pixels:]) == {0}
    # The top half is emitted first, so the halves survive the reorder intact.
    assert frames.dark == "a" * HALF + "p" * HALF
    assert frames.accent == "p" * HALF + "a" * HALF


def test_mono_model_has_no_accent_frame() -> None:
    img = Image.new("RGBA", (PANEL_WIDTH, PANEL_HEIGHT), (255, 255, 255, 255))
    model = PANEL_MODELS["12.48inch e-Paper"]

    frames = build_device_frames(quantize(img, model, 0), model, 0)

    assert frames.accent is None


def test_wrong_size_fails_before_any_request(fake_session) -> None:
    img = Image.new("RGBA", (800, 480), (255, 255, 255, 255))

    with pytest.raises(FrameGeometryError):
        upload_image(img, model="12.48inch e-Paper", mode=0, client=_client(fake_session))

    assert fake_session.calls == []


def test_unknown_model_fails_before_any_request(fake_session) -> None:
    img = Image.new("RGBA", (PANEL_WIDTH, PANEL_HEIGHT), (255, 255, 255, 255))

    with pytest.raises(UnsupportedModelError):
        upload_image(img, model="12.48inch e-Paper (Z)", mode=0, client=_client(fake_session))

    assert fake_session.calls == []


def test_upload_image_file_rasterizes_small_sources(tmp_path, fake_session) -> None:
    path = tmp_path / "board.png"
    Image.new("RGB", (160, 90), (0, 0, 0)).save(path)

    report = upload_image_file(
        path,
        model="12.48inch e-Paper",
        mode=0,
        fit="contain",
        client=_client(fake_session),
    )

    assert report.dark_chunks == 11
    dark = _bodies(fake_session, "LOADA")
    # Letterboxed: black content plus white bars.
    assert {"a", "p"} <= set(dark)


def test_upload_image_closes_the_session_it_opens(fake_session, monkeypatch) -> None:
    monkeypatch.setattr(requests, "Session", lambda: fake_session)
    img = Image.new("RGBA", (PANEL_WIDTH, PANEL_HEIGHT), (255, 255, 255, 255))

    upload_image(img, model="12.48inch e-Paper", mode=0, host="192.168.7.149")

    assert fake_session.paths[0] == "EPD"
    assert fake_session.closed
