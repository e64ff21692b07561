from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

import requests

from ..config import MAX_CHUNK_SIZE, SETTINGS, PanelModel
from ..processing.packing import FrameGeometryError, chunk_stream


SessionFactory = Callable[[], requests.Session]

LOGGER = logging.getLogger(__name__)

PROGRESS_EVERY = 10


class UploadError(RuntimeError):
    """A protocol step failed; the remaining steps were not sent."""

    def __init__(self, step: str, status: int | None, body: str = "", reason: str = "") -> None:
        self.step = step
        self.status = status
        self.body = body
        self.reason = reason
        detail = f"{status} {reason}".strip() if status is not None else reason
        message = f"POST /{step} -> {detail}"
        if body:
            message = f"{message}\n{body}"
        super().__init__(message)


@dataclass(frozen=True)
class UploadReport:
    model: str
    dark_chunks: int
    accent_chunks: int
    requests: int


def _base_url(host: str) -> str:
    host = host.strip()
    if not host:
        raise ValueError("No device address configured (set EPD_IP or pass --ip)")
    if "://" in host:
        return host.rstrip("/")
    return f"http://{host}"


class EpdClient:
    """Drives the controller's ``/EPD`` ``/LOADA`` ``/LOADB`` ``/SHOW`` sequence.

    Requests go out strictly one after another: the controller appends each
    chunk at its own internal offset, so order of arrival is the only
    addressing the protocol has.
    """

    def __init__(
        self,
        host: str,
        *,
        timeout: float | None = None,
        chunk_size: int | None = None,
        session_factory: SessionFactory | None = None,
    ) -> None:
        self._base_url = _base_url(host)
        self._timeout = SETTINGS.timeout if timeout is None else timeout
        self._chunk_size = chunk_size or SETTINGS.chunk_size or MAX_CHUNK_SIZE
        self._session_factory = session_factory or requests.Session
        self._session = self._create_session()

    @property
    def base_url(self) -> str:
        return self._base_url

    def _create_session(self) -> requests.Session:
        session = self._session_factory()
        session.headers.update({"User-Agent": "epd-uploader/1.0"})
        return session

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "EpdClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def post_text(self, step: str, body: str) -> None:
        url = f"{self._base_url}/{step}"
        try:
            response = self._session.post(
                url,
                data=body.encode("utf-8"),
                headers={"Content-Type": "text/plain"},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            LOGGER.error("POST /%s failed: %s", step, exc)
            raise UploadError(step, None, reason=str(exc)) from exc

        if not response.ok:
            LOGGER.error("POST /%s -> %s %s", step, response.status_code, response.reason)
            raise UploadError(step, response.status_code, response.text or "", response.reason or "")

    def _load(self, step: str, chunks: Sequence[str]) -> None:
        total = len(chunks)
        LOGGER.info("POST /%s x%d chunks", step, total)
        for index, chunk in enumerate(chunks, start=1):
            self.post_text(step, chunk)
            if index % PROGRESS_EVERY == 0 or index == total:
                LOGGER.info("    %d/%d", index, total)

    def upload_frames(
        self,
        model: PanelModel,
        dark_frame: str,
        accent_frame: str | None = None,
    ) -> UploadReport:
        if not dark_frame:
            raise FrameGeometryError("Dark plane frame is empty")
        if model.is_color and not accent_frame:
            raise FrameGeometryError(f"{model.name} needs an accent plane frame")

        dark_chunks = chunk_stream(dark_frame, self._chunk_size)
        accent_chunks = chunk_stream(accent_frame, self._chunk_size) if model.is_color else []

        LOGGER.info("HTTP to controller @ %s", self._base_url)
        LOGGER.info('POST /EPD "%s"', model.name)
        self.post_text("EPD", model.name)

        self._load("LOADA", dark_chunks)
        if model.is_color:
            self._load("LOADB", accent_chunks)

        LOGGER.info('POST /SHOW "%s"', model.name)
        self.post_text("SHOW", model.name)

        return UploadReport(
            model=model.name,
            dark_chunks=len(dark_chunks),
            accent_chunks=len(accent_chunks),
            requests=2 + len(dark_chunks) + len(accent_chunks),
        )
