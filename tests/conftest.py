from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import pytest


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "OK", reason: str = "OK") -> None:
        self.status_code = status_code
        self.text = text
        self.reason = reason

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400


class FakeSession:
    """Records POSTs; ``failures`` maps a 1-based request number to a response or exception."""

    def __init__(self, failures: Optional[Dict[int, object]] = None) -> None:
        self.headers: Dict[str, str] = {}
        self.calls: List[Tuple[str, str, float]] = []
        self.failures = failures or {}
        self.closed = False

    def post(self, url, data=None, headers=None, timeout=None):
        body = data.decode("utf-8") if isinstance(data, bytes) else data
        self.calls.append((url, body, timeout))
        outcome = self.failures.get(len(self.calls))
        if isinstance(outcome, Exception):
            raise outcome
        if outcome is not None:
            return outcome
        return FakeResponse()

    def close(self) -> None:
        self.closed = True

    @property
    def paths(self) -> List[str]:
        return [url.rsplit("/", 1)[-1] for url, _, _ in self.calls]


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


def pixels(img) -> List[Tuple[int, ...]]:
    data = img.convert("RGBA").tobytes()
    return [tuple(data[i:i + 4]) for i in range(0, len(data), 4)]
