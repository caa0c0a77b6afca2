"""Shared test fixtures."""

from __future__ import annotations

import io
import wave
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import aiohttp
import numpy as np
import pytest

from polyscribe.config import AppConfig


@pytest.fixture
def config() -> AppConfig:
    """Default config for testing."""
    return AppConfig()


@pytest.fixture
def audio_file(tmp_path: Path) -> Path:
    """A small file standing in for a recording."""
    path = tmp_path / "memo.webm"
    path.write_bytes(b"fake-webm-audio")
    return path


def make_wav_bytes(duration: float = 1.0, sample_rate: int = 16000, channels: int = 1) -> bytes:
    """Generate WAV audio bytes with a simple sine wave."""
    num_samples = int(duration * sample_rate)
    t = np.linspace(0, duration, num_samples, dtype=np.float32)
    audio = 0.3 * np.sin(2 * np.pi * 440 * t)
    audio_int16 = (audio * 32767).astype(np.int16)
    if channels > 1:
        audio_int16 = np.repeat(audio_int16, channels)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(audio_int16.tobytes())

    return buf.getvalue()


class FakeResponse:
    """Stand-in for ``aiohttp.ClientResponse`` used as an async context manager."""

    def __init__(
        self,
        body: str = "",
        *,
        json_body: Any = None,
        content_type: str = "text/plain",
        status: int = 200,
    ) -> None:
        self._body = body
        self._json = json_body
        self.content_type = content_type
        self.status = status

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise aiohttp.ClientResponseError(
                request_info=MagicMock(),
                history=(),
                status=self.status,
                message="error",
            )

    async def text(self) -> str:
        return self._body

    async def json(self, content_type: str | None = "application/json") -> Any:
        if self._json is None:
            raise ValueError("not JSON")
        return self._json

    async def __aenter__(self) -> FakeResponse:
        return self

    async def __aexit__(self, *exc: object) -> bool:
        return False


def json_response(payload: Any, status: int = 200) -> FakeResponse:
    return FakeResponse(json_body=payload, content_type="application/json", status=status)


class FakeSession:
    """Replays queued responses and records every request made."""

    def __init__(self, responses: list[FakeResponse | Exception]) -> None:
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self._responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self.request("POST", url, **kwargs)

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self.request("GET", url, **kwargs)

    def methods(self) -> list[str]:
        return [call["method"] for call in self.calls]
