"""Whisper ASR webservice backend (single multipart upload)."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import aiohttp

from polyscribe.backends.base import (
    BackendKind,
    TranscriptionBackend,
    TranscriptionOptions,
    client_session,
)
from polyscribe.constants import (
    WHISPER_ASR_DEFAULT_LANGUAGE,
    WHISPER_ASR_FIELD_NAME,
    WHISPER_ASR_REQUEST_TIMEOUT,
)
from polyscribe.encoding import encode_multipart
from polyscribe.errors import TranscriptionFailed, TransportError
from polyscribe.storage import FileStorage

logger = logging.getLogger(__name__)


class WhisperASRBackend(TranscriptionBackend):
    """Backend for a self-hosted whisper-asr-webservice.

    The service answers either with a plain text body or with a JSON object
    whose ``text`` field holds the transcript, depending on its output
    settings. Both are accepted.
    """

    name = BackendKind.WHISPER_ASR.value

    def __init__(
        self,
        url: str,
        storage: FileStorage,
        options: TranscriptionOptions | None = None,
        language: str = WHISPER_ASR_DEFAULT_LANGUAGE,
        request_timeout: float = WHISPER_ASR_REQUEST_TIMEOUT,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._url = url.rstrip("/")
        self._storage = storage
        self._options = options or TranscriptionOptions()
        self._language = language
        self._timeout = request_timeout
        self._session = session

    def build_params(self) -> dict[str, str]:
        params = {"task": "translate" if self._options.translate else "transcribe"}
        language = self._options.language or self._language
        if language and language != "auto":
            params["language"] = language
        return params

    async def transcribe(self, audio_file: Path) -> str:
        audio_bytes = await self._storage.read_binary(audio_file)
        body, boundary = encode_multipart({WHISPER_ASR_FIELD_NAME: audio_bytes})
        url = f"{self._url}/asr"
        params = self.build_params()

        logger.info("Uploading %d bytes to %s (%s)", len(audio_bytes), url, params)
        try:
            async with client_session(self._session, self._timeout) as session:
                async with session.post(
                    url,
                    params=params,
                    data=body,
                    headers={"Content-Type": f"multipart/form-data; boundary={boundary}"},
                ) as response:
                    response.raise_for_status()
                    text = await _extract_text(response)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error("Whisper ASR request failed: %s", exc)
            raise TransportError(f"Whisper ASR request to {url} failed: {exc}") from exc
        except ValueError as exc:
            raise TranscriptionFailed(f"Whisper ASR returned invalid JSON from {url}") from exc

        logger.debug("Whisper ASR returned %d chars", len(text))
        return text


async def _extract_text(response: aiohttp.ClientResponse) -> str:
    """Pull the transcript out of a raw text or JSON ``{text}`` response."""
    if response.content_type == "application/json":
        payload = await response.json()
        text = payload.get("text") if isinstance(payload, dict) else None
        if not isinstance(text, str):
            raise TranscriptionFailed("Whisper ASR JSON response has no 'text' field")
        return text
    return await response.text()
