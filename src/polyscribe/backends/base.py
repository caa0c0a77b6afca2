"""Abstract transcription backend interface."""

from __future__ import annotations

import abc
import contextlib
import enum
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from pathlib import Path

import aiohttp

from polyscribe.constants import DEFAULT_TIMESTAMP_FORMAT


class BackendKind(str, enum.Enum):
    """Identifiers of the available backends, as written in the config."""

    SWIFTINK = "swiftink"
    WHISPER_ASR = "whisper_asr"
    AZURE_SPEECH = "azure_speech_service"


@dataclass(frozen=True)
class TranscriptionOptions:
    """Per-request options shared by all backends."""

    translate: bool = False
    language: str | None = None  # None = backend default, "auto" = detect
    timestamps: bool = False
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT


@dataclass(frozen=True)
class TranscriptionRequest:
    """One transcription, fixed at dispatch time."""

    audio_file: Path
    backend: BackendKind
    options: TranscriptionOptions = field(default_factory=TranscriptionOptions)


class TranscriptionBackend(abc.ABC):
    """Abstract base class for transcription backends."""

    name: str = ""

    @abc.abstractmethod
    async def transcribe(self, audio_file: Path) -> str:
        """Transcribe an audio file to text.

        Args:
            audio_file: Path to the audio file.

        Returns:
            The transcript.

        Raises:
            TranscriptionFailed: or one of its subclasses on any failure.
        """
        ...


@contextlib.asynccontextmanager
async def client_session(
    session: aiohttp.ClientSession | None,
    timeout: float,
) -> AsyncIterator[aiohttp.ClientSession]:
    """Yield the injected session, or a fresh one closed on exit."""
    if session is not None:
        yield session
        return
    async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as owned:
        yield owned
