"""Backend selection and invocation."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from pathlib import Path
from types import MappingProxyType

from polyscribe.audio.convert import FFmpegAudioConverter
from polyscribe.backends.azure_speech import AzureSpeechBackend
from polyscribe.backends.base import (
    BackendKind,
    TranscriptionBackend,
    TranscriptionOptions,
    TranscriptionRequest,
)
from polyscribe.backends.swiftink import SwiftinkBackend
from polyscribe.backends.whisper_asr import WhisperASRBackend
from polyscribe.config import AppConfig
from polyscribe.errors import UnknownBackendError
from polyscribe.status import StatusReporter
from polyscribe.storage import FileStorage

logger = logging.getLogger(__name__)

BackendFactory = Callable[["TranscriptionEngine", TranscriptionOptions], TranscriptionBackend]


def _whisper_asr(engine: TranscriptionEngine, options: TranscriptionOptions) -> TranscriptionBackend:
    cfg = engine.config.whisper_asr
    return WhisperASRBackend(
        url=cfg.url,
        storage=engine.storage,
        options=options,
        language=cfg.language,
        request_timeout=cfg.request_timeout,
    )


def _swiftink(engine: TranscriptionEngine, options: TranscriptionOptions) -> TranscriptionBackend:
    cfg = engine.config.swiftink
    return SwiftinkBackend(
        token=cfg.token,
        options=options,
        dev=cfg.dev,
        poll_interval=cfg.poll_interval,
        max_tries=cfg.max_tries,
        status=engine.status,
        verbosity=engine.config.verbosity,
    )


def _azure_speech(engine: TranscriptionEngine, options: TranscriptionOptions) -> TranscriptionBackend:
    cfg = engine.config.azure
    return AzureSpeechBackend(
        key=cfg.key,
        region=cfg.region,
        storage=engine.storage,
        converter=engine.converter,
        options=options,
        language=cfg.language,
        auto_detect_languages=cfg.auto_detect_languages,
        mono=cfg.mono,
    )


BACKENDS: Mapping[BackendKind, BackendFactory] = MappingProxyType({
    BackendKind.SWIFTINK: _swiftink,
    BackendKind.WHISPER_ASR: _whisper_asr,
    BackendKind.AZURE_SPEECH: _azure_speech,
})


def resolve_backend(name: str | BackendKind) -> BackendKind:
    """Map a configured backend name to its kind."""
    try:
        return BackendKind(name)
    except ValueError:
        raise UnknownBackendError(str(name), [k.value for k in BACKENDS]) from None


class TranscriptionEngine:
    """Runs a transcription on the configured backend.

    Exactly one backend handles each request. Its errors reach the caller
    unchanged: there is no retry and no fallback to another backend.
    """

    def __init__(
        self,
        config: AppConfig,
        status: StatusReporter | None = None,
        storage: FileStorage | None = None,
        converter: FFmpegAudioConverter | None = None,
    ) -> None:
        self.config = config
        self.status = status
        self.storage = storage or FileStorage()
        self.converter = converter or FFmpegAudioConverter()

    def default_options(self) -> TranscriptionOptions:
        cfg = self.config.transcription
        return TranscriptionOptions(
            translate=cfg.translate,
            timestamps=cfg.timestamps,
            timestamp_format=cfg.timestamp_format,
        )

    def build_request(
        self,
        audio_file: Path,
        options: TranscriptionOptions | None = None,
    ) -> TranscriptionRequest:
        return TranscriptionRequest(
            audio_file=Path(audio_file),
            backend=resolve_backend(self.config.transcription.backend),
            options=options or self.default_options(),
        )

    async def get_transcription(self, audio_file: Path) -> str:
        """Transcribe a file with the configured backend and options."""
        return await self.transcribe(self.build_request(audio_file))

    async def transcribe(self, request: TranscriptionRequest) -> str:
        kind = resolve_backend(request.backend)
        factory = BACKENDS.get(kind)
        if factory is None:
            raise UnknownBackendError(kind.value, [k.value for k in BACKENDS])
        backend = factory(self, request.options)
        logger.debug("Transcription engine: %s", backend.name)

        start = time.monotonic()
        transcription = await backend.transcribe(request.audio_file)
        elapsed_ms = (time.monotonic() - start) * 1000

        logger.debug("Transcription: %s", transcription)
        logger.info("Transcription took %d ms (%s)", elapsed_ms, backend.name)
        return transcription
