"""Azure Speech backend (continuous recognition over the Speech SDK)."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from polyscribe.audio.convert import FFmpegAudioConverter, WavInfo, read_wav
from polyscribe.backends.base import BackendKind, TranscriptionBackend, TranscriptionOptions
from polyscribe.constants import AZURE_AUTO_DETECT_LANGUAGES, AZURE_DEFAULT_LANGUAGE
from polyscribe.errors import StreamingError, TranscriptionFailed
from polyscribe.storage import FileStorage

logger = logging.getLogger(__name__)


class StreamingSession:
    """Accumulates recognized fragments and resolves exactly once.

    The public event methods may be called from any thread (the SDK fires
    callbacks on its own threads); they hand the event to the event loop,
    which is the only writer of the session state.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()
        self._fragments: list[str] = []
        self._result: asyncio.Future[str] = self._loop.create_future()

    @property
    def text(self) -> str:
        return " ".join(self._fragments).strip()

    @property
    def done(self) -> bool:
        return self._result.done()

    def recognized(self, text: str) -> None:
        self._post(self._append, text)

    def no_match(self) -> None:
        self._post(self._resolve)

    def stopped(self) -> None:
        self._post(self._resolve)

    def failed(self, error: BaseException) -> None:
        self._post(self._reject, error)

    async def wait(self) -> str:
        return await self._result

    def _post(self, callback: Callable[..., None], *args: Any) -> None:
        if self._loop.is_closed():
            logger.debug("Dropping streaming event after the loop closed")
            return
        self._loop.call_soon_threadsafe(callback, *args)

    def _append(self, text: str) -> None:
        if self._result.done():
            return
        logger.debug("Recognized: %s", text)
        self._fragments.append(text)

    def _resolve(self) -> None:
        if not self._result.done():
            self._result.set_result(self.text)

    def _reject(self, error: BaseException) -> None:
        if not self._result.done():
            self._result.set_exception(error)


class AzureSpeechBackend(TranscriptionBackend):
    """Backend using Azure Speech continuous recognition.

    The input is transcoded to 16 kHz PCM WAV with ffmpeg and pushed into an
    SDK push stream. The session ends on the first "no match" result or
    "session stopped" event; an error cancellation fails it.
    """

    name = BackendKind.AZURE_SPEECH.value

    def __init__(
        self,
        key: str,
        region: str,
        storage: FileStorage,
        converter: FFmpegAudioConverter,
        options: TranscriptionOptions | None = None,
        language: str = AZURE_DEFAULT_LANGUAGE,
        auto_detect_languages: list[str] | None = None,
        mono: bool = True,
    ) -> None:
        self._key = key
        self._region = region
        self._storage = storage
        self._converter = converter
        self._options = options or TranscriptionOptions()
        self._language = self._options.language or language
        self._auto_detect_languages = auto_detect_languages or list(AZURE_AUTO_DETECT_LANGUAGES)
        self._mono = mono

    async def transcribe(self, audio_file: Path) -> str:
        sdk = self._load_sdk()

        audio_bytes = await self._storage.read_binary(audio_file)
        wav = read_wav(await self._converter.convert(audio_bytes, mono=self._mono))
        logger.info(
            "Streaming %.1fs of audio to Azure Speech (language=%s)",
            wav.duration,
            self._language,
        )

        session = StreamingSession()
        try:
            recognizer = self._create_recognizer(sdk, wav)
            self._connect(sdk, recognizer, session)
        except (ValueError, RuntimeError) as exc:
            logger.error("Could not set up Azure Speech recognizer: %s", exc)
            raise TranscriptionFailed(f"Could not set up Azure Speech recognizer: {exc}") from exc

        try:
            try:
                await asyncio.to_thread(lambda: recognizer.start_continuous_recognition_async().get())
            except RuntimeError as exc:
                raise StreamingError(f"Could not start recognition: {exc}") from exc
            return await session.wait()
        finally:
            await asyncio.to_thread(lambda: recognizer.stop_continuous_recognition_async().get())
            logger.debug("Azure Speech recognition stopped")

    @staticmethod
    def _load_sdk() -> Any:
        try:
            import azure.cognitiveservices.speech as speechsdk
        except ImportError as exc:
            raise TranscriptionFailed(
                "Azure Speech requires the Speech SDK: pip install 'polyscribe[azure]'"
            ) from exc
        return speechsdk

    def _create_recognizer(self, sdk: Any, wav: WavInfo) -> Any:
        speech_config = sdk.SpeechConfig(subscription=self._key, region=self._region)

        stream_format = sdk.audio.AudioStreamFormat(
            samples_per_second=wav.sample_rate,
            bits_per_sample=wav.sample_width * 8,
            channels=wav.channels,
        )
        stream = sdk.audio.PushAudioInputStream(stream_format=stream_format)
        stream.write(wav.frames)
        stream.close()
        audio_config = sdk.audio.AudioConfig(stream=stream)

        if self._language == "auto":
            auto_detect = sdk.languageconfig.AutoDetectSourceLanguageConfig(
                languages=self._auto_detect_languages
            )
            return sdk.SpeechRecognizer(
                speech_config=speech_config,
                auto_detect_source_language_config=auto_detect,
                audio_config=audio_config,
            )

        speech_config.speech_recognition_language = self._language
        return sdk.SpeechRecognizer(speech_config=speech_config, audio_config=audio_config)

    @staticmethod
    def _connect(sdk: Any, recognizer: Any, session: StreamingSession) -> None:
        def on_recognized(evt: Any) -> None:
            reason = evt.result.reason
            if reason == sdk.ResultReason.RecognizedSpeech:
                session.recognized(evt.result.text)
            elif reason == sdk.ResultReason.NoMatch:
                session.no_match()

        def on_canceled(evt: Any) -> None:
            if evt.reason == sdk.CancellationReason.Error:
                logger.error("Azure Speech cancelled: %s", evt.error_details)
                session.failed(StreamingError(evt.error_details, getattr(evt, "error_code", None)))

        def on_session_stopped(evt: Any) -> None:
            session.stopped()

        recognizer.recognized.connect(on_recognized)
        recognizer.canceled.connect(on_canceled)
        recognizer.session_stopped.connect(on_session_stopped)
