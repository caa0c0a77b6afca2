"""Audio container conversion to PCM WAV through ffmpeg."""

from __future__ import annotations

import asyncio
import io
import logging
import shutil
import wave
from dataclasses import dataclass

from polyscribe.constants import AZURE_SAMPLE_RATE
from polyscribe.errors import AudioConversionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WavInfo:
    """Format and frames of a decoded WAV file."""

    channels: int
    sample_width: int
    sample_rate: int
    frames: bytes

    @property
    def duration(self) -> float:
        frame_size = self.channels * self.sample_width
        if not frame_size or not self.sample_rate:
            return 0.0
        return len(self.frames) / frame_size / self.sample_rate


def read_wav(data: bytes) -> WavInfo:
    """Decode WAV bytes into format parameters and raw PCM frames."""
    try:
        with wave.open(io.BytesIO(data), "rb") as wf:
            return WavInfo(
                channels=wf.getnchannels(),
                sample_width=wf.getsampwidth(),
                sample_rate=wf.getframerate(),
                frames=wf.readframes(wf.getnframes()),
            )
    except (wave.Error, EOFError) as exc:
        raise AudioConversionError(f"Invalid WAV data: {exc}") from exc


class FFmpegAudioConverter:
    """Transcodes any container ffmpeg understands into 16-bit PCM WAV."""

    def __init__(self, ffmpeg_path: str = "ffmpeg", sample_rate: int = AZURE_SAMPLE_RATE) -> None:
        self._ffmpeg_path = ffmpeg_path
        self._sample_rate = sample_rate

    def build_command(self, mono: bool) -> list[str]:
        cmd = [
            self._ffmpeg_path,
            "-hide_banner",
            "-loglevel", "error",
            "-i", "pipe:0",
            "-acodec", "pcm_s16le",
            "-ar", str(self._sample_rate),
        ]
        if mono:
            cmd += ["-ac", "1"]
        cmd += ["-f", "wav", "pipe:1"]
        return cmd

    async def convert(self, data: bytes, mono: bool = True) -> bytes:
        """Convert audio bytes to WAV bytes."""
        if shutil.which(self._ffmpeg_path) is None:
            raise AudioConversionError(f"ffmpeg not found: {self._ffmpeg_path}")

        cmd = self.build_command(mono)
        logger.debug("Converting %d bytes to WAV: %s", len(data), " ".join(cmd))
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await proc.communicate(data)

        if proc.returncode != 0:
            message = stderr.decode(errors="replace").strip()
            logger.error("ffmpeg failed (exit %d): %s", proc.returncode, message)
            raise AudioConversionError(f"ffmpeg exited with {proc.returncode}: {message}")

        logger.debug("Converted to %d bytes of WAV", len(stdout))
        return stdout
