"""Tests for WAV decoding and ffmpeg conversion."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import make_wav_bytes
from polyscribe.audio.convert import FFmpegAudioConverter, read_wav
from polyscribe.errors import AudioConversionError, TranscriptionFailed


class TestReadWav:
    def test_mono(self) -> None:
        info = read_wav(make_wav_bytes(duration=1.0, sample_rate=16000))
        assert info.channels == 1
        assert info.sample_width == 2
        assert info.sample_rate == 16000
        assert len(info.frames) == 16000 * 2
        assert info.duration == pytest.approx(1.0)

    def test_stereo(self) -> None:
        info = read_wav(make_wav_bytes(duration=0.5, sample_rate=8000, channels=2))
        assert info.channels == 2
        assert info.duration == pytest.approx(0.5)

    def test_invalid_data(self) -> None:
        with pytest.raises(AudioConversionError):
            read_wav(b"definitely not a wav file")


def fake_process(stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0) -> MagicMock:
    proc = MagicMock()
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    proc.returncode = returncode
    return proc


class TestFFmpegAudioConverter:
    def test_command_mono(self) -> None:
        cmd = FFmpegAudioConverter().build_command(mono=True)
        assert cmd[0] == "ffmpeg"
        assert cmd[cmd.index("-ac") + 1] == "1"
        assert cmd[cmd.index("-ar") + 1] == "16000"
        assert cmd[-3:] == ["-f", "wav", "pipe:1"]

    def test_command_keeps_channels(self) -> None:
        cmd = FFmpegAudioConverter().build_command(mono=False)
        assert "-ac" not in cmd

    @pytest.mark.asyncio
    async def test_missing_ffmpeg(self) -> None:
        with patch("polyscribe.audio.convert.shutil.which", return_value=None):
            with pytest.raises(AudioConversionError, match="ffmpeg not found"):
                await FFmpegAudioConverter().convert(b"audio")

    @pytest.mark.asyncio
    async def test_successful_conversion(self) -> None:
        wav = make_wav_bytes(duration=0.1)
        proc = fake_process(stdout=wav)

        with (
            patch("polyscribe.audio.convert.shutil.which", return_value="/usr/bin/ffmpeg"),
            patch(
                "polyscribe.audio.convert.asyncio.create_subprocess_exec",
                new=AsyncMock(return_value=proc),
            ) as exec_mock,
        ):
            result = await FFmpegAudioConverter().convert(b"webm-bytes", mono=True)

        assert result == wav
        proc.communicate.assert_awaited_once_with(b"webm-bytes")
        assert "-ac" in exec_mock.call_args.args

    @pytest.mark.asyncio
    async def test_ffmpeg_failure(self) -> None:
        proc = fake_process(stderr=b"Invalid data found", returncode=1)

        with (
            patch("polyscribe.audio.convert.shutil.which", return_value="/usr/bin/ffmpeg"),
            patch(
                "polyscribe.audio.convert.asyncio.create_subprocess_exec",
                new=AsyncMock(return_value=proc),
            ),
        ):
            with pytest.raises(AudioConversionError, match="Invalid data found") as excinfo:
                await FFmpegAudioConverter().convert(b"garbage")

        assert isinstance(excinfo.value, TranscriptionFailed)
