"""Configuration loading and saving (TOML)."""

from __future__ import annotations

import logging
import sys
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import tomli_w

from polyscribe.constants import (
    AZURE_AUTO_DETECT_LANGUAGES,
    AZURE_DEFAULT_LANGUAGE,
    CONFIG_FILE,
    DEFAULT_BACKEND,
    DEFAULT_TIMESTAMP_FORMAT,
    SWIFTINK_MAX_TRIES,
    SWIFTINK_POLL_INTERVAL,
    WHISPER_ASR_DEFAULT_LANGUAGE,
    WHISPER_ASR_DEFAULT_URL,
    WHISPER_ASR_REQUEST_TIMEOUT,
)

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)


@dataclass
class TranscriptionConfig:
    """Backend selection and options applied to every request."""

    backend: str = DEFAULT_BACKEND  # "swiftink" | "whisper_asr" | "azure_speech_service"
    translate: bool = False
    timestamps: bool = False
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT  # strftime pattern


@dataclass
class WhisperASRConfig:
    """Whisper ASR webservice configuration."""

    url: str = WHISPER_ASR_DEFAULT_URL
    language: str = WHISPER_ASR_DEFAULT_LANGUAGE  # "auto" lets the service detect
    request_timeout: float = WHISPER_ASR_REQUEST_TIMEOUT


@dataclass
class SwiftinkConfig:
    """Swiftink job API configuration."""

    token: str = ""
    dev: bool = False
    poll_interval: float = SWIFTINK_POLL_INTERVAL
    max_tries: int = SWIFTINK_MAX_TRIES


@dataclass
class AzureConfig:
    """Azure Speech configuration."""

    key: str = ""
    region: str = ""
    language: str = AZURE_DEFAULT_LANGUAGE  # e.g. "en-US", or "auto"
    auto_detect_languages: list[str] = field(
        default_factory=lambda: list(AZURE_AUTO_DETECT_LANGUAGES)
    )
    mono: bool = True


@dataclass
class AppConfig:
    """Root application configuration."""

    transcription: TranscriptionConfig = field(default_factory=TranscriptionConfig)
    whisper_asr: WhisperASRConfig = field(default_factory=WhisperASRConfig)
    swiftink: SwiftinkConfig = field(default_factory=SwiftinkConfig)
    azure: AzureConfig = field(default_factory=AzureConfig)
    debug: bool = False
    verbosity: int = 1  # 0 = silent, 1 = progress messages

    @classmethod
    def load(cls, path: Path | None = None) -> AppConfig:
        """Load config from TOML file, falling back to defaults."""
        config_path = path or CONFIG_FILE
        config = cls()

        if not config_path.exists():
            logger.info("No config file found at %s, using defaults", config_path)
            return config

        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
            config = _merge_config(config, data)
            logger.info("Loaded config from %s", config_path)
        except Exception:
            logger.exception("Failed to load config from %s, using defaults", config_path)

        return config

    def save(self, path: Path | None = None) -> None:
        """Save config to TOML file."""
        config_path = path or CONFIG_FILE
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "wb") as f:
            tomli_w.dump(asdict(self), f)
        logger.info("Saved config to %s", config_path)


_SECTIONS = ("transcription", "whisper_asr", "swiftink", "azure")
_SCALARS = ("debug", "verbosity")


def _merge_config(config: AppConfig, data: dict[str, Any]) -> AppConfig:
    """Merge a TOML dict into an AppConfig, preserving defaults for missing keys."""
    for name in _SECTIONS:
        section = data.get(name)
        if not isinstance(section, dict):
            continue
        target = getattr(config, name)
        known = {f.name for f in fields(target)}
        for key, val in section.items():
            if key in known:
                setattr(target, key, val)
            else:
                logger.debug("Ignoring unknown config key %s.%s", name, key)

    for key in _SCALARS:
        if key in data:
            setattr(config, key, data[key])

    return config
