"""Default values, paths, and version constants."""

from __future__ import annotations

import os
from pathlib import Path

# Version
VERSION = "0.1.0"
APP_NAME = "polyscribe"

# XDG directories
XDG_CONFIG_HOME = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))

# Configuration files
CONFIG_DIR = XDG_CONFIG_HOME / APP_NAME
CONFIG_FILE = CONFIG_DIR / "config.toml"

# Transcription defaults
DEFAULT_BACKEND = "swiftink"
DEFAULT_TIMESTAMP_FORMAT = "%H:%M:%S"

# Whisper ASR webservice
WHISPER_ASR_DEFAULT_URL = "http://localhost:9000"
WHISPER_ASR_DEFAULT_LANGUAGE = "en"
WHISPER_ASR_FIELD_NAME = "audio_file"
WHISPER_ASR_REQUEST_TIMEOUT = 600.0  # seconds, uploads can be long

# Swiftink job API
SWIFTINK_API_BASE = "https://api.swiftink.io"
SWIFTINK_DEV_API_BASE = "https://example.com"
SWIFTINK_POLL_INTERVAL = 3.0  # seconds between status checks
SWIFTINK_MAX_TRIES = 200  # ~10 minutes at the default interval
SWIFTINK_REQUEST_TIMEOUT = 60.0

# Azure Speech
AZURE_DEFAULT_LANGUAGE = "auto"
AZURE_AUTO_DETECT_LANGUAGES = ["en-US", "uk-UA"]
AZURE_SAMPLE_RATE = 16000

# Status messages
STATUS_UPLOADING = "Uploading..."
STATUS_UPLOADING_MS = 5000
STATUS_COMPLETE = "100% - Complete!"
STATUS_COMPLETE_MS = 3000
NOTIFY_TIMEOUT = 5.0

# Logging
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
