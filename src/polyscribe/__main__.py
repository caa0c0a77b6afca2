"""Entry point: python -m polyscribe"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from polyscribe import __version__
from polyscribe.constants import LOG_FORMAT

if TYPE_CHECKING:
    from polyscribe.backends.base import TranscriptionRequest
    from polyscribe.dispatcher import TranscriptionEngine


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich handler if available."""
    level = logging.DEBUG if verbose else logging.INFO

    try:
        from rich.console import Console
        from rich.logging import RichHandler

        logging.basicConfig(
            level=level,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        )
    except ImportError:
        logging.basicConfig(level=level, format=LOG_FORMAT)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="polyscribe",
        description="Transcribe an audio file through a cloud transcription backend",
    )
    parser.add_argument("audio_file", nargs="?", type=Path, help="Audio file to transcribe")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--version", action="version", version=f"polyscribe {__version__}"
    )
    parser.add_argument(
        "--config", type=str, default=None, help="Path to config file"
    )
    parser.add_argument(
        "--backend", type=str, default=None, help="Override the configured backend"
    )
    parser.add_argument(
        "--language", type=str, default=None, help='Language code, or "auto" to detect'
    )
    parser.add_argument(
        "--translate", action="store_true", help="Ask the backend to translate to English"
    )
    parser.add_argument(
        "--timestamps", action="store_true", help="Prefix each segment with its time range"
    )
    parser.add_argument(
        "--timestamp-format", type=str, default=None, help="strftime pattern for timestamps"
    )
    parser.add_argument(
        "--notify", action="store_true", help="Show progress as desktop notifications"
    )
    parser.add_argument(
        "--list-backends", action="store_true", help="List available backends and exit"
    )
    return parser.parse_args(argv)


def cmd_list_backends() -> None:
    """Print the available backends and exit."""
    from polyscribe.dispatcher import BACKENDS

    for kind in BACKENDS:
        print(f"  {kind.value}")


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)

    if args.list_backends:
        cmd_list_backends()
        return

    if args.audio_file is None:
        print("error: an audio file is required", file=sys.stderr)
        sys.exit(2)

    from polyscribe.config import AppConfig

    config = AppConfig.load(Path(args.config) if args.config else None)
    setup_logging(verbose=args.verbose or config.debug)
    logger = logging.getLogger("polyscribe")

    if args.backend:
        config.transcription.backend = args.backend

    from polyscribe.dispatcher import TranscriptionEngine
    from polyscribe.errors import TranscriptionError
    from polyscribe.status import ConsoleStatusReporter, NotificationStatusReporter

    status = NotificationStatusReporter() if args.notify else ConsoleStatusReporter()
    engine = TranscriptionEngine(config=config, status=status)

    options = dataclasses.replace(
        engine.default_options(),
        translate=args.translate or config.transcription.translate,
        timestamps=args.timestamps or config.transcription.timestamps,
        language=args.language,
    )
    if args.timestamp_format:
        options = dataclasses.replace(options, timestamp_format=args.timestamp_format)

    try:
        request = engine.build_request(args.audio_file, options)
        transcription = asyncio.run(_run(engine, request))
    except (TranscriptionError, OSError) as exc:
        logger.error("%s", exc)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
        sys.exit(130)

    print(transcription)


async def _run(engine: TranscriptionEngine, request: TranscriptionRequest) -> str:
    try:
        return await engine.transcribe(request)
    finally:
        if engine.status is not None:
            await engine.status.flush()


if __name__ == "__main__":
    main()
