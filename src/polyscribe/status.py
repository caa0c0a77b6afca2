"""Progress messages shown to the user while a transcription runs."""

from __future__ import annotations

import abc
import asyncio
import logging
import subprocess

from rich.console import Console

from polyscribe.constants import APP_NAME, NOTIFY_TIMEOUT

logger = logging.getLogger(__name__)


class StatusReporter(abc.ABC):
    """Fire-and-forget sink for progress messages.

    Implementations must never raise: a failing display must not affect
    the transcription.
    """

    @abc.abstractmethod
    def display(self, message: str, duration_ms: int, is_final: bool = False) -> None:
        """Show a message for roughly ``duration_ms`` milliseconds."""
        ...

    async def flush(self) -> None:
        """Wait for messages still being delivered."""


class ConsoleStatusReporter(StatusReporter):
    """Writes status lines to stderr so stdout stays clean for the transcript."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)

    def display(self, message: str, duration_ms: int, is_final: bool = False) -> None:
        style = "bold green" if is_final else "cyan"
        try:
            self._console.print(f"[{style}]{message}[/{style}]")
        except Exception:
            logger.debug("Failed to print status message", exc_info=True)


class NotificationStatusReporter(StatusReporter):
    """Desktop notifications via notify-send.

    Inside a running event loop the notify-send process is started as a
    background task, so ``display`` never blocks the loop. Call ``flush``
    before the loop shuts down to let queued notifications go out.
    """

    def __init__(self, timeout: float = NOTIFY_TIMEOUT) -> None:
        self._timeout = timeout
        self._pending: set[asyncio.Task[None]] = set()

    def display(self, message: str, duration_ms: int, is_final: bool = False) -> None:
        cmd = [
            "notify-send",
            "--app-name", APP_NAME,
            "--urgency", "normal" if is_final else "low",
            "--expire-time", str(duration_ms),
            APP_NAME,
            message,
        ]
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._notify_blocking(cmd)
            return

        task = loop.create_task(self._notify(cmd))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def flush(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending)

    async def _notify(self, cmd: list[str]) -> None:
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except FileNotFoundError:
            logger.debug("notify-send not found, skipping notification")
            return
        except Exception:
            logger.debug("Failed to send notification", exc_info=True)
            return

        try:
            await asyncio.wait_for(proc.wait(), timeout=self._timeout)
        except asyncio.TimeoutError:
            proc.kill()
            logger.debug("notify-send timed out")

    def _notify_blocking(self, cmd: list[str]) -> None:
        try:
            subprocess.run(cmd, capture_output=True, timeout=self._timeout)
        except FileNotFoundError:
            logger.debug("notify-send not found, skipping notification")
        except Exception:
            logger.debug("Failed to send notification", exc_info=True)
