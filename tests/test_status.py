"""Tests for status reporters."""

from __future__ import annotations

import asyncio
import io
import subprocess
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from rich.console import Console

from polyscribe.status import ConsoleStatusReporter, NotificationStatusReporter


class TestConsoleStatusReporter:
    def test_prints_message(self) -> None:
        buf = io.StringIO()
        reporter = ConsoleStatusReporter(Console(file=buf, force_terminal=False))

        reporter.display("Uploading...", 5000)
        reporter.display("100% - Complete!", 3000, is_final=True)

        output = buf.getvalue()
        assert "Uploading..." in output
        assert "100% - Complete!" in output


class TestNotificationStatusReporter:
    def test_calls_notify_send(self) -> None:
        with patch("polyscribe.status.subprocess.run") as run:
            NotificationStatusReporter().display("Uploading...", 5000)

        cmd = run.call_args.args[0]
        assert cmd[0] == "notify-send"
        assert "5000" in cmd
        assert cmd[-1] == "Uploading..."

    def test_missing_notify_send_is_silent(self) -> None:
        with patch("polyscribe.status.subprocess.run", side_effect=FileNotFoundError):
            NotificationStatusReporter().display("hi", 1000)  # Should not raise

    def test_timeout_is_silent(self) -> None:
        with patch(
            "polyscribe.status.subprocess.run",
            side_effect=subprocess.TimeoutExpired("notify-send", 5),
        ):
            NotificationStatusReporter().display("hi", 1000, is_final=True)


class TestNotificationInEventLoop:
    @pytest.mark.asyncio
    async def test_display_does_not_block_loop(self) -> None:
        proc = MagicMock()
        proc.wait = AsyncMock(return_value=0)
        reporter = NotificationStatusReporter()

        with (
            patch("polyscribe.status.subprocess.run") as run,
            patch(
                "polyscribe.status.asyncio.create_subprocess_exec",
                new=AsyncMock(return_value=proc),
            ) as spawn,
        ):
            reporter.display("Uploading...", 5000)
            spawn.assert_not_called()
            await reporter.flush()

        run.assert_not_called()
        cmd = spawn.await_args.args
        assert cmd[0] == "notify-send"
        assert cmd[-1] == "Uploading..."
        proc.wait.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_notify_send_is_silent(self) -> None:
        reporter = NotificationStatusReporter()

        with patch(
            "polyscribe.status.asyncio.create_subprocess_exec",
            new=AsyncMock(side_effect=FileNotFoundError),
        ):
            reporter.display("hi", 1000)
            await reporter.flush()  # Should not raise

    @pytest.mark.asyncio
    async def test_hung_notify_send_is_killed(self) -> None:
        proc = MagicMock()
        proc.wait = AsyncMock(side_effect=asyncio.TimeoutError)
        reporter = NotificationStatusReporter(timeout=0.01)

        with patch(
            "polyscribe.status.asyncio.create_subprocess_exec",
            new=AsyncMock(return_value=proc),
        ):
            reporter.display("hi", 1000, is_final=True)
            await reporter.flush()

        proc.kill.assert_called_once()

    @pytest.mark.asyncio
    async def test_flush_without_messages(self) -> None:
        await NotificationStatusReporter().flush()
        await ConsoleStatusReporter(Console(file=io.StringIO())).flush()
