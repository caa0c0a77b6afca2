"""Swiftink backend: create a remote job, then poll it until it finishes."""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import aiohttp

from polyscribe.backends.base import (
    BackendKind,
    TranscriptionBackend,
    TranscriptionOptions,
    client_session,
)
from polyscribe.constants import (
    STATUS_COMPLETE,
    STATUS_COMPLETE_MS,
    STATUS_UPLOADING,
    STATUS_UPLOADING_MS,
    SWIFTINK_API_BASE,
    SWIFTINK_DEV_API_BASE,
    SWIFTINK_MAX_TRIES,
    SWIFTINK_POLL_INTERVAL,
    SWIFTINK_REQUEST_TIMEOUT,
)
from polyscribe.errors import (
    PollTimeout,
    RemoteJobFailed,
    TranscriptionFailed,
    TransportError,
    ValidationFailed,
)
from polyscribe.formatting import TimestampedSegment, format_segments
from polyscribe.status import StatusReporter

logger = logging.getLogger(__name__)


class JobStatus(str, enum.Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETE = "complete"
    FAILED = "failed"
    VALIDATION_FAILED = "validation_failed"


@dataclass
class AsyncJob:
    """Snapshot of a remote transcription job.

    Segments stay in their raw payload form until they are needed, so a
    malformed segment only matters when timestamps are rendered.
    """

    id: str
    status: str
    text: str | None = None
    raw_segments: list[Any] | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> AsyncJob:
        if not isinstance(payload, dict):
            raise TranscriptionFailed(f"Unexpected job payload: {payload!r}")
        return cls(
            id=str(payload.get("id", "")),
            status=str(payload.get("status", "")),
            text=payload.get("text"),
            raw_segments=payload.get("text_segments"),
        )

    @property
    def is_complete(self) -> bool:
        # A "complete" job without its text or segments is still being written out
        return (
            self.status == JobStatus.COMPLETE
            and self.text is not None
            and self.raw_segments is not None
        )

    def segments(self) -> list[TimestampedSegment]:
        """Parse the job's segments, in server order."""
        try:
            return [TimestampedSegment.from_dict(s) for s in self.raw_segments or []]
        except (KeyError, TypeError, ValueError) as exc:
            raise TranscriptionFailed(f"Malformed segments in job {self.id}: {exc}") from exc


class SwiftinkBackend(TranscriptionBackend):
    """Backend for the Swiftink transcript API."""

    name = BackendKind.SWIFTINK.value

    def __init__(
        self,
        token: str,
        options: TranscriptionOptions | None = None,
        dev: bool = False,
        poll_interval: float = SWIFTINK_POLL_INTERVAL,
        max_tries: int = SWIFTINK_MAX_TRIES,
        status: StatusReporter | None = None,
        verbosity: int = 1,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._token = token
        self._options = options or TranscriptionOptions()
        self._api_base = SWIFTINK_DEV_API_BASE if dev else SWIFTINK_API_BASE
        self._poll_interval = poll_interval
        self._max_tries = max_tries
        self._status = status
        self._verbosity = verbosity
        self._session = session

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    async def transcribe(self, audio_file: Path) -> str:
        logger.info("Submitting %s to Swiftink", audio_file.name)
        async with client_session(self._session, SWIFTINK_REQUEST_TIMEOUT) as session:
            job_id = await self.submit(session)
            self._report(STATUS_UPLOADING, STATUS_UPLOADING_MS)
            job = await self.wait_for_completion(session, job_id)

        logger.info("Swiftink finished transcribing job %s", job_id)
        self._report(STATUS_COMPLETE, STATUS_COMPLETE_MS, is_final=True)

        if job.text is None:
            raise TranscriptionFailed(f"Swiftink job {job_id} completed without text")
        if self._options.timestamps:
            return format_segments(job.segments(), self._options.timestamp_format)
        return job.text

    async def submit(self, session: aiohttp.ClientSession) -> str:
        """Create the remote job and return its id."""
        url = f"{self._api_base}/transcripts/"
        payload = await self._request(
            session, "POST", url, json={"translate": self._options.translate}
        )
        logger.debug("Create transcript response: %s", payload)

        job_id = payload.get("id") if isinstance(payload, dict) else None
        if not job_id:
            raise TranscriptionFailed("Swiftink did not return a transcript id")
        logger.info("Created Swiftink job %s", job_id)
        return str(job_id)

    async def wait_for_completion(self, session: aiohttp.ClientSession, job_id: str) -> AsyncJob:
        """Poll the job until it completes, fails, or the try budget runs out."""
        url = f"{self._api_base}/transcripts/{job_id}"
        logger.debug("Waiting for Swiftink to finish transcribing...")

        for attempt in range(1, self._max_tries + 1):
            job = AsyncJob.from_payload(await self._request(session, "GET", url))
            logger.debug("Poll %d/%d: job %s is %s", attempt, self._max_tries, job_id, job.status)

            if job.is_complete:
                return job
            if job.status == JobStatus.FAILED:
                logger.error("Swiftink failed to transcribe job %s", job_id)
                raise RemoteJobFailed(f"Remote transcription failed (job {job_id})")
            if job.status == JobStatus.VALIDATION_FAILED:
                logger.error("Swiftink rejected the input file for job %s", job_id)
                raise ValidationFailed(f"Input file rejected by remote validator (job {job_id})")

            if attempt < self._max_tries:
                await asyncio.sleep(self._poll_interval)

        logger.error("Swiftink took too long to transcribe job %s", job_id)
        raise PollTimeout(job_id, self._max_tries)

    async def _request(
        self,
        session: aiohttp.ClientSession,
        method: str,
        url: str,
        json: dict[str, Any] | None = None,
    ) -> Any:
        try:
            async with session.request(method, url, headers=self._headers, json=json) as response:
                response.raise_for_status()
                return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error("Swiftink %s %s failed: %s", method, url, exc)
            raise TransportError(f"Swiftink {method} {url} failed: {exc}") from exc
        except ValueError as exc:
            raise TranscriptionFailed(f"Swiftink returned invalid JSON from {url}") from exc

    def _report(self, message: str, duration_ms: int, is_final: bool = False) -> None:
        if self._status is not None and self._verbosity >= 1:
            self._status.display(message, duration_ms, is_final)
