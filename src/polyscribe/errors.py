"""Exception hierarchy shared by the dispatcher and every backend."""

from __future__ import annotations


class TranscriptionError(Exception):
    """Base class for every error raised by polyscribe."""


class UnknownBackendError(TranscriptionError):
    """The configured backend name is not in the registry."""

    def __init__(self, name: str, valid: list[str]) -> None:
        self.name = name
        self.valid = valid
        super().__init__(
            f"Unknown transcription backend '{name}'. Options: {', '.join(valid)}"
        )


class TranscriptionFailed(TranscriptionError):
    """A backend could not produce a transcript."""


class TransportError(TranscriptionFailed):
    """The provider could not be reached or answered with an HTTP error.

    The underlying exception is available as ``__cause__``.
    """


class RemoteRejection(TranscriptionFailed):
    """The provider explicitly reported that the job did not succeed."""


class RemoteJobFailed(RemoteRejection):
    """The remote job ended in the ``failed`` state."""


class ValidationFailed(RemoteRejection):
    """The remote validator rejected the input file."""


class PollTimeout(TranscriptionFailed):
    """The job did not reach a terminal state within the poll budget."""

    def __init__(self, job_id: str, tries: int) -> None:
        self.job_id = job_id
        self.tries = tries
        super().__init__(
            f"Timed out waiting for remote completion of job {job_id} after {tries} polls"
        )


class StreamingError(TranscriptionFailed):
    """The streaming session was cancelled with an error."""

    def __init__(self, details: str, code: object = None) -> None:
        self.details = details
        self.code = code
        super().__init__(f"Streaming recognition cancelled: {details}")


class AudioConversionError(TranscriptionFailed):
    """The audio could not be converted to WAV."""
