"""Render timestamped transcript segments as readable text."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class TimestampedSegment:
    """A span of transcribed text; offsets are seconds from the start of the audio."""

    start: float
    end: float
    text: str

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(
                f"Segment starts after it ends ({self.start:.2f} > {self.end:.2f})"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TimestampedSegment:
        return cls(
            start=float(data["start"]),
            end=float(data["end"]),
            text=str(data["text"]),
        )


def format_offset(seconds: float, timestamp_format: str) -> str:
    """Format an offset as a UTC time of day anchored at the Unix epoch.

    ``format_offset(75.5, "%H:%M:%S")`` gives ``"00:01:15"``.
    """
    return datetime.fromtimestamp(seconds, tz=timezone.utc).strftime(timestamp_format)


def format_segments(segments: Iterable[TimestampedSegment], timestamp_format: str) -> str:
    """Render one ``"<start> - <end>: <text>"`` line per segment, in order."""
    lines: list[str] = []
    for segment in segments:
        start = format_offset(segment.start, timestamp_format)
        end = format_offset(segment.end, timestamp_format)
        lines.append(f"{start} - {end}: {segment.text}\n")
    return "".join(lines)
