"""Helpers for projecting an AnalysisResult onto video playback."""

from __future__ import annotations

import bisect
import math
from dataclasses import dataclass

from sentinelvid.models.analysis import AnalysisResult, SecurityEvent

# Minimum severity for each label, highest first.
SEVERITY_BANDS = ((5, "Critical"), (3, "Suspicious"))


def parse_timestamp(text: str) -> float | None:
    """Convert 'HH:MM:SS' or 'MM:SS' (seconds may be fractional) to seconds.

    Returns None when the text is not a timestamp.
    """
    parts = text.strip().split(":")
    if len(parts) not in (2, 3):
        return None
    try:
        values = [float(part) for part in parts]
    except ValueError:
        return None
    if any(not math.isfinite(value) or value < 0 for value in values):
        return None
    if len(values) == 3:
        hours, minutes, seconds = values
        return hours * 3600 + minutes * 60 + seconds
    minutes, seconds = values
    return minutes * 60 + seconds


def format_timestamp(seconds: float) -> str:
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def severity_label(severity: int) -> str:
    """Band a severity score: 5 and up Critical, 3 and up Suspicious, else Routine."""
    for floor, label in SEVERITY_BANDS:
        if severity >= floor:
            return label
    return "Routine"


@dataclass(frozen=True)
class TimelineEntry:
    """An event paired with its playback offset (None if unparseable)."""

    index: int
    event: SecurityEvent
    offset_s: float | None

    @property
    def label(self) -> str:
        return severity_label(self.event.severity)


def build_timeline(result: AnalysisResult) -> list[TimelineEntry]:
    """Entries in model output order."""
    return [
        TimelineEntry(index=idx, event=event, offset_s=parse_timestamp(event.timestamp))
        for idx, event in enumerate(result.events)
    ]


def active_entry(entries: list[TimelineEntry], position_s: float) -> TimelineEntry | None:
    """Entry that started most recently at or before `position_s`."""
    seekable = sorted(
        (entry for entry in entries if entry.offset_s is not None),
        key=lambda entry: (entry.offset_s, entry.index),
    )
    offsets = [entry.offset_s for entry in seekable]
    idx = bisect.bisect_right(offsets, position_s)
    if idx == 0:
        return None
    return seekable[idx - 1]
