"""Security analysis result models."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel

__all__ = ["AnalysisResult", "RawModelResponse", "SecurityEvent", "VideoMeta"]


class VideoMeta(BaseModel):
    """Footage-level metadata reported by the model."""

    model_config = {"extra": "forbid"}
    duration: str
    lighting: str


class SecurityEvent(BaseModel):
    """A single security-relevant event on the footage timeline.

    severity is expected to be 1, 3 or 5 and confidence to lie in [0, 1]; values
    are passed through as reported by the model.
    """

    model_config = {"extra": "forbid"}
    timestamp: str
    severity: int
    classification: str
    description: str
    confidence: float


class AnalysisResult(BaseModel):
    """Structured security report for one video."""

    model_config = {"extra": "forbid"}
    video_meta: VideoMeta
    events: list[SecurityEvent]
    summary: str


@dataclass(frozen=True)
class RawModelResponse:
    """Unparsed model output plus usage accounting."""

    text: str | None
    finish_reason: str | None = None
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
