"""Configuration models for the analysis pipeline."""

from __future__ import annotations

import math

from pydantic import BaseModel, Field, field_validator, model_validator

MIB = 1024 * 1024
GIB = 1024 * MIB

# Files API chunked uploads must send multiples of this size (except the last chunk).
UPLOAD_CHUNK_GRANULARITY = 256 * 1024

DEFAULT_VIDEO_MIME_TYPES = [
    "video/mp4",
    "video/mpeg",
    "video/mpg",
    "video/mov",
    "video/quicktime",
    "video/avi",
    "video/x-msvideo",
    "video/x-flv",
    "video/webm",
    "video/wmv",
    "video/x-ms-wmv",
    "video/3gpp",
]


def embedded_request_size(size: int) -> int:
    """Bytes occupied by `size` raw bytes once base64 encoded."""
    return 4 * math.ceil(size / 3)


class GeminiConfig(BaseModel):
    """Gemini REST API configuration."""

    model_config = {"extra": "forbid"}
    api_key_env: str = "GEMINI_API_KEY"
    model: str = "gemini-2.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com"
    api_version: str = "v1beta"
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    request_timeout: float = Field(default=300.0, gt=0.0)
    upload_timeout: float = Field(default=900.0, gt=0.0)

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class TransportConfig(BaseModel):
    """Size policy for choosing between embedded and staged transport.

    Files below `inline_threshold_bytes` are embedded. Larger files are staged
    through the file service; if staging fails on transport, files below
    `fallback_ceiling_bytes` are embedded instead. Files at or above
    `max_file_bytes` are rejected before any network call.

    Any `video/*` media type is accepted by default. Set `allow_any_video_type`
    to false to restrict uploads to `supported_mime_types`, the formats Gemini
    documents for video understanding.
    """

    model_config = {"extra": "forbid"}
    inline_threshold_bytes: int = Field(default=20 * MIB, gt=0)
    fallback_ceiling_bytes: int = Field(default=64 * MIB, gt=0)
    max_file_bytes: int = Field(default=2 * GIB, gt=0)
    request_ceiling_bytes: int = Field(default=100_000_000, gt=0)
    upload_chunk_bytes: int = Field(default=8 * MIB, gt=0)
    supported_mime_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_VIDEO_MIME_TYPES)
    )
    allow_any_video_type: bool = True

    @field_validator("supported_mime_types")
    @classmethod
    def _normalize_mime_types(cls, value: list[str]) -> list[str]:
        return [item.strip().lower() for item in value]

    @field_validator("upload_chunk_bytes")
    @classmethod
    def _validate_chunk_size(cls, value: int) -> int:
        if value % UPLOAD_CHUNK_GRANULARITY != 0:
            raise ValueError(
                f"upload_chunk_bytes must be a multiple of {UPLOAD_CHUNK_GRANULARITY}"
            )
        return value

    @model_validator(mode="after")
    def _validate_limits(self) -> TransportConfig:
        if not (
            self.inline_threshold_bytes <= self.fallback_ceiling_bytes <= self.max_file_bytes
        ):
            raise ValueError(
                "size limits must satisfy "
                "inline_threshold_bytes <= fallback_ceiling_bytes <= max_file_bytes"
            )
        if embedded_request_size(self.fallback_ceiling_bytes) >= self.request_ceiling_bytes:
            raise ValueError(
                "fallback_ceiling_bytes leaves no headroom under request_ceiling_bytes "
                "once base64 encoded"
            )
        return self


class PollingConfig(BaseModel):
    """Bounds for waiting on a staged upload to become active."""

    model_config = {"extra": "forbid"}
    initial_delay_s: float = Field(default=2.0, ge=0.0)
    interval_s: float = Field(default=3.0, ge=0.0)
    max_attempts: int = Field(default=200, ge=1)
    timeout_s: float = Field(default=600.0, gt=0.0)


class Config(BaseModel):
    """Root configuration."""

    model_config = {"extra": "forbid"}
    version: int = 1
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
