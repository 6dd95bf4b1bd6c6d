"""Centralized enums for type safety and IDE support."""

from enum import StrEnum


class AnalysisPhase(StrEnum):
    """Progress phases of a single analysis invocation.

    Forward order: idle -> uploading -> analyzing -> complete.
    `error` is reachable from any non-terminal phase.
    """

    IDLE = "idle"
    UPLOADING = "uploading"
    ANALYZING = "analyzing"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (AnalysisPhase.COMPLETE, AnalysisPhase.ERROR)


class TransportStrategy(StrEnum):
    """How a video asset travels to the inference endpoint."""

    EMBEDDED = "embedded"
    STAGED = "staged"


class RemoteAssetState(StrEnum):
    """Lifecycle states reported by the remote file service."""

    STATE_UNSPECIFIED = "STATE_UNSPECIFIED"
    PROCESSING = "PROCESSING"
    ACTIVE = "ACTIVE"
    FAILED = "FAILED"
