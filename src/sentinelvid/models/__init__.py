"""Sentinelvid data models."""

from sentinelvid.models.analysis import AnalysisResult, RawModelResponse, SecurityEvent, VideoMeta
from sentinelvid.models.asset import (
    EmbeddedPayload,
    ReferencedPayload,
    RemoteAssetHandle,
    TransportPayload,
    VideoAsset,
)
from sentinelvid.models.config import Config, GeminiConfig, PollingConfig, TransportConfig
from sentinelvid.models.enums import AnalysisPhase, RemoteAssetState, TransportStrategy

__all__ = [
    "AnalysisPhase",
    "AnalysisResult",
    "Config",
    "EmbeddedPayload",
    "GeminiConfig",
    "PollingConfig",
    "RawModelResponse",
    "ReferencedPayload",
    "RemoteAssetHandle",
    "RemoteAssetState",
    "SecurityEvent",
    "TransportConfig",
    "TransportPayload",
    "TransportStrategy",
    "VideoAsset",
    "VideoMeta",
]
