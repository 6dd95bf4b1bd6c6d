"""Transport selection and staged upload."""

from sentinelvid.transport.staged import Clock, StagedUploadPoller, SystemClock
from sentinelvid.transport.strategy import (
    build_embedded_payload,
    can_fall_back,
    format_size,
    is_supported_video_type,
    select_strategy,
    validate_asset,
)

__all__ = [
    "Clock",
    "StagedUploadPoller",
    "SystemClock",
    "build_embedded_payload",
    "can_fall_back",
    "format_size",
    "is_supported_video_type",
    "select_strategy",
    "validate_asset",
]
