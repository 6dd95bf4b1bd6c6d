"""Transport strategy selection for video assets.

Policy: assets below the inline threshold are embedded in the request as
base64. Larger assets are staged through the file service; if staging fails on
transport, assets below the fallback ceiling are embedded instead. Assets at or
above the absolute ceiling are rejected before any network call.
"""

from __future__ import annotations

import asyncio
import base64
import logging

from sentinelvid.errors import EmptyAssetError, FileTooLargeError, UnsupportedMediaTypeError
from sentinelvid.models.asset import EmbeddedPayload, VideoAsset
from sentinelvid.models.config import TransportConfig, embedded_request_size
from sentinelvid.models.enums import TransportStrategy

logger = logging.getLogger(__name__)

__all__ = [
    "build_embedded_payload",
    "can_fall_back",
    "embedded_request_size",
    "format_size",
    "is_supported_video_type",
    "select_strategy",
    "validate_asset",
]

_SIZE_UNITS = ("bytes", "KB", "MB", "GB", "TB")


def format_size(size: int) -> str:
    """Render a byte count in binary units, e.g. 20971520 -> '20.0 MB'."""
    value = float(size)
    for unit in _SIZE_UNITS:
        if value < 1024 or unit == _SIZE_UNITS[-1]:
            if unit == "bytes":
                return f"{int(value)} bytes"
            return f"{value:.1f} {unit}"
        value /= 1024
    raise AssertionError("unreachable")


def is_supported_video_type(mime_type: str, config: TransportConfig) -> bool:
    normalized = mime_type.split(";", 1)[0].strip().lower()
    if normalized in config.supported_mime_types:
        return True
    return config.allow_any_video_type and normalized.startswith("video/")


def validate_asset(asset: VideoAsset, config: TransportConfig) -> None:
    """Reject assets that can never be analyzed.

    Raises:
        UnsupportedMediaTypeError: media type is not a recognized video type
        EmptyAssetError: asset has no data
        FileTooLargeError: asset is at or above the absolute size ceiling
    """
    if not is_supported_video_type(asset.mime_type, config):
        raise UnsupportedMediaTypeError(asset.mime_type)
    if asset.size <= 0:
        raise EmptyAssetError(asset.name)
    if asset.size >= config.max_file_bytes:
        raise FileTooLargeError(
            size=asset.size,
            limit=config.max_file_bytes,
            size_text=format_size(asset.size),
            limit_text=format_size(config.max_file_bytes),
        )


def select_strategy(size: int, config: TransportConfig) -> TransportStrategy:
    """Pick the transport for an asset of `size` bytes."""
    if size < config.inline_threshold_bytes:
        return TransportStrategy.EMBEDDED
    return TransportStrategy.STAGED


def can_fall_back(size: int, config: TransportConfig) -> bool:
    """Whether a failed staged upload of `size` bytes may be retried embedded."""
    return size < config.fallback_ceiling_bytes


async def build_embedded_payload(asset: VideoAsset) -> EmbeddedPayload:
    """Read and base64-encode the asset off the event loop."""
    data = await asset.read_bytes()
    encoded = await asyncio.to_thread(base64.b64encode, data)
    logger.debug(
        "Encoded %s inline: raw=%d encoded=%d",
        asset.name,
        len(data),
        embedded_request_size(len(data)),
    )
    return EmbeddedPayload(data_b64=encoded.decode("ascii"), mime_type=asset.mime_type)
