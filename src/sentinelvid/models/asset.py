"""Video asset and transport payload models."""

from __future__ import annotations

import asyncio
import mimetypes
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from sentinelvid.errors import AssetReadError
from sentinelvid.models.enums import RemoteAssetState

__all__ = [
    "EmbeddedPayload",
    "ReferencedPayload",
    "RemoteAssetHandle",
    "TransportPayload",
    "VideoAsset",
]


@dataclass(frozen=True)
class VideoAsset:
    """Video selected for analysis.

    Backed either by in-memory bytes or by a file on disk. `size` is the
    declared size and is what size policy is applied to, so large files are
    rejected without being read.
    """

    name: str
    mime_type: str
    size: int
    source: bytes | Path = field(repr=False)

    @classmethod
    def from_path(cls, path: Path, mime_type: str | None = None) -> VideoAsset:
        """Describe a file on disk, guessing the media type from its extension."""
        if mime_type is None:
            guessed, _ = mimetypes.guess_type(path.name)
            mime_type = guessed or "application/octet-stream"
        return cls(
            name=path.name,
            mime_type=mime_type,
            size=path.stat().st_size,
            source=path,
        )

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str, name: str = "video") -> VideoAsset:
        return cls(name=name, mime_type=mime_type, size=len(data), source=data)

    async def read_bytes(self) -> bytes:
        """Return the full asset contents, reading from disk off the event loop.

        Raises:
            AssetReadError: the backing file is gone or unreadable
        """
        if isinstance(self.source, bytes):
            return self.source
        try:
            return await asyncio.to_thread(self.source.read_bytes)
        except OSError as e:
            raise AssetReadError(self.name, e) from e

    async def iter_chunks(self, chunk_size: int) -> AsyncIterator[bytes]:
        """Yield the asset contents in chunks of at most `chunk_size` bytes.

        Raises:
            AssetReadError: the backing file is gone or unreadable
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")

        if isinstance(self.source, bytes):
            for offset in range(0, len(self.source), chunk_size):
                yield self.source[offset : offset + chunk_size]
            return

        try:
            handle: BinaryIO = await asyncio.to_thread(self.source.open, "rb")
        except OSError as e:
            raise AssetReadError(self.name, e) from e
        try:
            while True:
                try:
                    chunk = await asyncio.to_thread(handle.read, chunk_size)
                except OSError as e:
                    raise AssetReadError(self.name, e) from e
                if not chunk:
                    return
                yield chunk
        finally:
            await asyncio.to_thread(handle.close)


@dataclass(frozen=True)
class EmbeddedPayload:
    """Video carried inline in the request body as base64 text."""

    data_b64: str = field(repr=False)
    mime_type: str


@dataclass(frozen=True)
class ReferencedPayload:
    """Video staged on the remote file service and referenced by URI."""

    uri: str
    mime_type: str


TransportPayload = EmbeddedPayload | ReferencedPayload


@dataclass(frozen=True)
class RemoteAssetHandle:
    """Remote file created by a staged upload.

    `state` keeps the raw remote value so unknown terminal states can be
    reported verbatim.
    """

    name: str
    uri: str
    mime_type: str
    state: str = RemoteAssetState.PROCESSING
    error_message: str | None = None

    @property
    def is_processing(self) -> bool:
        return self.state == RemoteAssetState.PROCESSING

    @property
    def is_active(self) -> bool:
        return self.state == RemoteAssetState.ACTIVE
