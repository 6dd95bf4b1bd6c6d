"""Gemini Files API uploader for staged transport."""

from __future__ import annotations

import asyncio
import logging
from contextlib import aclosing

import aiohttp

from sentinelvid.errors import MissingCredentialError, TransportError
from sentinelvid.gemini.http import build_headers, error_for_status
from sentinelvid.interfaces import AssetUploader
from sentinelvid.models.asset import RemoteAssetHandle, VideoAsset
from sentinelvid.models.config import GeminiConfig, TransportConfig
from sentinelvid.models.enums import RemoteAssetState

logger = logging.getLogger(__name__)

UPLOAD_URL_HEADER = "X-Goog-Upload-URL"


class GeminiFileUploader(AssetUploader):
    """Stages videos through the Gemini Files API.

    Uses the resumable upload protocol: one start request that returns an
    upload URL, then chunked upload commands with the final chunk finalizing
    the file.
    """

    def __init__(self, config: GeminiConfig, transport: TransportConfig) -> None:
        self.base_url = config.base_url
        self.api_version = config.api_version
        self.upload_timeout = float(config.upload_timeout)
        self.chunk_bytes = transport.upload_chunk_bytes

        self._session: aiohttp.ClientSession | None = None
        self._shutdown_called = False

        logger.info(
            "GeminiFileUploader initialized: chunk_bytes=%d, timeout=%.0fs",
            self.chunk_bytes,
            self.upload_timeout,
        )

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Lazy-create aiohttp session with timeout."""
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.upload_timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    def _ensure_open(self, credential: str) -> str:
        if not credential or not credential.strip():
            raise MissingCredentialError()
        if self._shutdown_called:
            raise RuntimeError("GeminiFileUploader has been shut down")
        return credential.strip()

    async def upload(self, asset: VideoAsset, credential: str) -> RemoteAssetHandle:
        """Upload the asset and return its remote handle (usually PROCESSING)."""
        credential = self._ensure_open(credential)
        session = await self._ensure_session()
        try:
            upload_url = await self._start_upload(session, asset, credential)
            file_info = await self._send_chunks(session, upload_url, asset, credential)
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as e:
            raise TransportError(f"File upload failed for {asset.name}: {e!r}", cause=e) from e
        except ValueError as e:
            raise TransportError(
                f"File upload for {asset.name} returned an undecodable response", cause=e
            ) from e
        return self._handle_from_response(file_info, operation="upload")

    async def get_status(self, handle: RemoteAssetHandle, credential: str) -> RemoteAssetHandle:
        credential = self._ensure_open(credential)
        session = await self._ensure_session()
        url = f"{self.base_url}/{self.api_version}/{handle.name}"
        try:
            async with session.get(url, headers=build_headers(credential)) as resp:
                if resp.status != 200:
                    error_text = await resp.text()
                    raise error_for_status(resp.status, error_text, "files.get")
                data = await resp.json()
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as e:
            raise TransportError(f"File status check failed for {handle.name}: {e!r}", cause=e) from e
        except ValueError as e:
            raise TransportError("Gemini files.get returned an invalid JSON envelope", cause=e) from e
        return self._handle_from_response(data, operation="files.get")

    async def _start_upload(
        self, session: aiohttp.ClientSession, asset: VideoAsset, credential: str
    ) -> str:
        url = f"{self.base_url}/upload/{self.api_version}/files"
        headers = {
            **build_headers(credential),
            "X-Goog-Upload-Protocol": "resumable",
            "X-Goog-Upload-Command": "start",
            "X-Goog-Upload-Header-Content-Length": str(asset.size),
            "X-Goog-Upload-Header-Content-Type": asset.mime_type,
        }
        body = {"file": {"display_name": asset.name}}
        async with session.post(url, json=body, headers=headers) as resp:
            if resp.status != 200:
                error_text = await resp.text()
                raise error_for_status(resp.status, error_text, "upload start")
            upload_url = resp.headers.get(UPLOAD_URL_HEADER)
        if not upload_url:
            raise TransportError("Gemini upload start response missing upload URL")
        return upload_url

    async def _send_chunks(
        self,
        session: aiohttp.ClientSession,
        upload_url: str,
        asset: VideoAsset,
        credential: str,
    ) -> object:
        offset = 0
        async with aclosing(asset.iter_chunks(self.chunk_bytes)) as chunks:
            async for chunk in chunks:
                chunk = chunk[: asset.size - offset]
                is_last = offset + len(chunk) >= asset.size
                command = "upload, finalize" if is_last else "upload"
                headers = {
                    **build_headers(credential),
                    "X-Goog-Upload-Offset": str(offset),
                    "X-Goog-Upload-Command": command,
                }
                async with session.post(upload_url, data=chunk, headers=headers) as resp:
                    if resp.status != 200:
                        error_text = await resp.text()
                        raise error_for_status(resp.status, error_text, "upload chunk")
                    if is_last:
                        try:
                            return await resp.json()
                        except ValueError as e:
                            raise TransportError(
                                "Gemini upload finalize returned an invalid JSON envelope",
                                cause=e,
                            ) from e
                offset += len(chunk)
                logger.debug("Uploaded %d/%d bytes of %s", offset, asset.size, asset.name)

        raise TransportError(
            f"{asset.name} ended after {offset} of {asset.size} declared bytes"
        )

    def _handle_from_response(self, data: object, *, operation: str) -> RemoteAssetHandle:
        """Build a handle from a File resource, optionally wrapped as {"file": {...}}."""
        if isinstance(data, dict) and isinstance(data.get("file"), dict):
            data = data["file"]
        if not isinstance(data, dict) or not isinstance(data.get("name"), str):
            raise TransportError(f"Gemini {operation} response is missing the file resource")

        error = data.get("error")
        error_message = error.get("message") if isinstance(error, dict) else None
        return RemoteAssetHandle(
            name=data["name"],
            uri=str(data.get("uri") or ""),
            mime_type=str(data.get("mimeType") or ""),
            state=str(data.get("state") or RemoteAssetState.STATE_UNSPECIFIED),
            error_message=error_message if isinstance(error_message, str) else None,
        )

    async def shutdown(self, timeout: float | None = None) -> None:
        """Cleanup resources - close HTTP session."""
        _ = timeout
        if self._shutdown_called:
            return

        self._shutdown_called = True
        logger.info("Shutting down GeminiFileUploader...")

        if self._session:
            await self._session.close()

        logger.info("GeminiFileUploader shutdown complete")
