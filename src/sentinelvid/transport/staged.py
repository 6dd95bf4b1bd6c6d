"""Staged upload and readiness polling."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Protocol

from sentinelvid.errors import ProcessingError, ProcessingTimeoutError
from sentinelvid.interfaces import AssetUploader
from sentinelvid.models.asset import ReferencedPayload, RemoteAssetHandle, VideoAsset
from sentinelvid.models.config import PollingConfig

logger = logging.getLogger(__name__)


class Clock(Protocol):
    def now(self) -> float: ...

    async def sleep(self, seconds: float) -> None: ...


class SystemClock:
    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class StagedUploadPoller:
    """Uploads an asset to the file service and waits until it is usable.

    Polling is sequential and bounded by both a status-check count and a
    wall-clock budget.
    """

    def __init__(
        self,
        uploader: AssetUploader,
        config: PollingConfig,
        clock: Clock | None = None,
    ) -> None:
        self._uploader = uploader
        self._config = config
        self._clock = clock or SystemClock()

    async def upload(self, asset: VideoAsset, credential: str) -> RemoteAssetHandle:
        logger.info("Uploading %s via file service (%d bytes)", asset.name, asset.size)
        handle = await self._uploader.upload(asset, credential)
        logger.info("Upload complete: name=%s state=%s", handle.name, handle.state)
        return handle

    async def await_ready(
        self, handle: RemoteAssetHandle, credential: str
    ) -> ReferencedPayload:
        """Poll until the remote file is ACTIVE.

        Raises:
            ProcessingTimeoutError: still processing after the polling bound
            ProcessingError: file reached any other terminal state
        """
        config = self._config
        started = self._clock.now()
        logger.info("Polling for file processing: %s", handle.name)

        await self._clock.sleep(config.initial_delay_s)
        current = await self._uploader.get_status(handle, credential)
        attempts = 1

        while current.is_processing:
            elapsed = self._clock.now() - started
            if attempts >= config.max_attempts or elapsed >= config.timeout_s:
                raise ProcessingTimeoutError(handle.name, attempts=attempts, elapsed_s=elapsed)
            logger.debug("File is processing: %s (check %d)", handle.name, attempts)
            await self._clock.sleep(config.interval_s)
            current = await self._uploader.get_status(handle, credential)
            attempts += 1

        if not current.is_active:
            message = f"File processing failed with state: {current.state}"
            if current.error_message:
                message = f"{message} ({current.error_message})"
            raise ProcessingError(message, state=current.state)

        logger.info("File is active and ready for analysis: %s", handle.name)
        return ReferencedPayload(
            uri=current.uri or handle.uri,
            mime_type=current.mime_type or handle.mime_type,
        )
