"""AnalysisPipeline orchestrator - core processing logic."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import TYPE_CHECKING

from sentinelvid.errors import (
    AnalysisError,
    AnalysisInProgressError,
    MissingCredentialError,
    PipelineShutdownError,
    TransportError,
)
from sentinelvid.inference.parser import parse_analysis
from sentinelvid.logging_setup import set_invocation_id
from sentinelvid.models.analysis import AnalysisResult
from sentinelvid.models.asset import TransportPayload, VideoAsset
from sentinelvid.models.config import Config
from sentinelvid.models.enums import AnalysisPhase, TransportStrategy
from sentinelvid.progress import ProgressCallback, ProgressReporter
from sentinelvid.transport.staged import Clock, StagedUploadPoller
from sentinelvid.transport.strategy import (
    build_embedded_payload,
    can_fall_back,
    format_size,
    select_strategy,
    validate_asset,
)

if TYPE_CHECKING:
    from sentinelvid.interfaces import AssetUploader, InferenceClient

logger = logging.getLogger(__name__)


class AnalysisPipeline:
    """Runs one video through transport selection, inference and parsing.

    Implements error-as-value pattern: run_analysis() returns an
    AnalysisResult or the AnalysisError that ended the invocation. At most one
    invocation is in flight; cancel() abandons it.
    """

    def __init__(
        self,
        config: Config,
        inference: InferenceClient,
        uploader: AssetUploader,
        clock: Clock | None = None,
    ) -> None:
        self._config = config
        self._inference = inference
        self._uploader = uploader
        self._poller = StagedUploadPoller(uploader, config.polling, clock=clock)
        self._active: asyncio.Task[object] | None = None
        self._shutdown_called = False

    @classmethod
    def from_config(cls, config: Config) -> AnalysisPipeline:
        """Build a pipeline wired to the Gemini REST adapters."""
        from sentinelvid.gemini import GeminiClient, GeminiFileUploader

        return cls(
            config,
            inference=GeminiClient(config.gemini),
            uploader=GeminiFileUploader(config.gemini, config.transport),
        )

    @property
    def is_running(self) -> bool:
        return self._active is not None

    def cancel(self) -> bool:
        """Cancel the in-flight invocation. Returns False if none is running."""
        if self._active is None:
            return False
        logger.info("Cancelling in-flight analysis")
        self._active.cancel()
        return True

    async def run_analysis(
        self,
        asset: VideoAsset,
        credential: str | None,
        on_progress: ProgressCallback | None = None,
    ) -> AnalysisResult | AnalysisError:
        """Analyze a video and return its security report or the failure.

        `on_progress` receives `analyzing` (embedded path) or `uploading` then
        `analyzing` (staged path). Cancellation of the calling task propagates
        as asyncio.CancelledError.
        """
        if self._shutdown_called:
            logger.warning("Rejected analysis of %s: pipeline is shut down", asset.name)
            return PipelineShutdownError()
        if self._active is not None:
            logger.warning("Rejected analysis of %s: another analysis is in flight", asset.name)
            return AnalysisInProgressError()

        reporter = ProgressReporter(on_progress)
        self._active = asyncio.current_task()
        set_invocation_id(uuid.uuid4().hex[:12])
        try:
            result = await self._analyze(asset, credential, reporter)
        except AnalysisError as err:
            reporter.fail()
            logger.warning(
                "Analysis failed for %s at stage %s: %s",
                asset.name,
                err.stage,
                err,
                exc_info=err.cause,
            )
            return err
        except asyncio.CancelledError:
            reporter.fail()
            logger.info("Analysis cancelled for %s", asset.name)
            raise
        finally:
            self._active = None
            set_invocation_id(None)

        reporter.complete()
        logger.info(
            "Analysis complete for %s: events=%d",
            asset.name,
            len(result.events),
        )
        return result

    async def _analyze(
        self,
        asset: VideoAsset,
        credential: str | None,
        reporter: ProgressReporter,
    ) -> AnalysisResult:
        """Run all stages. Raises AnalysisError subclasses on failure."""
        if not credential or not credential.strip():
            raise MissingCredentialError()
        credential = credential.strip()

        transport = self._config.transport
        validate_asset(asset, transport)

        strategy = select_strategy(asset.size, transport)
        logger.info(
            "Selected %s transport for %s (%s, %s)",
            strategy,
            asset.name,
            format_size(asset.size),
            asset.mime_type,
        )

        payload: TransportPayload
        match strategy:
            case TransportStrategy.EMBEDDED:
                reporter.advance(AnalysisPhase.ANALYZING)
                payload = await build_embedded_payload(asset)
            case TransportStrategy.STAGED:
                reporter.advance(AnalysisPhase.UPLOADING)
                payload = await self._staged_payload(asset, credential, reporter)
            case _:
                raise TypeError(f"Unexpected transport strategy: {strategy!r}")

        response = await self._inference.invoke(payload, credential)
        if response.finish_reason not in (None, "STOP"):
            logger.warning(
                "Model finished with reason %s for %s", response.finish_reason, asset.name
            )
        return parse_analysis(response.text)

    async def _staged_payload(
        self,
        asset: VideoAsset,
        credential: str,
        reporter: ProgressReporter,
    ) -> TransportPayload:
        """Stage the asset remotely, falling back to embedding on transport failure."""
        try:
            handle = await self._poller.upload(asset, credential)
            payload: TransportPayload = await self._poller.await_ready(handle, credential)
        except TransportError as err:
            if not can_fall_back(asset.size, self._config.transport):
                logger.error(
                    "Staged upload failed for %s and %s is above the embedding ceiling: %s",
                    asset.name,
                    format_size(asset.size),
                    err,
                )
                raise
            logger.warning(
                "Staged upload failed for %s, falling back to embedded transport: %s",
                asset.name,
                err,
            )
            reporter.advance(AnalysisPhase.ANALYZING)
            return await build_embedded_payload(asset)

        reporter.advance(AnalysisPhase.ANALYZING)
        return payload

    async def shutdown(self, timeout: float | None = None) -> None:
        """Cancel any in-flight invocation and close adapter sessions."""
        if self._shutdown_called:
            return
        self._shutdown_called = True
        self.cancel()
        await self._inference.shutdown(timeout)
        await self._uploader.shutdown(timeout)
