"""Gemini generateContent inference client."""

from __future__ import annotations

import asyncio
import logging

import aiohttp

from sentinelvid.errors import MissingCredentialError, TransportError
from sentinelvid.gemini.http import build_headers, error_for_status
from sentinelvid.inference.request import build_generate_request
from sentinelvid.interfaces import InferenceClient
from sentinelvid.models.analysis import RawModelResponse
from sentinelvid.models.asset import EmbeddedPayload, TransportPayload
from sentinelvid.models.config import GeminiConfig

logger = logging.getLogger(__name__)


class GeminiClient(InferenceClient):
    """Gemini inference client.

    Uses aiohttp for async HTTP calls to the Gemini REST API.
    Requests structured JSON output constrained by RESPONSE_SCHEMA.
    """

    def __init__(self, config: GeminiConfig) -> None:
        self.model = config.model
        self.base_url = config.base_url
        self.api_version = config.api_version
        self.temperature = config.temperature
        self.request_timeout = float(config.request_timeout)

        self._session: aiohttp.ClientSession | None = None
        self._shutdown_called = False

        logger.info(
            "GeminiClient initialized: model=%s, temperature=%s",
            self.model,
            self.temperature,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/{self.api_version}/models/{self.model}:generateContent"

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Lazy-create aiohttp session with timeout."""
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.request_timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def invoke(self, payload: TransportPayload, credential: str) -> RawModelResponse:
        """Run security analysis on the payload.

        Raises:
            MissingCredentialError: credential is empty (before any network call)
            AuthError: credential or project rejected by the endpoint
            TransportError: network failure or other HTTP error
        """
        if not credential or not credential.strip():
            raise MissingCredentialError()
        if self._shutdown_called:
            raise RuntimeError("GeminiClient has been shut down")

        start_time = asyncio.get_running_loop().time()
        body = build_generate_request(payload, temperature=self.temperature)
        data = await self._call_api(body, build_headers(credential.strip()))

        text, finish_reason = self._extract_text(data)
        usage = data.get("usageMetadata", {})
        if not isinstance(usage, dict):
            usage = {}
        self._log_usage(usage, start_time, payload, finish_reason)

        prompt_tokens = usage.get("promptTokenCount")
        completion_tokens = usage.get("candidatesTokenCount")
        return RawModelResponse(
            text=text,
            finish_reason=finish_reason,
            prompt_tokens=prompt_tokens if isinstance(prompt_tokens, int) else None,
            completion_tokens=completion_tokens if isinstance(completion_tokens, int) else None,
        )

    async def _call_api(
        self, body: dict[str, object], headers: dict[str, str]
    ) -> dict[str, object]:
        session = await self._ensure_session()
        try:
            async with session.post(self.endpoint, json=body, headers=headers) as resp:
                if resp.status != 200:
                    error_text = await resp.text()
                    raise error_for_status(resp.status, error_text, "generateContent")
                data = await resp.json()
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as e:
            raise TransportError(f"Gemini generateContent request failed: {e!r}", cause=e) from e
        except ValueError as e:
            raise TransportError(
                "Gemini generateContent returned an invalid JSON envelope", cause=e
            ) from e

        if not isinstance(data, dict):
            raise TransportError("Gemini generateContent response is not a JSON object")
        return data

    def _extract_text(self, data: dict[str, object]) -> tuple[str | None, str | None]:
        """Return (concatenated text parts, finish reason) of the first candidate."""
        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            feedback = data.get("promptFeedback")
            if isinstance(feedback, dict) and feedback.get("blockReason"):
                logger.warning("Gemini blocked the prompt: %s", feedback.get("blockReason"))
            return None, None

        first = candidates[0]
        if not isinstance(first, dict):
            return None, None
        finish_reason = first.get("finishReason")
        content = first.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return None, finish_reason if isinstance(finish_reason, str) else None

        texts = [
            part["text"]
            for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str) and not part.get("thought")
        ]
        text = "".join(texts) or None
        return text, finish_reason if isinstance(finish_reason, str) else None

    def _log_usage(
        self,
        usage: dict[str, object],
        start_time: float,
        payload: TransportPayload,
        finish_reason: str | None,
    ) -> None:
        elapsed_s = asyncio.get_running_loop().time() - start_time
        logger.info(
            "VLM token usage",
            extra={
                "event_type": "vlm_usage",
                "provider": "gemini",
                "model": self.model,
                "transport": "embedded" if isinstance(payload, EmbeddedPayload) else "staged",
                "temperature": self.temperature,
                "finish_reason": finish_reason,
                "prompt_tokens": usage.get("promptTokenCount"),
                "completion_tokens": usage.get("candidatesTokenCount"),
                "total_tokens": usage.get("totalTokenCount"),
                "elapsed_s": round(elapsed_s, 3),
            },
        )

    async def shutdown(self, timeout: float | None = None) -> None:
        """Cleanup resources - close HTTP session."""
        _ = timeout
        if self._shutdown_called:
            return

        self._shutdown_called = True
        logger.info("Shutting down GeminiClient...")

        if self._session:
            await self._session.close()

        logger.info("GeminiClient shutdown complete")
