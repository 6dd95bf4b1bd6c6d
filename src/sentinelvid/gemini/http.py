"""HTTP helpers shared by the Gemini adapters."""

from __future__ import annotations

from sentinelvid.errors import AnalysisError, AuthError, PayloadTooLargeError, TransportError

API_KEY_HEADER = "x-goog-api-key"

_AUTH_STATUSES = frozenset({401, 403, 404})
_API_KEY_INVALID_MARKERS = ("API_KEY_INVALID", "API key not valid", "API key expired")
_BODY_EXCERPT_CHARS = 300


def build_headers(credential: str) -> dict[str, str]:
    return {API_KEY_HEADER: credential}


def error_for_status(status: int, body: str, operation: str) -> AnalysisError:
    """Translate a non-success HTTP response into the pipeline error taxonomy."""
    excerpt = body.strip()[:_BODY_EXCERPT_CHARS]
    if status in _AUTH_STATUSES or (
        status == 400 and any(marker in body for marker in _API_KEY_INVALID_MARKERS)
    ):
        return AuthError(
            f"Gemini {operation} rejected the API key or project (HTTP {status}): {excerpt}",
            status=status,
        )
    if status == 413:
        return PayloadTooLargeError(
            f"Gemini {operation} rejected the payload size (HTTP 413): {excerpt}",
            status=status,
        )
    return TransportError(f"Gemini {operation} error {status}: {excerpt}", status=status)
