"""Parsing of raw model output into AnalysisResult."""

from __future__ import annotations

import json

from pydantic import ValidationError

from sentinelvid.errors import EmptyResponseError, MalformedResponseError
from sentinelvid.models.analysis import AnalysisResult

_EXCERPT_CHARS = 500


def _excerpt(text: str) -> str:
    if len(text) <= _EXCERPT_CHARS:
        return text
    return text[:_EXCERPT_CHARS] + "..."


def parse_analysis(raw_text: str | None) -> AnalysisResult:
    """Parse model JSON text into an AnalysisResult.

    Only the response shape is checked; severity and confidence values are
    passed through unchanged.

    Raises:
        EmptyResponseError: no text was returned
        MalformedResponseError: text is not JSON or does not match the shape
    """
    if raw_text is None or not raw_text.strip():
        raise EmptyResponseError()

    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(
            f"not valid JSON ({e.msg} at position {e.pos})",
            raw_excerpt=_excerpt(raw_text),
            cause=e,
        ) from e

    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"expected JSON object, got {type(data).__name__}",
            raw_excerpt=_excerpt(raw_text),
        )

    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in err["loc"]) or "<root>" for err in e.errors()
        )
        raise MalformedResponseError(
            f"does not match analysis schema ({fields})",
            raw_excerpt=_excerpt(raw_text),
            cause=e,
        ) from e
