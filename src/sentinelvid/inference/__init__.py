"""Inference request construction and response parsing."""

from sentinelvid.inference.parser import parse_analysis
from sentinelvid.inference.request import (
    ANALYSIS_PROMPT,
    RESPONSE_SCHEMA,
    SYSTEM_INSTRUCTION,
    build_generate_request,
    build_video_part,
)

__all__ = [
    "ANALYSIS_PROMPT",
    "RESPONSE_SCHEMA",
    "SYSTEM_INSTRUCTION",
    "build_generate_request",
    "build_video_part",
    "parse_analysis",
]
