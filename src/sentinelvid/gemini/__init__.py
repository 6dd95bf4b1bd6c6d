"""Gemini REST API adapters."""

from sentinelvid.gemini.client import GeminiClient
from sentinelvid.gemini.files import GeminiFileUploader

__all__ = ["GeminiClient", "GeminiFileUploader"]
