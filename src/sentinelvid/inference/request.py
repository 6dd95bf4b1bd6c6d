"""Gemini generateContent request construction."""

from __future__ import annotations

from typing import Any

from sentinelvid.models.asset import EmbeddedPayload, ReferencedPayload, TransportPayload

SYSTEM_INSTRUCTION = """Role: Senior Security Operations Center (SOC) Analyst
Objective: Analyze video footage to identify, log, and classify security-relevant events while filtering out environmental noise.

Rules:
- IGNORE repetitive motion (trees, rain) unless a subject is obscured.
- IDENTIFY attributes: Clothing color, Vehicle make, Direction.
- SEVERITY SCORING: 1=Routine, 3=Suspicious, 5=Critical (Weapon/Force).
- TIMESTAMPS: Precise HH:MM:SS relative to video start.
- OUTPUT: Strict JSON format."""

ANALYSIS_PROMPT = "Analyze this surveillance footage and generate a security report."

DEFAULT_TEMPERATURE = 0.2

_EVENT_FIELDS = ["timestamp", "severity", "classification", "description", "confidence"]

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "video_meta": {
            "type": "OBJECT",
            "properties": {
                "duration": {"type": "STRING"},
                "lighting": {"type": "STRING"},
            },
            "required": ["duration", "lighting"],
        },
        "events": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "timestamp": {"type": "STRING"},
                    "severity": {"type": "INTEGER"},
                    "classification": {"type": "STRING"},
                    "description": {"type": "STRING"},
                    "confidence": {"type": "NUMBER"},
                },
                "required": _EVENT_FIELDS,
                "propertyOrdering": _EVENT_FIELDS,
            },
        },
        "summary": {"type": "STRING"},
    },
    "required": ["video_meta", "events", "summary"],
    "propertyOrdering": ["video_meta", "events", "summary"],
}


def build_video_part(payload: TransportPayload) -> dict[str, Any]:
    """Content part carrying the video, dispatched on the payload variant."""
    match payload:
        case EmbeddedPayload(data_b64=data, mime_type=mime_type):
            return {"inlineData": {"mimeType": mime_type, "data": data}}
        case ReferencedPayload(uri=uri, mime_type=mime_type):
            return {"fileData": {"mimeType": mime_type, "fileUri": uri}}
        case _:
            raise TypeError(f"Unexpected transport payload type: {type(payload).__name__}")


def build_generate_request(
    payload: TransportPayload, *, temperature: float = DEFAULT_TEMPERATURE
) -> dict[str, Any]:
    """Assemble the generateContent body for a security analysis call."""
    return {
        "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
        "contents": [
            {
                "role": "user",
                "parts": [build_video_part(payload), {"text": ANALYSIS_PROMPT}],
            }
        ],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
            "temperature": temperature,
        },
    }
