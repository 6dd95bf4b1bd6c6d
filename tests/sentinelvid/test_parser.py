"""Tests for parsing model output into AnalysisResult."""

from __future__ import annotations

import json

import pytest

from sentinelvid.errors import EmptyResponseError, MalformedResponseError, ParseError
from sentinelvid.inference.parser import parse_analysis
from tests.sentinelvid.mocks import sample_analysis


def test_parses_well_formed_report() -> None:
    result = parse_analysis(json.dumps(sample_analysis()))

    assert result.summary == "One forced entry through the side gate."
    assert result.video_meta.lighting == "low"
    event = result.events[0]
    assert event.timestamp == "00:00:42"
    assert event.severity == 5
    assert event.confidence == pytest.approx(0.91)


def test_empty_event_list_is_valid() -> None:
    result = parse_analysis(json.dumps(sample_analysis(events=[])))

    assert result.events == []


def test_out_of_range_values_pass_through() -> None:
    """Severity and confidence are not clamped or rejected."""
    event = {
        "timestamp": "00:01:00",
        "severity": 4,
        "classification": "Loitering",
        "description": "Person waits by the mailbox.",
        "confidence": 1.4,
    }

    result = parse_analysis(json.dumps(sample_analysis(events=[event])))

    assert result.events[0].severity == 4
    assert result.events[0].confidence == pytest.approx(1.4)


@pytest.mark.parametrize("raw", [None, "", "   \n"])
def test_empty_text_is_empty_response(raw: str | None) -> None:
    with pytest.raises(EmptyResponseError) as exc_info:
        parse_analysis(raw)

    assert exc_info.value.stage == "parse"


def test_invalid_json_is_malformed() -> None:
    raw = '{"video_meta": {"duration": "00:01'

    with pytest.raises(MalformedResponseError) as exc_info:
        parse_analysis(raw)

    assert "not valid JSON" in str(exc_info.value)
    assert exc_info.value.raw_excerpt == raw
    assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)


def test_non_object_json_is_malformed() -> None:
    with pytest.raises(MalformedResponseError, match="expected JSON object, got list"):
        parse_analysis("[1, 2, 3]")


def test_missing_field_is_named() -> None:
    """Shape errors name the offending field path."""
    data = sample_analysis()
    del data["events"][0]["confidence"]

    with pytest.raises(MalformedResponseError) as exc_info:
        parse_analysis(json.dumps(data))

    assert "events.0.confidence" in str(exc_info.value)


def test_excerpt_is_truncated() -> None:
    raw = "x" * 2000

    with pytest.raises(ParseError) as exc_info:
        parse_analysis(raw)

    assert isinstance(exc_info.value, MalformedResponseError)
    assert len(exc_info.value.raw_excerpt) == 503
