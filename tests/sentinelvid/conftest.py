"""Shared pytest fixtures for Sentinelvid tests."""

from __future__ import annotations

import sys
from pathlib import Path

# Add src to sys.path for imports
src_path = Path(__file__).parent.parent.parent / "src"
if str(src_path.resolve()) not in sys.path:
    sys.path.insert(0, str(src_path.resolve()))

import pytest

from sentinelvid.models.config import Config, PollingConfig, TransportConfig
from tests.sentinelvid.mocks import FakeClock, MockInferenceClient, MockUploader

# Small limits so staged/fallback paths can be exercised with tiny in-memory assets.
SMALL_TRANSPORT = {
    "inline_threshold_bytes": 1024,
    "fallback_ceiling_bytes": 4096,
    "max_file_bytes": 16384,
    "request_ceiling_bytes": 100_000,
}

TEST_CREDENTIAL = "test-secret-key-123"


@pytest.fixture
def small_config() -> Config:
    """Config with tiny size limits and fast polling."""
    return Config(
        transport=TransportConfig(**SMALL_TRANSPORT),
        polling=PollingConfig(initial_delay_s=2.0, interval_s=3.0, max_attempts=5, timeout_s=600.0),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def uploader() -> MockUploader:
    return MockUploader()


@pytest.fixture
def inference() -> MockInferenceClient:
    return MockInferenceClient()
