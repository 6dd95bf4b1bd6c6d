"""Mock implementations for testing."""

from tests.sentinelvid.mocks.clock import FakeClock
from tests.sentinelvid.mocks.inference import MockInferenceClient, sample_analysis
from tests.sentinelvid.mocks.uploader import MockUploader

__all__ = [
    "FakeClock",
    "MockInferenceClient",
    "MockUploader",
    "sample_analysis",
]
