"""Sentinelvid security footage analysis pipeline."""

__version__ = "0.1.0"

# Export commonly used types
from sentinelvid.errors import AnalysisError
from sentinelvid.models.analysis import AnalysisResult, SecurityEvent
from sentinelvid.models.asset import VideoAsset
from sentinelvid.models.enums import AnalysisPhase
from sentinelvid.pipeline import AnalysisPipeline

__all__ = [
    "AnalysisError",
    "AnalysisPhase",
    "AnalysisPipeline",
    "AnalysisResult",
    "SecurityEvent",
    "VideoAsset",
    "__version__",
]
