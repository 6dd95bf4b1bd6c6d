"""Analysis pipeline orchestration."""

from sentinelvid.pipeline.core import AnalysisPipeline

__all__ = ["AnalysisPipeline"]
