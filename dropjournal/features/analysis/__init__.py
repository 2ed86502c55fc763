"""
Analysis feature module.

- Threshold-gated analysis pipeline over unanalyzed entries
- Claude-backed narrative generator
"""

from dropjournal.features.analysis.generator import (
    AnalysisBatchItem,
    AnalysisGenerator,
    ClaudeAnalysisGenerator,
)
from dropjournal.features.analysis.pipeline import (
    AnalysisPipeline,
    PipelineOutcome,
    PipelineState,
)

__all__ = [
    "AnalysisBatchItem",
    "AnalysisGenerator",
    "ClaudeAnalysisGenerator",
    "AnalysisPipeline",
    "PipelineOutcome",
    "PipelineState",
]
