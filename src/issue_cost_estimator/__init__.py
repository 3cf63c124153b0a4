"""
Issue Cost Estimator - price the open issues of a GitHub repository.

Fetches every open issue, classifies its complexity with an LLM (falling back
to a label heuristic) and produces a CSV cost report with summary statistics.
"""

from __future__ import annotations

__version__ = "1.0.0"

from .core.config import PipelineConfig, settings
from .domain.models import (
    AnalyzedIssue,
    ComplexityTier,
    Issue,
    Report,
    RepositoryRef,
    Summary,
)
from .services.pipeline import analyze_repository

__all__ = [
    "__version__",
    "settings",
    "analyze_repository",
    "AnalyzedIssue",
    "ComplexityTier",
    "Issue",
    "PipelineConfig",
    "Report",
    "RepositoryRef",
    "Summary",
]
