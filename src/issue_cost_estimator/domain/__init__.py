"""Domain models and business entities."""

from __future__ import annotations

from .models import (
    AnalyzedIssue,
    ClassificationResult,
    ClassificationSource,
    ComplexityTier,
    Issue,
    PipelineState,
    Report,
    RepositoryRef,
    Summary,
)

__all__ = [
    "AnalyzedIssue",
    "ClassificationResult",
    "ClassificationSource",
    "ComplexityTier",
    "Issue",
    "PipelineState",
    "Report",
    "RepositoryRef",
    "Summary",
]
