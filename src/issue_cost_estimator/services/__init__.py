"""Business services and pipeline orchestration."""

from __future__ import annotations

from .pipeline import CostEstimationPipeline, analyze_repository, validate_request

__all__ = ["CostEstimationPipeline", "analyze_repository", "validate_request"]
