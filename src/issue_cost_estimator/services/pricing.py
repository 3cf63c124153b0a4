"""Cost estimation per complexity tier and report aggregation."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from ..domain.models import AnalyzedIssue, ComplexityTier, Summary

# Dollar band (min, max) per tier
COST_BANDS: dict[ComplexityTier, tuple[int, int]] = {
    ComplexityTier.LOW: (100, 300),
    ComplexityTier.MEDIUM: (300, 600),
    ComplexityTier.HIGH: (600, 1000),
}


def estimate_cost(tier: ComplexityTier) -> int:
    """Return the midpoint of the tier's cost band, rounded to whole dollars."""
    low, high = COST_BANDS[ComplexityTier(tier)]
    return round((low + high) / 2)


def summarize(issues: Sequence[AnalyzedIssue]) -> Summary:
    """
    Fold analyzed issues into summary statistics.

    Args:
        issues: Analyzed issues in any order

    Returns:
        Summary: Issue count, exact cost total and per-tier counts
    """
    counts = Counter(issue.tier for issue in issues)
    return Summary(
        total_issues=len(issues),
        total_estimated_cost=sum(issue.cost for issue in issues),
        tier_counts={tier: counts.get(tier, 0) for tier in ComplexityTier},
    )
