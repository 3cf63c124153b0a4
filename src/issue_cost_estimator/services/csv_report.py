"""
CSV rendering of analyzed issues.

Title and labels are always quoted with embedded quotes doubled; the cost
carries a leading ``$``. Rows are joined by ``\\n`` without a trailing newline.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..domain.models import AnalyzedIssue

CSV_COLUMNS = ("issue_number", "title", "complexity", "estimated_cost", "labels", "url")
CSV_HEADER = ",".join(CSV_COLUMNS)


def quote(value: str) -> str:
    """Wrap a field in double quotes, doubling any embedded quote."""
    return '"' + value.replace('"', '""') + '"'


def format_row(issue: AnalyzedIssue) -> str:
    return ",".join(
        (
            str(issue.issue_number),
            quote(issue.title),
            issue.tier.value,
            f"${issue.cost}",
            quote(issue.labels_joined),
            issue.url,
        )
    )


def to_csv(issues: Iterable[AnalyzedIssue]) -> str:
    """Render the header followed by one row per issue, in input order."""
    return "\n".join([CSV_HEADER, *(format_row(issue) for issue in issues)])


def empty_csv() -> str:
    """Header-only report returned for repositories without open issues."""
    return CSV_HEADER + "\n"
