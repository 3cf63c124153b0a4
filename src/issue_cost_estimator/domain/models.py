"""
Domain models using Pydantic V2.

Defines the core data structures for the estimator with:
- Strict type validation
- Immutability for every value handed between pipeline stages
- Wire-format rendering for the HTTP response
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ComplexityTier(str, Enum):
    """Coarse implementation-effort classification of an issue."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ClassificationSource(str, Enum):
    """Which classifier path produced a result."""

    LLM = "llm"
    HEURISTIC = "heuristic"


class PipelineState(str, Enum):
    """Enumeration of pipeline states for a single request."""

    IDLE = "idle"
    PARSING_REF = "parsing_ref"
    FETCHING_ISSUES = "fetching_issues"
    CLASSIFYING_ISSUES = "classifying_issues"
    AGGREGATING = "aggregating"
    DONE = "done"
    FAILED = "failed"


class RepositoryRef(BaseModel):
    """
    Owner/name pair identifying a repository.

    Attributes:
        owner: Account or organisation owning the repository
        name: Repository name without a ``.git`` suffix
    """

    model_config = ConfigDict(frozen=True)

    owner: str = Field(..., min_length=1, description="Repository owner")
    name: str = Field(..., min_length=1, description="Repository name")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


class Issue(BaseModel):
    """
    Open issue as returned by the GitHub REST API.

    Attributes:
        number: Issue number within the repository
        title: Issue title
        body: Markdown body, absent when the author left it empty
        labels: Label names in API order
        comment_count: Number of comments
        html_url: Browser URL of the issue
    """

    model_config = ConfigDict(frozen=True)

    number: int = Field(..., ge=0)
    title: str = Field(default="")
    body: str | None = Field(default=None)
    labels: tuple[str, ...] = Field(default_factory=tuple)
    comment_count: int = Field(default=0, ge=0)
    html_url: str = Field(default="")

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Issue:
        """
        Build an issue from a GitHub REST issue payload.

        Labels may be label objects or bare strings.
        """
        labels = []
        for label in payload.get("labels") or []:
            if isinstance(label, dict):
                name = label.get("name")
            else:
                name = label
            if name:
                labels.append(str(name))

        return cls(
            number=payload["number"],
            title=payload.get("title") or "",
            body=payload.get("body"),
            labels=tuple(labels),
            comment_count=payload.get("comments") or 0,
            html_url=payload.get("html_url") or "",
        )


class ClassificationResult(BaseModel):
    """Complexity verdict for one issue."""

    model_config = ConfigDict(frozen=True)

    tier: ComplexityTier
    reasoning: str = ""
    source: ClassificationSource = ClassificationSource.LLM


class AnalyzedIssue(BaseModel):
    """
    Per-issue record from which the CSV rows are derived.

    Attributes:
        issue_number: Issue number
        title: Issue title
        tier: Assigned complexity tier
        cost: Estimated cost in dollars
        labels_joined: Label names joined with ``"; "``
        url: Browser URL of the issue
        reasoning: Explanation attached to the classification
    """

    model_config = ConfigDict(frozen=True)

    issue_number: int
    title: str
    tier: ComplexityTier
    cost: int = Field(..., ge=0)
    labels_joined: str = ""
    url: str = ""
    reasoning: str = ""


class Summary(BaseModel):
    """Aggregate statistics over all analyzed issues."""

    model_config = ConfigDict(frozen=True)

    total_issues: int = Field(default=0, ge=0)
    total_estimated_cost: int = Field(default=0, ge=0)
    tier_counts: dict[ComplexityTier, int] = Field(
        default_factory=lambda: {tier: 0 for tier in ComplexityTier}
    )

    @field_validator("tier_counts")
    @classmethod
    def fill_missing_tiers(cls, v: dict[ComplexityTier, int]) -> dict[ComplexityTier, int]:
        """Ensure every tier has a count."""
        return {tier: v.get(tier, 0) for tier in ComplexityTier}

    @classmethod
    def empty(cls) -> Summary:
        return cls()

    def to_dict(self) -> dict[str, Any]:
        """Render the summary in the response wire format."""
        return {
            "totalIssues": self.total_issues,
            "totalEstimatedCost": self.total_estimated_cost,
            "complexityBreakdown": {
                tier.value: count for tier, count in self.tier_counts.items()
            },
        }


class Report(BaseModel):
    """
    Pipeline output for one repository.

    Attributes:
        csv_text: CSV report text
        summary: Aggregate statistics
        issues: Analyzed issues in fetch order
        message: Informational message, set when no issues were found
    """

    model_config = ConfigDict(frozen=True)

    csv_text: str
    summary: Summary = Field(default_factory=Summary)
    issues: tuple[AnalyzedIssue, ...] = Field(default_factory=tuple)
    message: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.issues

    def to_response(self) -> dict[str, Any]:
        """Convert to the JSON body returned by the HTTP endpoint."""
        if self.message is not None:
            return {"csv": self.csv_text, "message": self.message}
        return {"csv": self.csv_text, "summary": self.summary.to_dict()}
