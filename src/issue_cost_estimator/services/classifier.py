"""
Issue complexity classification.

The LLM path is tried first; whenever it does not yield a validated verdict
the deterministic label/length heuristic decides instead, so every issue
always receives a tier.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Protocol, Union

from ..core.exceptions import ClassifierError
from ..core.logging import LoggerMixin
from ..domain.models import (
    ClassificationResult,
    ClassificationSource,
    ComplexityTier,
    Issue,
)

DETAILED_BODY_THRESHOLD = 500

_BUG_MARKERS = ("bug", "fix")
_FEATURE_MARKERS = ("feature", "enhancement")

PROMPT_TEMPLATE = """Analyze this GitHub issue and estimate its complexity and cost.

Issue Title: {title}
Issue Body: {body}
Labels: {labels}
Comments Count: {comments}

Consider:
- Technical complexity from the description
- Number of acceptance criteria or requirements mentioned
- Whether it's a bug fix (usually lower cost) vs feature (higher cost)
- Presence of detailed specs vs vague requirements
- Labels that indicate scope (enhancement, bug, feature, etc.)

Respond with ONLY a JSON object in this exact format:
{{
  "complexity": "low" | "medium" | "high",
  "reasoning": "Brief explanation of your assessment"
}}"""


class CompletionClient(Protocol):
    """Anything able to answer a prompt with text."""

    async def complete(self, prompt: str) -> str: ...


@dataclass(frozen=True)
class Parsed:
    result: ClassificationResult


@dataclass(frozen=True)
class Unparseable:
    reason: str


ParseOutcome = Union[Parsed, Unparseable]


def build_prompt(issue: Issue) -> str:
    """Render the classification prompt for one issue."""
    return PROMPT_TEMPLATE.format(
        title=issue.title,
        body=issue.body or "No description provided",
        labels=", ".join(issue.labels) or "None",
        comments=issue.comment_count,
    )


def parse_classification(text: str) -> ParseOutcome:
    """
    Strictly parse an LLM reply into a classification.

    The span from the first ``{`` to the last ``}`` must decode to a JSON
    object whose ``complexity`` is a known tier.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return Unparseable("no JSON object in reply")

    try:
        data = json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        return Unparseable(f"invalid JSON: {e.msg}")

    if not isinstance(data, dict):
        return Unparseable("reply is not a JSON object")

    complexity = data.get("complexity")
    try:
        tier = ComplexityTier(str(complexity).strip().lower())
    except ValueError:
        return Unparseable(f"unknown complexity {complexity!r}")

    reasoning = data.get("reasoning", "")
    if not isinstance(reasoning, str):
        reasoning = str(reasoning)

    return Parsed(
        ClassificationResult(
            tier=tier, reasoning=reasoning, source=ClassificationSource.LLM
        )
    )


def heuristic_classify(issue: Issue) -> ClassificationResult:
    """
    Classify an issue from its labels and body length alone.

    Bug labels win over feature labels, so an issue tagged both is low.
    """
    labels = [label.lower() for label in issue.labels]

    if any(marker in label for label in labels for marker in _BUG_MARKERS):
        return _heuristic(ComplexityTier.LOW, "Bug fix with standard complexity")

    if any(marker in label for label in labels for marker in _FEATURE_MARKERS):
        if len(issue.body or "") > DETAILED_BODY_THRESHOLD:
            return _heuristic(
                ComplexityTier.HIGH, "Feature request with detailed requirements"
            )
        return _heuristic(ComplexityTier.MEDIUM, "Feature request with moderate scope")

    return _heuristic(ComplexityTier.MEDIUM, "Standard complexity based on heuristics")


def _heuristic(tier: ComplexityTier, reasoning: str) -> ClassificationResult:
    return ClassificationResult(
        tier=tier, reasoning=reasoning, source=ClassificationSource.HEURISTIC
    )


class ComplexityClassifier(LoggerMixin):
    """
    Assigns a complexity tier to issues.

    ``classify`` never raises for classifier failures; they degrade to the
    heuristic verdict. Without a completion client every issue is
    classified heuristically.
    """

    def __init__(self, client: CompletionClient | None) -> None:
        self.client = client

    async def classify(self, issue: Issue) -> ClassificationResult:
        outcome = await self._ask_llm(issue)
        if isinstance(outcome, Parsed):
            return outcome.result

        self.logger.warning(
            "classification_fallback", issue_number=issue.number, reason=outcome.reason
        )
        return heuristic_classify(issue)

    async def _ask_llm(self, issue: Issue) -> ParseOutcome:
        if self.client is None:
            return Unparseable("no LLM client configured")

        try:
            reply = await self.client.complete(build_prompt(issue))
        except ClassifierError as e:
            return Unparseable(e.message)
        except Exception as e:  # noqa: BLE001
            self.logger.exception("llm_unexpected_error", issue_number=issue.number)
            return Unparseable(f"unexpected LLM failure: {e}")

        return parse_classification(reply)
