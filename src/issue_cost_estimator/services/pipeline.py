"""
Main pipeline orchestration service.

Coordinates the cost estimation of one repository:
1. Repository URL parsing
2. Issue retrieval
3. Sequential, rate-limited issue classification
4. Aggregation and CSV rendering
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Protocol

import httpx

from ..core.config import PipelineConfig
from ..core.exceptions import (
    ClientInputError,
    ConfigurationError,
    EstimatorError,
    PipelineError,
)
from ..core.logging import LoggerMixin
from ..domain.models import (
    AnalyzedIssue,
    Issue,
    PipelineState,
    Report,
    RepositoryRef,
    Summary,
)
from .classifier import CompletionClient, ComplexityClassifier
from .csv_report import empty_csv, to_csv
from .github import GitHubIssueFetcher
from .llm import LLMRouter, split_model_id
from .pricing import estimate_cost, summarize
from .reference import parse_repository_url

NO_ISSUES_MESSAGE = "No open issues found in this repository"

Sleep = Callable[[float], Awaitable[None]]


class IssueSource(Protocol):
    async def fetch_open_issues(self, repo: RepositoryRef) -> list[Issue]: ...


def validate_request(repo_url: str | None, config: PipelineConfig) -> RepositoryRef:
    """
    Check a request before any client is built.

    Order: URL presence, secrets, URL format, model identifier.

    Raises:
        ClientInputError: If the URL is missing or malformed
        ConfigurationError: If a secret is absent or the model is unsupported
    """
    if not repo_url or not repo_url.strip():
        raise ClientInputError("Repository URL is required")
    if not config.github_token.strip():
        raise ConfigurationError("GitHub token not configured")
    if not config.llm_api_key.strip():
        raise ConfigurationError("LLM API key not configured")

    repo = parse_repository_url(repo_url)
    split_model_id(config.llm_model)
    return repo


class CostEstimationPipeline(LoggerMixin):
    """
    Runs the estimation pipeline for a single request.

    Each instance handles one repository; ``state`` follows
    idle → parsing_ref → fetching_issues → classifying_issues → aggregating
    → done, or moves to failed from any earlier state.
    """

    def __init__(
        self,
        config: PipelineConfig,
        *,
        fetcher: IssueSource,
        classifier: ComplexityClassifier,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            config: Immutable pipeline configuration
            fetcher: Source of open issues
            classifier: Complexity classifier
            sleep: Delay primitive awaited between classifications
        """
        self.config = config
        self.fetcher = fetcher
        self.classifier = classifier
        self._sleep = sleep
        self.state = PipelineState.IDLE

    def _transition(self, state: PipelineState) -> None:
        self.logger.debug(
            "pipeline_state_changed", source=self.state.value, target=state.value
        )
        self.state = state

    async def run(self, repo_url: str | None) -> Report:
        """
        Estimate the cost of every open issue of a repository.

        Args:
            repo_url: Repository URL supplied by the caller

        Returns:
            Report: CSV text and summary statistics

        Raises:
            ClientInputError: If the URL is missing or malformed
            ConfigurationError: If a required secret is absent
            UpstreamError: If GitHub cannot list the issues
            PipelineError: On timeout or any other failure
        """
        try:
            return await asyncio.wait_for(
                self._run(repo_url), timeout=self.config.request_timeout_s
            )
        except asyncio.TimeoutError as e:
            error = PipelineError(
                "Repository analysis timed out",
                timeout_s=self.config.request_timeout_s,
                state=self.state.value,
            )
            self._fail(error)
            raise error from e
        except EstimatorError as e:
            self._fail(e)
            raise
        except Exception as e:
            failed_state = self.state
            self._fail(e)
            raise PipelineError(
                "An error occurred while processing the repository",
                error=str(e),
                state=failed_state.value,
            ) from e

    def _fail(self, error: Exception) -> None:
        self.logger.error(
            "pipeline_failed",
            state=self.state.value,
            error_type=type(error).__name__,
            error=str(error),
        )
        self._transition(PipelineState.FAILED)

    async def _run(self, repo_url: str | None) -> Report:
        self._transition(PipelineState.PARSING_REF)
        repo = validate_request(repo_url, self.config)

        self._transition(PipelineState.FETCHING_ISSUES)
        self.logger.info("fetching_issues", repository=repo.full_name)
        issues = await self.fetcher.fetch_open_issues(repo)

        if not issues:
            self._transition(PipelineState.DONE)
            self.logger.info("no_open_issues", repository=repo.full_name)
            return Report(
                csv_text=empty_csv(), summary=Summary.empty(), message=NO_ISSUES_MESSAGE
            )

        self._transition(PipelineState.CLASSIFYING_ISSUES)
        analyzed = await self._analyze_all(issues)

        self._transition(PipelineState.AGGREGATING)
        summary = summarize(analyzed)
        report = Report(
            csv_text=to_csv(analyzed), summary=summary, issues=tuple(analyzed)
        )

        self._transition(PipelineState.DONE)
        self.logger.info(
            "pipeline_completed",
            repository=repo.full_name,
            total_issues=summary.total_issues,
            total_estimated_cost=summary.total_estimated_cost,
        )
        return report

    async def _analyze_all(self, issues: list[Issue]) -> list[AnalyzedIssue]:
        analyzed: list[AnalyzedIssue] = []
        total = len(issues)

        for index, issue in enumerate(issues, start=1):
            self.logger.info(
                "analyzing_issue", position=index, total=total, issue_number=issue.number
            )
            analyzed.append(await self._analyze(issue))

            if index < total:
                await self._sleep(self.config.classification_delay_s)

        return analyzed

    async def _analyze(self, issue: Issue) -> AnalyzedIssue:
        classification = await self.classifier.classify(issue)
        cost = estimate_cost(classification.tier)
        self.logger.debug(
            "issue_classified",
            issue_number=issue.number,
            tier=classification.tier.value,
            source=classification.source.value,
            cost=cost,
        )
        return AnalyzedIssue(
            issue_number=issue.number,
            title=issue.title,
            tier=classification.tier,
            cost=cost,
            labels_joined="; ".join(issue.labels),
            url=issue.html_url,
            reasoning=classification.reasoning,
        )


async def analyze_repository(
    repo_url: str | None,
    config: PipelineConfig,
    *,
    http_client: httpx.AsyncClient | None = None,
    completion_client: CompletionClient | None = None,
) -> Report:
    """
    High-level convenience function to estimate a repository.

    Validates the request, builds the GitHub and LLM clients from ``config``,
    runs the pipeline within ``config.request_timeout_s`` and closes the
    clients afterwards.

    Args:
        repo_url: Repository URL
        config: Immutable pipeline configuration
        http_client: Optional client used for GitHub requests
        completion_client: Optional LLM client replacing the configured router

    Returns:
        Report: Estimation report

    Example:
        >>> report = asyncio.run(analyze_repository(url, settings.pipeline_config()))
        >>> print(report.summary.total_estimated_cost)
    """
    validate_request(repo_url, config)

    router: LLMRouter | None = None
    if completion_client is None:
        router = LLMRouter(
            config.llm_api_key,
            config.llm_model,
            ollama_url=config.ollama_url,
        )
        completion_client = router

    try:
        async with GitHubIssueFetcher(
            config.github_token,
            base_url=config.github_api_url,
            http_client=http_client,
        ) as fetcher:
            pipeline = CostEstimationPipeline(
                config,
                fetcher=fetcher,
                classifier=ComplexityClassifier(completion_client),
            )
            return await pipeline.run(repo_url)
    finally:
        if router is not None:
            await router.aclose()
