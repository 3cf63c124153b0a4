"""
Unit tests for the estimation pipeline.

The fetcher and LLM are replaced by in-memory stand-ins.
"""

from __future__ import annotations

import asyncio
import dataclasses

import pytest

from issue_cost_estimator.core.exceptions import (
    ClientInputError,
    ConfigurationError,
    InvalidReferenceError,
    PipelineError,
    UpstreamNotFoundError,
)
from issue_cost_estimator.domain.models import ComplexityTier, PipelineState
from issue_cost_estimator.services.classifier import ComplexityClassifier
from issue_cost_estimator.services.csv_report import CSV_HEADER
from issue_cost_estimator.services.pipeline import (
    NO_ISSUES_MESSAGE,
    CostEstimationPipeline,
    validate_request,
)

REPO_URL = "https://github.com/octo/reef"


class StaticFetcher:
    """Issue source returning a fixed list or raising."""

    def __init__(self, issues=(), error: Exception | None = None) -> None:
        self.issues = list(issues)
        self.error = error
        self.requested = []

    async def fetch_open_issues(self, repo):
        self.requested.append(repo)
        if self.error is not None:
            raise self.error
        return self.issues


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _pipeline(config, fetcher, client=None, sleep=None) -> CostEstimationPipeline:
    return CostEstimationPipeline(
        config,
        fetcher=fetcher,
        classifier=ComplexityClassifier(client),
        sleep=sleep or RecordingSleep(),
    )


@pytest.mark.asyncio
async def test_full_run(pipeline_config, make_issue, stub_llm, reply) -> None:
    issues = [
        make_issue(1, title="Crash", labels=("bug", "ui")),
        make_issue(2, title="Dark mode", labels=("enhancement",)),
        make_issue(3, title="Docs"),
    ]
    client = stub_llm(reply("low"), reply("high"), "not json")
    fetcher = StaticFetcher(issues)
    pipeline = _pipeline(pipeline_config, fetcher, client)

    report = await pipeline.run(REPO_URL)

    assert pipeline.state == PipelineState.DONE
    assert fetcher.requested[0].full_name == "octo/reef"
    assert [i.issue_number for i in report.issues] == [1, 2, 3]
    assert [i.tier for i in report.issues] == [
        ComplexityTier.LOW,
        ComplexityTier.HIGH,
        ComplexityTier.MEDIUM,
    ]
    assert report.issues[0].labels_joined == "bug; ui"
    assert report.summary.total_issues == 3
    assert report.summary.total_estimated_cost == 200 + 800 + 450
    assert report.message is None

    lines = report.csv_text.split("\n")
    assert lines[0] == CSV_HEADER
    assert len(lines) == 4


@pytest.mark.asyncio
async def test_sleeps_between_classifications_only(
    pipeline_config, make_issue
) -> None:
    config = dataclasses.replace(pipeline_config, classification_delay_s=0.5)
    sleep = RecordingSleep()
    pipeline = _pipeline(
        config, StaticFetcher([make_issue(n) for n in range(1, 5)]), sleep=sleep
    )

    await pipeline.run(REPO_URL)

    assert sleep.delays == [0.5, 0.5, 0.5]


@pytest.mark.asyncio
async def test_single_issue_does_not_sleep(pipeline_config, make_issue) -> None:
    sleep = RecordingSleep()
    pipeline = _pipeline(pipeline_config, StaticFetcher([make_issue()]), sleep=sleep)

    await pipeline.run(REPO_URL)

    assert sleep.delays == []


@pytest.mark.asyncio
async def test_no_issues_short_circuits(pipeline_config, stub_llm) -> None:
    client = stub_llm()
    pipeline = _pipeline(pipeline_config, StaticFetcher([]), client)

    report = await pipeline.run(REPO_URL)

    assert report.message == NO_ISSUES_MESSAGE
    assert report.csv_text == CSV_HEADER + "\n"
    assert report.summary.total_issues == 0
    assert client.prompts == []
    assert pipeline.state == PipelineState.DONE


@pytest.mark.asyncio
@pytest.mark.parametrize("repo_url", [None, "", "   "])
async def test_missing_url(pipeline_config, repo_url) -> None:
    fetcher = StaticFetcher()
    pipeline = _pipeline(pipeline_config, fetcher)

    with pytest.raises(ClientInputError, match="Repository URL is required"):
        await pipeline.run(repo_url)

    assert fetcher.requested == []
    assert pipeline.state == PipelineState.FAILED


@pytest.mark.asyncio
async def test_invalid_url(pipeline_config) -> None:
    pipeline = _pipeline(pipeline_config, StaticFetcher())

    with pytest.raises(InvalidReferenceError):
        await pipeline.run("https://github.com/octo")

    assert pipeline.state == PipelineState.FAILED


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("field", "message"),
    [("github_token", "GitHub token"), ("llm_api_key", "LLM API key")],
)
async def test_missing_secret(pipeline_config, field: str, message: str) -> None:
    config = dataclasses.replace(pipeline_config, **{field: ""})
    fetcher = StaticFetcher()
    pipeline = _pipeline(config, fetcher)

    with pytest.raises(ConfigurationError, match=message):
        await pipeline.run(REPO_URL)

    assert fetcher.requested == []


@pytest.mark.asyncio
async def test_upstream_error_keeps_its_kind(pipeline_config) -> None:
    error = UpstreamNotFoundError("Repository not found", status_code=404)
    pipeline = _pipeline(pipeline_config, StaticFetcher(error=error))

    with pytest.raises(UpstreamNotFoundError):
        await pipeline.run(REPO_URL)

    assert pipeline.state == PipelineState.FAILED


@pytest.mark.asyncio
async def test_unexpected_error_is_wrapped(pipeline_config) -> None:
    pipeline = _pipeline(pipeline_config, StaticFetcher(error=KeyError("number")))

    with pytest.raises(PipelineError) as exc_info:
        await pipeline.run(REPO_URL)

    assert exc_info.value.context["state"] == PipelineState.FETCHING_ISSUES.value
    assert isinstance(exc_info.value.__cause__, KeyError)
    assert pipeline.state == PipelineState.FAILED


class HangingCompletionClient:
    async def complete(self, prompt: str) -> str:
        await asyncio.sleep(30)
        return ""


@pytest.mark.asyncio
async def test_timeout_moves_to_failed(pipeline_config, make_issue) -> None:
    config = dataclasses.replace(pipeline_config, request_timeout_s=0.05)
    pipeline = _pipeline(
        config, StaticFetcher([make_issue()]), HangingCompletionClient()
    )

    with pytest.raises(PipelineError, match="timed out") as exc_info:
        await pipeline.run(REPO_URL)

    assert exc_info.value.context["state"] == PipelineState.CLASSIFYING_ISSUES.value
    assert pipeline.state == PipelineState.FAILED


class TestValidateRequest:
    """Tests for the checks made before any client is built."""

    def test_returns_reference(self, pipeline_config) -> None:
        assert validate_request(REPO_URL, pipeline_config).full_name == "octo/reef"

    def test_missing_url_before_missing_secret(self, pipeline_config) -> None:
        config = dataclasses.replace(pipeline_config, github_token="")

        with pytest.raises(ClientInputError, match="Repository URL is required"):
            validate_request("", config)

    def test_malformed_url_before_unsupported_model(self, pipeline_config) -> None:
        config = dataclasses.replace(pipeline_config, llm_model="unknown/model")

        with pytest.raises(InvalidReferenceError):
            validate_request("https://github.com/octo", config)

    def test_unsupported_model(self, pipeline_config) -> None:
        config = dataclasses.replace(pipeline_config, llm_model="unknown/model")

        with pytest.raises(ConfigurationError, match="Unsupported LLM model"):
            validate_request(REPO_URL, config)
