"""
Pytest configuration and fixtures.

Provides shared fixtures and configuration for all tests.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from issue_cost_estimator.core.config import PipelineConfig, Settings
from issue_cost_estimator.core.exceptions import ClassifierError
from issue_cost_estimator.domain.models import Issue

GITHUB_API = "https://api.github.test"


class StubCompletionClient:
    """LLM stand-in returning canned replies in order."""

    def __init__(self, *replies: str | BaseException) -> None:
        self.replies = list(replies)
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if self.replies else ClassifierError("no reply")
        if isinstance(reply, BaseException):
            raise reply
        return reply


def llm_reply(complexity: str, reasoning: str = "Looks routine") -> str:
    """Build a chat reply wrapping the JSON verdict in prose."""
    payload = json.dumps({"complexity": complexity, "reasoning": reasoning})
    return f"Here is my assessment:\n{payload}\nHope this helps."


def issue_payload(
    number: int,
    *,
    title: str | None = None,
    body: str | None = "Something is off",
    labels: tuple[str, ...] = (),
    comments: int = 0,
    pull_request: bool = False,
) -> dict[str, Any]:
    """Build a GitHub REST issue listing entry."""
    payload: dict[str, Any] = {
        "number": number,
        "title": title or f"Issue {number}",
        "body": body,
        "labels": [{"id": i, "name": name} for i, name in enumerate(labels)],
        "comments": comments,
        "html_url": f"https://github.com/octo/reef/issues/{number}",
        "state": "open",
    }
    if pull_request:
        payload["pull_request"] = {
            "url": f"https://api.github.com/repos/octo/reef/pulls/{number}"
        }
    return payload


def github_transport(
    pages: list[list[dict[str, Any]]] | None = None,
    *,
    status_code: int = 200,
    calls: list[httpx.Request] | None = None,
) -> httpx.MockTransport:
    """Serve ``pages`` by their ``page`` query parameter, or a fixed error status."""

    def _handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        if status_code != 200:
            return httpx.Response(status_code=status_code, json={"message": "nope"})
        page = int(request.url.params.get("page", "1"))
        data = (pages or [])[page - 1] if page <= len(pages or []) else []
        return httpx.Response(status_code=200, json=data)

    return httpx.MockTransport(_handler)


@pytest.fixture
def pipeline_config() -> PipelineConfig:
    """Pipeline configuration with dummy secrets and no classification delay."""
    return PipelineConfig(
        github_token="ghp-test-token",
        llm_api_key="sk-test-key",
        github_api_url=GITHUB_API,
        classification_delay_s=0.0,
        request_timeout_s=5.0,
    )


@pytest.fixture
def mock_settings() -> Settings:
    """Provide settings isolated from the environment and .env files."""
    return Settings(
        _env_file=None,
        github_token="ghp-test-token",
        llm_api_key="sk-test-key",
        environment="testing",
        log_level="DEBUG",
    )


@pytest.fixture
def make_issue() -> Callable[..., Issue]:
    """Factory for issues with sensible defaults."""

    def _make(
        number: int = 1,
        *,
        title: str = "Example issue",
        body: str | None = None,
        labels: tuple[str, ...] = (),
        comment_count: int = 0,
    ) -> Issue:
        return Issue(
            number=number,
            title=title,
            body=body,
            labels=labels,
            comment_count=comment_count,
            html_url=f"https://github.com/octo/reef/issues/{number}",
        )

    return _make


@pytest.fixture
def stub_llm() -> type[StubCompletionClient]:
    """Class building LLM stand-ins: ``stub_llm(reply, error, ...)``."""
    return StubCompletionClient


@pytest.fixture
def reply() -> Callable[..., str]:
    """Builder of chat replies carrying a JSON verdict."""
    return llm_reply


@pytest.fixture
def payload() -> Callable[..., dict[str, Any]]:
    """Builder of GitHub REST issue entries."""
    return issue_payload


@pytest.fixture
def transport() -> Callable[..., httpx.MockTransport]:
    """Builder of mock GitHub transports."""
    return github_transport
