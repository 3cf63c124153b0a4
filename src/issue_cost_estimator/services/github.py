"""
GitHub REST client retrieving the open issues of a repository.

Pages are requested sequentially; pull requests, which GitHub includes in
issue listings, are dropped before issues are materialized.
"""

from __future__ import annotations

from types import TracebackType
from typing import Any

import httpx

from ..core.exceptions import UpstreamError
from ..core.logging import LoggerMixin
from ..domain.models import Issue, RepositoryRef

DEFAULT_PAGE_SIZE = 100
_HTTP_ERROR_STATUS_THRESHOLD = 400


def is_pull_request(payload: dict[str, Any]) -> bool:
    """Return True for issue-listing entries that describe pull requests."""
    return payload.get("pull_request") is not None


class GitHubIssueFetcher(LoggerMixin):
    """
    Fetches every open issue of a repository from the GitHub REST API.

    Parameters
    ----------
    token
        Bearer token for the GitHub API.
    base_url
        REST API root, overridable for GitHub Enterprise.
    page_size
        Number of issues requested per page.
    http_client
        Optional ``httpx.AsyncClient`` for testing. If not provided, the
        fetcher creates and owns its own client.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = "https://api.github.com",
        page_size: int = DEFAULT_PAGE_SIZE,
        timeout_s: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._page_size = page_size
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "issue-cost-estimator",
        }
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout_s)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this fetcher owns it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> GitHubIssueFetcher:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def fetch_open_issues(self, repo: RepositoryRef) -> list[Issue]:
        """
        Retrieve all open issues, excluding pull requests, in page order.

        Args:
            repo: Repository to list

        Returns:
            Issues in the order GitHub returned them; empty when the
            repository has no open issues

        Raises:
            UpstreamNotFoundError: GitHub answered 404
            UpstreamRateLimitedError: GitHub answered 403
            UpstreamError: Any other HTTP or transport failure
        """
        issues: list[Issue] = []
        page = 1

        while True:
            entries = await self._fetch_page(repo, page)
            if not entries:
                break

            actual = [Issue.from_api(e) for e in entries if not is_pull_request(e)]
            issues.extend(actual)
            self.logger.debug(
                "issue_page_fetched",
                repository=repo.full_name,
                page=page,
                entries=len(entries),
                issues=len(actual),
            )

            if len(entries) < self._page_size:
                break
            page += 1

        self.logger.info("issues_fetched", repository=repo.full_name, count=len(issues))
        return issues

    async def _fetch_page(self, repo: RepositoryRef, page: int) -> list[dict[str, Any]]:
        url = f"{self._base_url}/repos/{repo.owner}/{repo.name}/issues"
        params = {"state": "open", "per_page": self._page_size, "page": page}

        try:
            response = await self._client.get(url, params=params, headers=self._headers)
        except httpx.HTTPError as e:
            raise UpstreamError(
                "GitHub API request failed",
                repository=repo.full_name,
                page=page,
                error=str(e),
            ) from e

        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise UpstreamError.from_status(response.status_code, repo.full_name)

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamError(
                "GitHub API returned invalid JSON", repository=repo.full_name, page=page
            ) from e

        if not isinstance(payload, list):
            raise UpstreamError(
                "GitHub API returned an unexpected payload",
                repository=repo.full_name,
                page=page,
            )
        return payload
