"""
Custom exception hierarchy for the Issue Cost Estimator.

Provides domain-specific exceptions with rich error context.
"""

from __future__ import annotations

from typing import Any


class EstimatorError(Exception):
    """Base exception for all estimator errors."""

    def __init__(self, message: str, **context: Any) -> None:
        """
        Initialize exception with message and context.

        Args:
            message: Human-readable error message
            **context: Additional error context for logging
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Return formatted error message."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ClientInputError(EstimatorError):
    """Raised when the caller supplied missing or malformed input."""


class InvalidReferenceError(ClientInputError):
    """Raised when a repository URL has no owner/name path."""


class ConfigurationError(EstimatorError):
    """Raised when required configuration or secrets are absent."""


class UpstreamError(EstimatorError):
    """Raised when the GitHub API request fails."""

    def __init__(
        self, message: str, *, status_code: int | None = None, **context: Any
    ) -> None:
        super().__init__(message, **context)
        self.status_code = status_code

    @classmethod
    def from_status(cls, status_code: int, repository: str) -> UpstreamError:
        """Return the error kind matching a GitHub HTTP status."""
        if status_code == 404:
            return UpstreamNotFoundError(
                "Repository not found", status_code=status_code, repository=repository
            )
        if status_code == 403:
            return UpstreamRateLimitedError(
                "GitHub API rate limit exceeded",
                status_code=status_code,
                repository=repository,
            )
        return cls(
            f"GitHub API responded with HTTP {status_code}",
            status_code=status_code,
            repository=repository,
        )


class UpstreamNotFoundError(UpstreamError):
    """Raised when GitHub reports the repository as missing or inaccessible."""


class UpstreamRateLimitedError(UpstreamError):
    """Raised when GitHub refuses the request because of rate limiting."""


class ClassifierError(EstimatorError):
    """Raised when LLM communication fails."""


class PipelineError(EstimatorError):
    """Raised when the pipeline fails for an unclassified reason."""

