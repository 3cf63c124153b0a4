"""Translation of pipeline errors into JSON error responses."""

from __future__ import annotations

from fastapi.responses import JSONResponse

from ..core.exceptions import (
    ClientInputError,
    ConfigurationError,
    EstimatorError,
    UpstreamNotFoundError,
    UpstreamRateLimitedError,
)

NOT_FOUND_MESSAGE = "Repository not found or you do not have access to it"
RATE_LIMITED_MESSAGE = "GitHub API rate limit exceeded. Please try again later."
UNEXPECTED_MESSAGE = "An error occurred while processing the repository"
METHOD_NOT_ALLOWED_MESSAGE = "Method not allowed"


def error_body(exc: Exception) -> tuple[int, dict[str, str]]:
    """
    Map an exception to an HTTP status and JSON body.

    Configuration messages name the missing setting, never its value.
    """
    if isinstance(exc, ClientInputError):
        return 400, {"error": exc.message}
    if isinstance(exc, ConfigurationError):
        return 500, {"error": exc.message}
    if isinstance(exc, UpstreamNotFoundError):
        return 404, {"error": NOT_FOUND_MESSAGE}
    if isinstance(exc, UpstreamRateLimitedError):
        return 403, {"error": RATE_LIMITED_MESSAGE}

    if isinstance(exc, EstimatorError):
        details = str(exc.context.get("error", exc.message))
    else:
        details = str(exc)
    return 500, {"error": UNEXPECTED_MESSAGE, "details": details}


def error_response(exc: Exception) -> JSONResponse:
    status_code, body = error_body(exc)
    return JSONResponse(status_code=status_code, content=body)
