"""
FastAPI web application exposing the cost estimation pipeline.

Provides REST API endpoints for:
- Repository analysis (synchronous, JSON in / JSON out)
- Health checks
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..core.config import PipelineConfig, settings
from ..core.exceptions import ClientInputError, EstimatorError
from ..core.logging import get_logger
from ..services.pipeline import analyze_repository
from .errors import METHOD_NOT_ALLOWED_MESSAGE, error_response

# ═══════════════════════════════════════════════════════════════════════════
# Application Setup
# ═══════════════════════════════════════════════════════════════════════════
logger = get_logger(__name__)

ANALYZE_PATH = "/api/analyze"

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Estimate the cost of the open issues of a GitHub repository",
    docs_url="/docs",
    redoc_url="/redoc",
)


# ═══════════════════════════════════════════════════════════════════════════
# Request Models
# ═══════════════════════════════════════════════════════════════════════════
class AnalyzeRequest(BaseModel):
    """Body of an analysis request."""

    model_config = ConfigDict(populate_by_name=True)

    repo_url: str | None = Field(default=None, alias="repoUrl")


@lru_cache(maxsize=1)
def get_pipeline_config() -> PipelineConfig:
    """Freeze the process settings into the pipeline configuration once."""
    return settings.pipeline_config()


# ═══════════════════════════════════════════════════════════════════════════
# Error Handlers
# ═══════════════════════════════════════════════════════════════════════════
@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed bodies as client input errors."""
    logger.info("invalid_request_body", path=request.url.path, errors=len(exc.errors()))
    return error_response(ClientInputError("Repository URL is required"))


# ═══════════════════════════════════════════════════════════════════════════
# API Routes
# ═══════════════════════════════════════════════════════════════════════════
@app.get("/health")
async def health() -> dict[str, str]:
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {"status": "ok", "version": settings.app_version}


@app.post(ANALYZE_PATH)
async def analyze(body: AnalyzeRequest) -> Any:
    """
    Estimate the cost of every open issue of a repository.

    Args:
        body: Request body carrying ``repoUrl``

    Returns:
        CSV report and summary, or a JSON error object
    """
    try:
        if not body.repo_url or not body.repo_url.strip():
            raise ClientInputError("Repository URL is required")

        report = await analyze_repository(body.repo_url, get_pipeline_config())

    except EstimatorError as e:
        logger.warning("analysis_failed", error_type=type(e).__name__, **e.context)
        return error_response(e)

    except Exception as e:
        logger.exception("analysis_unexpected_error")
        return error_response(e)

    return report.to_response()


@app.api_route(
    ANALYZE_PATH,
    methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def analyze_method_not_allowed() -> JSONResponse:
    return JSONResponse(
        status_code=405,
        content={"error": METHOD_NOT_ALLOWED_MESSAGE},
        headers={"Allow": "POST"},
    )


# ═══════════════════════════════════════════════════════════════════════════
# Startup/Shutdown Events
# ═══════════════════════════════════════════════════════════════════════════
@app.on_event("startup")
async def startup_event() -> None:
    """Application startup."""
    logger.info(
        "application_started",
        environment=settings.environment,
        model=settings.llm_model,
        github_configured=settings.has_github_token,
        llm_configured=settings.has_llm_api_key,
    )


@app.on_event("shutdown")
async def shutdown_event() -> None:
    """Application shutdown."""
    logger.info("application_shutdown")
