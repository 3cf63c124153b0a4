"""Core application components."""

from __future__ import annotations

from .config import PipelineConfig, settings
from .exceptions import EstimatorError
from .logging import get_logger

__all__ = ["settings", "PipelineConfig", "EstimatorError", "get_logger"]
