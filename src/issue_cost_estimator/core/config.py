"""
Core configuration management using Pydantic V2 Settings.

This module provides type-safe, validated configuration management with support for:
- Environment variables
- .env file loading
- Runtime validation
- An immutable per-process pipeline configuration
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

SUPPORTED_LLM_PROVIDERS = ("openai/", "ollama/")


@dataclass(frozen=True)
class PipelineConfig:
    """
    Immutable configuration handed to the pipeline orchestrator.

    Built once at process start; secrets are plain strings here and must
    never be logged.
    """

    github_token: str
    llm_api_key: str
    llm_model: str = "openai/gpt-4o-mini"
    ollama_url: str = "http://localhost:11434"
    github_api_url: str = "https://api.github.com"
    classification_delay_s: float = 0.5
    request_timeout_s: float = 300.0

    def __repr__(self) -> str:
        return (
            f"PipelineConfig(llm_model={self.llm_model!r}, "
            f"github_api_url={self.github_api_url!r}, "
            f"classification_delay_s={self.classification_delay_s!r}, "
            f"request_timeout_s={self.request_timeout_s!r})"
        )


class Settings(BaseSettings):
    """
    Application-wide configuration with environment variable support.

    All settings can be overridden via environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ═══════════════════════════════════════════════════════════════════════
    # Credentials
    # ═══════════════════════════════════════════════════════════════════════
    github_token: SecretStr | None = Field(
        default=None,
        description="GitHub API bearer token",
    )

    llm_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("llm_api_key", "openai_api_key"),
        description="API key for the LLM provider",
    )

    # ═══════════════════════════════════════════════════════════════════════
    # LLM Configuration
    # ═══════════════════════════════════════════════════════════════════════
    llm_model: str = Field(
        default="openai/gpt-4o-mini",
        description="LLM model identifier (prefix: openai/, ollama/)",
    )

    ollama_url: str = Field(
        default="http://localhost:11434",
        description="Ollama server URL for local models",
    )

    # ═══════════════════════════════════════════════════════════════════════
    # Pipeline Configuration
    # ═══════════════════════════════════════════════════════════════════════
    github_api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL",
    )

    classification_delay_seconds: float = Field(
        default=0.5,
        ge=0,
        le=60,
        description="Pause between consecutive LLM classifications",
    )

    request_timeout_seconds: int = Field(
        default=300,
        ge=10,
        le=3600,
        description="Upper bound for a single repository analysis",
    )

    # ═══════════════════════════════════════════════════════════════════════
    # Application Configuration
    # ═══════════════════════════════════════════════════════════════════════
    app_name: str = Field(
        default="Issue Cost Estimator",
        description="Application display name",
    )

    app_version: str = Field(
        default="1.0.0",
        description="Application version",
    )

    environment: Literal["development", "production", "testing"] = Field(
        default="development",
        description="Runtime environment",
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # ═══════════════════════════════════════════════════════════════════════
    # Logging Configuration
    # ═══════════════════════════════════════════════════════════════════════
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )

    # ═══════════════════════════════════════════════════════════════════════
    # Web Server Configuration
    # ═══════════════════════════════════════════════════════════════════════
    app_host: str = Field(
        default="0.0.0.0",
        description="Web server host",
    )

    app_port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Web server port",
    )

    # ═══════════════════════════════════════════════════════════════════════
    # Validators
    # ═══════════════════════════════════════════════════════════════════════
    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is uppercase."""
        return v.upper() if isinstance(v, str) else v

    @field_validator("llm_model")
    @classmethod
    def validate_model_format(cls, v: str) -> str:
        """Default bare model names to the OpenAI provider."""
        if not v.startswith(SUPPORTED_LLM_PROVIDERS) and "/" not in v:
            return f"openai/{v}"
        return v

    # ═══════════════════════════════════════════════════════════════════════
    # Helper Methods
    # ═══════════════════════════════════════════════════════════════════════
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def has_github_token(self) -> bool:
        return _secret_value(self.github_token) != ""

    @property
    def has_llm_api_key(self) -> bool:
        return _secret_value(self.llm_api_key) != ""

    def pipeline_config(self) -> PipelineConfig:
        """
        Freeze the settings into the configuration the pipeline consumes.

        Returns:
            PipelineConfig: Immutable pipeline configuration

        Raises:
            ConfigurationError: If a required secret is absent
        """
        if not self.has_github_token:
            raise ConfigurationError("GitHub token not configured", setting="GITHUB_TOKEN")
        if not self.has_llm_api_key:
            raise ConfigurationError("LLM API key not configured", setting="LLM_API_KEY")

        return PipelineConfig(
            github_token=_secret_value(self.github_token),
            llm_api_key=_secret_value(self.llm_api_key),
            llm_model=self.llm_model,
            ollama_url=self.ollama_url,
            github_api_url=self.github_api_url,
            classification_delay_s=self.classification_delay_seconds,
            request_timeout_s=float(self.request_timeout_seconds),
        )


def _secret_value(secret: SecretStr | None) -> str:
    if secret is None:
        return ""
    return secret.get_secret_value().strip()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings instance.

    Returns:
        Settings: Singleton settings object
    """
    return Settings()


# Convenience export
settings: Settings = get_settings()
