"""
Process config from environment with defaults.
Uses pydantic-settings so all env vars are validated and documented in one model.
"""

from __future__ import annotations

import os
from pathlib import Path

import dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DEFAULTS_FILE = Path("~/.cloudwatch-build-metrics/defaults.json")


class PublisherSettings(BaseSettings):
    """
    All environment variables used by the build metrics publisher.
    Env vars are read from os.environ (UPPER_SNAKE_CASE by default).
    """

    model_config = SettingsConfigDict(
        env_file=None,  # .env is loaded by bootstrap_env() so os.environ is ready
        extra="ignore",
    )

    # LocalStack or VPC endpoint; unset talks to the public regional endpoint
    aws_endpoint_url: str | None = None

    # Where the global defaults triple is persisted by the CLI host
    defaults_file: Path = Field(
        default=DEFAULT_DEFAULTS_FILE,
        validation_alias="BUILD_METRICS_DEFAULTS_FILE",
    )

    # Instance metadata (IMDS) credential lookup
    metadata_timeout: float = Field(
        default=1.0, validation_alias="BUILD_METRICS_METADATA_TIMEOUT"
    )
    metadata_attempts: int = Field(
        default=1, validation_alias="BUILD_METRICS_METADATA_ATTEMPTS"
    )

    log_level: str = "INFO"

    @field_validator("aws_endpoint_url", mode="before")
    @classmethod
    def blank_endpoint_is_none(cls, v: object) -> str | None:
        if isinstance(v, str):
            return v.strip() or None
        return None

    @field_validator("defaults_file", mode="after")
    @classmethod
    def expand_home(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator("metadata_timeout", mode="before")
    @classmethod
    def clamp_metadata_timeout(cls, v: object) -> float:
        try:
            t = float(v)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 1.0
        return max(0.1, min(t, 30.0))

    @field_validator("metadata_attempts", mode="before")
    @classmethod
    def clamp_metadata_attempts(cls, v: object) -> int:
        try:
            n = int(v)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 1
        return max(1, min(n, 10))


def get_settings() -> PublisherSettings:
    """Return validated settings from current environment."""
    return PublisherSettings()


def bootstrap_env(path: Path | str | None = None) -> None:
    """
    Load a .env file into os.environ. Uses path when given, else BUILD_METRICS_ENV_FILE.
    Call once at startup before get_settings() so vars from the file are visible.
    """
    path = path or os.environ.get("BUILD_METRICS_ENV_FILE")
    if path:
        dotenv.load_dotenv(Path(path).resolve())
