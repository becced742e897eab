"""
Global configuration shared by ordersim processes.

Provides globally shared configuration:
- OTEL export settings
- Generic service-level runtime settings (log level, environment)

Simulator-specific settings (order rate, product ranges, host credentials)
live in the simulator's own config module and must NOT be added here.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT: Path = Path(__file__).resolve().parents[1]
DEFAULT_ENV_PATH: Path = PROJECT_ROOT / ".env"


class OTELConfig(BaseSettings):
    """OpenTelemetry configuration."""

    enabled: bool = Field(
        default=True,
        description="Export logs, traces and metrics over OTLP. JSON stdout logs are always on.",
    )
    service_name: str = Field(default="ordersim")
    otlp_endpoint: str = Field(default="http://otel-collector:4317")
    otlp_headers: str | None = Field(default=None)
    resource_attributes: str = Field(default="deployment.environment=local")

    model_config = SettingsConfigDict(extra="ignore")


class ServiceConfig(BaseSettings):
    """Generic service-level config."""

    log_level: str = Field(default="INFO")
    environment: str = Field(default="local")

    model_config = SettingsConfigDict(extra="ignore")


class AppConfig(BaseSettings):
    """Root global configuration object."""

    otel: OTELConfig = Field(default_factory=OTELConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    @lru_cache(maxsize=1)
    def load(cls) -> "AppConfig":
        try:
            env_file = str(DEFAULT_ENV_PATH) if DEFAULT_ENV_PATH.exists() else None
            return cls(_env_file=env_file)
        except ValidationError as exc:
            raise RuntimeError("Invalid configuration values.") from exc

    def log_level_number(self) -> int:
        """Numeric logging level for `service.log_level`, INFO when unknown."""
        return getattr(logging, self.service.log_level.upper(), logging.INFO)
