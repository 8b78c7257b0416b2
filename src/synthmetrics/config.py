"""Application configuration loading via Pydantic settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from synthmetrics.adapters.frameworks.asgi import DEFAULT_DURATION_BUCKETS_MS


class Settings(BaseSettings):
    """Runtime configuration sourced from ``SYNTHMETRICS_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SYNTHMETRICS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_json: bool = True
    cpu_sample_interval: float = Field(default=5.0, gt=0)
    process_metrics_interval: float = Field(default=5.0, gt=0)
    stress_duration: float = Field(default=60.0, gt=0)
    health_failure_rate: float = Field(default=0.1, ge=0, le=1)
    default_metrics: bool = True
    request_duration_buckets: list[float] = Field(
        default_factory=lambda: [float(b) for b in DEFAULT_DURATION_BUCKETS_MS]
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @field_validator("request_duration_buckets")
    @classmethod
    def _ascending_buckets(cls, value: list[float]) -> list[float]:
        if not value:
            raise ValueError("at least one bucket is required")
        if any(lower >= upper for lower, upper in zip(value, value[1:])):
            raise ValueError("buckets must be strictly ascending")
        return value


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""
    return Settings()
