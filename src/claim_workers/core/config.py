# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Configuration management using Pydantic Settings."""

from beartype import beartype
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Worker settings with immutable configuration."""

    model_config = SettingsConfigDict(
        env_file=None,
        env_file_encoding="utf-8",
        frozen=True,  # Immutable settings
        validate_default=True,
        extra="forbid",
    )

    # External task engine
    camunda_base_url: str = Field(
        default="http://localhost:8080/engine-rest",
        description="Base URL of the workflow engine REST API",
        min_length=1,
    )
    worker_id: str = Field(
        default="insurance-worker",
        description="Identifier this worker instance locks tasks with",
        min_length=1,
    )
    lock_duration_ms: int = Field(
        default=30000,
        gt=0,
        le=3_600_000,
        description="How long a fetched task stays locked to this worker",
    )
    max_tasks: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum number of tasks fetched per poll",
    )
    poll_interval_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Pause between polls when no task was returned",
    )
    async_response_timeout_ms: int = Field(
        default=0,
        ge=0,
        le=300_000,
        description="Long-poll timeout sent with fetchAndLock (0 disables long polling)",
    )
    worker_concurrency: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Tasks processed concurrently per subscription",
    )
    task_retries: int = Field(
        default=3,
        ge=0,
        le=100,
        description="Retries reported for a task that has no retry counter yet",
    )
    task_retry_timeout_ms: int = Field(
        default=5000,
        ge=0,
        le=3_600_000,
        description="Delay before the engine makes a failed task available again",
    )

    # Remote services (unset means the client is not configured)
    claims_api_url: str | None = Field(
        default=None,
        description="Base URL of the claims REST service",
    )
    employees_api_url: str | None = Field(
        default=None,
        description="Base URL of the employees REST service",
    )
    customers_api_url: str | None = Field(
        default=None,
        description="Base URL of the customers REST service",
    )
    policies_api_url: str | None = Field(
        default=None,
        description="Base URL of the policies REST service",
    )
    notification_webhook_url: str | None = Field(
        default=None,
        description="Webhook customer notifications are posted to (logged when unset)",
    )
    api_timeout_seconds: float = Field(
        default=10.0,
        ge=1.0,
        le=120.0,
        description="Timeout applied to every remote service call",
    )

    # Cache
    redis_url: str | None = Field(
        default=None,
        description="Redis URL for the lookup cache (in-memory cache when unset)",
    )
    cache_ttl_seconds: int = Field(
        default=300,
        ge=1,
        le=86400,
        description="Time to live of cached lookups",
    )
    cache_max_entries: int = Field(
        default=10_000,
        ge=1,
        le=1_000_000,
        description="Maximum number of entries held by the in-memory cache",
    )

    # Runtime
    app_env: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Root log level",
    )

    @field_validator("camunda_base_url")
    @classmethod
    def validate_camunda_base_url(cls: type["Settings"], v: str) -> str:
        """Ensure the engine URL is an HTTP URL without a trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid workflow engine URL: {v}")
        return v.rstrip("/")

    @field_validator(
        "claims_api_url",
        "employees_api_url",
        "customers_api_url",
        "policies_api_url",
        "notification_webhook_url",
    )
    @classmethod
    def validate_service_urls(cls: type["Settings"], v: str | None) -> str | None:
        """Treat blank URLs as unset and reject non-HTTP ones."""
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid service URL: {v}")
        return v.rstrip("/")

    @field_validator("worker_id")
    @classmethod
    def validate_worker_id(cls: type["Settings"], v: str) -> str:
        """Reject whitespace-only worker ids."""
        if not v.strip():
            raise ValueError("Worker ID cannot be blank")
        return v.strip()


_settings: Settings | None = None


@beartype
def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


@beartype
def clear_settings_cache() -> None:
    """Clear settings cache (for testing)."""
    global _settings
    _settings = None
