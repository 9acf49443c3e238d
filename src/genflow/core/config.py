"""Application configuration for genflow.

Values come from environment variables prefixed with ``GENFLOW_``. The Kie.ai
credential is also read from the bare ``KIE_API_KEY`` variable used by
existing deployments. The key defaults to an empty string so that the
application can be configured without it; :class:`~genflow.providers.KieClient`
refuses to start when it is missing.
"""

from __future__ import annotations

from typing import Any, cast

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """Pydantic settings container for the generation core."""

    model_config = cast(
        Any,
        SettingsConfigDict(
            env_prefix="GENFLOW_",
            env_file=".env",
            extra="ignore",
            populate_by_name=True,
        ),
    )

    kie_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("GENFLOW_KIE_API_KEY", "KIE_API_KEY"),
        description="Bearer credential for the Kie.ai API.",
    )
    kie_base_url: str = Field(
        default="https://api.kie.ai",
        description="Base URL of the Kie.ai API.",
    )
    kie_upload_url: str = Field(
        default="https://kieai.redpandaai.co/api/file-stream-upload",
        description="Multipart endpoint of the Kie.ai temporary file storage.",
    )
    database_url: str = Field(
        default="sqlite:///genflow.db",
        description="SQLAlchemy URL of the generation task store.",
    )
    log_level: str = Field(default="INFO")

    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Per-attempt timeout for provider requests.",
    )
    request_max_retries: int = Field(
        default=3,
        ge=0,
        description="Retries for rate-limited, server and network failures.",
    )

    poll_initial_delay_seconds: float = Field(default=2.0, ge=0.0)
    poll_interval_seconds: float = Field(
        default=2.0,
        ge=0.0,
        description="Interval used for the first few polling attempts.",
    )
    poll_standard_interval_seconds: float = Field(default=5.0, ge=0.0)
    poll_max_interval_seconds: float = Field(default=10.0, ge=0.0)
    poll_budget_seconds: float = Field(
        default=5 * 60,
        gt=0,
        description="Wall-clock budget before a task is failed with TIMEOUT.",
    )
    poll_max_attempts: int | None = Field(
        default=None,
        ge=1,
        description="Optional cap on polling attempts per task.",
    )

    resume_on_startup: bool = Field(default=True)
    resume_max_tasks: int = Field(default=50, ge=1)

    @classmethod
    def build_default(cls) -> "AppConfig":
        """Construct configuration from the environment."""

        return cls()


__all__ = ["AppConfig"]
