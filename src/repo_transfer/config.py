"""Runtime configuration.

Settings are read once from the environment and passed explicitly to the
client and the CLI. The model is frozen; nothing mutates it after startup.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Connection and concurrency settings for talking to the GitHub API."""

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    token: Annotated[
        SecretStr | None,
        Field(
            default=None,
            validation_alias=AliasChoices("REPO_TRANSFER_TOKEN", "GITHUB_TOKEN", "GH_TOKEN"),
            description="Token used as a bearer credential for every API call",
        ),
    ]

    # ------------------------------------------------------------------
    # Endpoint
    # ------------------------------------------------------------------

    api_url: str = Field(
        "https://api.github.com",
        description="Base URL of the GitHub REST API (GHES: https://host/api/v3)",
    )

    timeout: float = Field(30.0, gt=0, description="Per-request timeout in seconds")

    # ------------------------------------------------------------------
    # Operational boundaries
    # ------------------------------------------------------------------

    max_concurrency: int = Field(
        8,
        ge=1,
        description="Upper bound on in-flight API requests across a whole batch",
    )

    per_page: int = Field(100, ge=1, le=100, description="Page size for list endpoints")

    verbose: bool = Field(False, description="Emit debug diagnostics")

    model_config = SettingsConfigDict(
        env_prefix="REPO_TRANSFER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
        frozen=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, read from the environment on first use."""
    return Settings()
