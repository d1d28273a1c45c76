"""
Settings - Client configuration using Pydantic Settings.

Loads from environment variables and .env files.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings."""

    # Endpoint: "public" (API key) or "vertex" (project/region + bearer token)
    endpoint: Literal["public", "vertex"] = "public"

    # Public Gemini API
    api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY"),
    )
    api_version: str = "v1beta"
    public_base_url: str = "https://generativelanguage.googleapis.com"

    # Vertex AI
    gcp_project_id: str | None = None
    gcp_region_name: str | None = None
    gcp_access_token: SecretStr | None = None
    gcp_service_account_file: Path | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "GCP_SERVICE_ACCOUNT_FILE", "GOOGLE_APPLICATION_CREDENTIALS"
        ),
    )
    vertex_api_version: str = "v1"

    # Requests
    default_model: str = "gemini-pro"
    timeout_seconds: float = Field(default=30.0, gt=0)

    # Extra catalogue entries, merged over the packaged known_models.json
    known_models_file: Path | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
