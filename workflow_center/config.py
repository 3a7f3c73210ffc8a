from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables with validation."""

    model_config = SettingsConfigDict(
        env_file=(str(Path(__file__).resolve().parents[1] / ".env"), ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    app_name: str = Field(default="AI Workflow Center", alias="APP_NAME")
    app_env: Literal["development", "staging", "production", "test"] = Field(
        default="production",
        alias="APP_ENV",
    )
    app_debug: bool = Field(default=False, alias="APP_DEBUG")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
    )

    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        alias="CORS_ORIGINS",
    )

    workflow_api_base_url: str = Field(
        default="http://localhost:8080",
        alias="WORKFLOW_API_BASE_URL",
    )
    workflow_api_timeout: float = Field(default=60.0, gt=0, le=600, alias="WORKFLOW_API_TIMEOUT")

    login_api_base_url: str = Field(
        default="http://localhost:8080",
        alias="LOGIN_API_BASE_URL",
    )
    login_api_timeout: float = Field(default=30.0, gt=0, le=600, alias="LOGIN_API_TIMEOUT")

    login_redirect_url: str = Field(
        default="http://localhost:3000/dashboard",
        alias="LOGIN_REDIRECT_URL",
    )
    login_redirect_delay_seconds: int = Field(
        default=3,
        ge=0,
        le=60,
        alias="LOGIN_REDIRECT_DELAY_SECONDS",
    )

    token_storage_key: str = Field(default="xzero_token", alias="TOKEN_STORAGE_KEY")
    token_query_param: str = Field(default="token", alias="TOKEN_QUERY_PARAM")
    session_cookie_secure: bool = Field(default=False, alias="SESSION_COOKIE_SECURE")

    @field_validator("workflow_api_base_url", "login_api_base_url", "login_redirect_url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        """Require an absolute http(s) URL and drop any trailing slash."""
        normalized = value.strip()
        if not (normalized.startswith("http://") or normalized.startswith("https://")):
            raise ValueError("URL settings must start with http:// or https://")
        if normalized.endswith("/") and normalized.count("/") > 2:
            normalized = normalized.rstrip("/")
        return normalized

    @field_validator("token_storage_key", "token_query_param")
    @classmethod
    def validate_key(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Token storage key and query parameter must not be empty.")
        return normalized

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: str | list[str]) -> list[str]:
        """Support comma-separated CORS origins from environment variables."""
        if isinstance(value, str):
            if not value.strip():
                return []
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()


settings: Settings = get_settings()
