"""
Configuration module for the portal client runtime.

The Settings object centralizes environment-driven configuration with strict
typing and validation rules so that the rest of the codebase can rely on a
single source of truth.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal
from urllib.parse import urlsplit

from pydantic import AnyHttpUrl, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from portal_client.i18n.config import SUPPORTED_LOCALE_CODES

SESSION_TRACKING_METHOD = "/api/method/erp.api.parent_portal.session_tracking"

PREFERENCE_STORE_SCHEMES = frozenset({"memory", "redis", "rediss"})


class Settings(BaseSettings):
    """Client configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    environment: Literal["local", "test", "staging", "production"] = Field(
        default="local",
        alias="APP_ENV",
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    api_base_url: AnyHttpUrl = Field(
        default="http://localhost:8000",
        alias="API_BASE_URL",
        validate_default=True,
        description="Backend origin that serves the session tracking methods.",
    )
    request_timeout_seconds: float = Field(
        default=5.0,
        alias="REQUEST_TIMEOUT_SECONDS",
        description="Per-request timeout handed to the HTTP transport.",
    )

    preference_store_url: str = Field(default="memory://", alias="PREFERENCE_STORE_URL")
    preference_namespace: str = Field(default="portal", alias="PREFERENCE_NAMESPACE")

    default_locale: str = Field(default="vi", alias="DEFAULT_LOCALE")
    language_preference_key: str = Field(default="userLanguage", alias="LANGUAGE_PREFERENCE_KEY")
    auth_token_key: str = Field(default="authToken", alias="AUTH_TOKEN_KEY")  # noqa: S105

    session_start_path: str = Field(
        default=f"{SESSION_TRACKING_METHOD}.track_app_session",
        alias="SESSION_START_PATH",
    )
    session_end_path: str = Field(
        default=f"{SESSION_TRACKING_METHOD}.track_app_close",
        alias="SESSION_END_PATH",
    )

    @field_validator(
        "preference_namespace",
        "language_preference_key",
        "auth_token_key",
        mode="before",
    )
    @classmethod
    def _strip_string(cls, value: str | None, info: ValidationInfo) -> str:
        if value is None:
            field = (info.field_name or "value").upper()
            raise ValueError(f"{field} must be provided.")
        trimmed = str(value).strip()
        if not trimmed:
            field = (info.field_name or "value").upper()
            raise ValueError(f"{field} must not be empty.")
        return trimmed

    @field_validator("request_timeout_seconds")
    @classmethod
    def _validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("REQUEST_TIMEOUT_SECONDS must be positive.")
        return value

    @field_validator("preference_store_url")
    @classmethod
    def _validate_store_url(cls, value: str) -> str:
        candidate = value.strip()
        scheme = urlsplit(candidate).scheme.lower()
        if scheme not in PREFERENCE_STORE_SCHEMES:
            allowed = ", ".join(sorted(PREFERENCE_STORE_SCHEMES))
            raise ValueError(f"PREFERENCE_STORE_URL scheme must be one of: {allowed}.")
        return candidate

    @field_validator("default_locale")
    @classmethod
    def _validate_default_locale(cls, value: str) -> str:
        candidate = value.strip().lower()
        if candidate not in SUPPORTED_LOCALE_CODES:
            supported = ", ".join(sorted(SUPPORTED_LOCALE_CODES))
            raise ValueError(f"DEFAULT_LOCALE must be one of: {supported}.")
        return candidate

    @field_validator("session_start_path", "session_end_path")
    @classmethod
    def _validate_path(cls, value: str, info: ValidationInfo) -> str:
        candidate = value.strip()
        if not candidate.startswith("/"):
            field = (info.field_name or "value").upper()
            raise ValueError(f"{field} must be an absolute path starting with '/'.")
        return candidate

    @property
    def api_origin(self) -> str:
        """Return the base URL without a trailing slash."""
        return str(self.api_base_url).rstrip("/")

    @property
    def uses_redis_store(self) -> bool:
        return urlsplit(self.preference_store_url).scheme.lower() in {"redis", "rediss"}


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance so configuration is evaluated once."""
    return Settings()


settings = get_settings()
