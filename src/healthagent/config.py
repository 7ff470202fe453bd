"""Application configuration using Pydantic Settings."""

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_MCP_SERVER_NAME = "inner-mcp-server"
DEFAULT_MCP_CLIENT_NAME = "inner-mcp-agent-host"
SECRET_FILE_ENV_VARS = ("GEMINI_API_KEY",)


def _load_secret_file_env_vars() -> None:
    """Allow secrets to be sourced from *_FILE env vars (Docker secrets)."""
    for env_var in SECRET_FILE_ENV_VARS:
        file_var = f"{env_var}_FILE"
        file_path = os.getenv(file_var)
        if not file_path:
            continue
        try:
            value = Path(file_path).read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise RuntimeError(f"Failed to read {file_var} at {file_path}") from exc
        if not value:
            raise ValueError(f"{file_var} is empty")
        os.environ[env_var] = value


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ----- Application -----
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = False

    # ----- Access -----
    # Empty disables the domain check (local development)
    allowed_domain: str = ""

    # ----- Gemini -----
    gemini_api_key: str = ""
    gemini_model: str = DEFAULT_GEMINI_MODEL

    # ----- Chat -----
    # 0 disables the deadline
    chat_timeout_seconds: float = Field(default=0.0, ge=0.0)

    # ----- MCP -----
    mcp_server_name: str = DEFAULT_MCP_SERVER_NAME
    mcp_client_name: str = DEFAULT_MCP_CLIENT_NAME
    mcp_client_version: str = "1.0.0"

    # ----- CORS -----
    # Can be set as JSON list or comma-separated string
    cors_origins_str: str = Field(default="http://localhost:5173", alias="cors_origins")

    @property
    def cors_origins(self) -> list[str]:
        """Parse cors_origins from comma-separated string or JSON list."""
        v = self.cors_origins_str
        if not v:
            return ["http://localhost:5173"]
        if v.startswith("["):
            raw = json.loads(v)
            if not isinstance(raw, list) or not all(isinstance(origin, str) for origin in raw):
                raise ValueError("CORS_ORIGINS must be a JSON list of strings")
            return raw
        return [origin.strip() for origin in v.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def domain_check_enabled(self) -> bool:
        return bool(self.allowed_domain.strip())

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Ensure secure settings in production environment."""
        if self.is_production:
            if self.app_debug:
                raise ValueError("APP_DEBUG must be false in production!")
            if any(origin == "*" or "localhost" in origin for origin in self.cors_origins):
                raise ValueError("CORS_ORIGINS must be restricted in production!")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    _load_secret_file_env_vars()
    return Settings()
