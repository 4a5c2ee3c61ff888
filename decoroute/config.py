"""
decoroute: Configuration
==========================

What:  Server-level settings that are not part of a Server's constructor.
How:   Pydantic Settings reads DECOROUTE_* environment variables (or a .env
       file), validates types and provides a singleton `settings` object.
Who:   Read by decoroute.server when building the FastAPI app and binding it.
When:  Loaded once at import time; a Server may be given its own instance.

The port is deliberately absent: it is a constructor argument of Server.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings loaded from environment variables.

    All settings have defaults suitable for local development.
    """

    # ── Binding ───────────────────────────────────────────────────────────
    # Interface uvicorn binds in Server.listen()
    host: str = Field(default="0.0.0.0")

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    # uvicorn's own access log; the log_requests middleware is independent
    access_log: bool = Field(default=True)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Application ───────────────────────────────────────────────────────
    app_title: str = Field(default="decoroute")

    # /docs, /redoc and /openapi.json on the FastAPI app
    docs_enabled: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_prefix="DECOROUTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
