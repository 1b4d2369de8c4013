"""
NoteStore Backend - Application Configuration
===============================================

What:  Configuration for the note service using Pydantic Settings.
Why:   Type-safe loading of the bind address, port and storage directory,
       validated once at startup.
How:   A `Settings` object is built by the CLI (from argv) or from the
       environment (NOTESTORE_* variables or a .env file) and handed to
       `create_app()`, which keeps it on `app.state`.
Who:   The CLI, the app factory, and middleware that needs tunables.
When:  Once at process startup.

Required values:
    host, port and storage_root have no defaults. A service that does not
    know where to listen or where its notes live refuses to start.
"""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    Keyword arguments take priority over environment variables, so the CLI
    can pass its parsed options straight in.
    """

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(description="Address to bind the HTTP server to")
    port: int = Field(ge=1, le=65535, description="Port to bind the HTTP server to")

    # ── Note Storage ──────────────────────────────────────────────────────
    # One `<name>.txt` file per note lives directly inside this directory.
    storage_root: str = Field(description="Directory holding the note files")

    # What: Replacement for the packaged UploadForm.html
    # None serves the copy shipped in notestore/static/
    upload_form_path: Optional[str] = Field(default=None)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: comma-separated origins, "*" for any
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("storage_root")
    @classmethod
    def validate_storage_root(cls, v: str) -> str:
        """Rejects a blank storage path."""
        if not v.strip():
            raise ValueError("storage_root must not be empty")
        return v

    # ── Rate Limiting ─────────────────────────────────────────────────────
    # What: Per-IP sliding window limit; 0 requests disables the limiter
    rate_limit_requests: int = Field(default=0, ge=0, le=100000)
    rate_limit_window: int = Field(default=60, ge=1, le=86400)  # seconds

    @property
    def rate_limit_enabled(self) -> bool:
        return self.rate_limit_requests > 0

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = SettingsConfigDict(
        env_prefix="NOTESTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # NOTESTORE_PORT and notestore_port both work
        extra="ignore",
    )
