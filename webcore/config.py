"""
webcore — Configuration
========================

What:  Process-wide settings that dictate how every request is handled.
How:   Pydantic Settings reads WEBCORE_* environment variables (or a .env
       file), validates types and ranges, and produces a frozen object that
       is shared by reference across all requests.
Who:   Passed to HandlerBuilder, which hands it to every Context.
When:  Loaded once at import time; tests and applications may construct
       their own instance instead of using the module singleton.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Dispatch-core settings loaded from environment variables.

    Attributes are grouped by concern.
    """

    # ── Problem Envelopes ─────────────────────────────────────────────────
    # What: Base URI of every error `type` link: {prefix}/{category}
    problem_type_prefix: str = Field(
        default="https://problems.example.com",
        description="Base URI for problem-details type links",
    )

    # What: Includes raw exception text in 4xx/5xx bodies under "error"
    # Production deployments MUST leave this off.
    debugging_enabled: bool = Field(default=False)

    # ── Request Bodies ────────────────────────────────────────────────────
    # What: Largest Content-Length accepted by Context.from_json (bytes)
    # Default: 1 MiB
    json_content_length_limit: int = Field(default=1 << 20, gt=0)

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_prefix="WEBCORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    @field_validator("problem_type_prefix")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Type links are joined with '/', so a trailing slash would double it."""
        return v.strip().rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper


# Singleton instance used when no explicit Settings is supplied
settings = Settings()
