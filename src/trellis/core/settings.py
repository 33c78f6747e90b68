"""Process-level settings for Trellis applications.

Values that used to be process globals in the original framework
(debug mode, the mail transfer command, logger flush thresholds) are
read once from the environment and ``.env`` files and validated at
startup.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup
    - **Environment-driven:** ``TRELLIS_*`` env vars and ``.env`` files
    - **Extra ignore:** Unknown env vars don't cause startup failures

Examples:
    >>> from trellis.core.settings import get_settings
    >>> get_settings().debug
    False

Tags:
    settings, configuration, pydantic, environment, trellis-core

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TrellisSettings(BaseSettings):
    """Settings shared by every Trellis application.

    Fields
    ──────
    debug        : Enable trace messages and the class/file naming guard
    log_level    : Level for framework diagnostics (structlog)
    log_format   : ``console`` or ``json`` diagnostics output
    sendmail     : Mail transfer command used by the email log route
    auto_flush   : Log entries buffered before a forced flush (0 = never)
    auto_dump    : Whether an automatic flush also dumps routes immediately
    """

    model_config = SettingsConfigDict(
        env_prefix="TRELLIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Diagnostics ──────────────────────────────────────────────
    debug: bool = False
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    # ── Mail ─────────────────────────────────────────────────────
    sendmail: str = "sendmail"

    # ── Application logger ───────────────────────────────────────
    auto_flush: int = Field(default=10000, ge=0)
    auto_dump: bool = False

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return value


_settings: TrellisSettings | None = None


def get_settings() -> TrellisSettings:
    """Return the cached settings instance, creating it on first call."""
    global _settings
    if _settings is None:
        _settings = TrellisSettings()
    return _settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    global _settings
    _settings = None
