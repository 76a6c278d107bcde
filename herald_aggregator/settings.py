"""Environment settings for Herald.

All fields can be set through ``HERALD_*`` environment variables or a
``.env`` file, e.g. ``HERALD_ISOLATE_HANDLER_ERRORS=true``.
"""

import logging
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from herald_shared.logging import configure_logging

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class AggregatorSettings(BaseSettings):
    """Process-level settings for the event aggregator."""

    # =========================================================================
    # LOGGING
    # =========================================================================
    log_level: str = "INFO"
    json_logs: bool = True

    # =========================================================================
    # DISPATCH
    # =========================================================================
    # When true, a failing handler is logged and reported to on_handler_error
    # instead of aborting the rest of the publish round.
    isolate_handler_errors: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = str(v).upper()
        if level not in _LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of {', '.join(_LOG_LEVELS)}"
            )
        return level

    model_config = SettingsConfigDict(
        env_prefix="HERALD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def log_level_number(self) -> int:
        return getattr(logging, self.log_level)

    def configure_logging(self, force: bool = False) -> None:
        """Apply the logging settings to stdlib logging and structlog."""
        configure_logging(
            level=self.log_level,
            json_output=self.json_logs,
            force=force,
        )


# =============================================================================
# GLOBAL SETTINGS (Lazy Initialization)
# =============================================================================

_settings: Optional[AggregatorSettings] = None


def get_settings() -> AggregatorSettings:
    """Get global settings instance.

    Creates a new AggregatorSettings instance lazily if none exists.
    Prefer passing settings explicitly over this global getter.
    """
    global _settings
    if _settings is None:
        _settings = AggregatorSettings()
    return _settings


def set_settings(settings_instance: AggregatorSettings) -> None:
    """Set the global settings instance (bootstrap and tests)."""
    global _settings
    _settings = settings_instance


def reset_settings() -> None:
    """Reset the global settings instance.

    Forces re-creation on next get_settings() call.
    """
    global _settings
    _settings = None


__all__ = [
    "AggregatorSettings",
    "get_settings",
    "reset_settings",
    "set_settings",
]
