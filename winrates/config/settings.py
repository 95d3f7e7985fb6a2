import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from winrates.models.enums import ErrorPolicy


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Aggregation
    minimum_elo: float = Field(
        0,
        ge=0,
        description="Both players must be rated at least this high for a battle to count.",
    )
    worker_count: int = Field(
        default_factory=lambda: os.cpu_count() or 1,
        ge=1,
        description="Number of concurrent workers extracting battle logs.",
    )
    error_policy: ErrorPolicy = Field(
        ErrorPolicy.ABORT,
        description="What to do with a malformed battle log (abort or skip).",
    )

    # Corpus
    exclusion: Optional[str] = Field(
        None, description="Skip day directories whose name contains this string."
    )
    species_rules_file: Optional[Path] = Field(
        None, description="JSON file with extra species normalization rules."
    )

    # Output
    table_width: int = Field(
        200,
        ge=40,
        description="Console width for the human-readable table; wider tables grow past it.",
    )

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )
    log_file: Optional[Path] = Field(
        None, description="Optional path of a rotating log file."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_prefix="WINRATES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
