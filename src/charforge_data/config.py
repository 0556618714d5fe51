"""
Runtime settings for the preprocessing CLI.

Values come from environment variables, optionally loaded from a ``.env``
file in the working directory. Command-line flags override them.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .preprocess.joiner import TARGET_EDITION


logger = logging.getLogger("charforge-data")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    """Where raw data is read from and where documents are written."""
    raw_dir: Path = Field(default=Path("data/_raw"), description="Raw 5etools JSON directory")
    out_dir: Path = Field(default=Path("data"), description="Output directory")
    edition: str = Field(default=TARGET_EDITION, description="Preferred rules edition tag")
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level {value!r}")
        return level


def load_settings(env_file: Path | None = None) -> Settings:
    """Build :class:`Settings` from ``CHARFORGE_*`` environment variables."""
    if not load_dotenv(dotenv_path=env_file):
        logger.debug(".env file not found, using environment and defaults")

    values = {
        field_name: os.environ[env_name]
        for field_name, env_name in (
            ("raw_dir", "CHARFORGE_RAW_DIR"),
            ("out_dir", "CHARFORGE_OUT_DIR"),
            ("edition", "CHARFORGE_EDITION"),
            ("log_level", "CHARFORGE_LOG_LEVEL"),
        )
        if os.environ.get(env_name)
    }
    return Settings(**values)


__all__ = ["LOG_LEVELS", "Settings", "load_settings"]
