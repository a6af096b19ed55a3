"""
Configuration module for contextkit with environment overrides.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """
    Application settings using Pydantic for validation
    and environment variable support.
    """

    # Registry bootstrap
    fetchers_file: Optional[Path] = Field(
        default=None, description="YAML file declaring the fetchers to register"
    )

    # Aggregation settings
    max_workers: int = Field(
        default=4, ge=1, description="Maximum number of workers for parallel fetching"
    )

    skip_unregistered: bool = Field(
        default=False,
        description="Skip fetch requests whose key has no registered fetcher",
    )

    # General settings
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = {
        "env_prefix": "CONTEXTKIT_",
        "case_sensitive": False,
    }

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        level = str(v).upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level


settings = Settings()
