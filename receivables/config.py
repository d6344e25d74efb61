"""
Configuration management using Pydantic Settings.
All parameters are loaded from environment variables with sensible defaults.
"""

import os
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_BASE_PATH = Path(os.environ.get(
    "RECEIVABLES_BASE_PATH",
    os.environ.get("APP_BASE_PATH", Path.cwd())
))
ENV_FILE_PATH = APP_BASE_PATH / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE_PATH),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    app_env: str = Field(default="development")
    app_debug: bool = Field(default=False)
    app_log_level: str = Field(default="INFO")

    # Server
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)

    # Exact matching
    exact_match_epsilon: Decimal = Field(default=Decimal("0.01"))

    # Suggestion scoring
    tolerance_ratio: Decimal = Field(default=Decimal("0.15"))
    tolerance_floor: Decimal = Field(default=Decimal("500"))
    combination_bonus: Decimal = Field(default=Decimal("0.1"))

    # Subset search and ranking
    max_combination_size: int = Field(default=3, ge=1)
    max_suggestions: int = Field(default=5, ge=0, le=5)

    # Data access
    invoice_read_attempts: int = Field(default=3, ge=1)
    seed_file: Optional[str] = Field(default=None)  # JSON rows loaded at startup

    def calculate_tolerance(self, target: Decimal) -> Decimal:
        """
        Calculate the widest acceptable gap for a suggestion.
        Returns: max(target * tolerance_ratio, tolerance_floor)
        """
        return max(target * self.tolerance_ratio, self.tolerance_floor)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
