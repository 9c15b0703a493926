"""Application configuration via pydantic-settings.

Reads from environment variables and .env file at project root.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root is 3 levels up from this file:
# src/pizza_skill/config.py -> project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    """Application settings loaded from environment / .env file."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Ordering ---
    dry_mode: bool = True
    item_code: str = "14SCREEN"
    tip_amount: float = 1.0
    max_store_distance: float = 100.0

    # --- Secrets Manager ---
    secret_name: str = "dominosOrdering"
    aws_region: str | None = None

    # --- Domino's API ---
    dominos_base_url: str = "https://order.dominos.com"
    dominos_tracking_url: str = (
        "https://tracker.dominos.com/tracker-presentation-service/v2/orders"
    )
    http_timeout_seconds: float = 15.0

    # --- Logging ---
    log_level: str = "INFO"
    log_file: str = ""

    # --- Langfuse ---
    langfuse_public_key: str = ""
    langfuse_secret_key: str = ""
    langfuse_base_url: str = "https://cloud.langfuse.com"

    @field_validator("dry_mode", mode="before")
    @classmethod
    def _only_literal_false_disables(cls, value: object) -> object:
        # Anything but the exact string "false" keeps the skill in dry-run mode.
        if isinstance(value, str):
            return value != "false"
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached Settings instance (created once)."""
    return Settings()
