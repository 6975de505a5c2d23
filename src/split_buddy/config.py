"""Configuration management for split-buddy."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SPLIT_BUDDY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database path
    database_path: Path = Path.home() / ".split_buddy" / "split_buddy.db"

    # Balances within this distance of zero are treated as settled
    settlement_tolerance: float = Field(default=1e-9, ge=0)

    # Send member notifications (group created, member added, expense added)
    notifications_enabled: bool = True

    def __init__(self, **kwargs):
        """Initialize settings and create database directory if needed."""
        super().__init__(**kwargs)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)


def load_settings() -> Settings:
    """Load application settings from environment variables."""
    try:
        return Settings()
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load settings. Check the SPLIT_BUDDY_* environment "
            f"variables or your .env file.\n"
            f"Error: {e}"
        ) from e
