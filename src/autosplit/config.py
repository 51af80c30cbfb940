"""Configuration management for AutoSplit."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Display settings
    currency_symbol: str = "₹"
    minor_units_per_major: int = 100  # paise per rupee

    # Settlement settings
    unsettled_tolerance: int = 50  # minor units, absorbs split rounding
    default_settlement_method: str = "upi"

    # Database path
    database_path: Path = Path.home() / ".autosplit" / "autosplit.db"

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
            f"Failed to load settings. Check your .env file and environment "
            f"variables.\n"
            f"Error: {e}"
        ) from e
