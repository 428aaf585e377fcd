"""Configuration management for the portfolio analytics API."""

import os
from enum import Enum

from dotenv import load_dotenv

# Load environment variables from .env if present (non-fatal when missing)
load_dotenv()


class PositionSource(str, Enum):
    """Where holdings snapshots are retrieved from."""

    ALPACA = "alpaca"
    FILE = "file"


class Settings:
    """Application settings sourced from environment variables."""

    def __init__(self) -> None:
        # Portfolio
        self.base_currency = os.getenv("BASE_CURRENCY", "USD").upper()
        self.position_source = os.getenv(
            "POSITION_SOURCE", PositionSource.ALPACA.value
        ).strip().lower()
        self.holdings_file = os.getenv("HOLDINGS_FILE") or None

        # Alpaca brokerage
        self.alpaca_api_key = os.getenv("ALPACA_API_KEY", "")
        self.alpaca_secret_key = os.getenv("ALPACA_SECRET_KEY", "")
        self.alpaca_base_url = os.getenv(
            "ALPACA_BASE_URL", "https://paper-api.alpaca.markets"
        )

        # Logging
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.log_file = os.getenv("LOG_FILE") or None

        # Server
        self.debug = self._get_bool("DEBUG", False)
        self.port = self._get_int("PORT", 8000)

    @property
    def alpaca_paper(self) -> bool:
        return "paper" in self.alpaca_base_url

    @staticmethod
    def _get_bool(name: str, default: bool) -> bool:
        value = os.getenv(name)
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    @staticmethod
    def _get_int(name: str, default: int) -> int:
        value = os.getenv(name)
        if value is None:
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            return default


# Global settings instance
settings = Settings()
