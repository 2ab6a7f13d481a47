"""Configuration management for lendingdesk.

Loads configuration from environment variables and provides defaults.
"""

import logging
import os
from dataclasses import dataclass
from datetime import date
from typing import Optional

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


@dataclass
class Config:
    """Application configuration."""

    # Database (":memory:" keeps everything for the life of the process only)
    db_path: str

    # Logging
    log_level: str

    # Load the fixed inventory and demo account on startup
    seed: bool

    # Overrides the system clock, raw ISO text
    today_override: Optional[str]

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            db_path=os.environ.get("LENDINGDESK_DB_PATH", ":memory:"),
            log_level=os.environ.get("LENDINGDESK_LOG_LEVEL", "WARNING").upper(),
            seed=os.environ.get("LENDINGDESK_SEED", "1").lower() not in ("0", "false", "no"),
            today_override=os.environ.get("LENDINGDESK_TODAY") or None,
        )

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if not isinstance(logging.getLevelName(self.log_level), int):
            errors.append(f"Unknown log level: {self.log_level}")

        if self.today_override:
            try:
                date.fromisoformat(self.today_override)
            except ValueError:
                errors.append(f"LENDINGDESK_TODAY is not an ISO date: {self.today_override}")

        return errors

    def today(self) -> date:
        """Current date for date-sensitive operations."""
        if self.today_override:
            return date.fromisoformat(self.today_override)
        return date.today()


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global config instance. Used for testing."""
    global _config
    _config = None
