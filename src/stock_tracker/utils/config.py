"""
Configuration for Stock Tracker.

Two environments exist:
- production: data in ~/Documents/StockTracker
- development: data in <project>/data, next to the source checkout

The environment is read from STOCK_TRACKER_ENV the first time get_config()
runs. Nothing here touches the disk until ensure_directories() is called.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .constants import (
    APP_NAME,
    APP_VERSION,
    DATABASE_FILENAME,
    EXPORT_DECIMAL_SEPARATOR,
    EXPORT_DEFAULT_FILENAME,
)

ENVIRONMENT_VARIABLE = "STOCK_TRACKER_ENV"
DEFAULT_ENVIRONMENT = "production"

logger = logging.getLogger(__name__)


class Config:
    """Paths and settings for one environment."""

    def __init__(self, environment: str = DEFAULT_ENVIRONMENT):
        """
        Args:
            environment: 'production' or 'development'
        """
        self.environment = environment
        self._data_dir = self._project_data_dir() if environment == "development" else self._user_data_dir()

    @staticmethod
    def _project_data_dir() -> Path:
        # utils -> stock_tracker -> src -> project root
        return Path(__file__).resolve().parents[3] / "data"

    @staticmethod
    def _user_data_dir() -> Path:
        return Path.home() / "Documents" / "StockTracker"

    def ensure_directories(self) -> None:
        """Create the data folder (and parents) if needed."""
        self._data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def app_name(self) -> str:
        return APP_NAME

    @property
    def app_version(self) -> str:
        return APP_VERSION

    @property
    def database_path(self) -> Path:
        return self._data_dir / DATABASE_FILENAME

    @property
    def database_url(self) -> str:
        """SQLite URL of database_path, with forward slashes on every platform."""
        return f"sqlite:///{self.database_path.as_posix()}"

    @property
    def default_export_path(self) -> Path:
        """Where the CSV report goes when no path is given."""
        return self._data_dir / EXPORT_DEFAULT_FILENAME

    @property
    def decimal_separator(self) -> str:
        return EXPORT_DECIMAL_SEPARATOR

    def database_exists(self) -> bool:
        return self.database_path.exists()

    def __repr__(self) -> str:
        return f"Config(environment='{self.environment}', database_path='{self.database_path}')"


_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Shared Config, created on first call.

    Args:
        environment: Used only when the instance is created; defaults to
            STOCK_TRACKER_ENV, then 'production'. A different value on a
            later call is ignored with a warning.
    """
    global _config_instance

    if _config_instance is None:
        _config_instance = Config(environment or os.environ.get(ENVIRONMENT_VARIABLE, DEFAULT_ENVIRONMENT))
    elif environment is not None and environment != _config_instance.environment:
        logger.warning(
            f"Config already created for '{_config_instance.environment}'; "
            f"ignoring requested environment '{environment}' (existing singleton kept)"
        )

    return _config_instance


def reset_config() -> None:
    """Forget the shared Config (tests)."""
    global _config_instance
    _config_instance = None
