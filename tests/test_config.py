"""Tests for application configuration."""

import logging
from pathlib import Path

from stock_tracker.utils import config as config_module
from stock_tracker.utils.config import Config, get_config, reset_config


class TestConfig:
    """Tests for the Config class."""

    def test_production_uses_documents_folder(self):
        config = Config("production")

        assert config.database_path == Path.home() / "Documents" / "StockTracker" / "stock_tracker.db"
        assert config.environment == "production"

    def test_development_uses_project_data_folder(self):
        config = Config("development")

        assert config.database_path.parent.name == "data"
        assert (config.database_path.parent.parent / "setup.py").exists()
        assert config.environment == "development"

    def test_database_url(self):
        config = Config("production")

        assert config.database_url.startswith("sqlite:///")
        assert config.database_url.endswith("stock_tracker.db")

    def test_export_defaults(self):
        config = Config("production")

        assert config.default_export_path.name == "estoque.csv"
        assert config.decimal_separator == ","

    def test_constructor_does_not_touch_disk(self, tmp_path, monkeypatch):
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        config = Config("production")

        assert not (tmp_path / "Documents").exists()
        config.ensure_directories()
        assert (tmp_path / "Documents" / "StockTracker").is_dir()
        assert not config.database_exists()

class TestGetConfig:
    """Tests for the configuration singleton."""

    def test_singleton(self):
        assert get_config() is get_config()

    def test_environment_variable(self, monkeypatch):
        monkeypatch.setenv(config_module.ENVIRONMENT_VARIABLE, "development")
        reset_config()

        assert get_config().environment == "development"

    def test_default_is_production(self, monkeypatch):
        monkeypatch.delenv(config_module.ENVIRONMENT_VARIABLE, raising=False)

        assert get_config().environment == "production"

    def test_mismatched_environment_warns(self, monkeypatch, caplog):
        monkeypatch.delenv(config_module.ENVIRONMENT_VARIABLE, raising=False)
        get_config()

        with caplog.at_level(logging.WARNING):
            config = get_config("development")

        assert config.environment == "production"
        assert "singleton" in caplog.text
