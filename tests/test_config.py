"""Tests for the config module."""

import importlib
from pathlib import Path

from lukunde import config
from lukunde.config import Settings, _parse_cors_origins


class TestParseCorsOrigins:
    """Test CORS origins parsing."""

    def test_parse_cors_origins_with_value(self, monkeypatch):
        """Test parsing CORS origins from environment variable."""
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://localhost:3000,http://localhost:8080")
        assert _parse_cors_origins() == ["http://localhost:3000", "http://localhost:8080"]

    def test_parse_cors_origins_without_value(self, monkeypatch):
        """Test default CORS origins when not set."""
        monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
        assert _parse_cors_origins() == ["*"]


class TestSettings:
    """Test Settings configuration."""

    def test_defaults(self, monkeypatch):
        """Test default values with a clean environment."""
        for key in [
            "DATABASE_PATH",
            "PORT",
            "ACCESS_CODE_LENGTH",
            "SHARE_LINK_PARAM",
            "SHEETS_STORAGE_KEY",
            "THEME_STORAGE_KEY",
            "BOOTSTRAP_SHEET_NAME",
            "ANALYSIS_SAMPLE_ROWS",
        ]:
            monkeypatch.delenv(key, raising=False)
        module = importlib.reload(config)

        settings = module.Settings()
        assert settings.database_path == Path("data/lukunde.db")
        assert settings.port == 8000
        assert settings.access_code_length == 6
        assert settings.share_link_param == "pauta"
        assert settings.sheets_storage_key == "educa-lukunde-sheets"
        assert settings.theme_storage_key == "educa-lukunde-theme"
        assert settings.bootstrap_sheet_name == "Pauta 1"
        assert settings.analysis_sample_rows == 50

    def test_explicit_values(self, tmp_path):
        """Settings accept explicit overrides."""
        settings = Settings(
            database_path=tmp_path / "test.db",
            anthropic_api_key="test-key",
            port=9000,
            analysis_sample_rows=10,
            default_expiration_unit="days",
        )
        assert settings.database_path == tmp_path / "test.db"
        assert settings.anthropic_api_key == "test-key"
        assert settings.port == 9000
        assert settings.analysis_sample_rows == 10
        assert settings.default_expiration_unit == "days"

    def test_port_coerced_from_string(self):
        assert Settings(port="8080").port == 8080
