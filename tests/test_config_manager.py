"""
Test cases for the configuration management system.
Tests config loading, environment overrides, and access functionality.
"""

import json
from pathlib import Path
import pytest

from config_manager import (
    DEFAULT_BOT_PATTERNS,
    AdminConfig,
    AnalyticsConfig,
    AppConfig,
    ConfigManager,
    PathsConfig,
)

ENV_VARS = [
    "MDCMS_HOST", "MDCMS_PORT", "MDCMS_DEBUG", "MDCMS_DEFAULT_THEME", "MDCMS_SECURE_COOKIES",
    "MDCMS_ADMIN_PASSWORD", "MDCMS_ADMIN_PASSWORD_HASH", "MDCMS_CONTENT_DIR", "MDCMS_THEMES_DIR",
    "MDCMS_ANALYTICS_FILE", "MDCMS_FLUSH_INTERVAL", "MDCMS_SSL_CERT", "MDCMS_SSL_KEY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestConfigManager:
    """Test the ConfigManager class functionality."""

    def test_defaults_without_file(self, tmp_path):
        """Test default values when the config file does not exist."""
        manager = ConfigManager(str(tmp_path / "missing.json"))

        app_config = manager.get_app_config()
        assert isinstance(app_config, AppConfig)
        assert app_config.port == 3000
        assert app_config.host == "0.0.0.0"
        assert app_config.secure_cookies is True

        admin_config = manager.get_admin_config()
        assert isinstance(admin_config, AdminConfig)
        assert not admin_config.login_enabled()

        analytics_config = manager.get_analytics_config()
        assert isinstance(analytics_config, AnalyticsConfig)
        assert analytics_config.flush_interval_seconds == 10.0
        assert analytics_config.bot_patterns == DEFAULT_BOT_PATTERNS

        assert not manager.get_ssl_config().enabled()

    def test_load_config_from_file(self, tmp_path):
        """Test that file values are merged over defaults section by section."""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({
            "app": {"port": 8080, "default_theme": "dark"},
            "admin": {"password": "pw"},
            "analytics": {"flush_interval_seconds": 2}
        }))

        manager = ConfigManager(str(config_file))
        app_config = manager.get_app_config()
        assert app_config.port == 8080
        assert app_config.default_theme == "dark"
        assert app_config.host == "0.0.0.0"
        assert manager.get_admin_config().login_enabled()
        assert manager.get_analytics_config().flush_interval_seconds == 2.0
        assert manager.get_analytics_config().recent_visits_limit == 50

    def test_invalid_json_falls_back_to_defaults(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text("{ invalid json }")

        manager = ConfigManager(str(config_file))
        assert manager.get_app_config().port == 3000

    def test_paths_resolved_against_config_directory(self, tmp_path):
        """Test that relative paths are anchored at the config file."""
        absolute = tmp_path / "elsewhere" / "log.json"
        config_file = tmp_path / "site" / "config.json"
        config_file.parent.mkdir()
        config_file.write_text(json.dumps({"paths": {"content_dir": "docs", "analytics_file": str(absolute)}}))

        paths_config = ConfigManager(str(config_file)).get_paths_config()
        assert isinstance(paths_config, PathsConfig)
        assert paths_config.content_dir == config_file.resolve().parent / "docs"
        assert paths_config.themes_dir == config_file.resolve().parent / "themes"
        assert paths_config.analytics_file == absolute

    def test_environment_overrides(self, tmp_path, monkeypatch):
        """Test that environment variables take precedence over the file."""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"app": {"port": 8080}}))

        monkeypatch.setenv("MDCMS_PORT", "9000")
        monkeypatch.setenv("MDCMS_DEBUG", "true")
        monkeypatch.setenv("MDCMS_SECURE_COOKIES", "false")
        monkeypatch.setenv("MDCMS_ADMIN_PASSWORD", "from-env")
        monkeypatch.setenv("MDCMS_FLUSH_INTERVAL", "0.5")
        monkeypatch.setenv("MDCMS_SSL_CERT", "cert.pem")
        monkeypatch.setenv("MDCMS_SSL_KEY", "key.pem")

        manager = ConfigManager(str(config_file))
        app_config = manager.get_app_config()
        assert app_config.port == 9000
        assert app_config.debug is True
        assert app_config.secure_cookies is False
        assert manager.get_admin_config().password == "from-env"
        assert manager.get_analytics_config().flush_interval_seconds == 0.5
        assert manager.get_ssl_config().enabled()


    def test_loading_never_writes_config(self, tmp_path, monkeypatch):
        """Test that secrets from the environment are never persisted."""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"app": {"port": 8080}}))
        before = config_file.read_bytes()
        monkeypatch.setenv("MDCMS_ADMIN_PASSWORD", "from-env")

        manager = ConfigManager(str(config_file))
        manager.get_admin_config()
        assert config_file.read_bytes() == before
        assert not (tmp_path / "missing.json").exists()
        ConfigManager(str(tmp_path / "missing.json"))
        assert not (tmp_path / "missing.json").exists()
