"""
Configuration management for MDCMS.
Handles loading, validating, and providing access to application settings.
"""

import os
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


DEFAULT_BOT_PATTERNS = [
    "bot",
    "crawl",
    "spider",
    "slurp",
    "curl",
    "wget",
    "python-requests",
    "httpclient",
    "headless",
    "facebookexternalhit",
    "preview",
    "monitor",
]


@dataclass
class AppConfig:
    """Application configuration settings."""
    host: str
    port: int
    debug: bool
    default_theme: str
    secure_cookies: bool


@dataclass
class AdminConfig:
    """Admin dashboard configuration settings."""
    password: str
    password_hash: str
    session_ttl_seconds: int

    def login_enabled(self) -> bool:
        return bool(self.password or self.password_hash)


@dataclass
class PathsConfig:
    """Path configuration settings (resolved against the config file directory)."""
    content_dir: Path
    themes_dir: Path
    analytics_file: Path


@dataclass
class AnalyticsConfig:
    """Visit analytics configuration settings."""
    flush_interval_seconds: float
    recent_visits_limit: int
    popular_pages_limit: int
    traffic_sources_limit: int
    bot_patterns: List[str] = field(default_factory=list)


@dataclass
class SSLConfig:
    """TLS certificate configuration."""
    cert: Optional[str] = None
    key: Optional[str] = None

    def enabled(self) -> bool:
        return bool(self.cert and self.key)


class ConfigManager:
    """Manages application configuration loading and access."""

    def __init__(self, config_file: str = "config.json"):
        self.config_file = Path(config_file)
        self._config: Optional[Dict[str, Any]] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        # Start with default config
        self._config = self._get_default_config()

        # Load base config from file
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    file_config = json.load(f)
                    # Merge file config with defaults
                    self._merge_config(file_config)
            except (json.JSONDecodeError, FileNotFoundError) as e:
                # Keep default config if file is invalid or not found
                logger.warning(f"Ignoring unreadable config file {self.config_file}: {e}")

        # Override with environment variables
        self._override_with_env()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "app": {
                "host": "0.0.0.0",
                "port": 3000,
                "debug": False,
                "default_theme": "default",
                "secure_cookies": True
            },
            "admin": {
                "password": "",
                "password_hash": "",
                "session_ttl_seconds": 3600
            },
            "paths": {
                "content_dir": "content",
                "themes_dir": "themes",
                "analytics_file": "analytics.json"
            },
            "analytics": {
                "flush_interval_seconds": 10,
                "recent_visits_limit": 50,
                "popular_pages_limit": 10,
                "traffic_sources_limit": 10,
                "bot_patterns": list(DEFAULT_BOT_PATTERNS)
            },
            "ssl": {
                "cert": None,
                "key": None
            }
        }

    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """Merge file configuration with current config."""
        for section, values in file_config.items():
            if section in self._config:
                if isinstance(values, dict):
                    self._config[section].update(values)
                else:
                    self._config[section] = values
            else:
                self._config[section] = values

    def _override_with_env(self) -> None:
        """Override configuration with environment variables."""
        # App settings
        if os.getenv("MDCMS_HOST"):
            self._config["app"]["host"] = os.getenv("MDCMS_HOST")

        if os.getenv("MDCMS_PORT"):
            self._config["app"]["port"] = int(os.getenv("MDCMS_PORT"))

        if os.getenv("MDCMS_DEBUG"):
            self._config["app"]["debug"] = os.getenv("MDCMS_DEBUG").lower() == "true"

        if os.getenv("MDCMS_DEFAULT_THEME"):
            self._config["app"]["default_theme"] = os.getenv("MDCMS_DEFAULT_THEME")

        if os.getenv("MDCMS_SECURE_COOKIES"):
            self._config["app"]["secure_cookies"] = os.getenv("MDCMS_SECURE_COOKIES").lower() == "true"

        # Admin settings
        if os.getenv("MDCMS_ADMIN_PASSWORD"):
            self._config["admin"]["password"] = os.getenv("MDCMS_ADMIN_PASSWORD")

        if os.getenv("MDCMS_ADMIN_PASSWORD_HASH"):
            self._config["admin"]["password_hash"] = os.getenv("MDCMS_ADMIN_PASSWORD_HASH")

        # Path settings
        if os.getenv("MDCMS_CONTENT_DIR"):
            self._config["paths"]["content_dir"] = os.getenv("MDCMS_CONTENT_DIR")

        if os.getenv("MDCMS_THEMES_DIR"):
            self._config["paths"]["themes_dir"] = os.getenv("MDCMS_THEMES_DIR")

        if os.getenv("MDCMS_ANALYTICS_FILE"):
            self._config["paths"]["analytics_file"] = os.getenv("MDCMS_ANALYTICS_FILE")

        # Analytics settings
        if os.getenv("MDCMS_FLUSH_INTERVAL"):
            self._config["analytics"]["flush_interval_seconds"] = float(os.getenv("MDCMS_FLUSH_INTERVAL"))

        # SSL settings
        if os.getenv("MDCMS_SSL_CERT"):
            self._config["ssl"]["cert"] = os.getenv("MDCMS_SSL_CERT")

        if os.getenv("MDCMS_SSL_KEY"):
            self._config["ssl"]["key"] = os.getenv("MDCMS_SSL_KEY")

    def _resolve_path(self, value: str) -> Path:
        """Resolve a configured path relative to the config file directory."""
        path = Path(value)
        if path.is_absolute():
            return path
        return self.config_file.resolve().parent / path

    def get_app_config(self) -> AppConfig:
        """Get application configuration."""
        app_config = self._config["app"]
        return AppConfig(
            host=app_config["host"],
            port=int(app_config["port"]),
            debug=bool(app_config["debug"]),
            default_theme=app_config["default_theme"],
            secure_cookies=bool(app_config["secure_cookies"])
        )

    def get_admin_config(self) -> AdminConfig:
        """Get admin configuration."""
        admin_config = self._config["admin"]
        return AdminConfig(
            password=admin_config.get("password") or "",
            password_hash=admin_config.get("password_hash") or "",
            session_ttl_seconds=int(admin_config["session_ttl_seconds"])
        )

    def get_paths_config(self) -> PathsConfig:
        """Get paths configuration."""
        paths_config = self._config["paths"]
        return PathsConfig(
            content_dir=self._resolve_path(paths_config["content_dir"]),
            themes_dir=self._resolve_path(paths_config["themes_dir"]),
            analytics_file=self._resolve_path(paths_config["analytics_file"])
        )

    def get_analytics_config(self) -> AnalyticsConfig:
        """Get analytics configuration."""
        analytics_config = self._config["analytics"]
        return AnalyticsConfig(
            flush_interval_seconds=float(analytics_config["flush_interval_seconds"]),
            recent_visits_limit=int(analytics_config["recent_visits_limit"]),
            popular_pages_limit=int(analytics_config["popular_pages_limit"]),
            traffic_sources_limit=int(analytics_config["traffic_sources_limit"]),
            bot_patterns=list(analytics_config.get("bot_patterns") or [])
        )

    def get_ssl_config(self) -> SSLConfig:
        """Get SSL configuration."""
        ssl_config = self._config.get("ssl") or {}
        return SSLConfig(cert=ssl_config.get("cert"), key=ssl_config.get("key"))

