"""Centralized settings loader for the application.

Infrastructure-level module — must not import from services/, repositories/,
config.py, or logging_config.py to avoid circular imports.
"""

import tomllib
import logging
from datetime import timedelta
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path(__file__).resolve().parent / "settings.toml"

_cached_settings: dict[Path, dict] = {}


def _load_settings(settings_path: Path = DEFAULT_SETTINGS_PATH) -> dict:
    """Load and cache settings from the TOML file."""
    settings_path = Path(settings_path).resolve()
    if settings_path in _cached_settings:
        return _cached_settings[settings_path]
    try:
        with open(settings_path, "rb") as f:
            _cached_settings[settings_path] = tomllib.load(f)
            return _cached_settings[settings_path]
    except Exception as e:
        logger.error("Failed to load settings from %s: %s", settings_path, e)
        raise


def reload_settings() -> None:
    """Forget cached settings so the next read hits the file again."""
    _cached_settings.clear()


class SettingsService:
    """Read-only accessor for application settings.

    Settings are cached at module level after the first read.
    """

    def __init__(self, settings_path: str | Path = DEFAULT_SETTINGS_PATH):
        self.settings = _load_settings(Path(settings_path))

    @property
    def settings_dict(self) -> dict:
        return self.settings

    @property
    def log_level(self) -> str:
        return self.settings["env"]["log_level"]

    @property
    def env(self) -> str:
        return self.settings["env"]["env"]

    @property
    def db_paths(self) -> dict[str, str]:
        return dict(self.settings.get("db_paths", {}))

    @property
    def api_version(self) -> str:
        return self.settings["shopify"]["api_version"]

    @property
    def request_timeout(self) -> int:
        return int(self.settings["shopify"].get("request_timeout", 30))

    @property
    def link_conversion_defaults(self) -> dict:
        """The [link_conversion] table: default toggles and rewrite options."""
        return dict(self.settings.get("link_conversion", {}))

    @property
    def market_config_max_age(self) -> timedelta:
        hours = self.settings.get("market_config", {}).get("max_age_hours", 24)
        return timedelta(hours=hours)
