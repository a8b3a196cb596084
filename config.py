from contextlib import suppress
import os
import threading

from sqlalchemy import create_engine, text

from logging_config import setup_logging

logger = setup_logging(__name__)

# =============================================================================
# Database Configuration
# =============================================================================

# Serializes engine creation and schema setup within the process
_ENGINE_LOCK = threading.RLock()

SHOP_SETTINGS_SCHEMA = """
CREATE TABLE IF NOT EXISTS shop_settings (
    shop_id TEXT PRIMARY KEY,
    market_config TEXT,
    market_config_at TEXT,
    config_version TEXT,
    url_strategy TEXT NOT NULL DEFAULT 'conservative',
    enable_link_conversion INTEGER NOT NULL DEFAULT 0
)
"""


def get_settings() -> dict:
    from settings_service import SettingsService

    return SettingsService().settings_dict


class DatabaseConfig:
    """SQLite database handle resolved from the [db_paths] table of settings.toml.

    Engines are shared per path so every repository talking to the same file
    uses one pool.

    Args:
        alias: Key in [db_paths] (e.g. "shop_settings")
        path: Explicit database file, bypasses settings lookup (tests, CLI)
    """

    _engines: dict[str, object] = {}

    def __init__(self, alias: str = "shop_settings", path: str | None = None):
        if path is None:
            db_paths = get_settings().get("db_paths", {})
            if alias not in db_paths:
                raise ValueError(
                    f"Unknown database alias '{alias}'. "
                    f"Available: {list(db_paths.keys())}"
                )
            path = db_paths[alias]
        self.alias = alias
        self.path = str(path)
        self.url = f"sqlite:///{self.path}"

    @property
    def engine(self):
        eng = DatabaseConfig._engines.get(self.path)
        if eng is None:
            with _ENGINE_LOCK:
                eng = DatabaseConfig._engines.get(self.path)
                if eng is None:
                    directory = os.path.dirname(os.path.abspath(self.path))
                    os.makedirs(directory, exist_ok=True)
                    eng = create_engine(self.url, connect_args={"check_same_thread": False})
                    DatabaseConfig._engines[self.path] = eng
        return eng

    def init_schema(self) -> None:
        """Create the shop_settings table if it does not exist yet."""
        with _ENGINE_LOCK:
            with self.engine.begin() as conn:
                conn.execute(text(SHOP_SETTINGS_SCHEMA))
        logger.info(f"Schema ready for {self.alias} ({self.path})")

    def dispose(self) -> None:
        """Dispose the shared engine for this path (e.g. before deleting the file)."""
        eng = DatabaseConfig._engines.pop(self.path, None)
        if eng is not None:
            with suppress(Exception):
                eng.dispose()
