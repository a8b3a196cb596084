"""
Shop Settings Repository

Persists per-shop link localization state in the shop_settings table:
the resolved market config (JSON), when it was stored, its fingerprint,
and the URL conversion toggles.

Design Principles:
1. Single Responsibility - Only shop_settings access, no business logic
2. Upserts - Every write creates the row on first use
3. BaseRepository - Inherits schema recovery for every statement
"""

import json
from datetime import datetime, timezone
from typing import Optional

import pandas as pd

from config import DatabaseConfig
from domain.enums import ConversionMode
from domain.models import ResolvedConfig, ShopSettingsRecord, UrlConversionSettings
from logging_config import setup_logging
from repositories.base import BaseRepository

logger = setup_logging(__name__, log_file="shop_settings_repo.log")


_SELECT_SHOP = """
    SELECT shop_id, market_config, market_config_at, config_version,
           url_strategy, enable_link_conversion
    FROM shop_settings
    WHERE shop_id = :shop_id
"""

_UPSERT_MARKET_CONFIG = """
    INSERT INTO shop_settings (shop_id, market_config, market_config_at, config_version)
    VALUES (:shop_id, :market_config, :market_config_at, :config_version)
    ON CONFLICT(shop_id) DO UPDATE SET
        market_config = excluded.market_config,
        market_config_at = excluded.market_config_at,
        config_version = excluded.config_version
"""

_CLEAR_MARKET_CONFIG = """
    UPDATE shop_settings
    SET market_config = NULL, market_config_at = NULL, config_version = NULL
    WHERE shop_id = :shop_id
"""

_UPSERT_URL_SETTINGS = """
    INSERT INTO shop_settings (shop_id, url_strategy, enable_link_conversion)
    VALUES (:shop_id, :url_strategy, :enable_link_conversion)
    ON CONFLICT(shop_id) DO UPDATE SET
        url_strategy = excluded.url_strategy,
        enable_link_conversion = excluded.enable_link_conversion
"""


def _parse_timestamp(value) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    parsed = datetime.fromisoformat(str(value))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _row_to_record(row: dict) -> ShopSettingsRecord:
    market_config = row.get("market_config")
    return ShopSettingsRecord(
        shop_id=row["shop_id"],
        market_config=json.loads(market_config) if market_config else None,
        market_config_at=_parse_timestamp(row.get("market_config_at")),
        config_version=row.get("config_version"),
        url_strategy=ConversionMode.from_string(row.get("url_strategy") or ConversionMode.CONSERVATIVE),
        enable_link_conversion=bool(row.get("enable_link_conversion")),
    )


class ShopSettingsRepository(BaseRepository):
    """Data access for the shop_settings table."""

    def get_shop_settings(self, shop_id: str) -> Optional[ShopSettingsRecord]:
        row = self.fetch_one(_SELECT_SHOP, {"shop_id": shop_id})
        return _row_to_record(row) if row is not None else None

    def save_market_config(self, shop_id: str, config: ResolvedConfig,
                           stored_at: Optional[datetime] = None) -> ShopSettingsRecord:
        """Store a resolved config with its fingerprint as the config version."""
        stored_at = stored_at or datetime.now(timezone.utc)
        self.write(
            _UPSERT_MARKET_CONFIG,
            {
                "shop_id": shop_id,
                "market_config": json.dumps(config.to_dict(), ensure_ascii=False),
                "market_config_at": stored_at.isoformat(),
                "config_version": config.fingerprint,
            },
        )
        logger.info(f"Stored market config for {shop_id} (version {config.fingerprint})")
        return self.get_shop_settings(shop_id)

    def clear_market_config(self, shop_id: str) -> bool:
        """Null out the stored config; True if a row was updated."""
        return self.write(_CLEAR_MARKET_CONFIG, {"shop_id": shop_id}) > 0

    def get_url_settings(self, shop_id: str) -> Optional[UrlConversionSettings]:
        record = self.get_shop_settings(shop_id)
        return record.url_settings if record is not None else None

    def upsert_url_settings(self, shop_id: str, settings: UrlConversionSettings) -> ShopSettingsRecord:
        self.write(
            _UPSERT_URL_SETTINGS,
            {
                "shop_id": shop_id,
                "url_strategy": settings.strategy.value,
                "enable_link_conversion": int(settings.enable_link_conversion),
            },
        )
        return self.get_shop_settings(shop_id)

    def list_shop_settings(self) -> pd.DataFrame:
        """Overview of every shop without the config blobs."""
        return self.read_df(
            """
            SELECT shop_id, market_config_at, config_version,
                   url_strategy, enable_link_conversion
            FROM shop_settings
            ORDER BY shop_id
            """
        )


# =============================================================================
# Factory Function
# =============================================================================

def get_shop_settings_repository(db: Optional[DatabaseConfig] = None) -> ShopSettingsRepository:
    """Create a ShopSettingsRepository on the configured shop_settings database."""
    return ShopSettingsRepository(db or DatabaseConfig("shop_settings"))
