"""
Market Sync Service

Keeps each shop's stored market config in step with the Admin API and runs
link conversion for a shop when its settings allow it.

Data flow:
  1. in-memory MarketConfigCache (optional, passed in)
  2. shop_settings table, valid for max_age
  3. fresh fetch -> parse -> fingerprint compare -> write only if changed

Design:
- Fetcher, repository and cache are injected; nothing is created here
- Every public method degrades to None / False / unchanged content and logs
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from domain.enums import ConversionMode
from domain.models import ResolvedConfig, RewriteOptions, UrlConversionSettings
from logging_config import setup_logging
from services.config_version import has_config_changed
from services.link_rewriter import convert_links_for_locale, validate_market_config
from services.market_config_cache import MarketConfigCache

logger = setup_logging(__name__, log_file="market_sync_service.log")


class MarketSyncService:
    """Coordinates fetch, persistence, caching and gated link conversion.

    Args:
        fetcher: Object with get_markets_web_presences() -> ResolvedConfig | None
        repo: ShopSettingsRepository
        cache: Optional MarketConfigCache shared by the caller
        max_age: How long a stored config is trusted before refetching
        default_options: Rewrite options used when a shop has no stored settings
    """

    def __init__(self, fetcher, repo, cache: Optional[MarketConfigCache] = None,
                 max_age: timedelta = timedelta(hours=24),
                 default_options: Optional[RewriteOptions] = None):
        self._fetcher = fetcher
        self._repo = repo
        self._cache = cache
        self.max_age = max_age
        self.default_options = default_options or RewriteOptions(enable_conversion=False)

    # =====================================================================
    # Market config
    # =====================================================================

    def sync_market_config(self, shop_id: str) -> Optional[ResolvedConfig]:
        """Fetch the latest config and store it if its fingerprint changed."""
        try:
            logger.info(f"Syncing market config for {shop_id}")
            config = self._fetcher.get_markets_web_presences()
            if config is None:
                logger.warning(f"Could not fetch market config for {shop_id}")
                return None

            existing = self._repo.get_shop_settings(shop_id)
            known_version = existing.config_version if existing else None
            if existing and existing.market_config and not has_config_changed(config, known_version):
                logger.info(f"Market config unchanged for {shop_id} ({known_version}); skipping write")
                stored = ResolvedConfig.from_dict(existing.market_config)
            else:
                self._repo.save_market_config(shop_id, config)
                logger.info(
                    f"Market config synced for {shop_id} ({config.fingerprint}, "
                    f"{len(config.canonical_mapping)} locales)"
                )
                stored = config

            if self._cache is not None:
                self._cache.put(shop_id, stored)
            return stored

        except Exception as e:
            logger.error(f"Failed to sync market config for {shop_id}: {e}")
            return None

    def get_cached_market_config(self, shop_id: str, max_age: Optional[timedelta] = None) -> Optional[ResolvedConfig]:
        """Return a stored config that is younger than max_age, else None."""
        if self._cache is not None:
            cached = self._cache.get(shop_id)
            if cached is not None:
                return cached

        max_age = max_age or self.max_age
        try:
            record = self._repo.get_shop_settings(shop_id)
            if record is None or not record.market_config:
                logger.info(f"No stored market config for {shop_id}")
                return None

            if record.market_config_at is not None:
                age = datetime.now(timezone.utc) - record.market_config_at
                if age > max_age:
                    logger.info(f"Stored market config for {shop_id} expired ({int(age.total_seconds() // 60)} min old)")
                    return None

            if not validate_market_config(record.market_config):
                return None

            config = ResolvedConfig.from_dict(record.market_config)
            if self._cache is not None:
                self._cache.put(shop_id, config)
            logger.info(f"Using stored market config for {shop_id} ({record.config_version})")
            return config

        except Exception as e:
            logger.error(f"Failed to read stored market config for {shop_id}: {e}")
            return None

    def get_market_config_with_cache(self, shop_id: str) -> Optional[ResolvedConfig]:
        """Stored config if still fresh, otherwise a new sync."""
        config = self.get_cached_market_config(shop_id)
        if config is None:
            config = self.sync_market_config(shop_id)
        return config

    def clear_market_config_cache(self, shop_id: str) -> bool:
        """Drop the shop's config from the cache and the table."""
        if self._cache is not None:
            self._cache.invalidate(shop_id)
        try:
            self._repo.clear_market_config(shop_id)
            logger.info(f"Cleared market config for {shop_id}")
            return True
        except Exception as e:
            logger.error(f"Failed to clear market config for {shop_id}: {e}")
            return False

    # =====================================================================
    # URL conversion settings
    # =====================================================================

    def get_url_conversion_settings(self, shop_id: str) -> UrlConversionSettings:
        default = UrlConversionSettings(
            strategy=self.default_options.strategy,
            enable_link_conversion=self.default_options.enable_conversion,
        )
        try:
            return self._repo.get_url_settings(shop_id) or default
        except Exception as e:
            logger.error(f"Failed to read URL conversion settings for {shop_id}: {e}")
            return default

    def set_link_conversion_enabled(self, shop_id: str, enabled: bool) -> Optional[UrlConversionSettings]:
        current = self.get_url_conversion_settings(shop_id)
        return self.update_url_conversion_settings(
            shop_id, strategy=current.strategy, enable_link_conversion=enabled
        )

    def update_url_conversion_settings(self, shop_id: str, strategy=None,
                                       enable_link_conversion: Optional[bool] = None) -> Optional[UrlConversionSettings]:
        """Change one or both toggles; unspecified values keep their current setting."""
        try:
            current = self.get_url_conversion_settings(shop_id)
            updated = UrlConversionSettings(
                strategy=ConversionMode.from_string(strategy) if strategy is not None else current.strategy,
                enable_link_conversion=(
                    current.enable_link_conversion if enable_link_conversion is None
                    else bool(enable_link_conversion)
                ),
            )
            record = self._repo.upsert_url_settings(shop_id, updated)
            logger.info(
                f"URL conversion settings for {shop_id}: strategy={updated.strategy.value}, "
                f"enabled={updated.enable_link_conversion}"
            )
            return record.url_settings if record is not None else updated
        except Exception as e:
            logger.error(f"Failed to update URL conversion settings for {shop_id}: {e}")
            return None

    # =====================================================================
    # Conversion
    # =====================================================================

    def convert_content(self, shop_id: str, html: Optional[str], target_locale: str) -> Optional[str]:
        """Localize the links in translated content if the shop has conversion on."""
        settings = self.get_url_conversion_settings(shop_id)
        if not settings.enable_link_conversion:
            return html

        config = self.get_market_config_with_cache(shop_id)
        if config is None:
            logger.info(f"No market config for {shop_id}; content passed through")
            return html

        options = settings.to_options(self.default_options)
        return convert_links_for_locale(html, target_locale, config, options)


# =============================================================================
# Factory Function
# =============================================================================

def get_market_sync_service(shop_domain: str, access_token: str,
                            cache: Optional[MarketConfigCache] = None,
                            db=None) -> MarketSyncService:
    """Wire a MarketSyncService from settings.toml.

    The cache is never created here; pass one in to share it between calls.
    """
    from repositories.shop_settings_repo import get_shop_settings_repository
    from services.markets_fetch_service import get_markets_fetch_service
    from settings_service import SettingsService

    settings = SettingsService()
    return MarketSyncService(
        fetcher=get_markets_fetch_service(shop_domain, access_token),
        repo=get_shop_settings_repository(db),
        cache=cache,
        max_age=settings.market_config_max_age,
        default_options=RewriteOptions.from_mapping(
            {
                **settings.link_conversion_defaults,
                "enable_conversion": settings.link_conversion_defaults.get("enable_link_conversion", False),
            }
        ),
    )
