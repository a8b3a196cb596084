"""
Services Package

Business logic for market link localization.

Each service module follows these principles:
1. Single Responsibility - one concern per module
2. Dependency Injection - fetchers, repositories and caches passed in
3. Pure core - parser, transformer, rewriter and version tracker do no I/O

Available Services:
- market_config_parser: market graph -> ResolvedConfig
- url_transformer: rewrite one URL for a locale strategy
- link_rewriter: rewrite the links of an HTML fragment (single and batch)
- config_version: config fingerprints for change detection
- market_config_cache: explicit TTL cache object
- markets_fetch_service: Admin API client
- market_sync_service: fetch/persist/cache orchestration and gated conversion
- language_display: operator-facing locale table
"""

# -----------------------------------------------------------------------------
# Pure core
# -----------------------------------------------------------------------------
from services.market_config_parser import (
    parse_markets_config,
    classify_presence,
    merge_strategy,
)
from services.url_transformer import (
    transform_url,
    should_skip_url,
    has_locale_prefix,
    remove_locale_prefix,
    is_internal_host,
)
from services.link_rewriter import (
    convert_links_for_locale,
    batch_convert_links,
    resolve_locale_strategy,
    validate_market_config,
    get_supported_locales,
    get_url_preview,
)
from services.config_version import (
    generate_config_fingerprint,
    has_config_changed,
)

# -----------------------------------------------------------------------------
# Collaborators
# -----------------------------------------------------------------------------
from services.market_config_cache import MarketConfigCache
from services.markets_fetch_service import MarketsFetchService, get_markets_fetch_service
from services.market_sync_service import MarketSyncService, get_market_sync_service
from services.language_display import get_language_name, get_language_urls_for_display

__all__ = [
    # === Pure core ===
    'parse_markets_config',
    'classify_presence',
    'merge_strategy',
    'transform_url',
    'should_skip_url',
    'has_locale_prefix',
    'remove_locale_prefix',
    'is_internal_host',
    'convert_links_for_locale',
    'batch_convert_links',
    'resolve_locale_strategy',
    'validate_market_config',
    'get_supported_locales',
    'get_url_preview',
    'generate_config_fingerprint',
    'has_config_changed',

    # === Collaborators ===
    'MarketConfigCache',
    'MarketsFetchService',
    'get_markets_fetch_service',
    'MarketSyncService',
    'get_market_sync_service',
    'get_language_name',
    'get_language_urls_for_display',
]
