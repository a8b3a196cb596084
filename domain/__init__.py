"""
Domain Models Package

Core types for market link localization. Everything here is pure Python
with no I/O, so it can be shared by services, repositories and tests.

Key Components:
- Enums: StrategyType, ConversionMode
- Models: LocaleCode, LocaleStrategy, MarketSummary, ResolvedConfig
- Options: RewriteOptions, UrlConversionSettings, ShopSettingsRecord
- Adapters: locale/connection normalization for Admin API payloads
- Segments: build_subfolder_segment
"""

from domain.enums import StrategyType, ConversionMode
from domain.models import (
    LocaleCode,
    LocaleStrategy,
    MarketLanguage,
    MarketSummary,
    ResolvedConfig,
    RewriteOptions,
    UrlConversionSettings,
    ShopSettingsRecord,
)
from domain.converters import (
    flatten_connection,
    normalize_locale_value,
    normalize_locale_list,
    primary_subtag,
)
from domain.segments import build_subfolder_segment

__all__ = [
    # Enums
    "StrategyType",
    "ConversionMode",
    # Models
    "LocaleCode",
    "LocaleStrategy",
    "MarketLanguage",
    "MarketSummary",
    "ResolvedConfig",
    "RewriteOptions",
    "UrlConversionSettings",
    "ShopSettingsRecord",
    # Adapters
    "flatten_connection",
    "normalize_locale_value",
    "normalize_locale_list",
    "primary_subtag",
    # Segments
    "build_subfolder_segment",
]
