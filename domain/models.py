"""
Domain Models

Dataclasses representing resolved market/locale configuration and the
options that drive link rewriting. Built fresh from each Admin API fetch and
never mutated afterwards.

Design Principles:
1. Immutability (frozen=True) - a resolved config can be shared across threads
2. Plain-data round trip - to_dict()/from_dict() for JSON persistence
3. No I/O - parsing, fetching and storage live in services/ and repositories/
"""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping, Optional

from domain.enums import ConversionMode, StrategyType


LocaleKey = str


# =============================================================================
# LocaleCode - normalized locale reference
# =============================================================================

@dataclass(frozen=True)
class LocaleCode:
    """
    A locale reference after normalization.

    Attributes:
        code: Locale code used as the mapping key (e.g. "fr", "pt-BR")
        tag: BCP-47 language tag when the API supplied one, else the code
    """
    code: str
    tag: str


# =============================================================================
# LocaleStrategy - resolved answer for one locale under one presence
# =============================================================================

@dataclass(frozen=True)
class LocaleStrategy:
    """
    How links for one locale are localized under one web presence.

    Attributes:
        locale: Locale code this strategy serves
        type: URL shape (primary, subfolder, subdomain, domain)
        url: Base URL of the localized storefront, no trailing slash
        suffix: Subfolder segment (subfolder strategies only)
        path: "/{suffix}/" (subfolder strategies only)
        host: Host the localized storefront is served from
        market_name: Name of the market the presence belongs to
        market_id: Admin API id of the market
        presence_id: Identity of the source web presence
        is_primary_market: True if the owning market is the shop's primary market
        is_alternate: True if the locale is an alternate (not default) locale
    """
    locale: LocaleKey
    type: StrategyType
    url: str
    suffix: Optional[str] = None
    path: Optional[str] = None
    host: Optional[str] = None
    market_name: str = ""
    market_id: str = ""
    presence_id: str = ""
    is_primary_market: bool = False
    is_alternate: bool = False

    def to_dict(self) -> dict:
        return {
            "locale": self.locale,
            "type": self.type.value,
            "url": self.url,
            "suffix": self.suffix,
            "path": self.path,
            "host": self.host,
            "market_name": self.market_name,
            "market_id": self.market_id,
            "presence_id": self.presence_id,
            "is_primary_market": self.is_primary_market,
            "is_alternate": self.is_alternate,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LocaleStrategy":
        return cls(
            locale=data["locale"],
            type=StrategyType(data["type"]),
            url=data.get("url") or "",
            suffix=data.get("suffix"),
            path=data.get("path"),
            host=data.get("host"),
            market_name=data.get("market_name") or "",
            market_id=data.get("market_id") or "",
            presence_id=data.get("presence_id") or "",
            is_primary_market=bool(data.get("is_primary_market")),
            is_alternate=bool(data.get("is_alternate")),
        )


# =============================================================================
# MarketSummary - per-market overview of the locales it contributed
# =============================================================================

@dataclass(frozen=True)
class MarketLanguage:
    """One locale contributed by a market, as shown in market summaries."""
    locale: LocaleKey
    type: StrategyType
    url: str
    is_alternate: bool = False

    def to_dict(self) -> dict:
        return {
            "locale": self.locale,
            "type": self.type.value,
            "url": self.url,
            "is_alternate": self.is_alternate,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MarketLanguage":
        return cls(
            locale=data["locale"],
            type=StrategyType(data["type"]),
            url=data.get("url") or "",
            is_alternate=bool(data.get("is_alternate")),
        )


@dataclass(frozen=True)
class MarketSummary:
    """An enabled market and the locales it yielded, in discovery order."""
    id: str
    name: str
    is_primary: bool = False
    languages: tuple[MarketLanguage, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "is_primary": self.is_primary,
            "languages": [language.to_dict() for language in self.languages],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MarketSummary":
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            is_primary=bool(data.get("is_primary")),
            languages=tuple(MarketLanguage.from_dict(lang) for lang in data.get("languages") or []),
        )


# =============================================================================
# ResolvedConfig - aggregate result of parsing the market graph
# =============================================================================

@dataclass(frozen=True)
class ResolvedConfig:
    """
    The resolved per-locale URL strategy for one shop.

    canonical_mapping holds the single winning strategy per locale;
    variant_mapping holds every strategy observed for each locale, in
    discovery order. Both are exposed read-only.

    Attributes:
        primary_host: Host of the shop's primary domain
        primary_url: Primary domain URL without trailing slash
        shop_name: Shop display name
        canonical_mapping: locale -> LocaleStrategy
        variant_mapping: locale -> tuple of LocaleStrategy
        markets: Summaries of markets that yielded at least one locale
        fingerprint: Content hash, see services.config_version
        fetched_at: ISO-8601 timestamp of when the source graph was parsed
    """
    primary_host: str
    primary_url: str
    shop_name: str = ""
    canonical_mapping: Mapping[LocaleKey, LocaleStrategy] = field(default_factory=dict)
    variant_mapping: Mapping[LocaleKey, tuple[LocaleStrategy, ...]] = field(default_factory=dict)
    markets: tuple[MarketSummary, ...] = field(default_factory=tuple)
    fingerprint: str = ""
    fetched_at: str = ""

    def __post_init__(self):
        object.__setattr__(self, "canonical_mapping", MappingProxyType(dict(self.canonical_mapping)))
        object.__setattr__(
            self,
            "variant_mapping",
            MappingProxyType({locale: tuple(variants) for locale, variants in self.variant_mapping.items()}),
        )
        object.__setattr__(self, "markets", tuple(self.markets))

    @property
    def locales(self) -> list[LocaleKey]:
        """Locales with a canonical strategy, in discovery order."""
        return list(self.canonical_mapping.keys())

    def to_dict(self) -> dict:
        return {
            "primary_host": self.primary_host,
            "primary_url": self.primary_url,
            "shop_name": self.shop_name,
            "canonical_mapping": {
                locale: strategy.to_dict() for locale, strategy in self.canonical_mapping.items()
            },
            "variant_mapping": {
                locale: [strategy.to_dict() for strategy in variants]
                for locale, variants in self.variant_mapping.items()
            },
            "markets": [market.to_dict() for market in self.markets],
            "fingerprint": self.fingerprint,
            "fetched_at": self.fetched_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ResolvedConfig":
        """Rebuild a ResolvedConfig from its to_dict() form (e.g. a cached JSON blob)."""
        return cls(
            primary_host=data["primary_host"],
            primary_url=data["primary_url"],
            shop_name=data.get("shop_name") or "",
            canonical_mapping={
                locale: LocaleStrategy.from_dict(strategy)
                for locale, strategy in (data.get("canonical_mapping") or {}).items()
            },
            variant_mapping={
                locale: tuple(LocaleStrategy.from_dict(strategy) for strategy in variants)
                for locale, variants in (data.get("variant_mapping") or {}).items()
            },
            markets=tuple(MarketSummary.from_dict(market) for market in data.get("markets") or []),
            fingerprint=data.get("fingerprint") or "",
            fetched_at=data.get("fetched_at") or "",
        )


# =============================================================================
# Options and settings
# =============================================================================

@dataclass(frozen=True)
class RewriteOptions:
    """
    Options for URL transformation and content rewriting.

    Attributes:
        strategy: CONSERVATIVE rewrites relative links only, AGGRESSIVE also
                  rewrites absolute internal links and <link> references
        preserve_query_params: Keep the query string on rewritten absolute URLs
        preserve_anchors: Keep the fragment on rewritten absolute URLs
        enable_conversion: Master switch; False returns content unchanged
    """
    strategy: ConversionMode = ConversionMode.CONSERVATIVE
    preserve_query_params: bool = True
    preserve_anchors: bool = True
    enable_conversion: bool = True

    @property
    def is_aggressive(self) -> bool:
        return self.strategy is ConversionMode.AGGRESSIVE

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "RewriteOptions":
        """Build options from a settings table such as [link_conversion]."""
        data = data or {}
        return cls(
            strategy=ConversionMode.from_string(data.get("strategy", ConversionMode.CONSERVATIVE)),
            preserve_query_params=bool(data.get("preserve_query_params", True)),
            preserve_anchors=bool(data.get("preserve_anchors", True)),
            enable_conversion=bool(data.get("enable_conversion", True)),
        )


@dataclass(frozen=True)
class UrlConversionSettings:
    """Per-shop toggles that gate whether link conversion runs at all."""
    strategy: ConversionMode = ConversionMode.CONSERVATIVE
    enable_link_conversion: bool = False

    def to_options(self, base: Optional[RewriteOptions] = None) -> RewriteOptions:
        base = base or RewriteOptions()
        return RewriteOptions(
            strategy=self.strategy,
            preserve_query_params=base.preserve_query_params,
            preserve_anchors=base.preserve_anchors,
            enable_conversion=self.enable_link_conversion,
        )


@dataclass(frozen=True)
class ShopSettingsRecord:
    """A row of the shop_settings table."""
    shop_id: str
    market_config: Optional[dict] = None
    market_config_at: Optional[datetime] = None
    config_version: Optional[str] = None
    url_strategy: ConversionMode = ConversionMode.CONSERVATIVE
    enable_link_conversion: bool = False

    @property
    def url_settings(self) -> UrlConversionSettings:
        return UrlConversionSettings(
            strategy=self.url_strategy,
            enable_link_conversion=self.enable_link_conversion,
        )
