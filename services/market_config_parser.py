"""
Market Config Parser

Reduces the Admin API market graph (markets -> web presences -> default and
alternate locales) to a ResolvedConfig: one canonical LocaleStrategy per
locale plus every variant observed for it.

Design:
- Pure functions over plain dicts; fetching lives in markets_fetch_service
- Locale/collection shape differences are handled by domain.converters
- Canonical precedence is the merge_strategy() reducer, testable on its own
"""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from domain.converters import (
    flatten_connection,
    normalize_locale_list,
    normalize_locale_value,
    safe_str,
    strip_trailing_slash,
)
from domain.enums import StrategyType
from domain.models import LocaleStrategy, MarketLanguage, MarketSummary, ResolvedConfig
from domain.segments import build_subfolder_segment
from logging_config import setup_logging
from services.config_version import generate_config_fingerprint

logger = setup_logging(__name__, log_file="market_config_parser.log")


def bare_host(host: Optional[str]) -> str:
    """Lowercase host with a single leading "www." removed."""
    host = safe_str(host).lower()
    return host[4:] if host.startswith("www.") else host


def merge_strategy(
    existing: Optional[LocaleStrategy],
    candidate: LocaleStrategy,
    candidate_is_primary: bool,
) -> LocaleStrategy:
    """Pick the canonical strategy for a locale.

    The first strategy seen wins, except that a strategy from the primary
    market always replaces whatever was there.
    """
    if existing is None or candidate_is_primary:
        return candidate
    return existing


def classify_presence(
    presence: Mapping[str, Any],
    locale: str,
    primary_host: str,
    primary_url: str,
) -> LocaleStrategy:
    """Work out the URL strategy a web presence uses for one locale.

    - subfolderSuffix set -> subfolder on the primary domain
    - different host under the primary domain -> subdomain
    - any other different host -> domain
    - same host or no domain -> primary
    """
    suffix = safe_str(presence.get("subfolderSuffix")).strip("/")
    if suffix:
        segment = build_subfolder_segment(locale, suffix)
        return LocaleStrategy(
            locale=locale,
            type=StrategyType.SUBFOLDER,
            url=f"{primary_url}/{segment}",
            suffix=segment,
            path=f"/{segment}/",
            host=primary_host,
        )

    domain = presence.get("domain") or {}
    domain_host = safe_str(domain.get("host")).lower() if isinstance(domain, Mapping) else ""

    if domain_host and domain_host != primary_host.lower():
        root = bare_host(primary_host)
        if domain_host == root or domain_host.endswith(f".{root}"):
            strategy_type = StrategyType.SUBDOMAIN
        else:
            strategy_type = StrategyType.DOMAIN
        url = strip_trailing_slash(domain.get("url")) or f"https://{domain_host}"
        return LocaleStrategy(locale=locale, type=strategy_type, url=url, host=domain_host)

    return LocaleStrategy(
        locale=locale,
        type=StrategyType.PRIMARY,
        url=primary_url,
        host=primary_host,
    )


def _strategy_for_alternate(base: LocaleStrategy, presence: Mapping[str, Any], locale: str,
                            primary_url: str) -> LocaleStrategy:
    """Reuse the default locale's shape for an alternate locale.

    Subfolder segments are recomputed because the same suffix can map to
    different segments per language (de + at -> de-at, en + at -> en-at).
    """
    if base.type is StrategyType.SUBFOLDER:
        segment = build_subfolder_segment(locale, presence.get("subfolderSuffix"))
        return replace(
            base,
            locale=locale,
            url=f"{primary_url}/{segment}",
            suffix=segment,
            path=f"/{segment}/",
            is_alternate=True,
        )
    return replace(base, locale=locale, is_alternate=True)


def parse_markets_config(
    data: Optional[Mapping[str, Any]],
    fetched_at: Optional[datetime] = None,
) -> Optional[ResolvedConfig]:
    """Parse the markets query response into a ResolvedConfig.

    Args:
        data: The `data` object of the markets GraphQL response
        fetched_at: Timestamp to record; defaults to now (UTC)

    Returns:
        ResolvedConfig, or None when the shop's primary domain or the
        market list is missing.
    """
    if not data:
        logger.warning("Markets payload is empty")
        return None

    shop = data.get("shop") or {}
    primary_domain = shop.get("primaryDomain") or {}
    primary_host = safe_str(primary_domain.get("host")).lower()
    primary_url = strip_trailing_slash(primary_domain.get("url"))
    if not primary_host or not primary_url:
        logger.warning("Shop primary domain is missing; link conversion unavailable")
        return None

    markets = flatten_connection(data.get("markets"))
    if not markets:
        logger.warning("No markets in payload; link conversion unavailable")
        return None

    canonical: dict[str, LocaleStrategy] = {}
    variants: dict[str, list[LocaleStrategy]] = {}
    seen: set[tuple[str, str]] = set()
    summaries: list[MarketSummary] = []

    for market_index, market in enumerate(markets):
        if not isinstance(market, Mapping) or not market.get("enabled"):
            continue

        market_id = safe_str(market.get("id"), default=f"market-{market_index}")
        market_name = safe_str(market.get("name"))
        is_primary = bool(market.get("primary") or market.get("isPrimary"))
        languages: list[MarketLanguage] = []

        for presence_index, presence in enumerate(flatten_connection(market.get("webPresences"))):
            if not isinstance(presence, Mapping):
                continue
            default_locale = normalize_locale_value(presence.get("defaultLocale"))
            if default_locale is None:
                logger.debug(f"Skipping presence {presence_index} of {market_name}: no default locale")
                continue

            presence_id = safe_str(presence.get("id"), default=f"{market_id}#{presence_index}")
            base = replace(
                classify_presence(presence, default_locale.code, primary_host, primary_url),
                market_name=market_name,
                market_id=market_id,
                presence_id=presence_id,
                is_primary_market=is_primary,
            )

            candidates = [base]
            for alternate in normalize_locale_list(presence.get("alternateLocales")):
                candidates.append(_strategy_for_alternate(base, presence, alternate.code, primary_url))

            for strategy in candidates:
                identity = (presence_id, strategy.locale)
                if identity in seen:
                    continue
                seen.add(identity)

                variants.setdefault(strategy.locale, []).append(strategy)
                canonical[strategy.locale] = merge_strategy(
                    canonical.get(strategy.locale), strategy, is_primary
                )
                languages.append(
                    MarketLanguage(
                        locale=strategy.locale,
                        type=strategy.type,
                        url=strategy.url,
                        is_alternate=strategy.is_alternate,
                    )
                )

        if languages:
            summaries.append(
                MarketSummary(id=market_id, name=market_name, is_primary=is_primary, languages=tuple(languages))
            )

    fetched_at = fetched_at or datetime.now(timezone.utc)
    config = ResolvedConfig(
        primary_host=primary_host,
        primary_url=primary_url,
        shop_name=safe_str(shop.get("name")),
        canonical_mapping=canonical,
        variant_mapping=variants,
        markets=tuple(summaries),
        fetched_at=fetched_at.isoformat(),
    )
    config = replace(config, fingerprint=generate_config_fingerprint(config))

    logger.info(
        f"Parsed markets config for {config.shop_name or primary_host}: "
        f"{len(summaries)} markets, {len(canonical)} locales"
    )
    return config
