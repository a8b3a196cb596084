"""
Link Rewriter

Rewrites link targets inside translated HTML so they point at the target
locale's storefront. Only href values are replaced; all other markup is
kept byte-for-byte.

Supported markup: `<a ...>` and `<link ...>` tags whose href attribute is
quoted (single or double quotes) and preceded by whitespace. Unquoted
values, `data-href` and other tags such as `<area>` are left untouched.

Failure isolation:
- one bad link keeps its original tag, the rest of the document still converts
- one bad locale in a batch returns the original content for that locale only
"""

import re
from typing import Any, Iterable, Mapping, Optional, Union
from urllib.parse import urljoin, urlsplit

from domain.converters import primary_subtag
from domain.models import LocaleStrategy, ResolvedConfig, RewriteOptions
from logging_config import setup_logging
from services.url_transformer import is_internal_host, transform_url

logger = setup_logging(__name__, log_file="link_rewriter.log")

REQUIRED_CONFIG_FIELDS = ("primary_host", "primary_url", "canonical_mapping")


def _tag_href_pattern(tag: str) -> re.Pattern:
    return re.compile(
        rf"<{tag}\b(?P<before>[^>]*?\s)href\s*=\s*"
        r"(?:\"(?P<dq>[^\"]*)\"|'(?P<sq>[^']*)')"
        r"(?P<after>[^>]*)>",
        re.IGNORECASE | re.DOTALL,
    )


ANCHOR_HREF_RE = _tag_href_pattern("a")
LINK_HREF_RE = _tag_href_pattern("link")


# =============================================================================
# Locale lookup
# =============================================================================

def resolve_locale_strategy(config: Optional[ResolvedConfig], locale: Optional[str]) -> Optional[LocaleStrategy]:
    """Find the canonical strategy for a locale.

    Tries the exact code, then a case-insensitive match, then the primary
    language subtag ("zh" for "zh-CN").
    """
    if config is None or not locale:
        return None

    mapping = config.canonical_mapping
    if locale in mapping:
        return mapping[locale]

    lowered = locale.lower()
    for code, strategy in mapping.items():
        if code.lower() == lowered:
            return strategy

    subtag = primary_subtag(locale)
    if subtag in mapping:
        return mapping[subtag]
    for code, strategy in mapping.items():
        if code.lower() == subtag:
            return strategy
    return None


# =============================================================================
# Rewriting
# =============================================================================

def _replace_href(match: re.Match, new_url: str) -> str:
    """Swap only the href value inside the matched tag."""
    group = "dq" if match.group("dq") is not None else "sq"
    offset = match.start()
    tag = match.group(0)
    return tag[: match.start(group) - offset] + new_url + tag[match.end(group) - offset:]


def _href_of(match: re.Match) -> str:
    return match.group("dq") if match.group("dq") is not None else match.group("sq")


def _is_internal_reference(url: str, primary_host: str) -> bool:
    if url.startswith("/") and not url.startswith("//"):
        return True
    host = urlsplit(urljoin(f"https://{primary_host}/", url)).hostname
    return is_internal_host(host, primary_host)


def convert_links_for_locale(
    html: Optional[str],
    target_locale: Optional[str],
    config: Optional[ResolvedConfig],
    options: Optional[RewriteOptions] = None,
) -> Optional[str]:
    """Rewrite the links in an HTML fragment for one target locale.

    Args:
        html: HTML fragment (translated content)
        target_locale: Locale to localize links for ("fr", "zh-CN")
        config: ResolvedConfig of the shop
        options: RewriteOptions; defaults to conservative mode

    Returns:
        The rewritten fragment, or the input unchanged when there is nothing
        to do or no strategy exists for the locale.
    """
    if not html or not target_locale or config is None:
        return html

    options = options or RewriteOptions()
    if not options.enable_conversion:
        return html

    try:
        strategy = resolve_locale_strategy(config, target_locale)
        if strategy is None:
            logger.debug(f"No locale strategy for {target_locale}; content left unchanged")
            return html

        primary_host = config.primary_host
        primary_url = config.primary_url

        def _convert_anchor(match: re.Match) -> str:
            original = _href_of(match)
            try:
                converted = transform_url(original, strategy, primary_host, primary_url, options)
                return _replace_href(match, converted)
            except Exception as e:
                logger.warning(f"Link conversion failed for {original!r} ({target_locale}): {e}")
                return match.group(0)

        converted_html = ANCHOR_HREF_RE.sub(_convert_anchor, html)

        if options.is_aggressive:
            def _convert_resource(match: re.Match) -> str:
                original = _href_of(match)
                try:
                    if not _is_internal_reference(original, primary_host):
                        return match.group(0)
                    converted = transform_url(original, strategy, primary_host, primary_url, options)
                    return _replace_href(match, converted)
                except Exception as e:
                    logger.warning(f"Resource link conversion failed for {original!r} ({target_locale}): {e}")
                    return match.group(0)

            converted_html = LINK_HREF_RE.sub(_convert_resource, converted_html)

        return converted_html

    except Exception as e:
        logger.error(f"Link conversion failed for locale {target_locale}: {e}")
        return html


def batch_convert_links(
    html: Optional[str],
    target_locales: Iterable[str],
    config: Optional[ResolvedConfig],
    options: Optional[RewriteOptions] = None,
) -> dict[str, Optional[str]]:
    """Rewrite one fragment for several locales.

    Returns a dict keyed by locale. A locale whose conversion fails gets
    the original fragment; the others are unaffected.
    """
    results: dict[str, Optional[str]] = {}
    for locale in target_locales:
        try:
            results[locale] = convert_links_for_locale(html, locale, config, options)
        except Exception as e:
            logger.error(f"Batch link conversion failed for locale {locale}: {e}")
            results[locale] = html
    return results


# =============================================================================
# Helpers
# =============================================================================

def validate_market_config(config: Union[ResolvedConfig, Mapping[str, Any], None]) -> bool:
    """Check that a config carries the fields link conversion needs.

    Accepts a ResolvedConfig or its plain-data form. Never raises.
    """
    if config is None:
        return False
    try:
        if isinstance(config, ResolvedConfig):
            data = {
                "primary_host": config.primary_host,
                "primary_url": config.primary_url,
                "canonical_mapping": config.canonical_mapping,
            }
        elif isinstance(config, Mapping):
            data = config
        else:
            logger.warning(f"Unsupported market config type: {type(config).__name__}")
            return False

        for field_name in REQUIRED_CONFIG_FIELDS:
            if field_name not in data or data[field_name] is None or data[field_name] == "":
                logger.warning(f"Market config missing required field: {field_name}")
                return False

        if not isinstance(data["canonical_mapping"], Mapping):
            logger.warning("Market config canonical_mapping is not a mapping")
            return False
        return True
    except Exception as e:
        logger.warning(f"Market config validation failed: {e}")
        return False


def get_supported_locales(config: Optional[ResolvedConfig]) -> list[str]:
    """Locales with a canonical strategy, in discovery order."""
    if config is None:
        return []
    return config.locales


def get_url_preview(original_url: str, target_locale: str, config: ResolvedConfig,
                    options: Optional[RewriteOptions] = None) -> dict:
    """Show what a single URL would become for a locale."""
    try:
        strategy = resolve_locale_strategy(config, target_locale)
        if strategy is None:
            return {
                "original": original_url,
                "converted": original_url,
                "type": "unchanged",
                "reason": f"No locale strategy for {target_locale}",
            }

        converted = transform_url(original_url, strategy, config.primary_host, config.primary_url, options)
        return {
            "original": original_url,
            "converted": converted,
            "type": strategy.type.value,
            "locale": target_locale,
            "changed": converted != original_url,
        }
    except Exception as e:
        return {
            "original": original_url,
            "converted": original_url,
            "type": "error",
            "error": str(e),
        }
