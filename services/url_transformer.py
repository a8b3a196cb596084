"""
URL Transformer

Rewrites a single URL to its localized form for one LocaleStrategy.

Rules:
- Non-http(s) schemes, fragment-only links and empty values are never touched
- Relative paths that already carry a locale prefix are left alone, so
  running the rewrite twice never double-localizes
- Absolute URLs are only rewritten in aggressive mode, and only when they
  point at the shop's own hosts
- transform_url() never raises; on any error the original URL is returned
"""

import re
from typing import Optional
from urllib.parse import urlsplit

from domain.enums import StrategyType
from domain.models import LocaleStrategy, RewriteOptions
from logging_config import setup_logging

logger = setup_logging(__name__, log_file="url_transformer.log")

SKIP_PREFIXES = ("mailto:", "tel:", "sms:", "javascript:", "data:", "#")

_SCHEME_RE = re.compile(r"^([a-z][a-z0-9+.\-]*):", re.IGNORECASE)
_LOCALE_PREFIX_RE = re.compile(r"^/[a-z]{2}(?:-[a-z]{2})?(?=/|$)", re.IGNORECASE)


def should_skip_url(url) -> bool:
    """True for values that must never be rewritten."""
    if not url or not isinstance(url, str):
        return True

    lowered = url.strip().lower()
    if lowered.startswith(SKIP_PREFIXES):
        return True

    scheme = _SCHEME_RE.match(lowered)
    if scheme and scheme.group(1) not in ("http", "https"):
        return True

    return False


def is_full_url(url: str) -> bool:
    lowered = url.lower()
    return lowered.startswith("http://") or lowered.startswith("https://")


def has_locale_prefix(path: str) -> bool:
    """True if the path starts with /xx or /xx-yy followed by / or the end."""
    return bool(_LOCALE_PREFIX_RE.match(path))


def remove_locale_prefix(path: str) -> str:
    """Strip one leading locale segment ("/en-de/products" -> "/products")."""
    stripped = _LOCALE_PREFIX_RE.sub("", path, count=1)
    return stripped if stripped.startswith("/") else f"/{stripped}"


def _has_own_segment(path: str, strategy: LocaleStrategy) -> bool:
    """True if the path already sits under the strategy's subfolder segment.

    Covers segments the generic prefix pattern misses, such as "fil-ph".
    """
    if strategy.type is not StrategyType.SUBFOLDER or not strategy.suffix:
        return False
    segment = f"/{strategy.suffix}".lower()
    lowered = path.lower()
    return lowered == segment or lowered.startswith(f"{segment}/")


def _remove_own_segment(path: str, strategy: LocaleStrategy) -> str:
    if not _has_own_segment(path, strategy):
        return path
    stripped = path[len(strategy.suffix) + 1:]
    return stripped if stripped.startswith("/") else f"/{stripped}"


def is_internal_host(url_host: Optional[str], primary_host: Optional[str]) -> bool:
    """True if the host is the primary host, a sub-domain of it, or a parent of it.

    A leading "www." is ignored on both sides.
    """
    if not url_host or not primary_host:
        return False

    def _bare(host: str) -> str:
        host = host.lower()
        return host[4:] if host.startswith("www.") else host

    host = _bare(url_host)
    primary = _bare(primary_host)
    return (
        host == primary
        or host.endswith(f".{primary}")
        or primary.endswith(f".{host}")
    )


def _localize_path(path: str, strategy: LocaleStrategy, base_url: str) -> Optional[str]:
    """Join a path onto the localized base for the strategy type.

    Returns None for strategy types that leave links unchanged.
    """
    if strategy.type is StrategyType.SUBFOLDER and strategy.suffix:
        return f"{base_url}/{strategy.suffix}{path}"
    if strategy.type.is_host_based and strategy.url:
        return f"{strategy.url}{path}"
    return None


def _transform_relative(url: str, strategy: LocaleStrategy) -> str:
    if has_locale_prefix(url) or _has_own_segment(url, strategy):
        return url
    localized = _localize_path(url, strategy, base_url="")
    return localized if localized is not None else url


def _transform_absolute(url: str, strategy: LocaleStrategy, primary_host: str,
                        primary_url: str, options: RewriteOptions) -> str:
    parts = urlsplit(url)
    if not is_internal_host(parts.hostname, primary_host):
        return url

    path = parts.path or "/"
    if _has_own_segment(path, strategy):
        path = _remove_own_segment(path, strategy)
    else:
        path = remove_locale_prefix(path)
    query = f"?{parts.query}" if options.preserve_query_params and parts.query else ""
    anchor = f"#{parts.fragment}" if options.preserve_anchors and parts.fragment else ""

    localized = _localize_path(path, strategy, base_url=primary_url.rstrip("/"))
    if localized is None:
        return url
    return f"{localized}{query}{anchor}"


def transform_url(
    original_url,
    strategy: LocaleStrategy,
    primary_host: str,
    primary_url: str,
    options: Optional[RewriteOptions] = None,
):
    """Rewrite one URL for the target locale's strategy.

    Args:
        original_url: href value as found in the content
        strategy: Canonical LocaleStrategy of the target locale
        primary_host: Host of the shop's primary domain
        primary_url: Primary domain URL without trailing slash
        options: RewriteOptions; defaults to conservative mode

    Returns:
        The localized URL, or original_url unchanged when it is skipped,
        external, already localized or malformed.
    """
    options = options or RewriteOptions()

    try:
        if should_skip_url(original_url):
            return original_url

        if original_url.startswith("/") and not original_url.startswith("//"):
            return _transform_relative(original_url, strategy)

        if options.is_aggressive and is_full_url(original_url):
            return _transform_absolute(original_url, strategy, primary_host, primary_url, options)

    except Exception as e:
        logger.debug(f"Leaving URL unchanged after transform error ({e}): {original_url!r}")

    return original_url
