"""
Input Normalization Utilities

The Admin API returns the same information in several shapes depending on
the query and API version: locales as bare strings or nested objects, and
collections as plain lists, `{nodes: [...]}` or `{edges: [{node: ...}]}`.
These adapters flatten all of them so the parser only ever sees flat
locale codes and plain lists.

Usage:
    ```python
    from domain.converters import flatten_connection, normalize_locale_list

    presences = flatten_connection(market.get("webPresences"))
    alternates = normalize_locale_list(presence.get("alternateLocales"))
    ```
"""

from typing import Any, Mapping, Optional

from domain.models import LocaleCode


def safe_str(value, default: str = "") -> str:
    """
    Convert value to a stripped str, returning default if null or blank.

    Examples:
        >>> safe_str("  fr ")
        'fr'
        >>> safe_str(None)
        ''
        >>> safe_str(None, default="N/A")
        'N/A'
    """
    if value is None:
        return default
    text = str(value).strip()
    return text if text else default


def flatten_connection(value: Any) -> list:
    """
    Flatten a GraphQL connection into a plain list.

    Accepts a bare list, `{"nodes": [...]}` or `{"edges": [{"node": ...}]}`.
    Anything else (None, scalars, unknown dicts) yields an empty list.

    Examples:
        >>> flatten_connection([1, 2])
        [1, 2]
        >>> flatten_connection({"nodes": [1]})
        [1]
        >>> flatten_connection({"edges": [{"node": 1}, {"node": 2}]})
        [1, 2]
        >>> flatten_connection(None)
        []
    """
    if isinstance(value, list):
        return [item for item in value if item is not None]
    if isinstance(value, Mapping):
        nodes = value.get("nodes")
        if isinstance(nodes, list):
            return [item for item in nodes if item is not None]
        edges = value.get("edges")
        if isinstance(edges, list):
            return [
                edge["node"]
                for edge in edges
                if isinstance(edge, Mapping) and edge.get("node") is not None
            ]
    return []


def normalize_locale_value(value: Any) -> Optional[LocaleCode]:
    """
    Reduce any supported locale shape to a LocaleCode.

    Supported shapes:
        "fr"
        {"locale": "fr"}
        {"isoCode": "fr", "languageTag": "fr-BE"}

    Args:
        value: Raw locale field from the Admin API

    Returns:
        LocaleCode, or None when no code can be extracted
    """
    if isinstance(value, str):
        code = safe_str(value)
        return LocaleCode(code=code, tag=code) if code else None

    if isinstance(value, Mapping):
        code = (
            safe_str(value.get("locale"))
            or safe_str(value.get("isoCode"))
            or safe_str(value.get("languageTag"))
        )
        if not code:
            return None
        tag = safe_str(value.get("languageTag"), default=code)
        return LocaleCode(code=code, tag=tag)

    return None


def normalize_locale_list(value: Any) -> list[LocaleCode]:
    """Normalize an alternate-locales field to a flat list of LocaleCode.

    Entries that cannot be resolved are dropped; order is preserved.
    """
    codes = []
    for item in flatten_connection(value):
        locale = normalize_locale_value(item)
        if locale is not None:
            codes.append(locale)
    return codes


def primary_subtag(locale: Optional[str]) -> str:
    """
    Return the lowercase language subtag of a locale.

    Examples:
        >>> primary_subtag("zh-CN")
        'zh'
        >>> primary_subtag("pt_BR")
        'pt'
        >>> primary_subtag(None)
        ''
    """
    if not locale:
        return ""
    return locale.replace("_", "-").split("-")[0].strip().lower()


def strip_trailing_slash(url: Optional[str]) -> str:
    """Drop trailing slashes from a base URL ("https://a.com/" -> "https://a.com")."""
    return safe_str(url).rstrip("/")
