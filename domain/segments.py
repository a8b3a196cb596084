"""
Subfolder Segment Builder

Computes the path segment a subfolder market serves a locale under.
Merchants configure one suffix per web presence ("be", "fr-be", "uk") and
the same presence can serve several languages, so the final segment
depends on both the locale and the suffix.
"""

from typing import Optional


def build_subfolder_segment(locale: Optional[str], suffix: Optional[str]) -> str:
    """
    Build the canonical subfolder segment for a locale and market suffix.

    Rules, first match wins:
    1. Empty suffix -> the locale itself
    2. Locale already region-qualified (en-gb) -> suffix is the full market path
    3. Suffix already hyphenated (fr-be) -> suffix as configured
    4. Suffix equals locale (single-market shop) -> locale
    5. Otherwise -> "{locale}-{suffix}"

    Both inputs are lowercased and the suffix is stripped of slashes.

    Args:
        locale: Language code, optionally region-qualified ("fr", "en-gb")
        suffix: Market subfolder suffix, may be empty or None

    Returns:
        Lowercase segment without leading/trailing slashes

    Examples:
        >>> build_subfolder_segment("fr", "be")
        'fr-be'
        >>> build_subfolder_segment("en-gb", "uk")
        'uk'
        >>> build_subfolder_segment("fr", "fr-be")
        'fr-be'
        >>> build_subfolder_segment("pt-pt", "")
        'pt-pt'
    """
    normalized_locale = (locale or "").strip().lower()
    normalized_suffix = (suffix or "").strip().strip("/").lower()

    if not normalized_suffix:
        return normalized_locale
    if "-" in normalized_locale:
        return normalized_suffix
    if "-" in normalized_suffix:
        return normalized_suffix
    if normalized_suffix == normalized_locale:
        return normalized_locale
    return f"{normalized_locale}-{normalized_suffix}"
