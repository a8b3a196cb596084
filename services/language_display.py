"""
Language Display

Tabular view of a resolved config for operators: one row per canonical
locale with its URL strategy. Used by the `mkts locales` command.
"""

from typing import Optional

import pandas as pd

from domain.models import ResolvedConfig

LANGUAGE_NAMES = {
    "en": "English",
    "es": "Spanish",
    "es-ES": "Spanish (Spain)",
    "es-MX": "Spanish (Mexico)",
    "fr": "French",
    "fr-FR": "French (France)",
    "fr-CA": "French (Canada)",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "pt-BR": "Portuguese (Brazil)",
    "pt-PT": "Portuguese (Portugal)",
    "nl": "Dutch",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
    "zh-CN": "Chinese (Simplified)",
    "zh-TW": "Chinese (Traditional)",
    "ru": "Russian",
    "ar": "Arabic",
    "hi": "Hindi",
    "th": "Thai",
    "tr": "Turkish",
    "pl": "Polish",
    "sv": "Swedish",
    "da": "Danish",
    "no": "Norwegian",
    "fi": "Finnish",
    "cs": "Czech",
    "hu": "Hungarian",
    "ro": "Romanian",
    "bg": "Bulgarian",
    "sk": "Slovak",
    "sl": "Slovenian",
    "et": "Estonian",
    "lv": "Latvian",
    "lt": "Lithuanian",
}

DISPLAY_COLUMNS = [
    "locale", "name", "type", "strategy", "url", "path", "market_name", "is_primary", "is_alternate",
]


def get_language_name(locale: str) -> str:
    """Display name for a locale code; unknown codes are returned as-is."""
    return LANGUAGE_NAMES.get(locale, locale)


def get_language_urls_for_display(config: Optional[ResolvedConfig]) -> pd.DataFrame:
    """One row per canonical locale, primary-market rows first, then by locale."""
    if config is None or not config.canonical_mapping:
        return pd.DataFrame(columns=DISPLAY_COLUMNS)

    rows = [
        {
            "locale": locale,
            "name": get_language_name(locale),
            "type": strategy.type.value,
            "strategy": strategy.type.display_name,
            "url": strategy.url or config.primary_url,
            "path": strategy.path,
            "market_name": strategy.market_name,
            "is_primary": strategy.is_primary_market,
            "is_alternate": strategy.is_alternate,
        }
        for locale, strategy in config.canonical_mapping.items()
    ]
    df = pd.DataFrame(rows, columns=DISPLAY_COLUMNS)
    df = df.sort_values(by=["is_primary", "locale"], ascending=[False, True], kind="stable")
    return df.reset_index(drop=True)
