"""
Domain Enums

Enumerations for the categorical values that flow through link localization.
Values are the lowercase strings used in serialized configs and settings.toml,
so members round-trip through JSON unchanged.
"""

from enum import Enum


class StrategyType(str, Enum):
    """
    Shape of a localized URL for one locale.

    - PRIMARY: served from the shop's primary domain, links are left alone
    - SUBFOLDER: a path segment on the primary domain (example.com/fr-be)
    - SUBDOMAIN: a host under the primary domain (fr.example.com)
    - DOMAIN: an independent domain (example.fr)
    """
    PRIMARY = "primary"
    SUBFOLDER = "subfolder"
    SUBDOMAIN = "subdomain"
    DOMAIN = "domain"

    @property
    def is_host_based(self) -> bool:
        """True for strategies that move the link to another host."""
        return self in (StrategyType.SUBDOMAIN, StrategyType.DOMAIN)

    @property
    def display_name(self) -> str:
        return {
            StrategyType.PRIMARY: "Primary domain",
            StrategyType.SUBFOLDER: "Subfolder",
            StrategyType.SUBDOMAIN: "Subdomain",
            StrategyType.DOMAIN: "Domain",
        }[self]


class ConversionMode(str, Enum):
    """
    How far the content rewriter reaches.

    CONSERVATIVE only rewrites relative links. AGGRESSIVE also rewrites
    absolute links to internal hosts and <link> resource references.
    """
    CONSERVATIVE = "conservative"
    AGGRESSIVE = "aggressive"

    @classmethod
    def from_string(cls, value) -> "ConversionMode":
        """
        Convert a settings value to a ConversionMode.

        Args:
            value: Mode name (case-insensitive) or an existing member

        Returns:
            Corresponding ConversionMode

        Raises:
            ValueError: If the name is not a known mode
        """
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"Unknown conversion mode: {value}")
