"""
Pytest configuration file for the market link localizer.
This file sets up the Python path so tests can import modules from the project root,
and provides market payload / resolved config fixtures.
"""
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add the project root to Python path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from domain.enums import StrategyType  # noqa: E402
from domain.models import LocaleStrategy, ResolvedConfig  # noqa: E402

FIXED_FETCHED_AT = datetime(2026, 1, 1, tzinfo=timezone.utc)


def make_presence(default_locale, suffix=None, host=None, url=None, alternates=(), presence_id=None):
    """Build a web presence node in the Admin API shape."""
    presence = {
        "defaultLocale": {"locale": default_locale},
        "alternateLocales": [{"locale": alt} for alt in alternates],
        "subfolderSuffix": suffix,
    }
    if presence_id is not None:
        presence["id"] = presence_id
    if host is not None:
        presence["domain"] = {"host": host, "url": url or f"https://{host}"}
    return presence


def make_market(market_id, name, presences, enabled=True, primary=False):
    return {
        "id": market_id,
        "name": name,
        "enabled": enabled,
        "primary": primary,
        "webPresences": {"nodes": list(presences)},
    }


def make_payload(markets, host="example.com", url="https://example.com", name="Test Shop"):
    return {
        "markets": {"nodes": list(markets)},
        "shop": {"primaryDomain": {"host": host, "url": url}, "name": name},
    }


def make_config(strategies, primary_host="example.com", primary_url="https://example.com"):
    """ResolvedConfig with the given strategies as canonical mapping."""
    return ResolvedConfig(
        primary_host=primary_host,
        primary_url=primary_url,
        shop_name="Test Shop",
        canonical_mapping={s.locale: s for s in strategies},
        variant_mapping={s.locale: (s,) for s in strategies},
    )


def subfolder(locale, suffix, primary_url="https://example.com"):
    return LocaleStrategy(
        locale=locale,
        type=StrategyType.SUBFOLDER,
        url=f"{primary_url}/{suffix}",
        suffix=suffix,
        path=f"/{suffix}/",
    )


@pytest.fixture
def payload_factory():
    return make_payload


@pytest.fixture
def multi_market_payload():
    """Primary market on the main domain plus subfolder, subdomain and domain markets."""
    return make_payload([
        make_market(
            "gid://shopify/Market/1", "United States",
            [make_presence("en", host="example.com", presence_id="p1")],
            primary=True,
        ),
        make_market(
            "gid://shopify/Market/2", "Belgium",
            [make_presence("nl", suffix="be", alternates=["fr", "de"], presence_id="p2")],
        ),
        make_market(
            "gid://shopify/Market/3", "Japan",
            [make_presence("ja", host="jp.example.com", presence_id="p3")],
        ),
        make_market(
            "gid://shopify/Market/4", "Germany",
            [make_presence("de-DE", host="example.de", url="https://example.de/", presence_id="p4")],
        ),
        make_market(
            "gid://shopify/Market/5", "Disabled",
            [make_presence("it", suffix="it", presence_id="p5")],
            enabled=False,
        ),
    ])


@pytest.fixture
def sample_config():
    """Resolved config covering every strategy type."""
    return make_config([
        LocaleStrategy(locale="en", type=StrategyType.PRIMARY, url="https://example.com",
                       host="example.com", is_primary_market=True),
        subfolder("fr", "fr-be"),
        subfolder("de-de", "de-de"),
        LocaleStrategy(locale="ja", type=StrategyType.SUBDOMAIN, url="https://jp.example.com",
                       host="jp.example.com"),
        LocaleStrategy(locale="it", type=StrategyType.DOMAIN, url="https://example.it",
                       host="example.it"),
    ])
