"""
Tests for the URL transformer

Covers skip rules, relative-path localization, aggressive absolute-URL
rewriting, idempotence and the never-raise guarantee.
"""
from unittest.mock import patch

import pytest

from conftest import make_market, make_payload, make_presence, subfolder
from domain.enums import ConversionMode, StrategyType
from domain.models import LocaleStrategy, RewriteOptions
from services.market_config_parser import parse_markets_config
from services.url_transformer import (
    has_locale_prefix,
    is_internal_host,
    remove_locale_prefix,
    should_skip_url,
    transform_url,
)

HOST = "example.com"
URL = "https://example.com"
AGGRESSIVE = RewriteOptions(strategy=ConversionMode.AGGRESSIVE)

FR = subfolder("fr", "fr-be")
DE_DE = subfolder("de-de", "de-de")
JA = LocaleStrategy(locale="ja", type=StrategyType.SUBDOMAIN, url="https://jp.example.com")
IT = LocaleStrategy(locale="it", type=StrategyType.DOMAIN, url="https://example.it")
EN = LocaleStrategy(locale="en", type=StrategyType.PRIMARY, url=URL)


def _transform(url, strategy, options=None):
    return transform_url(url, strategy, HOST, URL, options)


class TestSkipRules:
    @pytest.mark.parametrize("url", [
        "mailto:shop@example.com",
        "tel:+3212345678",
        "sms:+3212345678",
        "javascript:void(0)",
        "data:text/plain;base64,SGk=",
        "#",
        "#reviews",
        "ftp://example.com/file",
        "MAILTO:shop@example.com",
    ])
    def test_skipped_urls_are_unchanged(self, url):
        assert should_skip_url(url)
        for strategy in (FR, JA, IT, EN):
            assert _transform(url, strategy) == url
            assert _transform(url, strategy, AGGRESSIVE) == url

    @pytest.mark.parametrize("value", ["", None, 42])
    def test_empty_or_non_string(self, value):
        assert _transform(value, FR) == value

    def test_colon_in_query_is_not_a_scheme(self):
        assert not should_skip_url("/pages/hours?open=10:30")
        assert _transform("/pages/hours?open=10:30", FR) == "/fr-be/pages/hours?open=10:30"


class TestRelativePaths:
    def test_subfolder(self):
        assert _transform("/products/shirt", FR) == "/fr-be/products/shirt"

    def test_root_path(self):
        assert _transform("/", FR) == "/fr-be/"

    def test_subdomain(self):
        assert _transform("/products/shirt", JA) == "https://jp.example.com/products/shirt"

    def test_domain(self):
        assert _transform("/collections/all?page=2", IT) == "https://example.it/collections/all?page=2"

    def test_primary_unchanged(self):
        assert _transform("/products/shirt", EN) == "/products/shirt"

    @pytest.mark.parametrize("url", ["/en-de/products", "/fr/products", "/fr", "/EN-GB/cart"])
    def test_already_localized_paths_unchanged(self, url):
        assert _transform(url, DE_DE) == url

    def test_idempotent(self):
        once = _transform("/products/shirt", FR)
        assert _transform(once, FR) == once

    @pytest.mark.parametrize("url", ["/products/a", "/fil-ph", "/FIL-PH/products/a"])
    def test_three_letter_locale_segment_idempotent(self, url):
        payload = make_payload([make_market("m1", "Philippines", [make_presence("fil", suffix="ph")])])
        strategy = parse_markets_config(payload).canonical_mapping["fil"]
        assert strategy.suffix == "fil-ph"

        once = _transform(url, strategy)
        assert _transform(once, strategy) == once

    def test_own_segment_left_alone(self):
        fil = subfolder("fil", "fil-ph")
        assert _transform("/fil-ph/products/a", fil) == "/fil-ph/products/a"
        assert _transform("/fil-phx/products/a", fil) == "/fil-ph/fil-phx/products/a"

    def test_protocol_relative_unchanged(self):
        assert _transform("//cdn.example.com/a.js", FR) == "//cdn.example.com/a.js"
        assert _transform("//cdn.example.com/a.js", FR, AGGRESSIVE) == "//cdn.example.com/a.js"

    def test_bare_relative_unchanged(self):
        assert _transform("products/shirt", FR) == "products/shirt"


class TestAbsoluteUrls:
    def test_conservative_leaves_absolute_urls(self):
        assert _transform("https://example.com/products", FR) == "https://example.com/products"

    def test_replaces_existing_locale_prefix_once(self):
        result = _transform("https://example.com/en-de/products", DE_DE, AGGRESSIVE)
        assert result == "https://example.com/de-de/products"

    def test_own_three_letter_segment_not_doubled(self):
        fil = subfolder("fil", "fil-ph")
        once = _transform("https://example.com/products/a?x=1", fil, AGGRESSIVE)
        assert once == "https://example.com/fil-ph/products/a?x=1"
        assert _transform(once, fil, AGGRESSIVE) == once
        assert _transform("https://example.com/fil-ph", fil, AGGRESSIVE) == "https://example.com/fil-ph/"

    def test_subfolder(self):
        result = _transform("https://www.example.com/products/shirt?color=red#size", FR, AGGRESSIVE)
        assert result == "https://example.com/fr-be/products/shirt?color=red#size"

    def test_subdomain(self):
        result = _transform("https://example.com/fr/products", JA, AGGRESSIVE)
        assert result == "https://jp.example.com/products"

    def test_domain(self):
        assert _transform("http://example.com/cart", IT, AGGRESSIVE) == "https://example.it/cart"

    def test_primary_unchanged(self):
        url = "https://example.com/products"
        assert _transform(url, EN, AGGRESSIVE) == url

    def test_host_without_path(self):
        assert _transform("https://example.com", FR, AGGRESSIVE) == "https://example.com/fr-be/"

    def test_drops_query_and_fragment_when_not_preserved(self):
        options = RewriteOptions(
            strategy=ConversionMode.AGGRESSIVE, preserve_query_params=False, preserve_anchors=False
        )
        result = _transform("https://example.com/products?a=1#top", FR, options)
        assert result == "https://example.com/fr-be/products"

    @pytest.mark.parametrize("url", [
        "https://other-shop.com/products",
        "https://notexample.com/products",
        "https://cdn.shopify.com/s/files/1/a.png",
    ])
    def test_external_hosts_unchanged(self, url):
        for strategy in (FR, JA, IT):
            assert _transform(url, strategy, AGGRESSIVE) == url

    def test_subdomain_link_is_internal(self):
        result = _transform("https://blog.example.com/news", FR, AGGRESSIVE)
        assert result == "https://example.com/fr-be/news"

    def test_malformed_url_returned_unchanged(self):
        url = "http://[::1/products"
        assert _transform(url, FR, AGGRESSIVE) == url

    def test_never_raises(self):
        with patch("services.url_transformer.urlsplit", side_effect=RuntimeError("boom")):
            url = "https://example.com/products"
            assert _transform(url, FR, AGGRESSIVE) == url


class TestHelpers:
    def test_has_locale_prefix(self):
        assert has_locale_prefix("/fr/")
        assert has_locale_prefix("/fr-be/products")
        assert has_locale_prefix("/de")
        assert not has_locale_prefix("/products")
        assert not has_locale_prefix("/fra/products")
        assert not has_locale_prefix("/fr-bel/products")

    def test_remove_locale_prefix(self):
        assert remove_locale_prefix("/en-de/products") == "/products"
        assert remove_locale_prefix("/fr") == "/"
        assert remove_locale_prefix("/products") == "/products"

    @pytest.mark.parametrize("host,expected", [
        ("example.com", True),
        ("www.example.com", True),
        ("shop.example.com", True),
        ("com", True),
        ("example.org", False),
        ("notexample.com", False),
        (None, False),
    ])
    def test_is_internal_host(self, host, expected):
        assert is_internal_host(host, "www.example.com") is expected
