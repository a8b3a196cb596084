"""Tests for ShopSettingsRepository against a temporary SQLite file."""
from datetime import datetime, timezone

import pytest

from config import DatabaseConfig
from domain.enums import ConversionMode
from domain.models import ResolvedConfig, UrlConversionSettings
from repositories.shop_settings_repo import ShopSettingsRepository, get_shop_settings_repository
from services.market_config_parser import parse_markets_config


@pytest.fixture
def repo(tmp_path):
    db = DatabaseConfig("shop_settings", path=str(tmp_path / "shop_settings.db"))
    yield ShopSettingsRepository(db)
    db.dispose()


@pytest.fixture
def parsed_config(multi_market_payload):
    return parse_markets_config(multi_market_payload)


def test_unknown_shop(repo):
    assert repo.get_shop_settings("missing") is None
    assert repo.get_url_settings("missing") is None


def test_save_market_config_round_trip(repo, parsed_config):
    stored_at = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    record = repo.save_market_config("shop-1", parsed_config, stored_at=stored_at)

    assert record.shop_id == "shop-1"
    assert record.config_version == parsed_config.fingerprint
    assert record.market_config_at == stored_at
    assert ResolvedConfig.from_dict(record.market_config) == parsed_config


def test_new_row_has_default_url_settings(repo, parsed_config):
    record = repo.save_market_config("shop-1", parsed_config)
    assert record.url_strategy is ConversionMode.CONSERVATIVE
    assert record.enable_link_conversion is False


def test_save_overwrites_previous_config(repo, parsed_config, sample_config):
    repo.save_market_config("shop-1", parsed_config)
    record = repo.save_market_config("shop-1", sample_config)
    assert record.market_config["primary_host"] == sample_config.primary_host
    assert record.config_version == sample_config.fingerprint


def test_url_settings_survive_config_writes(repo, parsed_config):
    repo.upsert_url_settings("shop-1", UrlConversionSettings(ConversionMode.AGGRESSIVE, True))
    repo.save_market_config("shop-1", parsed_config)

    settings = repo.get_url_settings("shop-1")
    assert settings == UrlConversionSettings(ConversionMode.AGGRESSIVE, True)


def test_clear_market_config(repo, parsed_config):
    repo.save_market_config("shop-1", parsed_config)
    assert repo.clear_market_config("shop-1") is True

    record = repo.get_shop_settings("shop-1")
    assert record.market_config is None
    assert record.config_version is None
    assert record.market_config_at is None


def test_clear_unknown_shop(repo):
    assert repo.clear_market_config("missing") is False


def test_list_shop_settings(repo, parsed_config):
    repo.save_market_config("shop-b", parsed_config)
    repo.upsert_url_settings("shop-a", UrlConversionSettings(enable_link_conversion=True))

    df = repo.list_shop_settings()
    assert df["shop_id"].tolist() == ["shop-a", "shop-b"]
    assert "market_config" not in df.columns


def test_factory_uses_given_db(tmp_path):
    db = DatabaseConfig("shop_settings", path=str(tmp_path / "other.db"))
    try:
        assert get_shop_settings_repository(db).db is db
    finally:
        db.dispose()
