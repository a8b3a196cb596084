"""Tests for the in-memory market config cache."""
import pytest

from services.market_config_cache import MarketConfigCache


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return MarketConfigCache(ttl_seconds=60, clock=clock)


def test_get_missing_returns_none(cache):
    assert cache.get("shop-1") is None


def test_put_then_get(cache, sample_config):
    cache.put("shop-1", sample_config)
    assert cache.get("shop-1") is sample_config
    assert len(cache) == 1


def test_entries_are_per_shop(cache, sample_config):
    cache.put("shop-1", sample_config)
    assert cache.get("shop-2") is None


def test_entry_valid_until_ttl(cache, clock, sample_config):
    cache.put("shop-1", sample_config)
    clock.advance(60)
    assert cache.get("shop-1") is sample_config


def test_expired_entry_is_evicted(cache, clock, sample_config):
    cache.put("shop-1", sample_config)
    clock.advance(61)
    assert cache.get("shop-1") is None
    assert len(cache) == 0


def test_put_refreshes_timestamp(cache, clock, sample_config):
    cache.put("shop-1", sample_config)
    clock.advance(50)
    cache.put("shop-1", sample_config)
    clock.advance(50)
    assert cache.get("shop-1") is sample_config


def test_invalidate(cache, sample_config):
    cache.put("shop-1", sample_config)
    assert cache.invalidate("shop-1") is True
    assert cache.invalidate("shop-1") is False
    assert cache.get("shop-1") is None


def test_clear(cache, sample_config):
    cache.put("shop-1", sample_config)
    cache.put("shop-2", sample_config)
    cache.clear()
    assert len(cache) == 0


def test_instances_do_not_share_state(clock, sample_config):
    first = MarketConfigCache(clock=clock)
    second = MarketConfigCache(clock=clock)
    first.put("shop-1", sample_config)
    assert second.get("shop-1") is None


@pytest.mark.parametrize("ttl", [0, -5])
def test_rejects_non_positive_ttl(ttl):
    with pytest.raises(ValueError):
        MarketConfigCache(ttl_seconds=ttl)
