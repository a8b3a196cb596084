"""
Market Config Cache

In-memory TTL cache of ResolvedConfig per shop. Callers create one and pass
it to whatever needs it; nothing here is a module-level singleton, so tests
and parallel workers each get their own instance.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from domain.models import ResolvedConfig
from logging_config import setup_logging

logger = setup_logging(__name__, log_file="market_config_cache.log")


@dataclass(frozen=True)
class _CacheEntry:
    config: ResolvedConfig
    stored_at: float


class MarketConfigCache:
    """TTL cache keyed by shop id.

    Args:
        ttl_seconds: How long an entry stays valid after put()
        clock: Monotonic time source, injectable for tests
    """

    def __init__(self, ttl_seconds: float = 24 * 60 * 60, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, shop_id: str) -> Optional[ResolvedConfig]:
        """Return the cached config, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(shop_id)
            if entry is None:
                return None
            age = self._clock() - entry.stored_at
            if age > self.ttl_seconds:
                del self._entries[shop_id]
                logger.debug(f"Cache entry for {shop_id} expired after {age:.0f}s")
                return None
            return entry.config

    def put(self, shop_id: str, config: ResolvedConfig) -> None:
        with self._lock:
            self._entries[shop_id] = _CacheEntry(config=config, stored_at=self._clock())

    def invalidate(self, shop_id: str) -> bool:
        """Drop one shop's entry. Returns True if something was removed."""
        with self._lock:
            removed = self._entries.pop(shop_id, None) is not None
        if removed:
            logger.debug(f"Invalidated cached market config for {shop_id}")
        return removed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
