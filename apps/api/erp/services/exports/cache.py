"""Bounded TTL cache for computed export/report data."""

import hashlib
import json
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Optional

from erp.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60


class ExportCache:
    """LRU cache whose entries expire ``ttl_seconds`` after they were stored.

    Expired entries are dropped when they are read; the least recently used
    entry is evicted once ``max_size`` is exceeded.
    """

    def __init__(
        self,
        max_size: int = 256,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._entries: OrderedDict[str, tuple[Any, float]] = OrderedDict()
        self._max_size = max_size
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or ``None`` when missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None

            value, stored_at = entry
            if self._clock() - stored_at >= self._ttl:
                del self._entries[key]
                self.misses += 1
                return None

            self._entries.move_to_end(key)
            self.hits += 1
            return value

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous entry."""
        with self._lock:
            self._entries[key] = (value, self._clock())
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_size:
                evicted, _ = self._entries.popitem(last=False)
                self.evictions += 1
                logger.debug("Evicted cache entry %s", evicted)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def make_cache_key(*parts: Any) -> str:
    """Fingerprint request parameters into a stable cache key."""
    raw = json.dumps(parts, sort_keys=True, default=str)
    return hashlib.sha256(raw.encode()).hexdigest()[:32]


default_cache = ExportCache(
    max_size=settings.EXPORT_CACHE_MAX_SIZE,
    ttl_seconds=settings.EXPORT_CACHE_TTL_SECONDS,
)


def get_cached_data(key: str) -> Optional[Any]:
    return default_cache.get(key)


def set_cached_data(key: str, value: Any) -> None:
    default_cache.set(key, value)


def get_export_cache() -> ExportCache:
    """FastAPI dependency returning the process-wide cache."""
    return default_cache
