"""
release_cache.py
- Keyed store of generated release lists, one entry per timeframe per day.
- In-memory LRU by default; Redis when OTT_CACHE_BACKEND=redis.
- Entries are fresh for ott_cache_ttl_seconds (5 min); freshness is checked by the
  reader, expired entries are swept on write.
"""
import json
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence, Tuple

from app.core.config import settings
from app.schemas import Release
from app.utils.timezone import ensure_utc, utc_now

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300


@dataclass(frozen=True)
class CacheEntry:
    data: Tuple[Release, ...]
    timestamp: datetime


def cache_key(timeframe: str, today: date) -> str:
    return f"{timeframe}-{today.isoformat()}"


def is_fresh(entry: Optional[CacheEntry], now: datetime, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> bool:
    if entry is None:
        return False
    return ensure_utc(now) - ensure_utc(entry.timestamp) < timedelta(seconds=ttl_seconds)


class ReleaseCache:
    """Thread-safe in-memory LRU of CacheEntry objects."""

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_entries: int = 64,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max(1, int(max_entries))
        self._clock = clock
        self._store: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    async def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._store.get(key)
            if entry is not None:
                self._store.move_to_end(key)
            return entry

    async def put(self, key: str, data: Sequence[Release]) -> CacheEntry:
        now = self._clock()
        entry = CacheEntry(data=tuple(data), timestamp=now)
        with self._lock:
            self._sweep_locked(now)
            self._store[key] = entry
            self._store.move_to_end(key)
            while len(self._store) > self.max_entries:
                evicted, _ = self._store.popitem(last=False)
                logger.debug(f"[OTT_CACHE] Evicted {evicted} (max_entries={self.max_entries})")
        return entry

    def sweep(self, now: Optional[datetime] = None) -> int:
        """Drop expired entries. Returns how many were removed."""
        with self._lock:
            return self._sweep_locked(now or self._clock())

    def _sweep_locked(self, now: datetime) -> int:
        expired = [k for k, e in self._store.items() if not is_fresh(e, now, self.ttl_seconds)]
        for k in expired:
            del self._store[k]
        return len(expired)

    def stats(self) -> dict:
        with self._lock:
            return {"backend": "memory", "size": len(self._store), "max_size": self.max_entries}


class RedisReleaseCache:
    """Redis-backed variant; Redis TTL handles eviction."""

    KEY_PREFIX = "ott:releases:"

    def __init__(self, redis=None, ttl_seconds: int = DEFAULT_TTL_SECONDS, clock: Callable[[], datetime] = utc_now):
        self._redis = redis
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    @property
    def redis(self):
        if self._redis is not None:
            return self._redis
        # resolved per call so the client matches the running event loop
        from app.core.redis_client import get_redis
        return get_redis()

    async def get(self, key: str) -> Optional[CacheEntry]:
        raw = await self.redis.get(f"{self.KEY_PREFIX}{key}")
        if not raw:
            return None
        try:
            payload = json.loads(raw)
            return CacheEntry(
                data=tuple(Release(**item) for item in payload.get("data", [])),
                timestamp=datetime.fromisoformat(payload["timestamp"]),
            )
        except Exception as e:
            logger.warning(f"[OTT_CACHE] Ignoring unreadable cache entry {key}: {e}")
            return None

    async def put(self, key: str, data: Sequence[Release]) -> CacheEntry:
        entry = CacheEntry(data=tuple(data), timestamp=self._clock())
        payload = {
            "data": [r.model_dump() for r in entry.data],
            "timestamp": entry.timestamp.isoformat(),
        }
        await self.redis.set(f"{self.KEY_PREFIX}{key}", json.dumps(payload), ex=self.ttl_seconds)
        return entry

    def stats(self) -> dict:
        return {"backend": "redis", "ttl_seconds": self.ttl_seconds}


def build_release_cache():
    """Cache instance chosen by settings."""
    if settings.ott_cache_backend.lower() == "redis":
        return RedisReleaseCache(ttl_seconds=settings.ott_cache_ttl_seconds)
    return ReleaseCache(
        ttl_seconds=settings.ott_cache_ttl_seconds,
        max_entries=settings.ott_cache_max_entries,
    )
