"""
release_query.py
- Normalizes raw query parameters, fetches releases through the cache,
  applies the date window, sorts and paginates.
- Concurrent fetches for the same cache key share one generation call.
"""
import asyncio
import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from app.core.config import settings
from app.schemas import Release, ReleasePage
from app.services.date_window import filter_by_date, parse_release_datetime
from app.services.release_cache import build_release_cache, cache_key, is_fresh
from app.services.release_generator import generate_releases
from app.utils.timezone import local_today, utc_now

logger = logging.getLogger(__name__)

SORT_FIELDS = ("release_date", "title", "platform")
DEFAULT_LIMIT = 20

# plain decimal numerals only; no "1_000", "inf" or "nan"
_NUMBER_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

# A fetcher returns None on failure; an empty list is a valid answer.
Fetcher = Callable[[str, date], Awaitable[Optional[List[Release]]]]


@dataclass(frozen=True)
class QueryParameters:
    timeframe: str = "week"
    limit: int = DEFAULT_LIMIT
    offset: int = 0
    sort_by: str = "release_date"
    order: str = "asc"


def _parse_number(raw: Any) -> Optional[float]:
    if raw is None:
        return None
    text = str(raw).strip()
    if not _NUMBER_RE.fullmatch(text):
        return None
    value = float(text)
    return value if math.isfinite(value) else None


def normalize_params(
    timeframe: Any = None,
    limit: Any = None,
    offset: Any = None,
    sort_by: Any = None,
    order: Any = None,
    default_limit: int = DEFAULT_LIMIT,
) -> QueryParameters:
    """Coerce raw (string) inputs to usable parameters; never raises."""
    valid_timeframe = "month" if timeframe == "month" else "week"

    parsed_limit = _parse_number(limit)
    parsed_limit = int(parsed_limit) if parsed_limit is not None else 0
    if parsed_limit <= 0:
        parsed_limit = default_limit

    parsed_offset = _parse_number(offset)
    parsed_offset = int(parsed_offset) if parsed_offset is not None and parsed_offset >= 0 else 0

    valid_sort = str(sort_by) if str(sort_by) in SORT_FIELDS else "release_date"
    valid_order = "desc" if str(order).lower() == "desc" else "asc"

    return QueryParameters(
        timeframe=valid_timeframe,
        limit=parsed_limit,
        offset=parsed_offset,
        sort_by=valid_sort,
        order=valid_order,
    )


def _sort_key(sort_by: str) -> Callable[[Release], Any]:
    if sort_by == "release_date":
        def by_date(release: Release) -> float:
            parsed = parse_release_datetime(release.release_date)
            # unparsable dates sort as the epoch
            return parsed.timestamp() if parsed else 0.0
        return by_date

    def by_text(release: Release) -> str:
        value = getattr(release, sort_by, "")
        return (value if isinstance(value, str) else str(value)).lower()
    return by_text


def sort_releases(releases: Sequence[Release], sort_by: str = "release_date", order: str = "asc") -> List[Release]:
    """Stable ascending sort; desc mirrors the ascending result, ties included."""
    ordered = sorted(releases, key=_sort_key(sort_by))
    if order == "desc":
        ordered.reverse()
    return ordered


def paginate(items: Sequence[Release], offset: int, limit: int) -> List[Release]:
    return list(items[offset:offset + limit])


async def _default_fetcher(timeframe: str, today: date) -> Optional[List[Release]]:
    return await generate_releases(timeframe, today=today)


class ReleaseQueryService:
    """Cache-wrapped release lookup plus filter/sort/paginate."""

    def __init__(
        self,
        fetcher: Optional[Fetcher] = None,
        cache=None,
        today: Optional[Callable[[], date]] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self._fetcher = fetcher or _default_fetcher
        self.cache = cache if cache is not None else build_release_cache()
        self._today = today or (lambda: local_today(settings.ott_timezone))
        self._now = now or utc_now
        self._inflight: Dict[Tuple[int, str], "asyncio.Future[Tuple[Release, ...]]"] = {}

    async def _cache_get(self, key: str):
        try:
            return await self.cache.get(key)
        except Exception as e:
            logger.warning(f"[OTT_CACHE] Cache read failed for {key}: {e}")
            return None

    async def _cache_put(self, key: str, releases: List[Release]) -> None:
        try:
            await self.cache.put(key, releases)
        except Exception as e:
            logger.warning(f"[OTT_CACHE] Cache write failed for {key}: {e}")

    async def get_releases(self, timeframe: str, today: Optional[date] = None) -> List[Release]:
        today = today or self._today()
        key = cache_key(timeframe, today)

        entry = await self._cache_get(key)
        if is_fresh(entry, self._now(), self.cache.ttl_seconds):
            logger.info(f"[OTT_CACHE] Returning cached data for {timeframe}")
            return list(entry.data)

        loop = asyncio.get_running_loop()
        flight_key = (id(loop), key)
        while True:
            pending = self._inflight.get(flight_key)
            if pending is None:
                break
            logger.info(f"[OTT_CACHE] Joining in-flight fetch for {key}")
            try:
                return list(await asyncio.shield(pending))
            except asyncio.CancelledError:
                # the leader was cancelled, not us: take over the fetch
                if not pending.cancelled():
                    raise
                logger.warning(f"[OTT_CACHE] In-flight fetch for {key} was cancelled, retrying")

        future: "asyncio.Future[Tuple[Release, ...]]" = loop.create_future()
        self._inflight[flight_key] = future
        try:
            try:
                fetched = await self._fetcher(timeframe, today)
            except Exception as e:
                logger.error(f"[OTT_GEN] Fetcher failed for {timeframe}: {e}")
                fetched = None
            if fetched is None:
                releases: List[Release] = []
            else:
                # a successful parse is cached even when empty
                releases = list(fetched)
                await self._cache_put(key, releases)
            future.set_result(tuple(releases))
            return releases
        finally:
            if not future.done():
                future.cancel()
            if self._inflight.get(flight_key) is future:
                del self._inflight[flight_key]

    async def query(self, params: QueryParameters) -> ReleasePage:
        today = self._today()
        all_releases = await self.get_releases(params.timeframe, today)
        filtered = filter_by_date(all_releases, params.timeframe, today)
        ordered = sort_releases(filtered, params.sort_by, params.order)
        paged = paginate(ordered, params.offset, params.limit)

        return ReleasePage(
            timeframe=params.timeframe,
            total=len(ordered),
            count=len(paged),
            offset=params.offset,
            limit=params.limit,
            order=params.order,
            releases=paged,
        )


_release_service: Optional[ReleaseQueryService] = None


def get_release_service() -> ReleaseQueryService:
    global _release_service
    if _release_service is None:
        _release_service = ReleaseQueryService()
    return _release_service
