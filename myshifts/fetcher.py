from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Protocol, Tuple

from .cache import TTLCache
from .constants import CACHE_KEY_PREFIX, CACHE_TTL_MINUTES
from .days import DayWindow
from .errors import FetchError
from .models import RawShift

logger = logging.getLogger(__name__)


class QuerySource(Protocol):
    async def query(
        self,
        start_utc: datetime,
        end_utc: datetime,
        subject_id: Optional[str] = None,
    ) -> List[RawShift]: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_cache_key(day: DayWindow, subject_id: str) -> str:
    # An empty subject means "the caller's own shifts" and is a valid key.
    return f"{CACHE_KEY_PREFIX}:{day.iso_date()}:{subject_id}"


def padded_window(day: DayWindow) -> Tuple[datetime, datetime]:
    """One full local day of padding on each side of ``day``, in UTC."""
    return day.shift(-1).start_utc, day.shift(1).end_utc


def overlaps_day(shift: RawShift, day: DayWindow) -> bool:
    return shift.start < day.end_utc and shift.end > day.start_utc


class ShiftsService:
    """Fetches the shifts overlapping one local day, cached per day and subject."""

    def __init__(
        self,
        source: QuerySource,
        cache: TTLCache,
        *,
        ttl: timedelta = timedelta(minutes=CACHE_TTL_MINUTES),
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.source = source
        self.cache = cache
        self.ttl = ttl
        self._clock = clock

    async def fetch_day(self, day: DayWindow, subject_id: str = "") -> List[RawShift]:
        key = build_cache_key(day, subject_id)
        padded: Tuple[RawShift, ...] = await self.cache.get_or_compute(
            key,
            lambda: self._query_padded(day, subject_id),
            self._clock() + self.ttl,
        )
        return [shift for shift in padded if overlaps_day(shift, day)]

    async def _query_padded(self, day: DayWindow, subject_id: str) -> Tuple[RawShift, ...]:
        start_utc, end_utc = padded_window(day)
        logger.debug(
            "querying shifts %s..%s for %s",
            start_utc.isoformat(),
            end_utc.isoformat(),
            subject_id or "me",
        )
        try:
            shifts = await self.source.query(start_utc, end_utc, subject_id or None)
        except Exception as exc:
            raise FetchError(day.iso_date(), subject_id, str(exc) or type(exc).__name__) from exc
        return tuple(shifts)

    def invalidate_day(self, day: DayWindow, subject_id: str = "") -> bool:
        return self.cache.invalidate(build_cache_key(day, subject_id))
