"""
Get-or-compute cache with an absolute expiry per entry.

The cache is the only shared mutable state of the shift calendar. One instance
is created by whoever owns the service (the FastAPI app keeps it on
``app.state``) and passed in; there is no module-level cache.

Concurrent callers that miss the same key share one in-flight computation
instead of issuing duplicate queries.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Generic, Iterable, Optional, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class TTLCache:
    def __init__(self, clock: Clock = _utcnow):
        self._clock = clock
        self._entries: Dict[str, CacheEntry[Any]] = {}
        self._inflight: Dict[str, "asyncio.Future[Any]"] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get_entry(key) is not None

    def get_entry(self, key: str) -> Optional[CacheEntry[Any]]:
        entry = self._entries.get(key)
        if entry is None or entry.is_expired(self._clock()):
            return None
        return entry

    def get(self, key: str, default: Any = None) -> Any:
        entry = self.get_entry(key)
        return default if entry is None else entry.value

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Union[T, Awaitable[T]]],
        expires_at: datetime,
    ) -> T:
        entry = self.get_entry(key)
        if entry is not None:
            logger.debug("cache hit %s", key)
            return entry.value

        pending = self._inflight.get(key)
        if pending is None:
            logger.debug("cache miss %s", key)
            pending = asyncio.ensure_future(self._fill(key, compute, expires_at))
            self._inflight[key] = pending
            pending.add_done_callback(lambda done, k=key: self._forget(k, done))
        else:
            logger.debug("joining in-flight compute for %s", key)
        return await asyncio.shield(pending)

    async def _fill(
        self,
        key: str,
        compute: Callable[[], Union[T, Awaitable[T]]],
        expires_at: datetime,
    ) -> T:
        result = compute()
        if inspect.isawaitable(result):
            result = await result
        # Failures never reach this line, so nothing is stored for them.
        self._entries[key] = CacheEntry(result, expires_at)
        return result

    def _forget(self, key: str, done: "asyncio.Future[Any]") -> None:
        if self._inflight.get(key) is done:
            del self._inflight[key]

    def invalidate(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def invalidate_many(self, keys: Iterable[str]) -> int:
        return sum(1 for key in keys if self.invalidate(key))

    def clear(self) -> None:
        self._entries.clear()
