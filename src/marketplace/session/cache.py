"""In-memory query cache keyed by tuples from `marketplace.session.keys`."""

import asyncio
import time
import typing as t
from dataclasses import dataclass

import structlog

from marketplace.common.exceptions import APIError
from marketplace.conf import settings

from .keys import QueryKey

logger = structlog.get_logger(__name__)

T = t.TypeVar("T")


@dataclass
class CacheEntry:
    value: t.Any
    updated_at: float
    invalidated: bool = False


def _matches(key: QueryKey, prefix: QueryKey) -> bool:
    # Trailing Nones in a prefix stand for "any filters".
    trimmed = list(prefix)
    while trimmed and trimmed[-1] is None:
        trimmed.pop()
    return key[: len(trimmed)] == tuple(trimmed)


class QueryCache:
    """Caches query results with a stale time and prefix invalidation.

    Concurrent `fetch` calls for the same key share one load.
    """

    def __init__(
        self,
        stale_time: float | None = None,
        retry: int = 1,
        clock: t.Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            stale_time: Seconds a result stays fresh. Defaults to settings.QUERY_STALE_TIME.
            retry: Extra attempts for a failing loader (client errors are never retried).
            clock: Monotonic time source.
        """
        self.stale_time = settings.QUERY_STALE_TIME if stale_time is None else stale_time
        self.retry = retry
        self._clock = clock
        self._entries: dict[QueryKey, CacheEntry] = {}
        self._inflight: dict[QueryKey, asyncio.Task[t.Any]] = {}
        self._generation = 0

    def __contains__(self, key: QueryKey) -> bool:
        return key in self._entries

    def get(self, key: QueryKey) -> t.Any:
        entry = self._entries.get(key)
        return entry.value if entry else None

    def set(self, key: QueryKey, value: t.Any) -> None:
        self._entries[key] = CacheEntry(value=value, updated_at=self._clock())

    def is_stale(self, key: QueryKey, stale_time: float | None = None) -> bool:
        entry = self._entries.get(key)
        if entry is None or entry.invalidated:
            return True
        limit = self.stale_time if stale_time is None else stale_time
        return self._clock() - entry.updated_at >= limit

    async def fetch(
        self,
        key: QueryKey,
        loader: t.Callable[[], t.Awaitable[T]],
        stale_time: float | None = None,
    ) -> T:
        """Return the cached value for `key`, loading it when missing or stale."""
        if not self.is_stale(key, stale_time):
            return t.cast(T, self._entries[key].value)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.create_task(self._load(key, loader, self._generation))
            self._inflight[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))
        return t.cast(T, await asyncio.shield(task))

    def _forget(self, key: QueryKey, task: "asyncio.Task[t.Any]") -> None:
        # A newer load may own the key after `clear()`.
        if self._inflight.get(key) is task:
            del self._inflight[key]

    async def _load(self, key: QueryKey, loader: t.Callable[[], t.Awaitable[T]], generation: int) -> T:
        attempt = 0
        while True:
            try:
                value = await loader()
                break
            except APIError as e:
                if e.is_client_error or attempt >= self.retry:
                    raise
                attempt += 1
                logger.info("query_retry", key=key, attempt=attempt, error=e.message)
        if generation == self._generation:
            self.set(key, value)
        return value

    def invalidate(self, prefix: QueryKey) -> int:
        """Mark every entry under `prefix` stale; returns how many were marked."""
        count = 0
        for key, entry in self._entries.items():
            if _matches(key, prefix):
                entry.invalidated = True
                count += 1
        logger.debug("queries_invalidated", prefix=prefix, count=count)
        return count

    def remove(self, prefix: QueryKey) -> None:
        for key in [key for key in self._entries if _matches(key, prefix)]:
            del self._entries[key]

    def clear(self) -> None:
        """Forget every entry and in-flight load.

        Running loads are left to finish so their callers see the real
        outcome (e.g. `SessionExpiredError`); their results are not stored.
        """
        self._entries.clear()
        self._inflight.clear()
        self._generation += 1
