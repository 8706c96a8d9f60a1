"""In-memory async cache with TTL, LRU capacity and in-flight request coalescing.

Every cache in Deezify (token, Deezer matches, derived playlists, weather) is
an AsyncTTLCache with a different lookup function, capacity and TTL.

Concurrent callers asking for the same missing or expired key share a single
lookup: the first caller starts it as a task and later callers await the same
future. Failed lookups are never stored, so the next caller simply retries.
"""

import asyncio
from collections import OrderedDict
from collections.abc import Awaitable, Callable
import time
from typing import Generic, TypeVar

from attrs import define, field

from deezify.config import get_logger

logger = get_logger(__name__).bind(service="cache")

K = TypeVar("K")
V = TypeVar("V")


@define(frozen=True, slots=True)
class CacheEntry(Generic[V]):
    """Stored value with its absolute expiry on the cache clock."""

    value: V
    expires_at: float | None

    def is_fresh(self, now: float) -> bool:
        return self.expires_at is None or now < self.expires_at


@define(slots=True)
class AsyncTTLCache(Generic[K, V]):
    """Capacity-bounded cache over an async lookup function.

    Attributes:
        lookup: Coroutine function computing the value for a missing key
        capacity: Maximum number of stored entries, least recently used is evicted
        ttl: Seconds an entry stays fresh, None for no time-based expiry
        name: Label used in log records
        clock: Monotonic time source, injectable for tests
    """

    lookup: Callable[[K], Awaitable[V]]
    capacity: int
    ttl: float | None = None
    name: str = "cache"
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    _entries: OrderedDict[K, CacheEntry[V]] = field(
        init=False, factory=OrderedDict, repr=False
    )
    _in_flight: dict[K, asyncio.Future[V]] = field(
        init=False, factory=dict, repr=False
    )

    def __attrs_post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError(f"Cache capacity must be positive, got {self.capacity}")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: K) -> bool:
        # Membership is a peek and leaves recency untouched
        return self._fresh_entry(key) is not None

    async def get(self, key: K) -> V:
        """Return the cached value for key, looking it up on a miss.

        Raises:
            Whatever the lookup raises; the failure is not cached
        """
        entry = self._fresh_entry(key)
        if entry is not None:
            self._entries.move_to_end(key)
            logger.debug(f"{self.name} hit", key=key)
            return entry.value

        future = self._in_flight.get(key)
        if future is None:
            logger.debug(f"{self.name} miss, starting lookup", key=key)
            future = asyncio.get_running_loop().create_task(self._run_lookup(key))
            # Mark failures as retrieved when every waiter has gone away
            future.add_done_callback(_consume_exception)
            self._in_flight[key] = future
        else:
            logger.debug(f"{self.name} miss, joining in-flight lookup", key=key)

        # A cancelled caller must not cancel the shared lookup
        return await asyncio.shield(future)

    def get_if_present(self, key: K) -> V | None:
        """Return the fresh cached value without triggering a lookup.

        A hit counts as a use and refreshes the entry's recency.
        """
        entry = self._fresh_entry(key)
        if entry is None:
            return None
        self._entries.move_to_end(key)
        return entry.value

    def invalidate(self, key: K) -> None:
        """Drop a stored entry. An in-flight lookup for the key is unaffected."""
        if self._entries.pop(key, None) is not None:
            logger.debug(f"{self.name} invalidated", key=key)

    def invalidate_all(self) -> None:
        self._entries.clear()

    async def _run_lookup(self, key: K) -> V:
        try:
            value = await self.lookup(key)
        finally:
            self._in_flight.pop(key, None)
        self._store(key, value)
        return value

    def _store(self, key: K, value: V) -> None:
        expires_at = None if self.ttl is None else self.clock() + self.ttl
        self._entries[key] = CacheEntry(value=value, expires_at=expires_at)
        self._entries.move_to_end(key)

        while len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"{self.name} evicted", key=evicted)

    def _fresh_entry(self, key: K) -> CacheEntry[V] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_fresh(self.clock()):
            del self._entries[key]
            return None
        return entry


def _consume_exception(future: asyncio.Future) -> None:
    if not future.cancelled():
        future.exception()
