# src/ticket_panel/infrastructure/cache.py
"""
Query Cache

Key-based cache for remote query results with staleness tracking.

Features:
- Results are reused for `stale_time` seconds, then refetched on next access
- Concurrent fetches of one key share a single in-flight request
- Invalidation marks an entry stale and refetches it in the background
- A failed fetch keeps the previous data and records the error

Usage:
    from .cache import QueryCache

    cache = QueryCache(stale_time=30)

    data = await cache.fetch("tickets-data", fetch_tickets_data)
    state = cache.get_state("tickets-data")

    # After a write
    cache.invalidate("tickets-data")
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Any]]
ErrorHandler = Callable[[str, BaseException], None]


@dataclass
class QueryEntry:
    """Cache entry with metadata."""
    data: Any = None
    updated_at: Optional[float] = None
    error: Optional[BaseException] = None
    invalidated: bool = False
    # Bumped by every invalidate(); a load only clears `invalidated` for its own generation
    generation: int = 0
    fetcher: Optional[Fetcher] = None
    in_flight: Optional["asyncio.Task[Any]"] = None

    @property
    def has_data(self) -> bool:
        return self.updated_at is not None

    @property
    def is_fetching(self) -> bool:
        return self.in_flight is not None and not self.in_flight.done()

    def is_stale(self, stale_time: float, now: float) -> bool:
        """Check if the entry must be refetched before reuse."""
        if not self.has_data or self.invalidated:
            return True
        return now - self.updated_at >= stale_time


@dataclass(frozen=True)
class QueryState:
    """Snapshot of one cache key as seen by the view."""
    data: Any = None
    is_loading: bool = True
    is_fetching: bool = False
    error: Optional[BaseException] = None
    updated_at: Optional[float] = None


class QueryCache:
    """
    In-memory query cache keyed by logical query identity.

    Entries are only ever replaced by a (re)fetch; callers never merge
    results into the cache directly.
    """

    def __init__(
        self,
        stale_time: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
        on_error: Optional[ErrorHandler] = None,
    ):
        """
        Initialize the cache.

        Args:
            stale_time: Seconds a result stays fresh
            clock: Monotonic time source
            on_error: Called with (key, error) whenever a fetch fails
        """
        self._stale_time = stale_time
        self._clock = clock
        self._on_error = on_error
        self._entries: Dict[str, QueryEntry] = {}
        self._stats = {"hits": 0, "misses": 0, "fetches": 0, "invalidations": 0}

    def set_error_handler(self, on_error: Optional[ErrorHandler]) -> None:
        """Replace the handler called when a fetch fails."""
        self._on_error = on_error

    def _entry(self, key: str) -> QueryEntry:
        entry = self._entries.get(key)
        if entry is None:
            entry = QueryEntry()
            self._entries[key] = entry
        return entry

    async def fetch(self, key: str, fetcher: Fetcher) -> Any:
        """
        Get cached data for a key, fetching it if missing or stale.

        Args:
            key: Query identity
            fetcher: Coroutine function producing fresh data

        Returns:
            The fresh or cached data

        Raises:
            Whatever the fetcher raised; the previous data stays cached.
        """
        entry = self._entry(key)
        entry.fetcher = fetcher

        if not entry.is_stale(self._stale_time, self._clock()):
            self._stats["hits"] += 1
            return entry.data

        self._stats["misses"] += 1

        if not entry.is_fetching:
            entry.in_flight = asyncio.create_task(self._load(key, entry, fetcher))

        task = entry.in_flight
        data = await task
        # Invalidated while loading: follow the refetch it scheduled
        while entry.in_flight is not task and entry.is_fetching:
            task = entry.in_flight
            data = await task
        return data

    async def _load(self, key: str, entry: QueryEntry, fetcher: Fetcher) -> Any:
        generation = entry.generation
        self._stats["fetches"] += 1
        logger.debug(f"Fetching query '{key}'")
        try:
            data = await fetcher()
        except Exception as e:
            entry.error = e
            logger.warning(f"Query '{key}' failed: {e}")
            if self._on_error is not None:
                self._on_error(key, e)
            raise

        entry.data = data
        entry.updated_at = self._clock()
        entry.error = None

        if entry.generation == generation:
            entry.invalidated = False
        else:
            # The read may predate the write that invalidated it
            logger.debug(f"Query '{key}' invalidated mid-fetch, refetching")
            entry.in_flight = asyncio.get_running_loop().create_task(
                self._load(key, entry, entry.fetcher or fetcher)
            )
            entry.in_flight.add_done_callback(_consume_result)
        return data

    def invalidate(self, key: str) -> None:
        """
        Mark a key stale and refetch it in the background.

        A fetch already in flight is refetched once it completes. Otherwise
        the refetch only starts when a fetcher has been seen for the key
        and an event loop is running, else the next fetch() reloads.
        """
        entry = self._entries.get(key)
        if entry is None:
            return

        self._stats["invalidations"] += 1
        entry.invalidated = True
        entry.generation += 1
        logger.debug(f"Invalidated query '{key}'")

        # An in-flight load sees the new generation and refetches when it finishes
        if entry.fetcher is None or entry.is_fetching:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return

        entry.in_flight = loop.create_task(self._load(key, entry, entry.fetcher))
        entry.in_flight.add_done_callback(_consume_result)

    async def wait_for_fetch(self, key: str) -> None:
        """Wait for in-flight fetches of the key, including follow-up refetches, to settle."""
        entry = self._entries.get(key)
        if entry is None:
            return
        while entry.in_flight is not None and not entry.in_flight.done():
            await asyncio.wait([entry.in_flight])

    def get_state(self, key: str) -> QueryState:
        """Get the view-facing state for a key."""
        entry = self._entries.get(key)
        if entry is None:
            return QueryState()

        return QueryState(
            data=entry.data,
            is_loading=not entry.has_data and entry.error is None,
            is_fetching=entry.is_fetching,
            error=entry.error,
            updated_at=entry.updated_at,
        )

    def is_stale(self, key: str) -> bool:
        """Check if the next fetch of the key will hit the remote store."""
        entry = self._entries.get(key)
        return entry is None or entry.is_stale(self._stale_time, self._clock())

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {**self._stats, "size": len(self._entries)}

    def clear(self) -> None:
        """Clear all cache entries."""
        self._entries.clear()
        logger.info("🗑️ Query cache cleared")


def _consume_result(task: "asyncio.Task[Any]") -> None:
    # Background refetch errors are already recorded on the entry
    if not task.cancelled():
        task.exception()
