"""Parameterized query cache with in-flight de-duplication."""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections import OrderedDict
from typing import Awaitable, Callable, Sequence

from catalog_browser.domain.cache import CacheEntry, CacheStatus
from catalog_browser.domain.filter_key import FilterKey
from catalog_browser.domain.item import Item
from catalog_browser.use_cases.normalize_error import ErrorNormalizer

logger = logging.getLogger(__name__)

Fetcher = Callable[[FilterKey], Awaitable[Sequence[Item]]]
Listener = Callable[[CacheEntry], None]


class QueryCache:
    """
    Caches catalog results per FilterKey.

    - request() is synchronous: it returns the current entry and, when the key
      has no entry (or an Idle one), starts exactly one fetch task
    - Requests for a key that is Loading attach to the pending task
    - Success and Error entries are served without re-fetching until invalidated
    - Fetch failures are stored normalized; nothing raises past this class
    - Every write is compare-and-set on the key's fetch generation, so a
      response that arrives after its key was invalidated is discarded
    - Listeners are notified of every settled entry

    request() needs a running event loop when it has to start a fetch.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        normalizer: ErrorNormalizer | None = None,
        max_entries: int | None = None,
        name: str = "catalog",
    ) -> None:
        """
        Initialize cache.

        Args:
            fetcher: Coroutine function fetching the items for a key
            normalizer: Converts fetch failures to ErrorInfo
            max_entries: Optional LRU cap on settled entries (None = unbounded)
            name: Label used in log records
        """
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be > 0")

        self._fetcher = fetcher
        self._normalizer = normalizer or ErrorNormalizer()
        self._max_entries = max_entries
        self._name = name

        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._in_flight: dict[str, asyncio.Task[CacheEntry]] = {}
        self._generations: dict[str, int] = {}
        self._generation_counter = itertools.count(1)
        self._listeners: list[Listener] = []
        # Invalidated fetches still running; only aclose() needs them
        self._retired: set[asyncio.Task[CacheEntry]] = set()

    def request(self, key: FilterKey) -> CacheEntry:
        slot = key.serialize()
        entry = self._entries.get(slot)

        if entry is not None and entry.status is not CacheStatus.IDLE:
            self._entries.move_to_end(slot)
            logger.debug(
                "Cache %s",
                "attach" if entry.status is CacheStatus.LOADING else "hit",
                extra={"cache": self._name, "slot": slot},
            )
            return entry

        return self._start_fetch(key, slot)

    async def resolve(self, key: FilterKey) -> CacheEntry:
        """Request key and wait until its pending fetch (if any) has settled."""
        entry = self.request(key)
        task = self._in_flight.get(key.serialize())
        if task is None:
            return entry
        # shield: a caller giving up must not cancel the fetch other callers share
        return await asyncio.shield(task)

    def peek(self, key: FilterKey) -> CacheEntry | None:
        """Current entry for key without starting a fetch."""
        return self._entries.get(key.serialize())

    def invalidate(self, key: FilterKey) -> bool:
        """
        Drop the entry for key so the next request fetches again.

        A fetch still in flight for key keeps running for its current waiters
        but its result is discarded when it arrives. aclose() still cancels it.

        Returns:
            True if an entry was removed
        """
        slot = key.serialize()
        self._generations.pop(slot, None)
        self._retire(self._in_flight.pop(slot, None))
        removed = self._entries.pop(slot, None) is not None
        if removed:
            logger.info("Cache entry invalidated", extra={"cache": self._name, "slot": slot})
        return removed

    def invalidate_all(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        self._generations.clear()
        for task in self._in_flight.values():
            self._retire(task)
        self._in_flight.clear()
        logger.info("Cache cleared", extra={"cache": self._name, "removed": count})
        return count

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for settled entries.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def aclose(self) -> None:
        """Cancel every fetch still in flight, invalidated ones included."""
        pending = list(self._in_flight.items())
        tasks = [task for _, task in pending] + list(self._retired)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._retired.clear()

        # A task cancelled before its first step never reaches its own cleanup
        for slot, task in pending:
            if self._in_flight.get(slot) is not task:
                continue
            del self._in_flight[slot]
            entry = self._entries.get(slot)
            if entry is not None and entry.status is CacheStatus.LOADING:
                self._entries[slot] = CacheEntry(key=entry.key)

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    def __len__(self) -> int:
        return len(self._entries)

    def _retire(self, task: asyncio.Task[CacheEntry] | None) -> None:
        if task is None or task.done():
            return
        self._retired.add(task)
        task.add_done_callback(self._retired.discard)

    def _start_fetch(self, key: FilterKey, slot: str) -> CacheEntry:
        loop = asyncio.get_running_loop()
        generation = next(self._generation_counter)

        entry = CacheEntry.loading(key)
        self._generations[slot] = generation
        self._entries[slot] = entry
        self._entries.move_to_end(slot)
        self._in_flight[slot] = loop.create_task(self._fetch(key, slot, generation))

        logger.info(
            "Cache miss, fetching",
            extra={"cache": self._name, "slot": slot, "generation": generation},
        )
        self._evict()
        return entry

    async def _fetch(self, key: FilterKey, slot: str, generation: int) -> CacheEntry:
        try:
            items = await self._fetcher(key)
        except asyncio.CancelledError:
            if self._is_current(slot, generation):
                # Back to Idle so the next request starts a fresh fetch
                self._entries[slot] = CacheEntry(key=key)
                self._in_flight.pop(slot, None)
            raise
        except Exception as exc:
            error = self._normalizer.normalize(exc)
            logger.warning(
                "Fetch failed",
                extra={
                    "cache": self._name,
                    "slot": slot,
                    "error_type": type(exc).__name__,
                    "error_code": error.code,
                },
            )
            result = CacheEntry.failure(key, error)
        else:
            result = CacheEntry.success(key, tuple(items))
            logger.info(
                "Fetch succeeded",
                extra={"cache": self._name, "slot": slot, "count": len(result.data or ())},
            )

        return self._settle(slot, generation, result)

    def _settle(self, slot: str, generation: int, result: CacheEntry) -> CacheEntry:
        if not self._is_current(slot, generation):
            logger.warning(
                "Discarding stale response",
                extra={"cache": self._name, "slot": slot, "generation": generation},
            )
            current = self._entries.get(slot)
            return current if current is not None else result

        self._entries[slot] = result
        self._in_flight.pop(slot, None)
        self._notify(result)
        self._evict()
        return result

    def _is_current(self, slot: str, generation: int) -> bool:
        return self._generations.get(slot) == generation

    def _notify(self, entry: CacheEntry) -> None:
        for listener in list(self._listeners):
            try:
                listener(entry)
            except Exception:
                logger.exception("Cache listener failed", extra={"cache": self._name})

    def _evict(self) -> None:
        if self._max_entries is None:
            return
        # Oldest first; Loading entries are never evicted
        for slot in list(self._entries):
            if len(self._entries) <= self._max_entries:
                return
            if self._entries[slot].status is CacheStatus.LOADING:
                continue
            del self._entries[slot]
            self._generations.pop(slot, None)
            logger.debug("Cache entry evicted", extra={"cache": self._name, "slot": slot})
