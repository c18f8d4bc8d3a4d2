"""
Test suite for QueryCache.

Verifies:
- One fetch per distinct key, cached Success/Error entries
- In-flight de-duplication for concurrent requests of the same key
- Key equality independent of selection order
- Error normalization and isolation between keys
- Keyed (not positional) settlement: late or invalidated responses never
  overwrite another generation's entry
- Listeners, LRU cap and cancellation
"""

from __future__ import annotations

import asyncio
from unittest.mock import Mock

import pytest

from catalog_browser.domain.cache import CacheEntry, CacheStatus
from catalog_browser.domain.errors import NetworkError, ServerError
from catalog_browser.domain.filter_key import FilterKey, derive_key
from catalog_browser.domain.item import Item
from catalog_browser.use_cases.query_cache import QueryCache


def make_items(prefix: str, count: int) -> list[Item]:
    return [
        Item(id=f"{prefix}{index}", name=f"{prefix} item {index}", brand=prefix, model="m")
        for index in range(count)
    ]


class ScriptedFetcher:
    """Fetcher whose answers, failures and timing are scripted per key."""

    def __init__(self) -> None:
        self.calls: list[FilterKey] = []
        self.gates: dict[FilterKey, asyncio.Event] = {}
        self.responses: dict[FilterKey, list[list[Item]]] = {}
        self.errors: dict[FilterKey, Exception] = {}
        self.cancelled: list[FilterKey] = []

    def gate(self, key: FilterKey) -> asyncio.Event:
        return self.gates.setdefault(key, asyncio.Event())

    def answer(self, key: FilterKey, *responses: list[Item]) -> None:
        self.responses[key] = list(responses)

    async def __call__(self, key: FilterKey) -> list[Item]:
        self.calls.append(key)
        # Pick the response at call time so overlapping fetches stay distinguishable
        queued = self.responses.get(key, [])
        response = queued.pop(0) if len(queued) > 1 else (queued[0] if queued else [])
        if key in self.gates:
            try:
                await self.gates[key].wait()
            except asyncio.CancelledError:
                self.cancelled.append(key)
                raise
        if key in self.errors:
            raise self.errors[key]
        return response


@pytest.fixture()
def fetcher() -> ScriptedFetcher:
    return ScriptedFetcher()


@pytest.fixture()
def cache(fetcher: ScriptedFetcher) -> QueryCache:
    return QueryCache(fetcher)


# ==============================================================================
# Basic lifecycle
# ==============================================================================


@pytest.mark.asyncio
async def test_first_request_is_loading_then_success(
    cache: QueryCache, fetcher: ScriptedFetcher
) -> None:
    key = derive_key("price-asc", ["A"])
    fetcher.answer(key, make_items("A", 3))

    entry = cache.request(key)
    assert entry.status is CacheStatus.LOADING
    assert entry.data is None

    resolved = await cache.resolve(key)

    assert resolved.status is CacheStatus.SUCCESS
    assert [item.id for item in resolved.data or ()] == ["A0", "A1", "A2"]
    assert cache.request(key) is resolved
    assert fetcher.calls == [key]


@pytest.mark.asyncio
async def test_items_are_stored_verbatim(cache: QueryCache, fetcher: ScriptedFetcher) -> None:
    key = derive_key(None)
    items = list(reversed(make_items("Z", 5)))
    fetcher.answer(key, items)

    entry = await cache.resolve(key)

    assert entry.data == tuple(items)


@pytest.mark.asyncio
async def test_empty_result_is_success(cache: QueryCache) -> None:
    entry = await cache.resolve(derive_key("", ["Nobody"]))

    assert entry.status is CacheStatus.SUCCESS
    assert entry.data == ()


@pytest.mark.asyncio
async def test_success_is_not_refetched(cache: QueryCache, fetcher: ScriptedFetcher) -> None:
    key = derive_key("newest")

    await cache.resolve(key)
    await cache.resolve(key)
    cache.request(key)

    assert len(fetcher.calls) == 1


@pytest.mark.asyncio
async def test_distinct_keys_get_independent_entries(
    cache: QueryCache, fetcher: ScriptedFetcher
) -> None:
    first = derive_key("price-asc", ["A"])
    second = derive_key("price-asc", ["B"])
    fetcher.answer(first, make_items("A", 1))
    fetcher.answer(second, make_items("B", 2))

    first_entry = await cache.resolve(first)
    second_entry = await cache.resolve(second)
    again = await cache.resolve(first)

    assert fetcher.calls == [first, second]
    assert again is first_entry
    assert first_entry is not second_entry
    assert len(cache) == 2


@pytest.mark.asyncio
async def test_reordered_selection_maps_to_same_entry(
    cache: QueryCache, fetcher: ScriptedFetcher
) -> None:
    await cache.resolve(derive_key("price-asc", ["A", "B"], ["x", "y"]))
    await cache.resolve(derive_key("price-asc", ["B", "A"], ["y", "x"]))

    assert len(fetcher.calls) == 1
    assert len(cache) == 1


# ==============================================================================
# In-flight de-duplication
# ==============================================================================


@pytest.mark.asyncio
async def test_concurrent_requests_issue_one_fetch(
    cache: QueryCache, fetcher: ScriptedFetcher
) -> None:
    key = derive_key("price-desc", ["A"])
    fetcher.answer(key, make_items("A", 2))
    gate = fetcher.gate(key)

    first = cache.request(key)
    second = cache.request(key)
    waiters = [asyncio.create_task(cache.resolve(key)) for _ in range(3)]
    await asyncio.sleep(0)

    assert first is second
    assert first.status is CacheStatus.LOADING
    assert cache.in_flight_count == 1

    gate.set()
    results = await asyncio.gather(*waiters)

    assert len(fetcher.calls) == 1
    assert all(result is results[0] for result in results)
    assert results[0].status is CacheStatus.SUCCESS
    assert cache.in_flight_count == 0


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_cancel_shared_fetch(
    cache: QueryCache, fetcher: ScriptedFetcher
) -> None:
    key = derive_key("oldest")
    gate = fetcher.gate(key)

    impatient = asyncio.create_task(cache.resolve(key))
    patient = asyncio.create_task(cache.resolve(key))
    await asyncio.sleep(0)

    impatient.cancel()
    gate.set()

    entry = await patient
    assert entry.status is CacheStatus.SUCCESS
    assert len(fetcher.calls) == 1


# ==============================================================================
# Errors
# ==============================================================================


@pytest.mark.asyncio
async def test_failure_is_stored_normalized(cache: QueryCache, fetcher: ScriptedFetcher) -> None:
    key = derive_key("price-asc", ["A"])
    fetcher.errors[key] = ServerError(status=500, server_message="Internal Server Error")

    entry = await cache.resolve(key)

    assert entry.status is CacheStatus.ERROR
    assert entry.data is None
    assert entry.error is not None
    assert entry.error.message == "Error 500: Internal Server Error"
    assert entry.error.code == "500"


@pytest.mark.asyncio
async def test_failure_does_not_affect_other_keys(
    cache: QueryCache, fetcher: ScriptedFetcher
) -> None:
    failing = derive_key("price-asc", ["A"])
    healthy = derive_key("price-asc", ["B"])
    fetcher.errors[failing] = ServerError(status=500)
    fetcher.answer(healthy, make_items("B", 1))

    failed = await cache.resolve(failing)
    succeeded = await cache.resolve(healthy)

    assert failed.status is CacheStatus.ERROR
    assert succeeded.status is CacheStatus.SUCCESS
    assert cache.peek(failing) is failed


@pytest.mark.asyncio
async def test_error_entry_is_not_refetched(cache: QueryCache, fetcher: ScriptedFetcher) -> None:
    key = derive_key(None)
    fetcher.errors[key] = NetworkError("Connection refused")

    await cache.resolve(key)
    entry = await cache.resolve(key)

    assert entry.status is CacheStatus.ERROR
    assert entry.error is not None
    assert entry.error.code == "NETWORK_ERROR"
    assert len(fetcher.calls) == 1


# ==============================================================================
# Keyed settlement
# ==============================================================================


@pytest.mark.asyncio
async def test_late_response_only_updates_its_own_key(
    cache: QueryCache, fetcher: ScriptedFetcher
) -> None:
    slow = derive_key("", ["A"])
    fast = derive_key("", ["B"])
    fetcher.answer(slow, make_items("A", 1))
    fetcher.answer(fast, make_items("B", 1))
    gate = fetcher.gate(slow)

    cache.request(slow)
    fast_entry = await cache.resolve(fast)

    gate.set()
    slow_entry = await cache.resolve(slow)

    assert cache.peek(fast) is fast_entry
    assert [item.id for item in fast_entry.data or ()] == ["B0"]
    assert [item.id for item in slow_entry.data or ()] == ["A0"]


@pytest.mark.asyncio
async def test_invalidate_refetches_and_discards_stale_response(
    cache: QueryCache, fetcher: ScriptedFetcher
) -> None:
    key = derive_key("price-asc")
    fetcher.answer(key, make_items("old", 1), make_items("new", 1))
    gate = fetcher.gate(key)

    stale_waiter = asyncio.create_task(cache.resolve(key))
    await asyncio.sleep(0)

    assert cache.invalidate(key) is True
    fresh_waiter = asyncio.create_task(cache.resolve(key))
    await asyncio.sleep(0)

    gate.set()
    await asyncio.gather(stale_waiter, fresh_waiter)

    entry = cache.peek(key)
    assert entry is not None
    assert entry.status is CacheStatus.SUCCESS
    assert [item.id for item in entry.data or ()] == ["new0"]
    assert len(fetcher.calls) == 2


@pytest.mark.asyncio
async def test_invalidate_settled_entry(cache: QueryCache, fetcher: ScriptedFetcher) -> None:
    key = derive_key(None)
    await cache.resolve(key)

    assert cache.invalidate(key) is True
    assert cache.peek(key) is None
    assert cache.invalidate(key) is False

    await cache.resolve(key)
    assert len(fetcher.calls) == 2


@pytest.mark.asyncio
async def test_invalidate_all(cache: QueryCache) -> None:
    await cache.resolve(derive_key("", ["A"]))
    await cache.resolve(derive_key("", ["B"]))

    assert cache.invalidate_all() == 2
    assert len(cache) == 0


# ==============================================================================
# Listeners
# ==============================================================================


@pytest.mark.asyncio
async def test_listeners_receive_settled_entries(
    cache: QueryCache, fetcher: ScriptedFetcher
) -> None:
    listener = Mock()
    unsubscribe = cache.subscribe(listener)
    failing = derive_key("", ["F"])
    fetcher.errors[failing] = ServerError(status=500)

    ok_entry = await cache.resolve(derive_key(None))
    failed_entry = await cache.resolve(failing)

    assert [call.args[0] for call in listener.call_args_list] == [ok_entry, failed_entry]

    unsubscribe()
    await cache.resolve(derive_key("", ["C"]))
    assert listener.call_count == 2


@pytest.mark.asyncio
async def test_listener_failure_does_not_break_cache(cache: QueryCache) -> None:
    cache.subscribe(Mock(side_effect=RuntimeError("listener bug")))
    healthy = Mock()
    cache.subscribe(healthy)

    entry = await cache.resolve(derive_key(None))

    assert entry.status is CacheStatus.SUCCESS
    healthy.assert_called_once_with(entry)


# ==============================================================================
# LRU cap and cancellation
# ==============================================================================


@pytest.mark.asyncio
async def test_max_entries_evicts_least_recently_requested(fetcher: ScriptedFetcher) -> None:
    cache = QueryCache(fetcher, max_entries=2)
    a, b, c = (derive_key("", [name]) for name in "ABC")

    await cache.resolve(a)
    await cache.resolve(b)
    cache.request(a)  # touch a: b becomes the oldest
    await cache.resolve(c)

    assert len(cache) == 2
    assert cache.peek(b) is None
    assert cache.peek(a) is not None
    assert cache.peek(c) is not None


@pytest.mark.asyncio
async def test_loading_entries_are_never_evicted(fetcher: ScriptedFetcher) -> None:
    cache = QueryCache(fetcher, max_entries=1)
    slow = derive_key("", ["slow"])
    gate = fetcher.gate(slow)

    cache.request(slow)
    await cache.resolve(derive_key("", ["fast"]))

    loading = cache.peek(slow)
    assert loading is not None
    assert loading.status is CacheStatus.LOADING

    gate.set()
    assert (await cache.resolve(slow)).status is CacheStatus.SUCCESS


def test_max_entries_must_be_positive(fetcher: ScriptedFetcher) -> None:
    with pytest.raises(ValueError):
        QueryCache(fetcher, max_entries=0)


@pytest.mark.asyncio
async def test_aclose_cancels_in_flight_and_leaves_idle_entry(
    cache: QueryCache, fetcher: ScriptedFetcher
) -> None:
    key = derive_key("newest")
    fetcher.gate(key)

    cache.request(key)
    await asyncio.sleep(0)
    await cache.aclose()

    entry = cache.peek(key)
    assert entry == CacheEntry(key=key, status=CacheStatus.IDLE)
    assert cache.in_flight_count == 0

    fetcher.gates[key].set()
    assert (await cache.resolve(key)).status is CacheStatus.SUCCESS
    assert len(fetcher.calls) == 2


@pytest.mark.asyncio
async def test_aclose_cancels_fetches_dropped_by_invalidate(
    cache: QueryCache, fetcher: ScriptedFetcher
) -> None:
    first = derive_key("", ["A"])
    second = derive_key("", ["B"])
    fetcher.gate(first)
    fetcher.gate(second)

    cache.request(first)
    cache.request(second)
    await asyncio.sleep(0)

    cache.invalidate(first)
    cache.invalidate_all()
    assert cache.in_flight_count == 0

    await cache.aclose()

    assert set(fetcher.cancelled) == {first, second}
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_invalidated_fetch_still_answers_its_waiter(
    cache: QueryCache, fetcher: ScriptedFetcher
) -> None:
    key = derive_key("newest")
    fetcher.answer(key, make_items("old", 1))
    gate = fetcher.gate(key)

    waiter = asyncio.create_task(cache.resolve(key))
    await asyncio.sleep(0)
    cache.invalidate(key)

    gate.set()
    entry = await waiter

    assert entry.status is CacheStatus.SUCCESS
    assert [item.id for item in entry.data or ()] == ["old0"]
    assert cache.peek(key) is None
    assert fetcher.cancelled == []


def test_request_needs_running_loop_to_fetch(cache: QueryCache) -> None:
    with pytest.raises(RuntimeError):
        cache.request(derive_key(None))
