from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import Callable

from catalog_browser.domain.filter_key import (
    NAME_ASC,
    NAME_DESC,
    NEWEST,
    OLDEST,
    PRICE_ASC,
    PRICE_DESC,
    FilterKey,
)
from catalog_browser.domain.item import Item
from catalog_browser.ports.catalog_gateway import CatalogGateway

_SORTS: dict[str, tuple[Callable[[Item], object], bool]] = {
    PRICE_ASC: (lambda item: item.price if item.price is not None else Decimal("0"), False),
    PRICE_DESC: (lambda item: item.price if item.price is not None else Decimal("0"), True),
    NEWEST: (lambda item: item.created_at or "", True),
    OLDEST: (lambda item: item.created_at or "", False),
    NAME_ASC: (lambda item: item.name.lower(), False),
    NAME_DESC: (lambda item: item.name.lower(), True),
}


class InMemoryCatalogGateway(CatalogGateway):
    """
    Canonical contract implementation for tests.

    - Stores items in insertion order
    - Brand/model filters: OR within a facet, AND across facets, exact match
    - Unknown sort names leave server order untouched
    - Records every call so tests can assert on outbound traffic
    - Optional gate: fetches block until the event is set
    - Optional failures: exception raised for a given key instead of answering
    """

    def __init__(
        self,
        items: list[Item],
        gate: asyncio.Event | None = None,
        failures: dict[FilterKey, Exception] | None = None,
    ) -> None:
        self._items = items
        self._gate = gate
        self._failures = failures or {}
        self.calls: list[FilterKey | str] = []

    async def fetch_items(self, key: FilterKey) -> list[Item]:
        self.calls.append(key)
        await self._wait()
        if key in self._failures:
            raise self._failures[key]

        matches = [item for item in self._items if self._matches(item, key)]
        if key.sort in _SORTS:
            sort_key, reverse = _SORTS[key.sort]
            matches.sort(key=sort_key, reverse=reverse)  # type: ignore[arg-type]
        return matches

    async def fetch_all(self) -> list[Item]:
        self.calls.append("all")
        await self._wait()
        return list(self._items)

    async def fetch_item(self, item_id: str) -> Item | None:
        self.calls.append(f"item:{item_id}")
        await self._wait()
        return next((item for item in self._items if item.id == item_id), None)

    async def _wait(self) -> None:
        if self._gate is not None:
            await self._gate.wait()

    def _matches(self, item: Item, key: FilterKey) -> bool:
        if key.brands and item.brand not in key.brands:
            return False
        if key.models and item.model not in key.models:
            return False
        return True
