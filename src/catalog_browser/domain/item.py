from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class Item:
    id: str
    name: str
    brand: str
    model: str
    price: Decimal | None = None
    description: str | None = None
    image_url: str | None = None
    created_at: str | None = None

    def matches_search(self, search_term: str) -> bool:
        """Case-insensitive substring match on the item name (empty term matches all)."""
        return search_term.lower() in self.name.lower()
