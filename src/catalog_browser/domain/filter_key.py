from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Iterable

PRICE_ASC = "price-asc"
PRICE_DESC = "price-desc"
NEWEST = "newest"
OLDEST = "oldest"
NAME_ASC = "name-asc"
NAME_DESC = "name-desc"

SORT_OPTIONS: tuple[str, ...] = (PRICE_ASC, PRICE_DESC, NEWEST, OLDEST, NAME_ASC, NAME_DESC)


@dataclass(frozen=True, slots=True)
class FilterKey:
    """
    Identity of a server-side catalog query.

    Brands and models are stored as frozensets so that two keys built from the
    same selections in a different order compare (and hash) equal.
    """

    sort: str = ""
    brands: frozenset[str] = field(default_factory=frozenset)
    models: frozenset[str] = field(default_factory=frozenset)

    @property
    def sorted_brands(self) -> tuple[str, ...]:
        return tuple(sorted(self.brands))

    @property
    def sorted_models(self) -> tuple[str, ...]:
        return tuple(sorted(self.models))

    @property
    def is_unfiltered(self) -> bool:
        return not (self.sort or self.brands or self.models)

    def serialize(self) -> str:
        """
        Deterministic cache slot for this key.

        JSON keeps values containing separators (e.g. "a,b") from colliding
        with multi-value selections.
        """
        return json.dumps(
            [self.sort, list(self.sorted_brands), list(self.sorted_models)],
            separators=(",", ":"),
        )


def derive_key(
    sort: str | None,
    brands: Iterable[str] = (),
    models: Iterable[str] = (),
) -> FilterKey:
    """Build the FilterKey for a sort choice and the current facet selections."""
    return FilterKey(
        sort=sort or "",
        brands=frozenset(brands),
        models=frozenset(models),
    )
