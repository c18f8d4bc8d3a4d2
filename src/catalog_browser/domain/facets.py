from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from catalog_browser.domain.errors import FilterValidationError
from catalog_browser.domain.item import Item


@dataclass(frozen=True, slots=True)
class ObservedFacets:
    brands: tuple[str, ...] = ()
    models: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.brands or self.models)


@dataclass(frozen=True, slots=True)
class FacetSnapshot:
    known_brands: tuple[str, ...]
    known_models: tuple[str, ...]
    selected_brands: tuple[str, ...]
    selected_models: tuple[str, ...]


class KnownFacets:
    """
    Universe of facet values seen so far.

    Only grows while browsing; clear() is the single exception and is meant
    for re-initialising the filters before a fresh discovery.
    """

    def __init__(self) -> None:
        self._values: set[str] = set()

    def observe(self, values: Iterable[str]) -> tuple[str, ...]:
        """Add values; returns the ones that were not known before, in sorted order."""
        new_values = {value for value in values if value and value not in self._values}
        self._values.update(new_values)
        return tuple(sorted(new_values))

    def clear(self) -> None:
        self._values.clear()

    def values(self) -> tuple[str, ...]:
        return tuple(sorted(self._values))

    def __contains__(self, value: object) -> bool:
        return value in self._values

    def __len__(self) -> int:
        return len(self._values)


class SelectedFacets:
    """Caller-selected facet values with toggle membership, kept in selection order."""

    def __init__(self) -> None:
        # dict preserves insertion order
        self._values: dict[str, None] = {}

    def toggle(self, value: str) -> bool:
        """Flip membership of value. Returns True if value is selected afterwards."""
        if value in self._values:
            del self._values[value]
            return False
        self._values[value] = None
        return True

    def clear(self) -> None:
        self._values.clear()

    def values(self) -> tuple[str, ...]:
        return tuple(self._values)

    def __contains__(self, value: object) -> bool:
        return value in self._values

    def __len__(self) -> int:
        return len(self._values)


class FacetStore:
    """
    Known and selected brand/model facets.

    Selections are not validated against the known sets: a value selected before
    discovery has reported it stays selected and is part of the query key.
    """

    def __init__(self) -> None:
        self._known_brands = KnownFacets()
        self._known_models = KnownFacets()
        self._selected_brands = SelectedFacets()
        self._selected_models = SelectedFacets()

    def observe(self, brands: Iterable[str], models: Iterable[str]) -> ObservedFacets:
        """Merge observed values into the known sets; returns only the new ones."""
        return ObservedFacets(
            brands=self._known_brands.observe(brands),
            models=self._known_models.observe(models),
        )

    def toggle_brand(self, value: str) -> bool:
        return self._selected_brands.toggle(_require_value(value, "brand"))

    def toggle_model(self, value: str) -> bool:
        return self._selected_models.toggle(_require_value(value, "model"))

    def selected_brands(self) -> tuple[str, ...]:
        return self._selected_brands.values()

    def selected_models(self) -> tuple[str, ...]:
        return self._selected_models.values()

    def known_brands(self) -> tuple[str, ...]:
        return self._known_brands.values()

    def known_models(self) -> tuple[str, ...]:
        return self._known_models.values()

    def is_brand_known(self, value: str) -> bool:
        return value in self._known_brands

    def is_model_known(self, value: str) -> bool:
        return value in self._known_models

    def clear_known(self) -> None:
        """Forget every known value; selections are kept."""
        self._known_brands.clear()
        self._known_models.clear()

    def clear_selection(self) -> None:
        self._selected_brands.clear()
        self._selected_models.clear()

    def snapshot(self) -> FacetSnapshot:
        return FacetSnapshot(
            known_brands=self.known_brands(),
            known_models=self.known_models(),
            selected_brands=tuple(sorted(self.selected_brands())),
            selected_models=tuple(sorted(self.selected_models())),
        )


def extract_facets(items: Sequence[Item]) -> ObservedFacets:
    """Distinct non-empty brands and models of items, in first-seen order."""
    brands: dict[str, None] = {}
    models: dict[str, None] = {}
    for item in items:
        if item.brand:
            brands[item.brand] = None
        if item.model:
            models[item.model] = None
    return ObservedFacets(brands=tuple(brands), models=tuple(models))


def _require_value(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise FilterValidationError(
            errors=[
                {
                    "field": field_name,
                    "message": "Facet value must not be blank",
                    "code": "BLANK_FACET",
                }
            ]
        )
    return value
