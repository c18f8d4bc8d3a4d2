"""Derived catalog view: cache lookup, client-side search and pagination."""

from __future__ import annotations

import logging
import math
from dataclasses import replace

from catalog_browser.domain.cache import CacheEntry, CacheStatus
from catalog_browser.domain.errors import PagingValidationError
from catalog_browser.domain.facets import FacetStore
from catalog_browser.domain.filter_key import FilterKey, derive_key
from catalog_browser.domain.item import Item
from catalog_browser.domain.view import ITEMS_PER_PAGE, CatalogView, ViewState, ViewStatus
from catalog_browser.use_cases.normalize_error import DEFAULT_MESSAGE
from catalog_browser.use_cases.query_cache import QueryCache

logger = logging.getLogger(__name__)


class CatalogController:
    """
    Orchestrates one catalog browsing session.

    Pipeline: sort + selected facets -> FilterKey -> QueryCache entry ->
    search filter on item names -> pagination window.

    Reset rules:
    - Changing the search term forces the page back to 1
    - Changing sort or facet selections keeps the page as is

    Out-of-range pages yield an empty window unless the controller was built
    with clamp_out_of_range_pages=True, in which case the page is moved to the
    last one.
    """

    def __init__(
        self,
        query_cache: QueryCache,
        facet_store: FacetStore,
        items_per_page: int = ITEMS_PER_PAGE,
        clamp_out_of_range_pages: bool = False,
    ) -> None:
        self._query_cache = query_cache
        self._facet_store = facet_store
        self._clamp = clamp_out_of_range_pages
        self._state = ViewState(items_per_page=items_per_page)
        self._state.validate()
        self._current_key: FilterKey | None = None

    @property
    def state(self) -> ViewState:
        return replace(self._state)

    @property
    def facet_store(self) -> FacetStore:
        return self._facet_store

    # ------------------------------------------------------------------
    # User-driven events
    # ------------------------------------------------------------------

    def set_sort(self, sort: str | None) -> None:
        self._state.sort = sort or ""

    def set_search_term(self, search_term: str) -> None:
        if search_term != self._state.search_term:
            self._state.search_term = search_term
            self._state.pagination_page = 1

    def set_page(self, page: int) -> None:
        if page < 1:
            raise PagingValidationError(
                errors=[{"field": "page", "message": "Must be >= 1", "code": "INVALID_PAGE"}]
            )
        self._state.pagination_page = page

    def toggle_brand(self, brand: str) -> bool:
        return self._facet_store.toggle_brand(brand)

    def toggle_model(self, model: str) -> bool:
        return self._facet_store.toggle_model(model)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def current_key(self) -> FilterKey:
        return derive_key(
            self._state.sort,
            self._facet_store.selected_brands(),
            self._facet_store.selected_models(),
        )

    def get_view(
        self,
        sort: str | None = None,
        search_term: str | None = None,
        pagination_page: int | None = None,
    ) -> CatalogView:
        """
        Derive the visible page without waiting for the network.

        Arguments left as None keep the current session state. Returns a
        Loading view while the key's fetch is pending; needs a running event
        loop when that fetch has to be started.

        Raises:
            PagingValidationError: If pagination_page < 1
        """
        state = self.update_state(sort, search_term, pagination_page)
        entry = self._query_cache.request(self._sync_key())
        return self._derive(entry, state)

    async def load_view(
        self,
        sort: str | None = None,
        search_term: str | None = None,
        pagination_page: int | None = None,
    ) -> CatalogView:
        """
        Same as get_view() but awaits the pending fetch first.

        The view is derived from the state and key captured before waiting;
        other callers may change the session state meanwhile.
        """
        state = self.update_state(sort, search_term, pagination_page)
        entry = await self._query_cache.resolve(self._sync_key())
        return self._derive(entry, state)

    def update_state(
        self,
        sort: str | None = None,
        search_term: str | None = None,
        pagination_page: int | None = None,
    ) -> ViewState:
        """Apply several user events at once; None leaves a field untouched."""
        # Page first: a search term change in the same call must win
        if pagination_page is not None:
            self.set_page(pagination_page)
        if sort is not None:
            self.set_sort(sort)
        if search_term is not None:
            self.set_search_term(search_term)
        return self.state

    def _sync_key(self) -> FilterKey:
        key = self.current_key()
        if key != self._current_key:
            logger.debug("Filter key changed", extra={"slot": key.serialize()})
            self._current_key = key
        return key

    def _derive(self, entry: CacheEntry, state: ViewState) -> CatalogView:
        page = state.pagination_page

        if entry.status in (CacheStatus.IDLE, CacheStatus.LOADING):
            return CatalogView(status=ViewStatus.LOADING, page=page)

        if entry.status is CacheStatus.ERROR:
            return CatalogView(
                status=ViewStatus.ERROR,
                page=page,
                error_message=entry.error.message if entry.error else DEFAULT_MESSAGE,
            )

        filtered = self._search(entry.data or (), state.search_term)
        items_per_page = state.items_per_page
        total_pages = max(1, math.ceil(len(filtered) / items_per_page))

        if self._clamp and page > total_pages:
            page = total_pages
            # Only write back when no other event moved the session meanwhile
            if self._state == state:
                self._state.pagination_page = page

        start = (page - 1) * items_per_page
        return CatalogView(
            status=ViewStatus.SUCCESS,
            items=filtered[start : start + items_per_page],
            total_pages=total_pages,
            total_items=len(filtered),
            page=page,
        )

    @staticmethod
    def _search(items: tuple[Item, ...], term: str) -> tuple[Item, ...]:
        return tuple(item for item in items if item.matches_search(term))
