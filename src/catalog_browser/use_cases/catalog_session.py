from __future__ import annotations

from dataclasses import dataclass

from catalog_browser.domain.facets import FacetStore
from catalog_browser.domain.filter_key import FilterKey
from catalog_browser.domain.item import Item
from catalog_browser.domain.view import ITEMS_PER_PAGE
from catalog_browser.ports.catalog_gateway import CatalogGateway
from catalog_browser.use_cases.catalog_controller import CatalogController
from catalog_browser.use_cases.discover_facets import FacetDiscovery
from catalog_browser.use_cases.get_item_by_id import GetItemById
from catalog_browser.use_cases.normalize_error import ErrorNormalizer
from catalog_browser.use_cases.query_cache import QueryCache


@dataclass(frozen=True, slots=True)
class CatalogSession:
    """Everything one browsing session needs, wired around a single gateway."""

    controller: CatalogController
    discovery: FacetDiscovery
    get_item_by_id: GetItemById
    browse_cache: QueryCache
    discovery_cache: QueryCache
    normalizer: ErrorNormalizer

    async def aclose(self) -> None:
        self.discovery.close()
        await self.browse_cache.aclose()
        await self.discovery_cache.aclose()


def build_catalog_session(
    gateway: CatalogGateway,
    items_per_page: int = ITEMS_PER_PAGE,
    cache_max_entries: int | None = None,
    clamp_out_of_range_pages: bool = False,
) -> CatalogSession:
    normalizer = ErrorNormalizer()
    facet_store = FacetStore()

    async def fetch_unfiltered(_key: FilterKey) -> list[Item]:
        return await gateway.fetch_all()

    browse_cache = QueryCache(
        gateway.fetch_items,
        normalizer=normalizer,
        max_entries=cache_max_entries,
        name="browse",
    )
    discovery_cache = QueryCache(fetch_unfiltered, normalizer=normalizer, name="discovery")

    return CatalogSession(
        controller=CatalogController(
            browse_cache,
            facet_store,
            items_per_page=items_per_page,
            clamp_out_of_range_pages=clamp_out_of_range_pages,
        ),
        discovery=FacetDiscovery(discovery_cache, facet_store),
        get_item_by_id=GetItemById(gateway),
        browse_cache=browse_cache,
        discovery_cache=discovery_cache,
        normalizer=normalizer,
    )
