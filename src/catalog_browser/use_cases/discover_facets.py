from __future__ import annotations

import logging
from dataclasses import dataclass

from catalog_browser.domain.cache import CacheEntry, CacheStatus, ErrorInfo
from catalog_browser.domain.facets import FacetSnapshot, FacetStore, extract_facets
from catalog_browser.domain.filter_key import FilterKey
from catalog_browser.use_cases.query_cache import QueryCache

logger = logging.getLogger(__name__)

# The discovery cache holds a single slot: the unfiltered catalog
DISCOVERY_KEY = FilterKey()


@dataclass(frozen=True, slots=True)
class DiscoverFacetsResponse:
    status: CacheStatus
    facets: FacetSnapshot
    error: ErrorInfo | None = None


class FacetDiscovery:
    """
    Seeds the FacetStore from unfiltered catalog fetches.

    The discovery QueryCache knows nothing about facets: this coordinator
    subscribes to it and, for each successful result, extracts the observed
    brands/models and merges them into the store. Merging is additive and
    idempotent, so the order in which discovery and browse fetches complete
    does not matter.
    """

    def __init__(self, discovery_cache: QueryCache, facet_store: FacetStore) -> None:
        self._cache = discovery_cache
        self._facet_store = facet_store
        self._unsubscribe = discovery_cache.subscribe(self.apply)

    def request(self) -> CacheEntry:
        """Start discovery if it has not run yet; returns the current entry."""
        return self._cache.request(DISCOVERY_KEY)

    async def execute(self) -> DiscoverFacetsResponse:
        """Run (or join) the discovery fetch and return the resulting facets."""
        entry = await self._cache.resolve(DISCOVERY_KEY)
        return DiscoverFacetsResponse(
            status=entry.status,
            facets=self._facet_store.snapshot(),
            error=entry.error,
        )

    async def refresh(self) -> DiscoverFacetsResponse:
        """Discard the cached discovery result and fetch it again."""
        self._cache.invalidate(DISCOVERY_KEY)
        return await self.execute()

    def apply(self, entry: CacheEntry) -> None:
        if entry.status is not CacheStatus.SUCCESS:
            logger.warning(
                "Facet discovery failed",
                extra={"error_code": entry.error.code if entry.error else None},
            )
            return

        observed = extract_facets(entry.data or ())
        added = self._facet_store.observe(observed.brands, observed.models)
        logger.info(
            "Facets discovered",
            extra={"new_brands": list(added.brands), "new_models": list(added.models)},
        )

    def close(self) -> None:
        self._unsubscribe()
