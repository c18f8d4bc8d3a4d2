"""
Dependency injection for FastAPI routes.

Key principle: the browsing session is per-process, not per-request. The
query cache, facet store and view state must survive between requests,
otherwise every request would re-fetch the catalog.
"""

from __future__ import annotations

from fastapi import Depends

from catalog_browser.adapters.http_catalog_gateway import HttpCatalogGateway
from catalog_browser.infra.config import (
    cache_max_entries,
    catalog_api_url,
    clamp_out_of_range_pages,
    items_per_page,
)
from catalog_browser.infra.http.client import get_http_client
from catalog_browser.use_cases.catalog_controller import CatalogController
from catalog_browser.use_cases.catalog_session import CatalogSession, build_catalog_session
from catalog_browser.use_cases.discover_facets import FacetDiscovery
from catalog_browser.use_cases.get_item_by_id import GetItemById

# Lazy initialization - only build the session when the first request needs it
_session: CatalogSession | None = None


def get_catalog_session() -> CatalogSession:
    """
    Get or create the process-wide catalog session.

    Reads configuration on first use and wires the HTTP gateway onto the
    shared httpx client.

    Raises:
        RuntimeError: If CATALOG_API_URL is not set
    """
    global _session
    if _session is None:
        gateway = HttpCatalogGateway(client=get_http_client(), base_url=catalog_api_url())
        _session = build_catalog_session(
            gateway,
            items_per_page=items_per_page(),
            cache_max_entries=cache_max_entries(),
            clamp_out_of_range_pages=clamp_out_of_range_pages(),
        )
    return _session


def reset_catalog_session() -> None:
    """Forget the current session; the next request builds a new one."""
    global _session
    _session = None


def get_catalog_controller(
    session: CatalogSession = Depends(get_catalog_session),
) -> CatalogController:
    return session.controller


def get_facet_discovery(
    session: CatalogSession = Depends(get_catalog_session),
) -> FacetDiscovery:
    return session.discovery


def get_get_item_by_id_use_case(
    session: CatalogSession = Depends(get_catalog_session),
) -> GetItemById:
    return session.get_item_by_id
