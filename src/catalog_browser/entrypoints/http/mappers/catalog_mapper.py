from __future__ import annotations

from catalog_browser.domain.facets import FacetSnapshot
from catalog_browser.domain.item import Item
from catalog_browser.domain.view import CatalogView, ViewState
from catalog_browser.entrypoints.http.dtos.catalog import (
    CatalogStateResponseDTO,
    CatalogViewResponseDTO,
    DiscoverFacetsResponseDTO,
    FacetsResponseDTO,
    FacetToggleResponseDTO,
    ItemResponseDTO,
)
from catalog_browser.use_cases.discover_facets import DiscoverFacetsResponse


class CatalogMapper:
    """Maps between domain models and REST DTOs for catalog browsing."""

    @staticmethod
    def to_item_response(item: Item) -> ItemResponseDTO:
        """
        Converts domain Item to REST response DTO.

        Handles Decimal → str conversion at the boundary.
        """
        return ItemResponseDTO(
            id=item.id,
            name=item.name,
            brand=item.brand,
            model=item.model,
            price=str(item.price) if item.price is not None else None,
            description=item.description,
            image_url=item.image_url,
            created_at=item.created_at,
        )

    @staticmethod
    def to_view_response(view: CatalogView) -> CatalogViewResponseDTO:
        return CatalogViewResponseDTO(
            items=[CatalogMapper.to_item_response(item) for item in view.items],
            total_pages=view.total_pages,
            total_items=view.total_items,
            page=view.page,
            status=view.status.value,
            error_message=view.error_message,
            show_pagination=view.show_pagination,
        )

    @staticmethod
    def to_state_response(state: ViewState) -> CatalogStateResponseDTO:
        return CatalogStateResponseDTO(
            sort=state.sort,
            search_term=state.search_term,
            page=state.pagination_page,
            items_per_page=state.items_per_page,
        )

    @staticmethod
    def to_facets_response(snapshot: FacetSnapshot) -> FacetsResponseDTO:
        return FacetsResponseDTO(
            known_brands=list(snapshot.known_brands),
            known_models=list(snapshot.known_models),
            selected_brands=list(snapshot.selected_brands),
            selected_models=list(snapshot.selected_models),
        )

    @staticmethod
    def to_toggle_response(
        value: str, selected: bool, known: bool, snapshot: FacetSnapshot
    ) -> FacetToggleResponseDTO:
        return FacetToggleResponseDTO(
            value=value,
            selected=selected,
            known=known,
            facets=CatalogMapper.to_facets_response(snapshot),
        )

    @staticmethod
    def to_discover_response(result: DiscoverFacetsResponse) -> DiscoverFacetsResponseDTO:
        return DiscoverFacetsResponseDTO(
            status=result.status.value,
            error_message=result.error.message if result.error else None,
            facets=CatalogMapper.to_facets_response(result.facets),
        )
