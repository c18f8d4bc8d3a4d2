from fastapi import APIRouter, Depends

from catalog_browser.entrypoints.http.dependencies import (
    get_catalog_controller,
    get_facet_discovery,
)
from catalog_browser.entrypoints.http.dtos.catalog import (
    DiscoverFacetsResponseDTO,
    FacetsResponseDTO,
    FacetToggleResponseDTO,
)
from catalog_browser.entrypoints.http.error_responses import ErrorResponse
from catalog_browser.entrypoints.http.mappers.catalog_mapper import CatalogMapper
from catalog_browser.use_cases.catalog_controller import CatalogController
from catalog_browser.use_cases.discover_facets import FacetDiscovery


router = APIRouter(prefix="/catalog/facets", tags=["Facets"])


@router.get(
    "",
    response_model=FacetsResponseDTO,
    summary="Known and selected facets",
)
async def get_facets(
    controller: CatalogController = Depends(get_catalog_controller),
) -> FacetsResponseDTO:
    return CatalogMapper.to_facets_response(controller.facet_store.snapshot())


@router.post(
    "/brands/{brand}/toggle",
    response_model=FacetToggleResponseDTO,
    summary="Select or deselect a brand",
    responses={422: {"model": ErrorResponse, "description": "Blank brand"}},
)
async def toggle_brand(
    brand: str,
    controller: CatalogController = Depends(get_catalog_controller),
) -> FacetToggleResponseDTO:
    selected = controller.toggle_brand(brand)
    store = controller.facet_store
    return CatalogMapper.to_toggle_response(
        brand, selected, store.is_brand_known(brand), store.snapshot()
    )


@router.post(
    "/models/{model}/toggle",
    response_model=FacetToggleResponseDTO,
    summary="Select or deselect a model",
    responses={422: {"model": ErrorResponse, "description": "Blank model"}},
)
async def toggle_model(
    model: str,
    controller: CatalogController = Depends(get_catalog_controller),
) -> FacetToggleResponseDTO:
    selected = controller.toggle_model(model)
    store = controller.facet_store
    return CatalogMapper.to_toggle_response(
        model, selected, store.is_model_known(model), store.snapshot()
    )


@router.post(
    "/discover",
    response_model=DiscoverFacetsResponseDTO,
    summary="Run facet discovery",
    description="""
    Fetch the unfiltered catalog and merge its brands and models into the
    known facets. Known facets only grow; selections are never touched.

    Discovery runs once per process unless `refresh=true`.
    """,
)
async def discover_facets(
    refresh: bool = False,
    discovery: FacetDiscovery = Depends(get_facet_discovery),
) -> DiscoverFacetsResponseDTO:
    result = await (discovery.refresh() if refresh else discovery.execute())
    return CatalogMapper.to_discover_response(result)
