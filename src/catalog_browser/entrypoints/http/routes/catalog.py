from fastapi import APIRouter, Depends

from catalog_browser.entrypoints.http.dependencies import get_catalog_controller
from catalog_browser.entrypoints.http.dtos.catalog import (
    CatalogStateResponseDTO,
    CatalogStateUpdateDTO,
    CatalogViewQueryDTO,
    CatalogViewResponseDTO,
)
from catalog_browser.entrypoints.http.error_responses import ErrorResponse
from catalog_browser.entrypoints.http.mappers.catalog_mapper import CatalogMapper
from catalog_browser.use_cases.catalog_controller import CatalogController


router = APIRouter(tags=["Catalog"])


@router.get(
    "/catalog",
    response_model=CatalogViewResponseDTO,
    summary="Derived catalog view",
    description="""
    Visible page of the catalog for the current session.

    ## Pipeline
    - Sort + selected brands/models select a cached server query
    - `search` filters item names (case-insensitive substring) client-side
    - 12 items per page; `show_pagination` is false for a single page

    ## State
    - Omitted parameters keep the current session state
    - A new search term resets the page to 1
    - Sort and facet changes keep the page (it may fall out of range)

    ## Status
    Fetch failures are returned as `status="error"` with a normalized
    `error_message`, not as HTTP errors.

    ## Example
    ```
    GET /v1/catalog?sort=price-asc&search=pro&page=1
    ```
    """,
    responses={422: {"model": ErrorResponse, "description": "Validation error"}},
)
async def get_catalog_view(
    query: CatalogViewQueryDTO = Depends(),
    controller: CatalogController = Depends(get_catalog_controller),
) -> CatalogViewResponseDTO:
    if query.wait:
        view = await controller.load_view(
            sort=query.sort, search_term=query.search, pagination_page=query.page
        )
    else:
        view = controller.get_view(
            sort=query.sort, search_term=query.search, pagination_page=query.page
        )
    return CatalogMapper.to_view_response(view)


@router.get(
    "/catalog/state",
    response_model=CatalogStateResponseDTO,
    summary="Current browsing state",
)
async def get_catalog_state(
    controller: CatalogController = Depends(get_catalog_controller),
) -> CatalogStateResponseDTO:
    return CatalogMapper.to_state_response(controller.state)


@router.put(
    "/catalog/state",
    response_model=CatalogStateResponseDTO,
    summary="Change sort, search term and/or page",
    responses={422: {"model": ErrorResponse, "description": "Validation error"}},
)
async def update_catalog_state(
    body: CatalogStateUpdateDTO,
    controller: CatalogController = Depends(get_catalog_controller),
) -> CatalogStateResponseDTO:
    state = controller.update_state(
        sort=body.sort, search_term=body.search_term, pagination_page=body.page
    )
    return CatalogMapper.to_state_response(state)
