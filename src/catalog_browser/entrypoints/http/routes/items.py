from fastapi import APIRouter, Depends

from catalog_browser.entrypoints.http.dependencies import get_get_item_by_id_use_case
from catalog_browser.entrypoints.http.dtos.catalog import ItemResponseDTO
from catalog_browser.entrypoints.http.error_responses import ErrorResponse
from catalog_browser.entrypoints.http.mappers.catalog_mapper import CatalogMapper
from catalog_browser.use_cases.get_item_by_id import GetItemById, GetItemByIdRequest


router = APIRouter(tags=["Items"])


@router.get(
    "/items/{item_id}",
    response_model=ItemResponseDTO,
    summary="Get a single catalog item",
    description="""
    Fetch one item from the remote catalog.

    Not cached: item details are read on demand. Failures of the catalog
    server share the normalized message format of the catalog view
    (e.g. `Error 500: ...`).
    """,
    responses={
        404: {"model": ErrorResponse, "description": "Item not found"},
        502: {"model": ErrorResponse, "description": "Catalog server unreachable or failing"},
    },
)
async def get_item(
    item_id: str,
    use_case: GetItemById = Depends(get_get_item_by_id_use_case),
) -> ItemResponseDTO:
    """Get item endpoint following parse → execute → map → return pattern."""
    result = await use_case.execute(GetItemByIdRequest(item_id=item_id))
    return CatalogMapper.to_item_response(result.item)
