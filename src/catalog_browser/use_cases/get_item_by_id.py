"""Get item by ID use case."""

from __future__ import annotations

from dataclasses import dataclass

from catalog_browser.domain.errors import NotFoundError, ValidationError
from catalog_browser.domain.item import Item
from catalog_browser.ports.catalog_gateway import CatalogGateway


@dataclass(frozen=True, slots=True)
class GetItemByIdRequest:
    """Request to get an item by ID."""

    item_id: str


@dataclass(frozen=True, slots=True)
class GetItemByIdResponse:
    """Response containing the requested item."""

    item: Item


class GetItemById:
    """
    Use case for retrieving a single catalog item.

    Responsibilities:
    - Reject blank identifiers
    - Delegate to the catalog gateway
    - Raise NotFoundError if the item doesn't exist

    Fetch failures (CatalogFetchError) propagate unchanged; the boundary
    exposing them normalizes the message.
    """

    def __init__(self, catalog_gateway: CatalogGateway) -> None:
        self._gateway = catalog_gateway

    async def execute(self, request: GetItemByIdRequest) -> GetItemByIdResponse:
        """
        Execute the get item by ID use case.

        Raises:
            ValidationError: If item_id is blank
            NotFoundError: If the item doesn't exist
            CatalogFetchError: If the catalog cannot be reached or fails
        """
        if not request.item_id.strip():
            raise ValidationError(
                errors=[
                    {
                        "field": "item_id",
                        "message": "Must not be blank",
                        "code": "BLANK_ID",
                    }
                ]
            )

        item = await self._gateway.fetch_item(request.item_id)

        if item is None:
            raise NotFoundError(resource="Item", identifier=request.item_id)

        return GetItemByIdResponse(item=item)
