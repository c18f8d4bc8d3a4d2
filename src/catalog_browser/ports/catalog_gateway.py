from __future__ import annotations

from abc import ABC, abstractmethod

from catalog_browser.domain.filter_key import FilterKey
from catalog_browser.domain.item import Item


class CatalogGateway(ABC):
    """
    Port for the remote, read-only catalog.

    Implementations translate transport failures into CatalogFetchError
    subclasses (NetworkError, ServerError). Callers never see transport
    specific exceptions.
    """

    @abstractmethod
    async def fetch_items(self, key: FilterKey) -> list[Item]:
        """
        Fetch the catalog filtered and sorted on the server side.

        Args:
            key: Sort + brand set + model set

        Returns:
            Items in server order

        Raises:
            NetworkError: If the server cannot be reached
            ServerError: If the server answers with a non-2xx status
        """
        ...

    @abstractmethod
    async def fetch_all(self) -> list[Item]:
        """
        Fetch the unfiltered catalog (facet discovery).

        Raises:
            NetworkError: If the server cannot be reached
            ServerError: If the server answers with a non-2xx status
        """
        ...

    @abstractmethod
    async def fetch_item(self, item_id: str) -> Item | None:
        """
        Fetch a single item.

        Returns:
            The item, or None if the server reports it does not exist

        Raises:
            NetworkError: If the server cannot be reached
            ServerError: If the server answers with a non-2xx status other than 404
        """
        ...
