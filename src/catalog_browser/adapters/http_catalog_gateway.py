"""HTTP implementation of CatalogGateway."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any
from urllib.parse import quote

import httpx

from catalog_browser.domain.errors import NetworkError, ServerError
from catalog_browser.domain.filter_key import (
    NAME_ASC,
    NAME_DESC,
    NEWEST,
    OLDEST,
    PRICE_ASC,
    PRICE_DESC,
    FilterKey,
)
from catalog_browser.domain.item import Item
from catalog_browser.ports.catalog_gateway import CatalogGateway

logger = logging.getLogger(__name__)

# Logical sort name -> literal query fragment understood by the catalog API
SORT_QUERY_FRAGMENTS: dict[str, str] = {
    PRICE_ASC: "sortBy=price&order=asc",
    PRICE_DESC: "sortBy=price&order=desc",
    NEWEST: "sortBy=createdAt&order=desc",
    OLDEST: "sortBy=createdAt&order=asc",
    NAME_ASC: "sortBy=name&order=asc",
    NAME_DESC: "sortBy=name&order=desc",
}


class MalformedItemError(ValueError):
    """A catalog record lacks required fields or has unparseable values."""


def build_query_string(key: FilterKey) -> str:
    """
    Build the query string for a filtered catalog request.

    - Parameters are appended only when non-empty
    - Brand and model lists are comma-joined, sorted for determinism
    - Unknown sort names contribute nothing

    Returns:
        "" when nothing applies, otherwise a string starting with "?"
    """
    parts: list[str] = []

    fragment = SORT_QUERY_FRAGMENTS.get(key.sort)
    if fragment:
        parts.append(fragment)

    if key.brands:
        parts.append("brand=" + ",".join(quote(brand, safe="") for brand in key.sorted_brands))
    if key.models:
        parts.append("model=" + ",".join(quote(model, safe="") for model in key.sorted_models))

    return "?" + "&".join(parts) if parts else ""


def parse_item(payload: Any) -> Item:
    """
    Convert one catalog record (JSON object) to a domain Item.

    Raises:
        MalformedItemError: If the record is not an object, lacks id/name,
            or carries an unparseable price
    """
    if not isinstance(payload, dict):
        raise MalformedItemError(f"expected object, got {type(payload).__name__}")

    item_id = payload.get("id")
    name = payload.get("name")
    if item_id in (None, "") or not isinstance(name, str):
        raise MalformedItemError("record is missing 'id' or 'name'")

    price = payload.get("price")
    try:
        parsed_price = Decimal(str(price)) if price not in (None, "") else None
    except InvalidOperation as exc:
        raise MalformedItemError(f"invalid price {price!r}") from exc

    return Item(
        id=str(item_id),
        name=name,
        brand=str(payload.get("brand") or ""),
        model=str(payload.get("model") or ""),
        price=parsed_price,
        description=payload.get("description"),
        image_url=payload.get("image"),
        created_at=payload.get("createdAt"),
    )


class HttpCatalogGateway(CatalogGateway):
    """
    Catalog API client over httpx.

    - GET <base><query> for filtered queries
    - GET <base>/ for facet discovery
    - GET <base>/<id> for single items
    - Transport failures become NetworkError, non-2xx responses ServerError
    - Malformed records inside a list payload are skipped with a warning
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        """
        Initialize gateway.

        Args:
            client: Shared async HTTP client (owned by the caller)
            base_url: Catalog collection URL, e.g. https://host/api/products
        """
        self._client = client
        self._base_url = base_url.rstrip("/")

    async def fetch_items(self, key: FilterKey) -> list[Item]:
        payload = await self._get_json(f"{self._base_url}{build_query_string(key)}")
        return self._parse_items(payload)

    async def fetch_all(self) -> list[Item]:
        payload = await self._get_json(f"{self._base_url}/")
        return self._parse_items(payload)

    async def fetch_item(self, item_id: str) -> Item | None:
        url = f"{self._base_url}/{quote(item_id, safe='')}"
        try:
            payload = await self._get_json(url)
        except ServerError as exc:
            if exc.status == httpx.codes.NOT_FOUND:
                return None
            raise

        try:
            return parse_item(payload)
        except MalformedItemError as exc:
            raise ServerError(status=200, server_message=f"Malformed item record: {exc}") from exc

    async def _get_json(self, url: str) -> Any:
        logger.info("Fetching catalog", extra={"url": url})
        try:
            response = await self._client.get(url)
        except httpx.TransportError as exc:
            logger.warning(
                "Catalog request failed",
                extra={"url": url, "error_type": type(exc).__name__},
            )
            raise NetworkError(str(exc) or "Could not reach the catalog server", url=url) from exc

        if response.is_error:
            raise ServerError(
                status=response.status_code,
                server_message=self._server_message(response),
                url=url,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ServerError(
                status=response.status_code,
                server_message="Response body is not valid JSON",
                url=url,
            ) from exc

    def _parse_items(self, payload: Any) -> list[Item]:
        if not isinstance(payload, list):
            raise ServerError(status=200, server_message="Expected a list of catalog items")

        items: list[Item] = []
        for record in payload:
            try:
                items.append(parse_item(record))
            except MalformedItemError as exc:
                logger.warning("Skipping malformed catalog record", extra={"reason": str(exc)})
        return items

    @staticmethod
    def _server_message(response: httpx.Response) -> str | None:
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict) and isinstance(body.get("message"), str):
            return body["message"]
        return None
