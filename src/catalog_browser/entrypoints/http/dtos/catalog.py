from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from catalog_browser.domain.filter_key import SORT_OPTIONS


class ItemResponseDTO(BaseModel):
    id: str
    name: str
    brand: str
    model: str
    price: str | None = None
    description: str | None = None
    image_url: str | None = None
    created_at: str | None = None


class CatalogViewQueryDTO(BaseModel):
    """Query parameters for the derived catalog view."""

    sort: str | None = Field(
        default=None,
        description=f"Logical sort name ({', '.join(SORT_OPTIONS)}); unknown names sort nothing",
        examples=["price-asc"],
        max_length=50,
    )
    search: str | None = Field(
        default=None,
        description="Case-insensitive substring matched against item names",
        examples=["pro"],
        max_length=200,
    )
    page: int | None = Field(
        default=None,
        description="Pagination page (1-based). Ignored when the search term changes.",
        examples=[1],
        ge=1,
    )
    wait: bool = Field(
        default=True,
        description="Wait for a pending catalog fetch instead of returning a loading view",
    )


class CatalogViewResponseDTO(BaseModel):
    items: list[ItemResponseDTO]
    total_pages: int
    total_items: int
    page: int
    status: Literal["loading", "error", "success"]
    error_message: str | None = None
    show_pagination: bool

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "items": [
                    {
                        "id": "1",
                        "name": "Pro Max",
                        "brand": "Apple",
                        "model": "iPhone",
                        "price": "999.00",
                    }
                ],
                "total_pages": 3,
                "total_items": 25,
                "page": 1,
                "status": "success",
                "error_message": None,
                "show_pagination": True,
            }
        }
    )


class CatalogStateUpdateDTO(BaseModel):
    """Body for changing sort, search term and page in one call."""

    sort: str | None = Field(default=None, max_length=50, examples=["price-desc"])
    search_term: str | None = Field(default=None, max_length=200, examples=["basic"])
    page: int | None = Field(default=None, ge=1, examples=[2])


class CatalogStateResponseDTO(BaseModel):
    sort: str
    search_term: str
    page: int
    items_per_page: int


class FacetsResponseDTO(BaseModel):
    known_brands: list[str]
    known_models: list[str]
    selected_brands: list[str]
    selected_models: list[str]


class FacetToggleResponseDTO(BaseModel):
    value: str
    selected: bool
    known: bool
    facets: FacetsResponseDTO


class DiscoverFacetsResponseDTO(BaseModel):
    status: Literal["idle", "loading", "error", "success"]
    error_message: str | None = None
    facets: FacetsResponseDTO
