from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from catalog_browser.domain.errors import PagingValidationError
from catalog_browser.domain.item import Item

ITEMS_PER_PAGE = 12


class ViewStatus(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    SUCCESS = "success"


@dataclass(slots=True)
class ViewState:
    """User-driven browsing state for one catalog session."""

    sort: str = ""
    search_term: str = ""
    pagination_page: int = 1
    items_per_page: int = ITEMS_PER_PAGE

    def validate(self) -> None:
        """
        Validate pagination parameters.

        Raises:
            PagingValidationError: If page or items per page are invalid
        """
        if self.pagination_page < 1:
            raise PagingValidationError("pagination_page must be >= 1")
        if self.items_per_page <= 0:
            raise PagingValidationError("items_per_page must be > 0")


@dataclass(frozen=True, slots=True)
class CatalogView:
    """Derived page shown to the presentation layer."""

    status: ViewStatus
    items: tuple[Item, ...] = ()
    total_pages: int = 1
    total_items: int = 0
    page: int = 1
    error_message: str | None = None

    @property
    def show_pagination(self) -> bool:
        return self.status is ViewStatus.SUCCESS and self.total_pages > 1

    @property
    def is_empty(self) -> bool:
        return self.status is ViewStatus.SUCCESS and not self.items
