from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from catalog_browser.domain.filter_key import FilterKey
from catalog_browser.domain.item import Item


class CacheStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class ErrorInfo:
    """Display-safe description of a failed fetch."""

    message: str
    code: str | None = None


@dataclass(frozen=True, slots=True)
class CacheEntry:
    key: FilterKey
    status: CacheStatus = CacheStatus.IDLE
    data: tuple[Item, ...] | None = None
    error: ErrorInfo | None = None

    @property
    def is_settled(self) -> bool:
        return self.status in (CacheStatus.SUCCESS, CacheStatus.ERROR)

    @classmethod
    def loading(cls, key: FilterKey) -> CacheEntry:
        return cls(key=key, status=CacheStatus.LOADING)

    @classmethod
    def success(cls, key: FilterKey, items: tuple[Item, ...]) -> CacheEntry:
        return cls(key=key, status=CacheStatus.SUCCESS, data=items)

    @classmethod
    def failure(cls, key: FilterKey, error: ErrorInfo) -> CacheEntry:
        return cls(key=key, status=CacheStatus.ERROR, error=error)
