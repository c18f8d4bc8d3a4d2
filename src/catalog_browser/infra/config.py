from __future__ import annotations

import os

from catalog_browser.domain.view import ITEMS_PER_PAGE

DEFAULT_TIMEOUT_SECONDS = 10.0


def catalog_api_url() -> str:
    url = os.getenv("CATALOG_API_URL")

    if not url:
        raise RuntimeError("CATALOG_API_URL environment variable is not set")

    return url.rstrip("/")


def request_timeout_seconds() -> float:
    raw = os.getenv("CATALOG_API_TIMEOUT_SECONDS")
    return float(raw) if raw else DEFAULT_TIMEOUT_SECONDS


def items_per_page() -> int:
    raw = os.getenv("CATALOG_ITEMS_PER_PAGE")
    return int(raw) if raw else ITEMS_PER_PAGE


def cache_max_entries() -> int | None:
    raw = os.getenv("CATALOG_CACHE_MAX_ENTRIES")
    return int(raw) if raw else None


def clamp_out_of_range_pages() -> bool:
    return os.getenv("CATALOG_CLAMP_OUT_OF_RANGE_PAGES", "false").lower() in ("1", "true", "yes")
