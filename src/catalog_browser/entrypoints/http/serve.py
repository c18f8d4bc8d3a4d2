"""Run the catalog browser API with uvicorn."""

from __future__ import annotations

import logging
import os
import sys

import uvicorn


def setup_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def main() -> None:
    setup_logging()
    uvicorn.run(
        "catalog_browser.entrypoints.http.app:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        log_config=None,  # keep the root logging configuration above
    )


if __name__ == "__main__":
    main()
