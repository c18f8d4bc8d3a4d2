import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from catalog_browser.entrypoints.http.dependencies import (
    get_catalog_session,
    reset_catalog_session,
)
from catalog_browser.entrypoints.http.exception_handlers import register_exception_handlers
from catalog_browser.entrypoints.http.routes.catalog import router as catalog_router
from catalog_browser.entrypoints.http.routes.facets import router as facets_router
from catalog_browser.entrypoints.http.routes.health import router as health_router
from catalog_browser.entrypoints.http.routes.items import router as items_router
from catalog_browser.infra.http.client import close_http_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Honour test overrides of the session provider
    provider = app.dependency_overrides.get(get_catalog_session, get_catalog_session)
    session = provider()

    # Kick off facet discovery in the background; browsing does not wait for it
    session.discovery.request()
    logger.info("Catalog session started")

    yield

    await session.aclose()
    reset_catalog_session()
    await close_http_client()
    logger.info("Catalog session closed")


def build_app() -> FastAPI:
    app = FastAPI(
        title="Catalog Browser API",
        description="""
        Browsing layer over a remote, read-only product catalog.

        ## Features
        - Cached server-side queries per sort + brand + model combination
        - Client-side name search and pagination over cached results
        - Facet discovery (known brands/models) and facet selection
        - Single item lookup

        ## Error Handling
        Catalog fetch failures in the browsing view are returned as data
        (`status="error"` with a normalized message). Other errors return
        structured JSON responses with error codes.
        """,
        version="0.1.0",
        docs_url="/docs",  # Swagger UI
        redoc_url="/redoc",  # ReDoc alternative
        openapi_url="/openapi.json",  # OpenAPI schema
        lifespan=lifespan,
    )

    # Register global exception handlers
    register_exception_handlers(app)

    # Register routers
    app.include_router(health_router)
    app.include_router(catalog_router, prefix="/v1")
    app.include_router(facets_router, prefix="/v1")
    app.include_router(items_router, prefix="/v1")

    return app


app = build_app()
