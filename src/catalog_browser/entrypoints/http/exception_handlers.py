"""FastAPI exception handlers for domain errors.

Translates domain errors to appropriate HTTP responses with structured error format.
"""

import logging
from typing import Any, Sequence

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from catalog_browser.domain.errors import CatalogFetchError, DomainError
from catalog_browser.use_cases.normalize_error import ErrorNormalizer

logger = logging.getLogger(__name__)

_normalizer = ErrorNormalizer()


async def handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
    """Handle all domain errors with automatic HTTP status code mapping.

    Maps domain errors to appropriate HTTP status codes:
    - VALIDATION_ERROR → 422 Unprocessable Entity
    - NOT_FOUND → 404 Not Found
    - FETCH_ERROR / NETWORK_ERROR / SERVER_ERROR → 502 Bad Gateway
    - Other → 400 Bad Request

    Catalog fetch failures carry the normalized display message as detail,
    never the raw transport error.

    Args:
        request: FastAPI request object
        exc: Domain error to handle

    Returns:
        JSON response with structured error format
    """
    error_dict = exc.to_dict()

    status_code_map: dict[str, int] = {
        "VALIDATION_ERROR": 422,  # HTTP_422_UNPROCESSABLE_CONTENT
        "NOT_FOUND": status.HTTP_404_NOT_FOUND,
        "FETCH_ERROR": status.HTTP_502_BAD_GATEWAY,
        "NETWORK_ERROR": status.HTTP_502_BAD_GATEWAY,
        "SERVER_ERROR": status.HTTP_502_BAD_GATEWAY,
    }

    status_code = status_code_map.get(exc.error_code, status.HTTP_400_BAD_REQUEST)

    if status_code >= 500:
        logger.error(
            "Catalog fetch error",
            extra={
                "error_code": exc.error_code,
                "detail": exc.message,
                "context": exc.context,
                "path": request.url.path,
                "method": request.method,
            },
        )
    else:
        logger.info(
            "Client error",
            extra={
                "error_code": exc.error_code,
                "detail": exc.message,
                "path": request.url.path,
                "method": request.method,
            },
        )

    detail = error_dict.get("message", str(exc))
    if isinstance(exc, CatalogFetchError):
        detail = _normalizer.normalize(exc).message

    response_content: dict[str, Any] = {
        "detail": detail,
        "code": error_dict.get("code", exc.error_code),
    }

    # Add field-level errors if present (for ValidationError)
    if "errors" in error_dict:
        response_content["errors"] = error_dict["errors"]

    return JSONResponse(status_code=status_code, content=response_content)


def _field_errors(raw_errors: Sequence[Any]) -> list[dict[str, str]]:
    errors = []

    for error in raw_errors:
        # Filter out 'body', 'query' and 'path' prefixes
        field_path = ".".join(
            str(loc) for loc in error["loc"] if loc not in ("body", "query", "path")
        )

        errors.append(
            {
                "field": field_path,
                "message": error["msg"],
                "code": error["type"],
            }
        )

    return errors


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError | PydanticValidationError
) -> JSONResponse:
    """Handle FastAPI/Pydantic validation errors.

    Query DTOs injected with Depends() are built inside the dependency, so
    their constraint violations arrive as plain pydantic ValidationErrors.
    Both kinds produce the same response.

    Examples:
        - page=0 (violates ge=1)
        - page=abc (not an integer)
        - search longer than 200 characters

    Returns:
        JSON response with 422 status and structured errors
    """
    errors = _field_errors(exc.errors())

    logger.info(
        "Request validation error",
        extra={
            "errors": errors,
            "path": request.url.path,
            "method": request.method,
        },
    )

    return JSONResponse(
        status_code=422,  # HTTP_422_UNPROCESSABLE_CONTENT
        content={
            "detail": "Invalid request parameters",
            "code": "VALIDATION_ERROR",
            "errors": errors,
        },
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected errors.

    Always logged with full traceback for investigation.

    Returns:
        JSON response with 500 status and generic error message
    """
    logger.error(
        "Unexpected error occurred",
        exc_info=exc,
        extra={
            "error_type": type(exc).__name__,
            "path": request.url.path,
            "method": request.method,
        },
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with FastAPI app.

    This should be called once during app initialization.
    """
    app.add_exception_handler(DomainError, handle_domain_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(PydanticValidationError, handle_request_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected_error)

    logger.info("Exception handlers registered successfully")
