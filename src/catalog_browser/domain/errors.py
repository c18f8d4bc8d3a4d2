"""Domain error classes.

Protocol-agnostic errors raised while browsing the catalog. The HTTP layer
maps them to status codes; the ErrorNormalizer maps them to view messages.
"""

from typing import Any

FieldError = dict[str, str]


class DomainError(Exception):
    """Root of every catalog browsing error.

    `message` is safe to show, `error_code` is stable across releases and
    `context` holds the values that made the operation fail.
    """

    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "code": self.error_code, **self.context}


class ValidationError(DomainError):
    """A browsing event carried an unusable value.

    Raised for a page below 1, a non-positive page size, a blank facet value
    or a blank item id. REST: 422.
    """

    error_code: str = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str | None = None,
        errors: list[FieldError] | None = None,
        **context: Any,
    ) -> None:
        # Field errors are optional; an empty list counts as none
        self.errors: list[FieldError] | None = errors or None
        default = "Validation failed" if self.errors else "Validation error"
        super().__init__(message or default, **context)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        if self.errors:
            payload["errors"] = self.errors
        return payload


class PagingValidationError(ValidationError):
    """Invalid page number or page size."""


class FilterValidationError(ValidationError):
    """Invalid sort or facet value."""


class NotFoundError(DomainError):
    """The catalog has no record for the requested identifier. REST: 404."""

    error_code: str = "NOT_FOUND"

    def __init__(self, resource: str, identifier: str | None = None, **context: Any) -> None:
        what = f"{resource} with identifier '{identifier}'" if identifier else resource
        super().__init__(
            f"{what} not found", resource=resource, identifier=identifier, **context
        )


class CatalogFetchError(DomainError):
    """The remote catalog could not serve a request.

    Never shown to users as-is: the ErrorNormalizer turns it into a
    display-safe message.

    Protocol mappings:
        - REST: 502 Bad Gateway
    """

    error_code: str = "FETCH_ERROR"


class NetworkError(CatalogFetchError):
    """The catalog server could not be reached (connect error, timeout)."""

    error_code: str = "NETWORK_ERROR"


class ServerError(CatalogFetchError):
    """The catalog server answered with a non-2xx status or an unusable body.

    Attributes:
        status: HTTP status code returned by the server
        server_message: Message found in the response body, if any
    """

    error_code: str = "SERVER_ERROR"

    def __init__(self, status: int, server_message: str | None = None, **context: Any) -> None:
        self.status = status
        self.server_message = server_message
        message = f"Catalog server responded with status {status}"
        if server_message:
            message = f"{message}: {server_message}"
        super().__init__(message, status=status, **context)
