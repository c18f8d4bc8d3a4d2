"""REST API error response models.

Structured error responses that provide consistent format for all HTTP errors.
"""

from pydantic import BaseModel, ConfigDict


class ErrorDetail(BaseModel):
    """Individual error detail for field-level errors."""

    field: str
    message: str
    code: str | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "field": "page",
                "message": "Must be >= 1",
                "code": "INVALID_PAGE",
            }
        }
    )


class ErrorResponse(BaseModel):
    """Structured error response format.

    Supports:
    - Simple errors (just detail and code)
    - Multi-field validation errors (detail + errors array)
    - Catalog fetch failures, whose detail is the normalized display message

    Examples:
        Not found:
            {"detail": "Item with identifier '42' not found", "code": "NOT_FOUND"}

        Catalog server failure:
            {"detail": "Error 500: Internal Server Error", "code": "SERVER_ERROR"}
    """

    detail: str
    code: str | None = None
    errors: list[ErrorDetail] | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"detail": "Item with identifier '42' not found", "code": "NOT_FOUND"},
                {"detail": "Error 500: Internal Server Error", "code": "SERVER_ERROR"},
                {
                    "detail": "Validation failed",
                    "code": "VALIDATION_ERROR",
                    "errors": [
                        {
                            "field": "brand",
                            "message": "Facet value must not be blank",
                            "code": "BLANK_FACET",
                        },
                    ],
                },
            ]
        }
    )
