"""Tests for ErrorNormalizer."""

from __future__ import annotations

from types import SimpleNamespace

import httpx
import pytest

from catalog_browser.domain.cache import ErrorInfo
from catalog_browser.domain.errors import NetworkError, NotFoundError, ServerError
from catalog_browser.use_cases.normalize_error import (
    DEFAULT_MESSAGE,
    DEFAULT_SERVER_MESSAGE,
    ErrorNormalizer,
)


@pytest.fixture()
def normalizer() -> ErrorNormalizer:
    return ErrorNormalizer()


# ==============================================================================
# Status-bearing errors
# ==============================================================================


def test_server_error_with_server_message(normalizer: ErrorNormalizer) -> None:
    info = normalizer.normalize(ServerError(status=500, server_message="Database down"))

    assert info == ErrorInfo(code="500", message="Error 500: Database down")


def test_server_error_without_server_message_uses_default(normalizer: ErrorNormalizer) -> None:
    info = normalizer.normalize(ServerError(status=500))

    assert info.message == f"Error 500: {DEFAULT_SERVER_MESSAGE}"


def test_httpx_status_error(normalizer: ErrorNormalizer) -> None:
    request = httpx.Request("GET", "https://catalog.test/api/products")
    response = httpx.Response(404, json={"message": "Not found"}, request=request)
    error = httpx.HTTPStatusError("404", request=request, response=response)

    info = normalizer.normalize(error)

    assert info == ErrorInfo(code="404", message="Error 404: Not found")


def test_httpx_status_error_without_json(normalizer: ErrorNormalizer) -> None:
    request = httpx.Request("GET", "https://catalog.test/")
    response = httpx.Response(502, text="bad gateway", request=request)

    info = normalizer.normalize(httpx.HTTPStatusError("502", request=request, response=response))

    assert info.message == f"Error 502: {DEFAULT_SERVER_MESSAGE}"


def test_mapping_with_status_and_data_message(normalizer: ErrorNormalizer) -> None:
    info = normalizer.normalize({"status": 503, "data": {"message": "Maintenance"}})

    assert info.message == "Error 503: Maintenance"


def test_mapping_with_string_status(normalizer: ErrorNormalizer) -> None:
    info = normalizer.normalize({"status": "FETCH_ERROR"})

    assert info == ErrorInfo(code="FETCH_ERROR", message=f"Error FETCH_ERROR: {DEFAULT_SERVER_MESSAGE}")


def test_object_with_status_code_attribute(normalizer: ErrorNormalizer) -> None:
    raw = SimpleNamespace(status_code=418, data={"message": "teapot"})

    assert normalizer.normalize(raw).message == "Error 418: teapot"


# ==============================================================================
# Message-bearing errors
# ==============================================================================


def test_network_error_uses_its_message(normalizer: ErrorNormalizer) -> None:
    info = normalizer.normalize(NetworkError("Connection refused"))

    assert info == ErrorInfo(code="NETWORK_ERROR", message="Connection refused")


def test_domain_error_keeps_code(normalizer: ErrorNormalizer) -> None:
    info = normalizer.normalize(NotFoundError("Item", "1"))

    assert info.code == "NOT_FOUND"
    assert info.message == "Item with identifier '1' not found"


def test_plain_exception_message(normalizer: ErrorNormalizer) -> None:
    info = normalizer.normalize(RuntimeError("boom"))

    assert info == ErrorInfo(code=None, message="boom")


def test_blank_message_falls_back_to_default(normalizer: ErrorNormalizer) -> None:
    assert normalizer.normalize(RuntimeError()).message == DEFAULT_MESSAGE
    assert normalizer.normalize({"message": ""}).message == DEFAULT_MESSAGE


def test_mapping_with_message(normalizer: ErrorNormalizer) -> None:
    assert normalizer.normalize({"message": "Aborted"}).message == "Aborted"


# ==============================================================================
# Anything else
# ==============================================================================


@pytest.mark.parametrize("raw", [None, 42, "text", object(), {}])
def test_unknown_shapes_give_default(normalizer: ErrorNormalizer, raw: object) -> None:
    assert normalizer.normalize(raw) == ErrorInfo(message=DEFAULT_MESSAGE)


def test_never_raises(normalizer: ErrorNormalizer) -> None:
    class Hostile:
        @property
        def status(self) -> int:
            raise RuntimeError("nope")

    assert normalizer.normalize(Hostile()) == ErrorInfo(message=DEFAULT_MESSAGE)
