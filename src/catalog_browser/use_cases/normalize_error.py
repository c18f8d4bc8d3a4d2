"""Fetch failure normalization."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from catalog_browser.domain.cache import ErrorInfo
from catalog_browser.domain.errors import DomainError, ServerError

logger = logging.getLogger(__name__)

DEFAULT_SERVER_MESSAGE = "An error occurred while fetching catalog items."
DEFAULT_MESSAGE = "An unknown error occurred."


class ErrorNormalizer:
    """
    Turns any fetch failure into a display-safe ErrorInfo.

    Supported shapes:
    - Status-bearing errors (ServerError, httpx.HTTPStatusError, objects with
      a ``status``/``status_code`` attribute, mappings with a ``status`` key)
      → "Error <status>: <server message or default>"
    - Errors with a message (exceptions, mappings with a ``message`` key)
      → that message, or the generic default when blank
    - Anything else → the generic default

    normalize() never raises.
    """

    def normalize(self, raw_error: Any) -> ErrorInfo:
        try:
            return self._normalize(raw_error)
        except Exception:  # noqa: BLE001 - normalization must not fail
            logger.exception("Could not normalize fetch error")
            return ErrorInfo(message=DEFAULT_MESSAGE)

    def _normalize(self, raw_error: Any) -> ErrorInfo:
        status = self._status_of(raw_error)
        if status is not None:
            server_message = self._server_message_of(raw_error) or DEFAULT_SERVER_MESSAGE
            return ErrorInfo(code=str(status), message=f"Error {status}: {server_message}")

        code = raw_error.error_code if isinstance(raw_error, DomainError) else None
        return ErrorInfo(code=code, message=self._message_of(raw_error) or DEFAULT_MESSAGE)

    @staticmethod
    def _status_of(raw_error: Any) -> int | str | None:
        if isinstance(raw_error, ServerError):
            return raw_error.status
        if isinstance(raw_error, httpx.HTTPStatusError):
            return raw_error.response.status_code
        if isinstance(raw_error, Mapping):
            return raw_error.get("status")
        for attribute in ("status", "status_code"):
            value = getattr(raw_error, attribute, None)
            if isinstance(value, (int, str)) and value != "":
                return value
        return None

    @staticmethod
    def _server_message_of(raw_error: Any) -> str | None:
        if isinstance(raw_error, ServerError):
            return raw_error.server_message
        if isinstance(raw_error, httpx.HTTPStatusError):
            try:
                body = raw_error.response.json()
            except ValueError:
                return None
            return body.get("message") if isinstance(body, dict) else None
        if isinstance(raw_error, Mapping):
            data = raw_error.get("data")
            if isinstance(data, Mapping) and isinstance(data.get("message"), str):
                return data["message"]
            return None
        data = getattr(raw_error, "data", None)
        if isinstance(data, Mapping) and isinstance(data.get("message"), str):
            return data["message"]
        return None

    @staticmethod
    def _message_of(raw_error: Any) -> str | None:
        if isinstance(raw_error, DomainError):
            return raw_error.message
        if isinstance(raw_error, Mapping):
            message = raw_error.get("message")
            return message if isinstance(message, str) else None
        if isinstance(raw_error, BaseException):
            return str(raw_error)
        message = getattr(raw_error, "message", None)
        return message if isinstance(message, str) else None
