"""Structured exceptions for the Meterdesk SDK.

Only configuration and transport failures are raised by the client itself.
HTTP and domain failures come back as data on ``ApiResult``; the exception
classes below exist for callers that opt into raising them.
"""

from __future__ import annotations

from typing import Any, Optional


class MeterdeskError(Exception):
    """Base exception for all Meterdesk SDK errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(MeterdeskError):
    """Base address (or another required setting) is missing at call time."""
    pass


class TransportError(MeterdeskError):
    """DNS, TLS, connect or timeout failure before an HTTP response arrived."""

    def __init__(self, message: str, *, method: str = "", url: str = "") -> None:
        self.method = method
        self.url = url
        super().__init__(message)


class ApiError(MeterdeskError):
    """A completed HTTP exchange that the caller chose to treat as an error."""

    def __init__(
        self,
        status: int,
        message: str,
        body: Any = None,
    ) -> None:
        self.status = status
        self.body = body
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.status}] {self.message}"


class HttpError(ApiError):
    """Non-2xx status without a declared envelope error."""
    pass


class DomainError(ApiError):
    """Envelope declared ``success: false``."""

    def __init__(
        self,
        status: int,
        message: str,
        body: Any = None,
        endpoint: Optional[str] = None,
    ) -> None:
        self.endpoint = endpoint
        super().__init__(status, message, body)
