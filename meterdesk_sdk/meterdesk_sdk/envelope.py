"""Envelope handling for ``{success, message, data}`` responses.

Some endpoints wrap their payload, some return it bare. Callers check
``error_message`` before trusting ``unwrap``: a declared failure may still
carry a ``data`` field with stale or partial content.
"""

from __future__ import annotations

from typing import Any, Optional

DEFAULT_ERROR_MESSAGE = "Request failed"


def is_envelope(body: Any) -> bool:
    """True when ``body`` is an object carrying a boolean ``success`` flag."""
    return isinstance(body, dict) and isinstance(body.get("success"), bool)


def unwrap(body: Any) -> Any:
    """Return ``body["data"]`` when present, otherwise ``body`` itself."""
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


def error_message(body: Any) -> Optional[str]:
    """Human-readable message for a declared failure, ``None`` otherwise."""
    if not isinstance(body, dict):
        return None
    if body.get("success") is not False:
        return None
    message = body.get("message")
    if isinstance(message, str) and message.strip():
        return message
    return DEFAULT_ERROR_MESSAGE


def declared_failure(body: Any) -> bool:
    return error_message(body) is not None
