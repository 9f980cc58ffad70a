"""Authentication header handling for the Meterdesk SDK."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict

if TYPE_CHECKING:
    from meterdesk_sdk.config import ClientSettings


def build_auth_headers(
    settings: "ClientSettings",
    *,
    send_identity: bool = True,
    send_token: bool = True,
) -> Dict[str, str]:
    """Return the identity and bearer headers the settings allow.

    Each header is emitted only when its toggle is on AND a value is
    configured. Returns an empty dict when neither applies (for example
    unauthenticated status probes).
    """
    headers: Dict[str, str] = {}
    if send_identity and settings.user_id:
        headers[settings.identity_header] = str(settings.user_id)
    if send_token and settings.access_token:
        headers["Authorization"] = f"Bearer {settings.access_token}"
    return headers
