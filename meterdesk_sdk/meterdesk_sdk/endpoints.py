"""Endpoint catalogue: the list endpoints paginators wrap, plus single-shot reads."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from meterdesk_sdk.models import StatusInfo, TopupInfo, User
from meterdesk_sdk.parsers import (
    CHANNEL_FIELDS,
    LOG_FIELDS,
    REDEMPTION_FIELDS,
    TOKEN_FIELDS,
    TOPUP_RECORD_FIELDS,
    USER_FIELDS,
    FieldMap,
    parse_numeric_map,
    parse_status,
    parse_topup_info,
    parse_user,
)

if TYPE_CHECKING:
    from meterdesk_sdk.client import AsyncMeterdeskClient

logger = logging.getLogger("meterdesk.endpoints")

STATUS_PATH = "/api/status"
SELF_PATH = "/api/user/self"
LOG_STAT_PATH = "/api/log/self/stat"
TOPUP_INFO_PATH = "/api/user/topup/info"


@dataclass(frozen=True)
class ListEndpoint:
    """A paginated list endpoint.

    When ``search_path`` is set, requests carrying any non-empty filter go
    there instead of ``path`` (the service splits listing and searching).
    """

    path: str
    fields: FieldMap
    search_path: Optional[str] = None

    def path_for(self, filters: Optional[Mapping[str, Any]]) -> str:
        if self.search_path and filters and any(
            value is not None and value != "" for value in filters.values()
        ):
            return self.search_path
        return self.path


SELF_LOGS = ListEndpoint("/api/log/self", LOG_FIELDS)
TOKENS = ListEndpoint("/api/token/", TOKEN_FIELDS)
SELF_TOPUPS = ListEndpoint("/api/user/topup/self", TOPUP_RECORD_FIELDS)
USERS = ListEndpoint("/api/user/", USER_FIELDS, search_path="/api/user/search")
CHANNELS = ListEndpoint("/api/channel/", CHANNEL_FIELDS, search_path="/api/channel/search")
REDEMPTIONS = ListEndpoint("/api/redemption/", REDEMPTION_FIELDS, search_path="/api/redemption/search")


async def fetch_status(client: "AsyncMeterdeskClient") -> Optional[StatusInfo]:
    """GET /api/status without credentials.

    Returns ``None`` when the server declares a failure or the payload is
    not an object.
    """
    result = await client.get(STATUS_PATH, send_identity=False, send_token=False)
    declared = result.declared_error
    if declared is not None:
        logger.info("Status probe declined: %s", declared)
        return None
    return parse_status(result.body)


async def fetch_self(client: "AsyncMeterdeskClient") -> Optional[User]:
    """The signed-in user; ``None`` on a declared failure or missing identity."""
    result = await client.get(SELF_PATH)
    declared = result.declared_error
    if declared is not None:
        logger.info("User fetch declined: %s", declared)
        return None
    return parse_user(result.body)


async def fetch_topup_info(client: "AsyncMeterdeskClient") -> Optional[TopupInfo]:
    result = await client.get(TOPUP_INFO_PATH)
    declared = result.declared_error
    if declared is not None:
        logger.info("Top-up info declined: %s", declared)
        return None
    return parse_topup_info(result.body)


async def fetch_log_stat(
    client: "AsyncMeterdeskClient",
    filters: Optional[Mapping[str, Any]] = None,
) -> Optional[Dict[str, Any]]:
    """Aggregate log figures (``quota``, ``rpm``, ``tpm``) for the same
    filters the log list takes. Use ``pick_metric`` to read them, since
    servers disagree on the key names.
    """
    result = await client.get(LOG_STAT_PATH, query=dict(filters or {}))
    declared = result.declared_error
    if declared is not None:
        logger.info("Log stat declined: %s", declared)
        return None
    return parse_numeric_map(result.body)
