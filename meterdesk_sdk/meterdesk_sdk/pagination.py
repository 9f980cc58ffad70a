"""Pagination controller shared by every list screen.

A ``Paginator`` wraps one ``ListEndpoint`` and moves through
``IDLE -> LOADING -> (LOADED | ERRORED)``; any state can go back to
``LOADING``. Each ``load`` bumps a generation counter and a response is
applied only if no newer load was issued meanwhile, so a slow page-1
response can never overwrite page 2.

When the server omits ``total`` the controller guesses that more pages
exist if the last page came back full. That guess is wrong by one page when
the final page happens to be exactly full.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Tuple

from meterdesk_sdk.endpoints import ListEndpoint
from meterdesk_sdk.errors import ConfigurationError, TransportError
from meterdesk_sdk.fields import get_int
from meterdesk_sdk.parsers import parse_rows

if TYPE_CHECKING:
    from meterdesk_sdk.client import AsyncMeterdeskClient

logger = logging.getLogger("meterdesk.pagination")

DEFAULT_PAGE_SIZE = 20


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"


@dataclass(frozen=True)
class PaginationState:
    page: int
    page_size: int
    total: Optional[int]
    items: Tuple[Any, ...]


class Paginator:
    """Page through one list endpoint.

    Usage::

        logs = Paginator(client, SELF_LOGS, page_size=20)
        await logs.load(1, filters={"model_name": "gpt-4o", "type": None})
        if logs.can_next():
            await logs.next()

    Filters are opaque here: they are forwarded verbatim (``None`` values
    are dropped by the client) and reused by ``next``/``prev``/``refresh``
    until the next ``load`` passes new ones.
    """

    def __init__(
        self,
        client: "AsyncMeterdeskClient",
        endpoint: ListEndpoint,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> None:
        if page_size < 1:
            raise ValueError(f"page_size must be >= 1; got {page_size}")
        self._client = client
        self._endpoint = endpoint
        self._filters: Dict[str, Any] = dict(filters or {})

        self._state = LoadState.IDLE
        self._error: Optional[str] = None
        self._generation = 0

        self._page = 1
        self._page_size = page_size
        self._total: Optional[int] = None
        self._items: Tuple[Any, ...] = ()
        self._last_row_count: Optional[int] = None
        self._dropped_rows = 0

    # ── State ────────────────────────────────────────────────────

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def page(self) -> int:
        return self._page

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def total(self) -> Optional[int]:
        """Server-reported total, ``None`` when the server did not send one."""
        return self._total

    @property
    def items(self) -> Tuple[Any, ...]:
        return self._items

    @property
    def filters(self) -> Dict[str, Any]:
        return dict(self._filters)

    @property
    def dropped_rows(self) -> int:
        """Rows discarded by the parser on the last successful load."""
        return self._dropped_rows

    @property
    def max_page(self) -> int:
        if not self._total:
            return self._page
        return max(1, math.ceil(self._total / self._page_size))

    def snapshot(self) -> PaginationState:
        return PaginationState(
            page=self._page,
            page_size=self._page_size,
            total=self._total,
            items=self._items,
        )

    def can_next(self) -> bool:
        if self._last_row_count is None:
            return False
        if self._total is not None:
            return self._page * self._page_size < self._total
        return self._last_row_count == self._page_size

    def can_prev(self) -> bool:
        return self._page > 1

    # ── Transitions ──────────────────────────────────────────────

    async def load(self, page: int = 1, filters: Optional[Mapping[str, Any]] = None) -> bool:
        """Fetch ``page`` and apply it.

        Returns True when this response was applied (as LOADED or ERRORED),
        False when a newer load superseded it. Configuration and transport
        errors mark the controller ERRORED and propagate.
        """
        page = max(1, page)
        if filters is not None:
            self._filters = dict(filters)
        self._generation += 1
        generation = self._generation
        page_size = self._page_size
        self._state = LoadState.LOADING
        self._error = None

        query = {**self._filters, "p": page, "page_size": page_size}
        path = self._endpoint.path_for(self._filters)
        try:
            result = await self._client.get(path, query=query)
        except (ConfigurationError, TransportError) as e:
            if generation == self._generation:
                self._state = LoadState.ERRORED
                self._error = e.message
            raise

        if generation != self._generation:
            logger.debug(
                "Discarding stale response for %s page %d (generation %d, latest %d)",
                path, page, generation, self._generation,
            )
            return False

        failure = result.failure_message()
        if failure is not None:
            self._state = LoadState.ERRORED
            self._error = failure
            logger.info("Load of %s page %d failed: %s", path, page, failure)
            return True

        parsed = parse_rows(result.body, self._endpoint.fields)
        payload = result.payload
        server_page = get_int(payload, "page")
        server_page_size = get_int(payload, "page_size")
        server_total = get_int(payload, "total")

        self._items = tuple(parsed.items)
        self._last_row_count = len(parsed.items) + parsed.dropped_count
        self._dropped_rows = parsed.dropped_count
        self._page = server_page if server_page is not None and server_page >= 1 else page
        self._page_size = (
            server_page_size if server_page_size is not None and server_page_size >= 1 else page_size
        )
        self._total = server_total if server_total is not None and server_total >= 0 else None
        self._state = LoadState.LOADED
        return True

    async def next(self) -> bool:
        """Load the following page; no-op (False) when ``can_next()`` is False."""
        if not self.can_next():
            return False
        return await self.load(self._page + 1)

    async def prev(self) -> bool:
        return await self.load(max(1, self._page - 1))

    async def refresh(self) -> bool:
        return await self.load(self._page)

    async def set_page_size(self, page_size: int) -> bool:
        """Change the page size and restart from page 1."""
        if page_size < 1:
            raise ValueError(f"page_size must be >= 1; got {page_size}")
        self._page_size = page_size
        return await self.load(1)
