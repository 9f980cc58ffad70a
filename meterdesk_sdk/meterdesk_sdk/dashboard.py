"""Dashboard snapshot: the signed-in user plus bucketed usage for a window."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

from meterdesk_sdk.errors import DomainError
from meterdesk_sdk.models import QuotaDataPoint, User
from meterdesk_sdk.parsers import QUOTA_DATA_FIELDS, parse_rows, parse_user
from meterdesk_sdk.timeseries import UsageSeries, aggregate, usage_window

if TYPE_CHECKING:
    from meterdesk_sdk.client import AsyncMeterdeskClient

USER_SELF_PATH = "/api/user/self"
DATA_SELF_PATH = "/api/data/self"


@dataclass(frozen=True)
class DashboardSnapshot:
    user: Optional[User]
    rows: Tuple[QuotaDataPoint, ...]
    series: UsageSeries
    window_start: int
    window_end: int
    error: Optional[str] = None


async def load_dashboard(
    client: "AsyncMeterdeskClient",
    range_days: int = 7,
    now: Optional[float] = None,
) -> DashboardSnapshot:
    """Fetch the user and usage rows concurrently and aggregate them.

    A declared envelope failure on either request raises ``DomainError``
    before anything is parsed. A bare non-2xx status is reported through
    ``snapshot.error`` alongside whatever could be parsed.
    """
    if range_days < 1:
        raise ValueError(f"range_days must be >= 1; got {range_days}")
    start, end = usage_window(range_days, now)
    user_res, data_res = await asyncio.gather(
        client.get(USER_SELF_PATH),
        client.get(DATA_SELF_PATH, query={"start_timestamp": start, "end_timestamp": end}),
    )

    for path, res in ((USER_SELF_PATH, user_res), (DATA_SELF_PATH, data_res)):
        declared = res.declared_error
        if declared is not None:
            raise DomainError(res.status, declared, res.body, endpoint=path)

    rows = tuple(parse_rows(data_res.body, QUOTA_DATA_FIELDS).items)
    error = None
    for res in (user_res, data_res):
        if not res.ok:
            error = f"HTTP {res.status}"
            break
    return DashboardSnapshot(
        user=parse_user(user_res.body),
        rows=rows,
        series=aggregate(rows, start, end),
        window_start=start,
        window_end=end,
        error=error,
    )
