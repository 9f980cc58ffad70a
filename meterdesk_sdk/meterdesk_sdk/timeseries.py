"""Fixed-width time bucketing of usage rows for rate metrics and sparklines.

Bucket width is one hour, or one day when the window spans more than 72
hours. Buckets are aligned to multiples of the width (epoch seconds), so
the bucket holding ``window_end`` is always the last one. Only the most
recent ``SPARKLINE_BUCKETS`` buckets are returned; totals and averages come
from the full row set.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from meterdesk_sdk.models import QuotaDataPoint

HOUR = 3600
DAY = 24 * HOUR
DAILY_BUCKETS_ABOVE = 72 * HOUR
SPARKLINE_BUCKETS = 24
UNKNOWN_MODEL = "unknown"


@dataclass(frozen=True)
class Bucket:
    start_timestamp: int
    quota_sum: float = 0
    token_sum: float = 0
    count_sum: float = 0


@dataclass(frozen=True)
class RateSeries:
    """Per-minute rates: ``rpm`` from counts, ``tpm`` from tokens."""

    rpm: Tuple[float, ...]
    tpm: Tuple[float, ...]
    avg_rpm: float
    avg_tpm: float


@dataclass(frozen=True)
class UsageTotals:
    quota: float = 0
    tokens: float = 0
    count: float = 0


@dataclass(frozen=True)
class ModelUsage:
    model: str
    quota: float = 0
    tokens: float = 0
    count: float = 0


@dataclass(frozen=True)
class UsageSeries:
    buckets: Tuple[Bucket, ...]
    rates: RateSeries
    bucket_width: int
    bucket_count: int
    totals: UsageTotals = field(default_factory=UsageTotals)
    models: Tuple[ModelUsage, ...] = ()

    @property
    def quota_tail(self) -> List[float]:
        return [b.quota_sum for b in self.buckets]

    @property
    def token_tail(self) -> List[float]:
        return [b.token_sum for b in self.buckets]

    @property
    def count_tail(self) -> List[float]:
        return [b.count_sum for b in self.buckets]


def bucket_width_for(window_seconds: int) -> int:
    if window_seconds > DAILY_BUCKETS_ABOVE:
        return DAY
    return HOUR


def usage_window(range_days: int, now: Optional[float] = None) -> Tuple[int, int]:
    """Dashboard window ending one hour past ``now`` (epoch seconds, floored)."""
    if now is None:
        now = time.time()
    end = math.floor(now) + HOUR
    return end - range_days * DAY, end


def summarize(rows: Iterable[QuotaDataPoint]) -> Tuple[UsageTotals, Tuple[ModelUsage, ...]]:
    """Totals over all rows plus per-model sums, largest quota first."""
    quota = tokens = count = 0
    per_model: Dict[str, List[float]] = {}
    for row in rows:
        q = row.quota or 0
        t = row.token_used or 0
        c = row.count or 0
        quota += q
        tokens += t
        count += c
        sums = per_model.setdefault(row.model_name or UNKNOWN_MODEL, [0, 0, 0])
        sums[0] += q
        sums[1] += t
        sums[2] += c
    models = sorted(
        (ModelUsage(model=name, quota=s[0], tokens=s[1], count=s[2]) for name, s in per_model.items()),
        key=lambda m: m.quota,
        reverse=True,
    )
    return UsageTotals(quota=quota, tokens=tokens, count=count), tuple(models)


def aggregate(
    rows: Iterable[QuotaDataPoint],
    window_start: float,
    window_end: float,
) -> UsageSeries:
    """Bucket ``rows`` over ``[window_start, window_end]`` and derive rates.

    Fractional bounds (``time.time()``) are floored to whole seconds.

    Rows without ``created_at`` are skipped for bucketing; rows falling
    outside the aligned window are dropped from the buckets but still count
    toward totals.
    """
    rows = list(rows)
    window_start = math.floor(window_start)
    window_end = math.floor(window_end)
    window_seconds = window_end - window_start
    width = bucket_width_for(window_seconds)
    aligned_start = window_start - window_start % width
    aligned_end = window_end - window_end % width
    count = max(1, (aligned_end - aligned_start) // width + 1)

    quota = [0] * count
    tokens = [0] * count
    times = [0] * count
    for row in rows:
        if row.created_at is None:
            continue
        index = (math.floor(row.created_at) - aligned_start) // width
        if index < 0 or index >= count:
            continue
        quota[index] += row.quota or 0
        tokens[index] += row.token_used or 0
        times[index] += row.count or 0

    take = min(SPARKLINE_BUCKETS, count)
    first = count - take
    buckets = tuple(
        Bucket(
            start_timestamp=aligned_start + i * width,
            quota_sum=quota[i],
            token_sum=tokens[i],
            count_sum=times[i],
        )
        for i in range(first, count)
    )

    totals, models = summarize(rows)
    minutes = max(1, window_seconds // 60)
    per_minute = width / 60
    rates = RateSeries(
        rpm=tuple(b.count_sum / per_minute for b in buckets),
        tpm=tuple(b.token_sum / per_minute for b in buckets),
        avg_rpm=totals.count / minutes,
        avg_tpm=totals.tokens / minutes,
    )
    return UsageSeries(
        buckets=buckets,
        rates=rates,
        bucket_width=width,
        bucket_count=count,
        totals=totals,
        models=models,
    )
