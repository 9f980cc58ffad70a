"""Tests for usage bucketing and rate derivation."""

from __future__ import annotations

import pytest

from meterdesk_sdk.models import QuotaDataPoint
from meterdesk_sdk.timeseries import (
    DAY,
    HOUR,
    SPARKLINE_BUCKETS,
    aggregate,
    bucket_width_for,
    usage_window,
)


def point(ts, quota=0, tokens=0, count=0, model=None) -> QuotaDataPoint:
    return QuotaDataPoint(created_at=ts, quota=quota, token_used=tokens, count=count, model_name=model)


class TestBucketWidth:
    def test_two_tier_policy(self) -> None:
        assert bucket_width_for(72 * HOUR) == HOUR
        assert bucket_width_for(72 * HOUR + 1) == DAY
        assert bucket_width_for(0) == HOUR


class TestBucketing:
    def test_hour_boundaries(self) -> None:
        """3599 -> bucket 0, 3600 -> bucket 1, window end -> last bucket."""
        end = 10 * HOUR
        series = aggregate([point(3599, count=1), point(3600, count=2), point(end, count=4)], 0, end)
        assert series.bucket_width == HOUR
        assert series.bucket_count == 11
        counts = series.count_tail
        assert counts[0] == 1
        assert counts[1] == 2
        assert counts[-1] == 4
        assert sum(counts) == 7

    def test_alignment(self) -> None:
        series = aggregate([point(7300, quota=5)], 3700, 3700 + 2 * HOUR)
        assert series.buckets[0].start_timestamp == 3600
        assert series.bucket_count == 3
        assert series.quota_tail == [0, 5, 0]

    def test_out_of_window_rows_dropped_but_counted_in_totals(self) -> None:
        rows = [point(-10 * HOUR, count=3, tokens=30), point(HOUR, count=1, tokens=10), point(99 * HOUR, count=5)]
        series = aggregate(rows, 0, 2 * HOUR)
        assert sum(series.count_tail) == 1
        assert series.totals.count == 9
        assert series.totals.tokens == 40

    def test_rows_without_timestamp_skipped(self) -> None:
        series = aggregate([QuotaDataPoint(count=2)], 0, HOUR)
        assert series.count_tail == [0, 0]
        assert series.totals.count == 2

    def test_minimum_one_bucket(self) -> None:
        series = aggregate([point(100, count=1)], 100, 100)
        assert series.bucket_count == 1
        assert series.count_tail == [1]

    def test_float_bounds_are_floored(self) -> None:
        series = aggregate([point(3600, count=1)], 0.0, 36000.5)
        assert series.bucket_count == 11
        assert series.buckets[0].start_timestamp == 0
        assert series.count_tail[1] == 1
        assert series.rates.avg_rpm == pytest.approx(1 / 600)

    def test_daily_buckets_for_long_windows(self) -> None:
        series = aggregate([point(DAY + 5, quota=2), point(2 * DAY, quota=3)], 0, 7 * DAY)
        assert series.bucket_width == DAY
        assert series.bucket_count == 8
        assert series.quota_tail[1] == 2
        assert series.quota_tail[2] == 3


class TestTruncation:
    def test_only_latest_buckets_surface(self) -> None:
        end = 47 * HOUR
        rows = [point(0, count=100), point(end, count=1)]
        series = aggregate(rows, 0, end)
        assert series.bucket_count == 48
        assert len(series.buckets) == SPARKLINE_BUCKETS
        assert series.buckets[0].start_timestamp == 24 * HOUR
        assert series.count_tail[-1] == 1
        assert 100 not in series.count_tail
        assert series.totals.count == 101


class TestRates:
    def test_per_minute_series(self) -> None:
        series = aggregate([point(0, count=120, tokens=600)], 0, HOUR)
        assert series.rates.rpm[0] == pytest.approx(2.0)
        assert series.rates.tpm[0] == pytest.approx(10.0)
        assert len(series.rates.rpm) == len(series.buckets)

    def test_daily_rate_divisor(self) -> None:
        series = aggregate([point(0, count=1440)], 0, 4 * DAY)
        assert series.rates.rpm[0] == pytest.approx(1.0)

    def test_averages_use_window_minutes(self) -> None:
        series = aggregate([point(0, count=30, tokens=300), point(HOUR * 5, count=30)], 0, HOUR)
        assert series.rates.avg_rpm == pytest.approx(1.0)
        assert series.rates.avg_tpm == pytest.approx(5.0)

    def test_zero_length_window_average(self) -> None:
        series = aggregate([point(10, count=3)], 10, 10)
        assert series.rates.avg_rpm == 3


class TestModelsAndWindow:
    def test_models_sorted_by_quota(self) -> None:
        rows = [point(0, quota=1, model="a"), point(0, quota=5, model="b"), point(0, quota=2), point(0, quota=2, model="a")]
        series = aggregate(rows, 0, HOUR)
        assert [(m.model, m.quota) for m in series.models] == [("b", 5), ("a", 3), ("unknown", 2)]

    def test_usage_window(self) -> None:
        start, end = usage_window(7, now=1_000_000)
        assert end == 1_000_000 + HOUR
        assert end - start == 7 * DAY

    def test_usage_window_floors_fractional_now(self) -> None:
        start, end = usage_window(1, now=1_000_000.75)
        assert (start, end) == (1_000_000 + HOUR - DAY, 1_000_000 + HOUR)
        assert isinstance(end, int)
