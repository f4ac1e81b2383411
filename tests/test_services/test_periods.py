"""Tests for reporting period shorthands and date buckets."""

from datetime import datetime, timedelta

import pytest

from stayhub.services.periods import bucket, normalize_period, resolve_period

NOW = datetime(2026, 6, 15, 13, 45)


class TestResolvePeriod:
    @pytest.mark.parametrize(("period", "days"), [("7d", 7), ("30d", 30), ("90d", 90)])
    def test_day_periods(self, period: str, days: int):
        start, end = resolve_period(period, now=NOW)
        assert end == NOW
        assert end - start == timedelta(days=days)

    def test_one_year(self):
        start, _ = resolve_period("1y", now=NOW)
        assert start == datetime(2025, 6, 15, 13, 45)

    def test_one_year_from_leap_day(self):
        start, _ = resolve_period("1y", now=datetime(2028, 2, 29))
        assert start == datetime(2027, 2, 28)

    @pytest.mark.parametrize("period", [None, "", "2w", "forever"])
    def test_unknown_falls_back_to_30_days(self, period):
        start, end = resolve_period(period, now=NOW)
        assert end - start == timedelta(days=30)

    def test_normalize(self):
        assert normalize_period("7d") == "7d"
        assert normalize_period("bogus") == "30d"
        assert normalize_period(None) == "30d"


class TestBucket:
    @pytest.mark.parametrize(
        ("group_by", "label"),
        [
            ("hour", "2026-06-15 13:00"),
            ("day", "2026-06-15"),
            ("month", "2026-06"),
            ("week", NOW.strftime("%Y-W%U")),
            ("fortnight", "2026-06-15"),
        ],
    )
    def test_labels(self, group_by: str, label: str):
        assert bucket(NOW, group_by) == label
