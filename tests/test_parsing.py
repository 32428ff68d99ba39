from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from demand_pacing.utils.parsing import (
    parse_day,
    parse_float,
    parse_int,
    parse_timestamp,
    slugify_city,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("125.40", 125.4), (" 80 ", 80.0), (42, 42.0), ("n/a", None), ("", None),
     (None, None), (True, None), (float("nan"), None), ("inf", None)],
)
def test_parse_float(raw, expected) -> None:
    assert parse_float(raw) == expected


def test_parse_int_truncates() -> None:
    assert parse_int("812.9") == 812
    assert parse_int("many") is None


def test_parse_day_uses_utc_calendar_day() -> None:
    assert parse_day("2025-03-10T23:30:00-05:00") == date(2025, 3, 11)
    assert parse_day(datetime(2025, 3, 10, 6, tzinfo=timezone.utc)) == date(2025, 3, 10)
    assert parse_day(date(2025, 3, 10)) == date(2025, 3, 10)
    assert parse_day("not a date") is None


def test_parse_timestamp_reads_naive_values_as_utc() -> None:
    stamp = parse_timestamp("2025-03-10 06:00:00")
    assert stamp is not None
    assert stamp.tzinfo is not None
    assert stamp.hour == 6


def test_slugify_city() -> None:
    assert slugify_city("  Las Vegas ") == "las-vegas"
    assert slugify_city(None) == ""
