"""Tests for date parsing, normalization and format conversion."""
from datetime import date, datetime

import pytest

from quest_planner.dates import (
    FORMATS,
    convert_date_format,
    days_ago_iso,
    expand_two_digit_year,
    normalize_date,
    parse_date,
    parse_day_first,
    today_iso,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("05.1.24", "2024-01-05"),
        ("5.1.2024", "2024-01-05"),
        ("31.12.2024", "2024-12-31"),
        ("29.02.2024", "2024-02-29"),
        ("2024-06-03", "2024-06-03"),
        ("  03.06.2024 ", "2024-06-03"),
    ],
)
def test_normalize_date(raw: str, expected: str) -> None:
    assert normalize_date(raw) == expected


def test_normalize_day_month_uses_current_year() -> None:
    assert normalize_date("5.6", today=date(2024, 1, 1)) == "2024-06-05"


@pytest.mark.parametrize("raw", ["31.02.2024", "2023-02-29", "garbage", "", None, 20240603, "2024/06/03"])
def test_normalize_invalid_is_empty(raw) -> None:
    assert normalize_date(raw) == ""


def test_two_digit_year_pivot() -> None:
    assert expand_two_digit_year(49) == 2049
    assert expand_two_digit_year(50) == 1950
    assert parse_day_first("1.1.99") == date(1999, 1, 1)


@pytest.mark.parametrize(
    "iso, day_first",
    [("2024-02-29", "29.02.2024"), ("2024-12-31", "31.12.2024"), ("2025-01-01", "01.01.2025")],
)
def test_convert_both_directions(iso: str, day_first: str) -> None:
    assert convert_date_format(iso, FORMATS.ISO, FORMATS.DAY_FIRST) == day_first
    assert convert_date_format(day_first, FORMATS.DAY_FIRST, FORMATS.ISO) == iso


def test_convert_date_object_ignores_source_format() -> None:
    assert convert_date_format(date(2024, 6, 3), FORMATS.DAY_FIRST, FORMATS.DAY_FIRST) == "03.06.2024"


@pytest.mark.parametrize(
    "value, from_format, to_format",
    [
        ("", FORMATS.ISO, FORMATS.DAY_FIRST),
        (None, FORMATS.ISO, FORMATS.DAY_FIRST),
        ("2024-13-01", FORMATS.ISO, FORMATS.DAY_FIRST),
        ("32.01.2024", FORMATS.DAY_FIRST, FORMATS.ISO),
        ("2024-06-03", "MM/DD/YYYY", FORMATS.ISO),
        ("2024-06-03", FORMATS.ISO, "MM/DD/YYYY"),
    ],
)
def test_convert_invalid_returns_none(value, from_format: str, to_format: str) -> None:
    assert convert_date_format(value, from_format, to_format) is None


def test_parse_date_discards_time() -> None:
    assert parse_date("2024-06-03T23:59:00Z") == date(2024, 6, 3)
    assert parse_date(datetime(2024, 6, 3, 12, 0)) == date(2024, 6, 3)

    with pytest.raises(ValueError):
        parse_date(12345)


def test_relative_helpers() -> None:
    assert today_iso(date(2024, 6, 3)) == "2024-06-03"
    assert days_ago_iso(14, today=date(2024, 1, 10)) == "2023-12-27"
