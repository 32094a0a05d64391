# -*- coding: utf-8 -*-
"""Calendar date parsing and formatting for ISO and day-first (DD.MM.YYYY) dates."""
from __future__ import annotations

import re
import typing as t
from datetime import date, datetime, timedelta

from loguru import logger


class FORMATS:
    ISO = "YYYY-MM-DD"
    DAY_FIRST = "DD.MM.YYYY"


_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_DAY_MONTH_RE = re.compile(r"^(\d{1,2})\.(\d{1,2})$")
_SHORT_YEAR_RE = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{2})$")
_LONG_YEAR_RE = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$")


def expand_two_digit_year(year: int) -> int:
    """Two-digit years below 50 are 2000s, the rest 1900s."""
    return 2000 + year if year < 50 else 1900 + year


def format_iso(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def format_day_first(value: date) -> str:
    return f"{value.day:02d}.{value.month:02d}.{value.year:04d}"


def parse_iso(text: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` string.

    :raises ValueError: If the text is not a valid ISO calendar date.
    """
    match = _ISO_RE.match((text or "").strip())
    if not match:
        raise ValueError(f"Not an ISO date: {text!r}")
    year, month, day = (int(part) for part in match.groups())
    return date(year, month, day)


def parse_day_first(text: str) -> date:
    """Parse ``D.M.YY``/``DD.MM.YYYY`` style strings.

    Day and month may have one or two digits. Two-digit years are expanded
    with :func:`expand_two_digit_year`.

    :raises ValueError: If the text is not a valid day-first calendar date.
    """
    cleaned = (text or "").strip()
    match = _LONG_YEAR_RE.match(cleaned)
    if match:
        day, month, year = (int(part) for part in match.groups())
        return date(year, month, day)
    match = _SHORT_YEAR_RE.match(cleaned)
    if match:
        day, month, year = (int(part) for part in match.groups())
        return date(expand_two_digit_year(year), month, day)
    raise ValueError(f"Not a day-first date: {text!r}")


def parse_date(value: t.Union[date, datetime, str]) -> date:
    """Coerce a date, datetime, ISO string or day-first string into a calendar date.

    Time-of-day is discarded so comparisons never depend on it.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if "T" in text:
            # ISO timestamps such as 2024-06-03T10:15:00Z
            text = text.split("T", 1)[0]
        if _ISO_RE.match(text):
            return parse_iso(text)
        return parse_day_first(text)
    raise ValueError(f"Unsupported date value: {value!r}")


def normalize_date(value: t.Any, today: t.Optional[date] = None) -> str:
    """Normalize a scraped date string to ISO form.

    Accepted inputs are ``DD.MM`` (current year), ``DD.MM.YY``,
    ``DD.MM.YYYY`` and ISO. Anything else, including impossible dates,
    becomes an empty string.
    """
    if not value or not isinstance(value, str):
        return ""

    text = value.strip()
    try:
        match = _DAY_MONTH_RE.match(text)
        if match:
            year = (today or date.today()).year
            day, month = (int(part) for part in match.groups())
            return format_iso(date(year, month, day))
        if _SHORT_YEAR_RE.match(text) or _LONG_YEAR_RE.match(text):
            return format_iso(parse_day_first(text))
        if _ISO_RE.match(text):
            return format_iso(parse_iso(text))
    except ValueError as e:
        logger.warning(f"Invalid date '{value}': {e}")
        return ""

    return ""


def convert_date_format(
        value: t.Union[date, str, None],
        from_format: str,
        to_format: str,
) -> t.Optional[str]:
    """Convert between the ISO and day-first formats.

    :param value: A date object (``from_format`` is then ignored) or a string.
    :param from_format: One of the :class:`FORMATS` values.
    :param to_format: One of the :class:`FORMATS` values.
    :return: The converted string, or None if the input or formats are invalid.
    """
    if not value:
        return None

    if isinstance(value, date):
        parsed = value.date() if isinstance(value, datetime) else value
    else:
        try:
            if from_format == FORMATS.DAY_FIRST:
                parsed = parse_day_first(value)
            elif from_format == FORMATS.ISO:
                parsed = parse_iso(value)
            else:
                return None
        except ValueError:
            logger.warning(f"Could not convert {value!r} from {from_format} to {to_format}")
            return None

    if to_format == FORMATS.DAY_FIRST:
        return format_day_first(parsed)
    if to_format == FORMATS.ISO:
        return format_iso(parsed)
    return None


def today_iso(today: t.Optional[date] = None) -> str:
    return format_iso(today or date.today())


def days_ago_iso(days: int, today: t.Optional[date] = None) -> str:
    return format_iso((today or date.today()) - timedelta(days=days))
