from __future__ import annotations

import math
import re
from datetime import date, timedelta

WEEK_KEY_PATTERN = re.compile(r"^(?P<year>\d{4})-W(?P<week>\d{2,})$")


def _as_date(value: str | date) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def sunday_weekday(value: date) -> int:
    """Weekday with Sunday=0 .. Saturday=6."""
    return (value.weekday() + 1) % 7


def week_number(value: str | date) -> int:
    """Week of the year counted from the week holding Jan 1.

    Weeks run Sunday to Saturday and week 1 is whichever week contains Jan 1,
    so this is not ISO-8601 numbering: there is no Thursday rule and early
    January never belongs to the previous year.
    """
    day = _as_date(value)
    jan1 = date(day.year, 1, 1)
    day_of_year = (day - jan1).days
    return math.ceil((day_of_year + sunday_weekday(jan1) + 1) / 7)


def week_key(value: str | date) -> str:
    day = _as_date(value)
    return f"{day.year:04d}-W{week_number(day):02d}"


def parse_week_key(key: str) -> tuple[int, int]:
    match = WEEK_KEY_PATTERN.match(key)
    if match is None:
        raise ValueError(f"Invalid week key: {key!r}")
    return int(match.group("year")), int(match.group("week"))


def week_start_for_key(key: str) -> str:
    """Resolve a week key to the Monday used as that bucket's date."""
    year, week = parse_week_key(key)
    reference = date(year, 1, 1) + timedelta(days=(week - 1) * 7)
    dow = sunday_weekday(reference)
    # Sunday (0) falls in the first branch and moves forward to the next day.
    if dow <= 4:
        monday = reference - timedelta(days=dow - 1)
    else:
        monday = reference + timedelta(days=8 - dow)
    return monday.isoformat()
