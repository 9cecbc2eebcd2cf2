"""Album date rules: folder name parsing and calendar comparisons.

Everything here is pure; nothing performs I/O.
"""

import re
from datetime import date, datetime
from typing import Optional, Union

from albumaudit.core.models import AlbumNameParse, CalendarDate
from albumaudit.utils.constants import (
    ALBUM_DATE_FORMAT,
    MAX_ALBUM_YEAR,
    MIN_ALBUM_YEAR,
)

# Exactly eight digits at the start of the name
ALBUM_DATE_PATTERN = re.compile(r"^([0-9]{8})(?![0-9])")

DateLike = Union[date, datetime]


def parse_album_name(name: str) -> AlbumNameParse:
    """
    Parse an album folder name into its date.

    The name must start with exactly 8 ASCII digits (YYYYMMDD) forming a real
    calendar date with a year between 1900 and 2100. Anything after the
    prefix is free-form label text and is ignored.

    Args:
        name: Album folder name

    Returns:
        AlbumNameParse. The raw prefix is reported even when the digits do
        not form a valid date.
    """
    match = ALBUM_DATE_PATTERN.match(name)
    if not match:
        return AlbumNameParse()

    raw = match.group(1)
    year = int(raw[0:4])
    month = int(raw[4:6])
    day = int(raw[6:8])

    if (
        year < MIN_ALBUM_YEAR or year > MAX_ALBUM_YEAR
        or month < 1 or month > 12
        or day < 1 or day > 31
    ):
        return AlbumNameParse(raw_date_prefix=raw)

    try:
        parsed = date(year, month, day)
    except ValueError:
        # e.g. 20230231
        return AlbumNameParse(raw_date_prefix=raw)

    return AlbumNameParse(date=parsed, raw_date_prefix=raw, is_valid=True)


def to_calendar_date(value: DateLike) -> CalendarDate:
    """Project a date or datetime onto its calendar date."""
    if isinstance(value, datetime):
        return value.date()
    return value


def calendar_dates_equal(a: Optional[DateLike], b: Optional[DateLike]) -> bool:
    """Date-only equality; False when either side is missing."""
    if a is None or b is None:
        return False
    return to_calendar_date(a) == to_calendar_date(b)


def day_gap(a: DateLike, b: DateLike) -> int:
    """
    Signed difference in whole days (a - b), ignoring time of day.

    A photo taken at 23:59 and an album dated the next day are one day
    apart, not zero.
    """
    return (to_calendar_date(a) - to_calendar_date(b)).days


def format_album_date(value: DateLike) -> str:
    """Format a date as an album name prefix (YYYYMMDD)."""
    return to_calendar_date(value).strftime(ALBUM_DATE_FORMAT)


def replace_date_prefix(name: str, new_date: DateLike) -> str:
    """
    Rewrite only the date prefix of an album name.

    The label after the prefix is preserved verbatim. Names without an
    8-digit prefix get one prepended, separated by a space.

    Example:
        "20200615 Trip" -> "20200620 Trip"
    """
    prefix = format_album_date(new_date)
    match = ALBUM_DATE_PATTERN.match(name)
    if match:
        return prefix + name[match.end():]
    if not name:
        return prefix
    return f"{prefix} {name}"
