"""Date and time helpers shared by the calendar and export code."""

from datetime import date, datetime, timezone
from math import ceil
from typing import Union

from dateutil import parser as date_parser

DateLike = Union[str, date]


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime in UTC

    Example:
        >>> now = utc_now()
        >>> now.tzinfo
        datetime.timezone.utc
    """
    return datetime.now(timezone.utc)


def to_date(value: DateLike) -> date:
    """Coerce a ``YYYY-MM-DD`` string (or datetime) into a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date_parser.isoparse(value).date()


def calculate_nights(check_in: DateLike, check_out: DateLike) -> int:
    """
    Calculate the number of nights between check-in and check-out dates.

    Partial days round up.

    Example:
        >>> calculate_nights("2024-12-01", "2024-12-05")
        4
    """
    delta = to_date(check_out) - to_date(check_in)
    return ceil(delta.total_seconds() / 86400)


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO 8601 timestamp into an aware datetime (UTC if no offset given).
    """
    parsed = date_parser.isoparse(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_iso_z(value: datetime) -> str:
    """
    Render a datetime as a UTC ISO string with millisecond precision.

    Example:
        >>> to_iso_z(datetime(2025, 7, 16, 18, 31, 12, tzinfo=timezone.utc))
        '2025-07-16T18:31:12.000Z'
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc_value = value.astimezone(timezone.utc)
    return utc_value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc_value.microsecond // 1000:03d}Z"
