"""Date parsing and date window utilities."""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional, Union

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from finance_aggregator.domain.errors import ParseError, malformed_field

DATE_FORMAT = "%Y-%m-%d"


def epoch_to_date(timestamp: Any, field: str = "date", record_id: Optional[str] = None) -> date:
    """Convert a UNIX epoch timestamp (seconds) to a date in UTC.

    Raises:
        ParseError: If the timestamp is not a number
    """
    if isinstance(timestamp, bool):
        raise ParseError(malformed_field(field, record_id, timestamp), field=field, record_id=record_id)
    try:
        seconds = float(timestamp)
        return datetime.fromtimestamp(seconds, tz=timezone.utc).date()
    except (TypeError, ValueError, OverflowError, OSError) as e:
        raise ParseError(
            malformed_field(field, record_id, timestamp), field=field, record_id=record_id
        ) from e


def parse_iso_date(value: Any, field: str = "date", record_id: Optional[str] = None) -> date:
    """Parse an ISO date or timestamp string into a UTC date.

    "2024-03-01" is taken as that calendar day. Timestamps carrying an offset
    are converted to UTC before the date is taken.

    Raises:
        ParseError: If the string is not an ISO date
    """
    if not isinstance(value, str) or not value.strip():
        raise ParseError(malformed_field(field, record_id, value), field=field, record_id=record_id)
    try:
        dt = date_parser.isoparse(value.strip())
    except (ValueError, OverflowError) as e:
        raise ParseError(malformed_field(field, record_id, value), field=field, record_id=record_id) from e
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.date()


def month_epoch_bounds(year: int, month: int) -> tuple[int, int]:
    """Return UTC epoch seconds bounding a calendar month.

    The start is inclusive and the end exclusive, matching the SimpleFIN
    protocol's start-date/end-date query parameters.

    Args:
        year: Calendar year
        month: Month (1-12)

    Returns:
        Tuple of (start_epoch, end_epoch)
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    end = start + relativedelta(months=1)
    return int(start.timestamp()), int(end.timestamp())


def calculate_date_range(months: int, end_date: Optional[Union[str, date]] = None) -> dict[str, str]:
    """Calculate the fetch window for a transaction sync.

    The end date defaults to today. The start date is ``months`` calendar
    months before the end date, clamped to the last day of the target month
    (2024-12-31 minus 6 months is 2024-06-30).

    Args:
        months: Number of months to go back
        end_date: End date as a date or ``YYYY-MM-DD`` string, or None for today

    Returns:
        Dict with ``start_date`` and ``end_date`` formatted ``YYYY-MM-DD``
    """
    if months < 0:
        raise ValueError(f"months must not be negative, got {months}")
    if end_date is None:
        end = date.today()
    elif isinstance(end_date, date):
        end = end_date
    else:
        try:
            end = datetime.strptime(end_date, DATE_FORMAT).date()
        except ValueError as e:
            raise ValueError(f"Could not parse end date '{end_date}': expected YYYY-MM-DD") from e

    start = end - relativedelta(months=months)
    return {"start_date": start.strftime(DATE_FORMAT), "end_date": end.strftime(DATE_FORMAT)}


def parse_date(date_str: str) -> date:
    """Parse a user-supplied date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and a few
    relative forms: "today", "yesterday", "this month", "last month",
    "this year", "last year".

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "this month": today.replace(day=1),
        "last month": (today - relativedelta(months=1)).replace(day=1),
        "this year": today.replace(month=1, day=1),
        "last year": today.replace(month=1, day=1) - relativedelta(years=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
