"""Clock helpers.

Timestamps are stored as naive UTC. The daily ledger is partitioned by the
server-local calendar date (or ``APP_TIMEZONE`` when configured).
"""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from checkin.config import settings
from checkin.utils.constants import RECORD_DATE_FORMAT


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (matches DateTime columns)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def server_now() -> datetime:
    """Current wall-clock time in the server's ledger timezone."""
    if settings.app_timezone:
        return datetime.now(ZoneInfo(settings.app_timezone))
    return datetime.now()


def server_today() -> date:
    """The calendar date that partitions daily records."""
    return server_now().date()


def format_record_date(value: date) -> str:
    return value.strftime(RECORD_DATE_FORMAT)


def parse_record_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD string.

    Raises:
        ValueError: If the string is not a valid calendar date
    """
    parsed = datetime.strptime(value, RECORD_DATE_FORMAT).date()
    if format_record_date(parsed) != value:
        raise ValueError(f"Not a canonical date: {value}")
    return parsed


def window_start(today: date, window_days: int) -> date:
    """First date (inclusive) of a trailing window ending on ``today``."""
    return today - timedelta(days=window_days)


def parse_cutoff(value: str) -> time:
    """Parse an HH:MM cutoff time."""
    return datetime.strptime(value, "%H:%M").time()
