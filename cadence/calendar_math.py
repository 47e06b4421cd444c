"""Calendar arithmetic on dates.

Month and year shifts clamp to the last valid day of the target month
(Jan 31 + 1 month -> Feb 28/29, Feb 29 + 1 year -> Feb 28). dateutil's
relativedelta implements exactly that policy, so the helpers here are thin.
"""
import calendar
import logging
import zoneinfo
from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

from . import config

logger = logging.getLogger(__name__)


def add_days(d: date, n: int) -> date:
    return d + timedelta(days=n)


def add_weeks(d: date, n: int) -> date:
    return add_days(d, n * 7)


def add_months(d: date, n: int) -> date:
    """Shift the month field by n, carrying into the year and clamping the day."""
    return d + relativedelta(months=n)


def add_years(d: date, n: int) -> date:
    return d + relativedelta(years=n)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def with_month_day(d: date, day: int) -> date:
    """Replace the day-of-month, clamped to the length of d's month."""
    return d.replace(day=min(day, days_in_month(d.year, d.month)))


def sunday_weekday(d: date) -> int:
    """Weekday number with 0=Sunday .. 6=Saturday.

    Python's date.weekday() counts from Monday, the rule model counts from
    Sunday like the RRULE form it came from.
    """
    return (d.weekday() + 1) % 7


def start_of_week(d: date) -> date:
    """Return the Sunday on or before d."""
    return d - timedelta(days=sunday_weekday(d))


def today(tz_name: str | None = None) -> date:
    """Current calendar date in the named timezone (default from config).

    Unknown zone names fall back to the host's local date.
    """
    tz_name = tz_name or config.DEFAULT_TIMEZONE
    try:
        tz = zoneinfo.ZoneInfo(tz_name)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError):
        logger.warning('unknown timezone %s; using local date', tz_name)
        return date.today()
    return datetime.now(tz).date()
