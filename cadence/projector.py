"""Project the occurrence dates of a rule from a start date.

occurrences() is a plain generator: nothing is computed until the caller
pulls, every call starts again from the start date, and a rule runs until the
consumer stops or the calendar ends at date.max. The first occurrence is always the
start date itself, whatever the rule, which is what the "Next 5 occurrences"
preview shows.

Each step is computed from the start date rather than from the previous
occurrence, so month-end clamping never drifts (Jan 31 -> Feb 29 -> Mar 31).
"""
import itertools
import logging
from datetime import date
from typing import Iterator

from . import config
from .calendar_math import (
    add_days,
    add_months,
    add_weeks,
    add_years,
    start_of_week,
    sunday_weekday,
    today,
    with_month_day,
)
from .models import Frequency, Rule

logger = logging.getLogger(__name__)

_STEP = {
    Frequency.DAILY: add_days,
    Frequency.WEEKLY: add_weeks,
    Frequency.MONTHLY: add_months,
    Frequency.YEARLY: add_years,
}


# Steps past date.max raise OverflowError (timedelta) or ValueError (year
# out of range); the sequence ends at the last representable date instead.
_OUT_OF_RANGE = (OverflowError, ValueError)


def _stepped(rule: Rule, start: date) -> Iterator[date]:
    step = _STEP[rule.frequency]
    for i in itertools.count():
        try:
            d = step(start, i * rule.interval)
        except _OUT_OF_RANGE:
            return
        yield d


def _weekly_by_day(rule: Rule, start: date) -> Iterator[date]:
    yield start
    days = rule.sorted_weekdays
    week0 = start_of_week(start)
    for k in itertools.count():
        for wd in days:
            try:
                d = add_days(add_weeks(week0, k * rule.interval), wd)
            except _OUT_OF_RANGE:
                return
            if d > start:
                yield d


def _monthly_by_day(rule: Rule, start: date) -> Iterator[date]:
    yield start
    first = start.replace(day=1)
    for i in itertools.count(1):
        try:
            d = with_month_day(add_months(first, i * rule.interval), rule.month_day)
        except _OUT_OF_RANGE:
            return
        yield d


def occurrences(rule: Rule, start: date) -> Iterator[date]:
    """Yield the occurrence dates of rule starting at start.

    The sequence is non-decreasing and unbounded until the calendar runs
    out: it stops at the last step that fits before date.max. A datetime
    start yields datetimes with its time of day kept.
    """
    if rule.frequency is Frequency.WEEKLY and rule.weekdays:
        if rule.weekdays == {sunday_weekday(start)}:
            # only the start's own weekday: same as plain weekly stepping
            return _stepped(rule, start)
        return _weekly_by_day(rule, start)
    if rule.frequency is Frequency.MONTHLY and rule.month_day is not None:
        return _monthly_by_day(rule, start)
    return _stepped(rule, start)


def _check_count(count: int):
    if count < 0:
        raise ValueError(f'count must be >= 0 (got {count})')


def first_occurrences(rule: Rule, start: date, count: int) -> list[date]:
    _check_count(count)
    return list(itertools.islice(occurrences(rule, start), count))


def occurrences_until(rule: Rule, start: date, until: date, inclusive: bool = True) -> Iterator[date]:
    """Yield occurrences up to the bound date (inclusive by default)."""
    if inclusive:
        return itertools.takewhile(lambda d: d <= until, occurrences(rule, start))
    return itertools.takewhile(lambda d: d < until, occurrences(rule, start))


def occurrences_between(rule: Rule, start: date, window_start: date, window_end: date,
                        limit: int | None = None) -> list[date]:
    """Return occurrences inside [window_start, window_end].

    At most `limit` dates are returned; with no limit the cap is
    config.MAX_OCCURRENCES_PER_WINDOW.
    """
    if window_start > window_end:
        raise ValueError(f'window_start {window_start} is after window_end {window_end}')
    cap = config.MAX_OCCURRENCES_PER_WINDOW if limit is None else limit
    inside = itertools.dropwhile(lambda d: d < window_start, occurrences_until(rule, start, window_end))
    out = list(itertools.islice(inside, cap + 1))
    if len(out) > cap:
        if limit is None:
            logger.warning('occurrences_between truncated to %s dates for window %s..%s', cap, window_start, window_end)
        out = out[:cap]
    return out


def next_occurrence(rule: Rule, start: date, after: date) -> date | None:
    """Return the first occurrence strictly after `after`.

    None when the sequence ends at date.max before passing `after`.
    """
    return next((d for d in occurrences(rule, start) if d > after), None)


def preview(rule: Rule, start: date | None = None, count: int | None = None,
            end_date: date | None = None) -> list[date]:
    """Dates for the "Next N occurrences" preview of a recurring template.

    start defaults to today in the configured timezone, count to
    config.PREVIEW_COUNT. Dates after end_date are left out. A negative
    count raises ValueError, as in first_occurrences().
    """
    if start is None:
        start = today()
    if count is None:
        count = config.PREVIEW_COUNT
    _check_count(count)
    seq = occurrences(rule, start) if end_date is None else occurrences_until(rule, start, end_date)
    return list(itertools.islice(seq, count))
