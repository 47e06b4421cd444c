"""Recurrence rule model.

A Rule is the validated, immutable form of a repeating schedule: a
frequency, an interval counted in that frequency's units, and the optional
weekday set (weekly rules) or day-of-month (monthly rules). Fields that do
not apply to the rule's frequency are validated and then dropped so that two
rules meaning the same schedule compare equal.
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from .errors import InvalidRuleError

logger = logging.getLogger(__name__)


class Frequency(str, enum.Enum):
    DAILY = 'daily'
    WEEKLY = 'weekly'
    MONTHLY = 'monthly'
    YEARLY = 'yearly'

    @property
    def code(self) -> str:
        """RRULE token, e.g. 'WEEKLY'."""
        return self.name

    @classmethod
    def coerce(cls, value) -> 'Frequency':
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if member.value == key:
                    return member
        raise InvalidRuleError('frequency', f'must be one of daily, weekly, monthly, yearly (got {value!r})')


# 0=Sunday .. 6=Saturday
WEEKDAY_NAMES = ('Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday')


@dataclass(frozen=True)
class Rule:
    frequency: Frequency
    interval: int = 1
    weekdays: frozenset = field(default_factory=frozenset)
    month_day: int | None = None

    def __post_init__(self):
        freq = Frequency.coerce(self.frequency)
        interval = self.interval
        if isinstance(interval, bool) or not isinstance(interval, int):
            raise InvalidRuleError('interval', f'must be an integer (got {interval!r})')
        if interval < 1:
            raise InvalidRuleError('interval', f'must be >= 1 (got {interval})')

        weekdays = self.weekdays
        if weekdays is None:
            weekdays = ()
        if isinstance(weekdays, (str, bytes)):
            raise InvalidRuleError('weekdays', 'must be a collection of integers 0-6')
        days = set()
        for wd in weekdays:
            if isinstance(wd, bool) or not isinstance(wd, int) or not 0 <= wd <= 6:
                raise InvalidRuleError('weekdays', f'values must be integers 0-6 (got {wd!r})')
            days.add(wd)

        month_day = self.month_day
        if month_day is not None:
            if isinstance(month_day, bool) or not isinstance(month_day, int):
                raise InvalidRuleError('monthDay', f'must be an integer (got {month_day!r})')
            if not 1 <= month_day <= 31:
                raise InvalidRuleError('monthDay', f'must be between 1 and 31 (got {month_day})')

        # weekdays only mean something for weekly rules, month_day for monthly
        if freq is not Frequency.WEEKLY:
            days = set()
        if freq is not Frequency.MONTHLY:
            month_day = None

        object.__setattr__(self, 'frequency', freq)
        object.__setattr__(self, 'weekdays', frozenset(days))
        object.__setattr__(self, 'month_day', month_day)

    def replace(self, **changes) -> 'Rule':
        """Return a new rule with the given fields changed."""
        values = {
            'frequency': self.frequency,
            'interval': self.interval,
            'weekdays': self.weekdays,
            'month_day': self.month_day,
        }
        values.update(changes)
        return Rule(**values)

    @property
    def sorted_weekdays(self) -> list[int]:
        return sorted(self.weekdays)


# Accepted spellings for form fields. The camelCase names are what the
# recurring-task form posts.
_FIELD_ALIASES = {
    'frequency': ('frequency', 'type', 'freq'),
    'interval': ('interval',),
    'weekdays': ('weekdays', 'daysOfWeek', 'days_of_week'),
    'month_day': ('month_day', 'monthDay', 'dayOfMonth', 'day_of_month'),
}

_ERROR_FIELD = {'frequency': 'frequency', 'interval': 'interval', 'weekdays': 'weekdays', 'month_day': 'monthDay'}


def _pick(fields: Mapping[str, Any], name: str):
    for key in _FIELD_ALIASES[name]:
        if key in fields and fields[key] is not None:
            return fields[key]
    return None


def _coerce_int(value, name: str) -> int:
    if isinstance(value, bool):
        raise InvalidRuleError(_ERROR_FIELD[name], f'must be an integer (got {value!r})')
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        s = value.strip()
        try:
            return int(s)
        except ValueError:
            pass
    raise InvalidRuleError(_ERROR_FIELD[name], f'must be an integer (got {value!r})')


def _coerce_weekdays(value) -> list[int]:
    if isinstance(value, (str, bytes)):
        # tolerate a comma-joined string like "1,3"
        value = [v for v in str(value).split(',') if v.strip()]
    if not isinstance(value, Iterable):
        raise InvalidRuleError('weekdays', f'must be a collection of integers 0-6 (got {value!r})')
    return [_coerce_int(v, 'weekdays') for v in value]


def validate_and_build_rule(fields: Mapping[str, Any]) -> Rule:
    """Build a Rule from a form-like mapping of fields.

    Integer-like strings are accepted for numeric fields since HTML inputs
    post them that way. Raises InvalidRuleError naming the offending field.
    """
    freq = _pick(fields, 'frequency')
    if freq is None:
        raise InvalidRuleError('frequency', 'is required')
    kwargs: dict[str, Any] = {'frequency': Frequency.coerce(freq)}

    interval = _pick(fields, 'interval')
    if interval is not None:
        kwargs['interval'] = _coerce_int(interval, 'interval')

    weekdays = _pick(fields, 'weekdays')
    if weekdays is not None:
        kwargs['weekdays'] = _coerce_weekdays(weekdays)

    month_day = _pick(fields, 'month_day')
    if month_day is not None:
        kwargs['month_day'] = _coerce_int(month_day, 'month_day')

    try:
        return Rule(**kwargs)
    except InvalidRuleError as e:
        logger.debug('validate_and_build_rule rejected fields=%r field=%s reason=%s', dict(fields), e.field, e.constraint)
        raise
