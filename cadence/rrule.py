"""Convert rules to and from RRULE text.

Only the subset the recurring-task form persists is supported:

    FREQ=<DAILY|WEEKLY|MONTHLY|YEARLY>[;INTERVAL=n][;BYDAY=SU,MO,..][;BYMONTHDAY=1-31]

Output field order is always FREQ, INTERVAL, BYDAY, BYMONTHDAY, INTERVAL=1 is
never written and BYDAY codes are written in weekday order starting Sunday.
"""
import logging
import re
from datetime import date

from . import config
from .errors import InvalidRuleError, MalformedRuleError
from .models import Frequency, Rule

logger = logging.getLogger(__name__)

# index == weekday number (0=Sunday)
WEEKDAY_CODES = ('SU', 'MO', 'TU', 'WE', 'TH', 'FR', 'SA')
CODE_TO_WEEKDAY = {code: i for i, code in enumerate(WEEKDAY_CODES)}

FREQ_CODES = {f.code: f for f in Frequency}
KNOWN_KEYS = ('FREQ', 'INTERVAL', 'BYDAY', 'BYMONTHDAY')

_INT_RE = re.compile(r'[+-]?\d+')


def serialize(rule: Rule) -> str:
    """Export a rule to its RRULE body (no leading 'RRULE:')."""
    parts: list[str] = [f'FREQ={rule.frequency.code}']
    if rule.interval > 1:
        parts.append(f'INTERVAL={rule.interval}')
    if rule.frequency is Frequency.WEEKLY and rule.weekdays:
        parts.append('BYDAY=' + ','.join(WEEKDAY_CODES[d] for d in rule.sorted_weekdays))
    if rule.frequency is Frequency.MONTHLY and rule.month_day is not None:
        parts.append(f'BYMONTHDAY={rule.month_day}')
    return ';'.join(parts)


def _fail(text, reason: str):
    logger.debug('parse rejected text=%r reason=%s', text, reason)
    raise MalformedRuleError(text, reason)


def _split_segments(text: str) -> dict[str, str]:
    body = text.strip()
    if body.upper().startswith('RRULE:'):
        body = body[len('RRULE:'):]
    segments = body.split(';')
    # tolerate a single trailing separator, e.g. 'FREQ=DAILY;'
    if len(segments) > 1 and not segments[-1].strip():
        segments.pop()
    values: dict[str, str] = {}
    for seg in segments:
        if '=' not in seg:
            _fail(text, f'segment {seg!r} is not KEY=VALUE')
        key, _, value = seg.partition('=')
        key = key.strip().upper()
        value = value.strip().upper()
        if not key or not value:
            _fail(text, f'segment {seg!r} is not KEY=VALUE')
        if key in values:
            _fail(text, f'{key} given more than once')
        if key not in KNOWN_KEYS:
            if config.STRICT_PARSE:
                _fail(text, f'unsupported key {key}')
            logger.info('parse ignoring unsupported key %s in %r', key, text)
            continue
        values[key] = value
    return values


def _parse_int(text, key: str, value: str) -> int:
    if not _INT_RE.fullmatch(value):
        _fail(text, f'{key} must be numeric (got {value!r})')
    return int(value)


def parse(text: str) -> Rule:
    """Parse an RRULE body into a Rule.

    Raises MalformedRuleError when the text does not match the grammar or
    names values outside the rule model's ranges.
    """
    if not isinstance(text, str) or not text.strip():
        _fail(text, 'empty rule')
    values = _split_segments(text)

    freq_token = values.get('FREQ')
    if freq_token is None:
        _fail(text, 'FREQ is required')
    frequency = FREQ_CODES.get(freq_token)
    if frequency is None:
        _fail(text, f'unrecognized FREQ {freq_token!r}')

    interval = 1
    if 'INTERVAL' in values:
        interval = _parse_int(text, 'INTERVAL', values['INTERVAL'])
        if interval < 1:
            _fail(text, f'INTERVAL must be a positive integer (got {interval})')

    weekdays: list[int] = []
    if 'BYDAY' in values:
        for code in values['BYDAY'].split(','):
            code = code.strip()
            if code not in CODE_TO_WEEKDAY:
                _fail(text, f'unrecognized BYDAY code {code!r}')
            wd = CODE_TO_WEEKDAY[code]
            if wd in weekdays:
                _fail(text, f'BYDAY code {code} repeated')
            weekdays.append(wd)

    month_day = None
    if 'BYMONTHDAY' in values:
        month_day = _parse_int(text, 'BYMONTHDAY', values['BYMONTHDAY'])
        if not 1 <= month_day <= 31:
            _fail(text, f'BYMONTHDAY must be between 1 and 31 (got {month_day})')

    try:
        return Rule(frequency=frequency, interval=interval, weekdays=weekdays, month_day=month_day)
    except InvalidRuleError as e:
        # ranges are checked above; keep parse's single failure type regardless
        raise MalformedRuleError(text, str(e)) from e


def to_dateutil(rule: Rule, start: date):
    """Build a dateutil.rrule.rrule equivalent for callers that expand with dateutil.

    Weeks start on Sunday to match the weekly buckets used by the projector.
    dateutil differs in two places: a BYMONTHDAY past the end of a month
    skips that month instead of clamping, and the start date is only part of
    the set when it matches the rule.
    """
    from dateutil import rrule as _rrule

    freq_map = {
        Frequency.DAILY: _rrule.DAILY,
        Frequency.WEEKLY: _rrule.WEEKLY,
        Frequency.MONTHLY: _rrule.MONTHLY,
        Frequency.YEARLY: _rrule.YEARLY,
    }
    wd_map = (_rrule.SU, _rrule.MO, _rrule.TU, _rrule.WE, _rrule.TH, _rrule.FR, _rrule.SA)
    params: dict = {'interval': rule.interval, 'wkst': _rrule.SU}
    if rule.weekdays:
        params['byweekday'] = tuple(wd_map[d] for d in rule.sorted_weekdays)
    if rule.month_day is not None:
        params['bymonthday'] = rule.month_day
    return _rrule.rrule(freq_map[rule.frequency], dtstart=start, **params)
