"""Natural-language recurrence phrases.

parse_recurrence_phrase() turns short phrases like 'every 2 weeks on friday'
or 'every month on the 1st' into a Rule, parse_text_to_rule() additionally
finds an anchor date in free text ('Pay rent on 2024-09-01 every month'),
and describe_rule() goes the other way for labels and previews.

These are heuristics. Phrases asking for something the rule model cannot
express (the last day of a month, the 2nd Sunday of a month) return None
rather than an approximation.
"""
import logging
import re
from datetime import date, datetime, time

import dateparser

from . import config
from .calendar_math import today
from .errors import InvalidRuleError
from .models import WEEKDAY_NAMES, Frequency, Rule

logger = logging.getLogger(__name__)

_UNIT_FREQ = {'day': Frequency.DAILY, 'week': Frequency.WEEKLY, 'month': Frequency.MONTHLY, 'year': Frequency.YEARLY}
_ADVERB_FREQ = {
    'daily': Frequency.DAILY,
    'weekly': Frequency.WEEKLY,
    'monthly': Frequency.MONTHLY,
    'yearly': Frequency.YEARLY,
    'annually': Frequency.YEARLY,
}
_WORKWEEK = [1, 2, 3, 4, 5]
_WEEKEND = [0, 6]

# nth-weekday-of-month and last-day-of-month need BYSETPOS / negative BYMONTHDAY
_UNSUPPORTED_RE = re.compile(
    r'\b(?:\d+(?:st|nd|rd|th)?|first|second|third|fourth|fifth|last)\s+'
    r'[a-z]+days?\s+of\s+(?:every|each|the)\s+month'
    r'|\blast\s+days?\s+of\s+(?:every|each|the)\s+month'
)
# 'on the 15th', 'day 15', '15th day of every month'
_MONTH_DAY_RE = re.compile(
    r'(?:\bon\s+(?:the\s+)?|\bthe\s+|\bday\s+)(\d{1,2})(?:st|nd|rd|th)?\b(?![/.:-]\d)'
    r'|\b(\d{1,2})(?:st|nd|rd|th)?\s+day\s+of\s+(?:every|each|the)\s+month'
)


def _weekday(word: str) -> int | None:
    """Map a weekday name or abbreviation (plural allowed) to 0=Sunday..6."""
    candidates = [word]
    if word.endswith('s') and len(word) > 3:
        candidates.append(word[:-1])
    for w in candidates:
        if len(w) < 3:
            continue
        for i, name in enumerate(WEEKDAY_NAMES):
            if name.lower().startswith(w):
                return i
    return None


def _weekdays_in(p: str) -> list[int]:
    found: list[int] = []
    for word in re.findall(r'[a-z]+', p):
        wd = _weekday(word)
        if wd is not None and wd not in found:
            found.append(wd)
    return found


def _frequency_fields(p: str) -> dict | None:
    # every 3 days / every 2 weeks
    m = re.search(r'every\s+(\d+)\s*(day|week|month|year)s?\b', p)
    if m:
        return {'frequency': _UNIT_FREQ[m.group(2)], 'interval': int(m.group(1))}

    # every 2nd month / every 2nd tuesday
    m = re.search(r'every\s+(\d+)(?:st|nd|rd|th)?\s+([a-z]+)', p)
    if m:
        n, word = int(m.group(1)), m.group(2)
        if word.rstrip('s') in _UNIT_FREQ:
            return {'frequency': _UNIT_FREQ[word.rstrip('s')], 'interval': n}
        if _weekday(word) is not None:
            return {'frequency': Frequency.WEEKLY, 'interval': n}

    # every other week / every other saturday
    m = re.search(r'every\s+other\s+([a-z]+)', p)
    if m:
        word = m.group(1)
        if word in _UNIT_FREQ:
            return {'frequency': _UNIT_FREQ[word], 'interval': 2}
        if _weekday(word) is not None:
            return {'frequency': Frequency.WEEKLY, 'interval': 2}

    if re.search(r'\b(?:bi-?weekly|fortnightly)\b', p):
        return {'frequency': Frequency.WEEKLY, 'interval': 2}

    if re.search(r'\bevery\s+weekday\b|\bweekdays\b', p):
        return {'frequency': Frequency.WEEKLY, 'weekdays': _WORKWEEK}
    if re.search(r'\bevery\s+weekend\b|\bweekends\b', p):
        return {'frequency': Frequency.WEEKLY, 'weekdays': _WEEKEND}

    m = re.search(r'(?:every|each)\s+(day|week|month|year)\b', p)
    if m:
        return {'frequency': _UNIT_FREQ[m.group(1)]}

    # every monday / each friday
    m = re.search(r'(?:every|each)\s+([a-z]+)', p)
    if m and _weekday(m.group(1)) is not None:
        return {'frequency': Frequency.WEEKLY}

    # recurring monthly / annually
    m = re.search(r'\b(daily|weekly|monthly|yearly|annually)\b', p)
    if m:
        return {'frequency': _ADVERB_FREQ[m.group(1)]}

    # on mondays (plural only; 'on monday' is a one-off)
    m = re.search(r'\bon\s+([a-z]+days)\b', p)
    if m and _weekday(m.group(1)) is not None:
        return {'frequency': Frequency.WEEKLY}

    return None


def parse_recurrence_phrase(phrase: str) -> Rule | None:
    """Parse a short natural-language recurrence phrase into a Rule.

    Returns None if no supported recurrence phrase is found.
    """
    if not phrase:
        return None
    p = phrase.strip().lower()

    if _UNSUPPORTED_RE.search(p):
        logger.debug('parse_recurrence_phrase unsupported pattern phrase=%r', phrase)
        return None

    fields = _frequency_fields(p)
    if fields is None:
        return None

    freq = fields['frequency']
    if freq is Frequency.WEEKLY and 'weekdays' not in fields:
        days = _weekdays_in(p)
        if days:
            fields['weekdays'] = days
    if freq is Frequency.MONTHLY:
        m = _MONTH_DAY_RE.search(p)
        if m:
            fields['month_day'] = int(m.group(1) or m.group(2))

    try:
        return Rule(**fields)
    except InvalidRuleError as e:
        logger.debug('parse_recurrence_phrase invalid rule phrase=%r field=%s reason=%s', phrase, e.field, e.constraint)
        return None


# --- anchor dates in free text ---
_MONTH = (r'(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?'
          r'|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)')
_ORD = r'\d{1,2}(?:st|nd|rd|th)?'
_ISO_RE = re.compile(r'\b(\d{4})-(\d{1,2})-(\d{1,2})\b')
_DATE_SPAN_RE = re.compile(
    r'\b\d{1,2}[./]\d{1,2}(?:[./]\d{2,4})?\b'
    rf'|\b{_ORD}\s+(?:of\s+)?{_MONTH}\b\.?(?:,?\s+\d{{4}}\b)?'
    rf'|\b{_MONTH}\b\.?\s+{_ORD}\b(?:,?\s+\d{{4}}\b)?',
    re.IGNORECASE,
)


def _parse_span(span: str, relative_to: date) -> date | None:
    cleaned = re.sub(r'(\d)(?:st|nd|rd|th)\b', r'\1', span, flags=re.IGNORECASE)
    cleaned = re.sub(r'\s+of\s+', ' ', cleaned, flags=re.IGNORECASE)
    dt = dateparser.parse(
        cleaned,
        languages=['en'],
        settings={
            'DATE_ORDER': config.DATE_ORDER,
            'PREFER_DATES_FROM': 'future',
            'RELATIVE_BASE': datetime.combine(relative_to, time()),
        },
    )
    if dt is None:
        logger.debug('dateparser could not read anchor %r', span)
        return None
    return dt.date()


def find_anchor_date(text: str, relative_to: date | None = None) -> tuple[date | None, tuple[int, int] | None]:
    """Locate the first explicit date in text.

    Returns (date, (start, end)) with the span's position, or (None, None).
    ISO dates are read directly; numeric and month-name dates go through
    dateparser honoring config.DATE_ORDER.
    """
    m = _ISO_RE.search(text)
    if m:
        try:
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3))), m.span()
        except ValueError:
            logger.debug('ignoring impossible ISO date %r', m.group(0))
    m = _DATE_SPAN_RE.search(text)
    if m:
        d = _parse_span(m.group(0), relative_to or today())
        if d is not None:
            return d, m.span()
    return None, None


def parse_text_to_rule(text: str, default_start: date | None = None) -> tuple[date | None, Rule | None]:
    """Parse free text for an anchor date and a recurrence phrase.

    Returns (start, rule). start is the anchor date found in the text, else
    default_start. rule is None when no recurrence phrase was found.

    Example: 'Pay rent on 2024-09-01 every month' -> (date(2024, 9, 1), Rule(MONTHLY))
    """
    if not text:
        return default_start, None
    anchor, span = find_anchor_date(text, relative_to=default_start)
    phrase = text
    if span is not None:
        # drop the date itself so its digits are not read as a day-of-month
        phrase = text[:span[0]] + ' ' + text[span[1]:]
    rule = parse_recurrence_phrase(phrase)
    return (anchor or default_start), rule


# --- descriptions ---
_UNIT_NAMES = {
    Frequency.DAILY: ('day', 'days'),
    Frequency.WEEKLY: ('week', 'weeks'),
    Frequency.MONTHLY: ('month', 'months'),
    Frequency.YEARLY: ('year', 'years'),
}


def describe_rule(rule: Rule) -> str:
    """Human-readable description, e.g. 'Every 2 weeks on Monday, Wednesday'."""
    singular, plural = _UNIT_NAMES[rule.frequency]
    text = f'Every {singular}' if rule.interval == 1 else f'Every {rule.interval} {plural}'
    if rule.weekdays:
        days = rule.sorted_weekdays
        if days == _WORKWEEK:
            text += ' on weekdays'
        elif days == _WEEKEND:
            text += ' on weekends'
        else:
            text += ' on ' + ', '.join(WEEKDAY_NAMES[d] for d in days)
    if rule.month_day is not None:
        text += f' on day {rule.month_day}'
    return text
