"""cadence: recurrence rules for recurring task templates.

Build a Rule from form fields, persist it as RRULE text, and project the
dates it falls on:

    rule = validate_and_build_rule({'frequency': 'weekly', 'interval': 2, 'weekdays': [1]})
    text = serialize(rule)              # 'FREQ=WEEKLY;INTERVAL=2;BYDAY=MO'
    rule == parse(text)                 # True
    first_occurrences(rule, date(2024, 1, 1), 3)
"""
import logging
import sys

from . import config
from .errors import InvalidRuleError, MalformedRuleError, RecurrenceError
from .models import Frequency, Rule, validate_and_build_rule
from .phrases import describe_rule, parse_recurrence_phrase, parse_text_to_rule
from .projector import (
    first_occurrences,
    next_occurrence,
    occurrences,
    occurrences_between,
    occurrences_until,
    preview,
)
from .rrule import parse, serialize, to_dateutil

logger = logging.getLogger(__name__)
# Library default: stay quiet unless the host application configures logging.
logger.addHandler(logging.NullHandler())


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Send package logs to stdout at level (default config.LOG_LEVEL).

    Opt-in for scripts and small hosts with no logging setup of their own.
    Calling it again only updates the level.
    """
    if not any(getattr(h, '_cadence_stdout', False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s:%(name)s: %(message)s'))
        handler._cadence_stdout = True
        logger.addHandler(handler)
    try:
        logger.setLevel(level if level is not None else config.LOG_LEVEL)
    except ValueError:
        logger.setLevel(logging.WARNING)
    return logger


__all__ = [
    'Frequency',
    'InvalidRuleError',
    'MalformedRuleError',
    'RecurrenceError',
    'Rule',
    'configure_logging',
    'describe_rule',
    'first_occurrences',
    'next_occurrence',
    'occurrences',
    'occurrences_between',
    'occurrences_until',
    'parse',
    'parse_recurrence_phrase',
    'parse_text_to_rule',
    'preview',
    'serialize',
    'to_dateutil',
    'validate_and_build_rule',
]
