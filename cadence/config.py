"""Simple runtime configuration for the cadence recurrence engine.

Control flags are read from environment variables to allow toggling in
development or production without code changes.
"""
import os


def _trueish(v: str | None) -> bool:
    if not v:
        return False
    return v.lower() in ('1', 'true', 'yes', 'on')


# Date ordering preference for numeric anchor dates in free text:
# 'DMY' (day-month-year) or 'MDY' (month-day-year). Default to 'DMY'.
DATE_ORDER = os.getenv('CADENCE_DATE_ORDER', 'DMY').upper()

# IANA timezone used when a preview needs "today" and the caller did not
# supply a start date.
DEFAULT_TIMEZONE = os.getenv('CADENCE_TIMEZONE', 'Australia/Melbourne')

# Number of occurrences shown by preview() when no count is given.
try:
    PREVIEW_COUNT = int(os.getenv('CADENCE_PREVIEW_COUNT', '5'))
except Exception:
    PREVIEW_COUNT = 5

# Upper bound on occurrences returned for a single window by
# occurrences_between() when the caller passes no explicit limit.
try:
    MAX_OCCURRENCES_PER_WINDOW = int(os.getenv('CADENCE_MAX_OCCURRENCES', '500'))
except Exception:
    MAX_OCCURRENCES_PER_WINDOW = 500

# Level for the package logger when it has no handlers configured.
LOG_LEVEL = os.getenv('CADENCE_LOG_LEVEL', 'WARNING').upper()

# When true, parse() rejects keys outside FREQ/INTERVAL/BYDAY/BYMONTHDAY.
# Set CADENCE_STRICT_PARSE=0 to skip unknown keys (e.g. COUNT, WKST) written
# by other calendar tools.
STRICT_PARSE = _trueish(os.getenv('CADENCE_STRICT_PARSE', '1'))


# Optional local overrides: define variables in cadence/local_config.py to
# override the defaults above without changing versioned config.
try:
    from .local_config import *  # type: ignore  # noqa: F401,F403
except ImportError:
    # No local overrides present; proceed with defaults.
    pass
