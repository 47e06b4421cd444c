"""Exceptions raised by the recurrence engine."""


class RecurrenceError(ValueError):
    """Base class for recurrence rule failures."""


class InvalidRuleError(RecurrenceError):
    """A rule was constructed with a field that violates its constraints."""

    def __init__(self, field: str, constraint: str):
        self.field = field
        self.constraint = constraint
        super().__init__(f'{field}: {constraint}')


class MalformedRuleError(RecurrenceError):
    """Rule text does not match the FREQ/INTERVAL/BYDAY/BYMONTHDAY grammar."""

    def __init__(self, text, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f'malformed rule {text!r}: {reason}')
