import pytest

from cadence.errors import InvalidRuleError, RecurrenceError
from cadence.models import Frequency, Rule, validate_and_build_rule


def test_defaults():
    r = Rule(Frequency.DAILY)
    assert r.interval == 1
    assert r.weekdays == frozenset()
    assert r.month_day is None


def test_frequency_accepts_names():
    assert Rule('WEEKLY').frequency is Frequency.WEEKLY
    assert Rule(' monthly ').frequency is Frequency.MONTHLY


@pytest.mark.parametrize('kwargs,field', [
    ({'frequency': 'daily', 'interval': 0}, 'interval'),
    ({'frequency': 'daily', 'interval': -3}, 'interval'),
    ({'frequency': 'daily', 'interval': 1.5}, 'interval'),
    ({'frequency': 'daily', 'interval': True}, 'interval'),
    ({'frequency': 'weekly', 'weekdays': [7]}, 'weekdays'),
    ({'frequency': 'weekly', 'weekdays': [-1]}, 'weekdays'),
    ({'frequency': 'weekly', 'weekdays': 'MO'}, 'weekdays'),
    ({'frequency': 'monthly', 'month_day': 0}, 'monthDay'),
    ({'frequency': 'monthly', 'month_day': 32}, 'monthDay'),
    ({'frequency': 'hourly'}, 'frequency'),
])
def test_invalid_fields_rejected(kwargs, field):
    with pytest.raises(InvalidRuleError) as exc:
        Rule(**kwargs)
    assert exc.value.field == field
    assert field in str(exc.value)


def test_invalid_rule_error_is_value_error():
    with pytest.raises(ValueError):
        Rule('daily', interval=0)
    assert issubclass(InvalidRuleError, RecurrenceError)


def test_out_of_range_values_rejected_even_when_irrelevant():
    # weekdays are dropped for daily rules, but only after validation
    with pytest.raises(InvalidRuleError):
        Rule('daily', weekdays=[9])
    with pytest.raises(InvalidRuleError):
        Rule('weekly', month_day=40)


def test_irrelevant_fields_are_dropped():
    assert Rule('daily', weekdays=[1, 2]).weekdays == frozenset()
    assert Rule('weekly', month_day=15).month_day is None
    assert Rule('monthly', weekdays=[3], month_day=15) == Rule('monthly', month_day=15)


def test_weekdays_are_a_set():
    r = Rule('weekly', weekdays=[3, 1, 3])
    assert r.weekdays == frozenset({1, 3})
    assert r.sorted_weekdays == [1, 3]
    assert r == Rule('weekly', weekdays={1, 3})


def test_weekly_with_empty_weekdays_is_allowed():
    assert Rule('weekly', weekdays=[]).weekdays == frozenset()


def test_rule_is_immutable():
    r = Rule('daily')
    with pytest.raises(AttributeError):
        r.interval = 2


def test_rule_is_hashable():
    assert len({Rule('daily'), Rule('daily'), Rule('weekly')}) == 2


def test_replace_returns_validated_copy():
    r = Rule('weekly', interval=2, weekdays=[1])
    r2 = r.replace(interval=3)
    assert r.interval == 2
    assert r2 == Rule('weekly', interval=3, weekdays=[1])
    with pytest.raises(InvalidRuleError):
        r.replace(interval=0)


def test_replace_frequency_drops_stale_fields():
    r = Rule('weekly', weekdays=[1]).replace(frequency='monthly', month_day=3)
    assert r.weekdays == frozenset()
    assert r.month_day == 3


# --- validate_and_build_rule ---

def test_build_from_form_fields():
    r = validate_and_build_rule({'type': 'weekly', 'interval': 2, 'daysOfWeek': [1, 3], 'dayOfMonth': 1})
    assert r == Rule(Frequency.WEEKLY, interval=2, weekdays={1, 3})


def test_build_coerces_numeric_strings():
    r = validate_and_build_rule({'frequency': 'monthly', 'interval': ' 3 ', 'monthDay': '31'})
    assert r == Rule('monthly', interval=3, month_day=31)


def test_build_accepts_comma_joined_weekdays():
    r = validate_and_build_rule({'frequency': 'weekly', 'weekdays': '1,5'})
    assert r.weekdays == frozenset({1, 5})


def test_build_requires_frequency():
    with pytest.raises(InvalidRuleError) as exc:
        validate_and_build_rule({'interval': 2})
    assert exc.value.field == 'frequency'


@pytest.mark.parametrize('fields,field', [
    ({'frequency': 'daily', 'interval': 'two'}, 'interval'),
    ({'frequency': 'daily', 'interval': 0}, 'interval'),
    ({'frequency': 'weekly', 'weekdays': ['x']}, 'weekdays'),
    ({'frequency': 'weekly', 'weekdays': 5}, 'weekdays'),
    ({'frequency': 'monthly', 'monthDay': 'last'}, 'monthDay'),
    ({'frequency': 'monthly', 'month_day': 0}, 'monthDay'),
])
def test_build_reports_offending_field(fields, field, debug_logs):
    with pytest.raises(InvalidRuleError) as exc:
        validate_and_build_rule(fields)
    assert exc.value.field == field


def test_build_logs_rejections(debug_logs):
    with pytest.raises(InvalidRuleError):
        validate_and_build_rule({'frequency': 'daily', 'interval': 0})
    assert 'validate_and_build_rule rejected' in debug_logs.text
