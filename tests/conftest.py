import logging
import pathlib
import sys
from datetime import date

import pytest

# ensure project root is on PYTHONPATH for test runs
ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from cadence import config  # noqa: E402
from cadence.models import Frequency, Rule  # noqa: E402


@pytest.fixture
def debug_logs(caplog):
    """Capture DEBUG records from the cadence package."""
    caplog.set_level(logging.DEBUG, logger='cadence')
    return caplog


@pytest.fixture
def fixed_today(monkeypatch):
    """Pin calendar_math.today() (and its importers) to 2024-03-01."""
    d = date(2024, 3, 1)
    import cadence.phrases
    import cadence.projector
    monkeypatch.setattr(cadence.projector, 'today', lambda tz_name=None: d)
    monkeypatch.setattr(cadence.phrases, 'today', lambda tz_name=None: d)
    return d


@pytest.fixture
def weekly_mondays():
    return Rule(Frequency.WEEKLY, interval=2, weekdays={1})


@pytest.fixture
def set_config(monkeypatch):
    """Let a test change config values; monkeypatch undoes it afterwards."""
    def _set(name, value):
        monkeypatch.setattr(config, name, value)
    return _set
