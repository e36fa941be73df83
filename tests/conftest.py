import os
from pathlib import Path

import pytest

# Qt must use an offscreen buffer before any QApplication exists.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QSettings

from qvq.core.parameters import Parameters


class FakeClock:
    """Manually advanced clock; scheduled callbacks run on ``run_frame``."""

    def __init__(self, start_ms: float = 0.0):
        self.now = float(start_ms)
        self.scheduled = []

    def now_ms(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms

    def call_on_next_frame(self, callback) -> None:
        self.scheduled.append(callback)

    def run_frame(self, advance_ms: float = 16.0) -> None:
        self.advance(advance_ms)
        pending, self.scheduled = self.scheduled, []
        for cb in pending:
            cb()


class RecordingSink:
    """DrawableSink that records every call and the resulting live set."""

    def __init__(self):
        self.calls = []
        self.live = {}

    def add(self, role, state):
        assert role not in self.live, f"duplicate add of {role}"
        self.calls.append(("add", role))
        self.live[role] = state

    def replace(self, role, state):
        assert role in self.live, f"replace of unknown {role}"
        self.calls.append(("replace", role))
        self.live[role] = state

    def remove(self, role):
        assert role in self.live, f"remove of unknown {role}"
        self.calls.append(("remove", role))
        del self.live[role]

    def ops(self, kind):
        return [role for op, role in self.calls if op == kind]


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def params():
    return Parameters()


@pytest.fixture
def tmp_settings(tmp_path: Path):
    """QSettings switched to INI in a temp folder so tests do not leak."""
    QSettings.setDefaultFormat(QSettings.IniFormat)
    QSettings.setPath(QSettings.IniFormat, QSettings.UserScope, str(tmp_path))
    s = QSettings("QvqApp.org", "QVQ")
    s.clear()
    yield s
    s.clear()
