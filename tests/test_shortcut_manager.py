import json
import logging
import pytest

from pathlib import Path

from PySide6 import QtWidgets
from PySide6.QtCore import QSettings

from qvq.app import shortcut_manager as sm


class StubNotifier:
    calls = []

    @classmethod
    def instance(cls):
        return cls

    @classmethod
    def notify(cls, **kwargs):
        cls.calls.append(kwargs)


@pytest.fixture(autouse=True)
def stub_error_notifier(monkeypatch):
    """Record notifications instead of opening dialogs."""
    monkeypatch.setattr(sm, "ErrorNotifier", StubNotifier)
    StubNotifier.calls.clear()
    yield
    StubNotifier.calls.clear()


@pytest.fixture
def config_dir(tmp_path: Path):
    """Temporary shortcuts.json"""
    cfg = tmp_path / "settings"
    cfg.mkdir(parents=True, exist_ok=True)
    defaults = {
        "animate_qv": "Ctrl+1",
        "animate_qvq": "Ctrl+2",
        "toggle_mode": "m",
    }
    (cfg / "shortcuts.json").write_text(json.dumps(defaults), encoding="utf-8")
    return cfg


@pytest.fixture
def main_window(qtbot):
    win = QtWidgets.QMainWindow()
    win.setWindowTitle("Test")
    qtbot.addWidget(win)
    win.show()
    return win


def test_registers_actions_and_callbacks(tmp_settings, config_dir, main_window):
    mgr = sm.ShortcutManager(main_window, config_dir)
    assert set(mgr._actions) == {"animate_qv", "animate_qvq", "toggle_mode"}
    assert mgr.shortcut_text("animate_qv") == "Ctrl+1"

    called = {"qv": 0}

    def cb():
        called["qv"] += 1

    mgr.add_callback("animate_qv", cb)
    mgr._on_action_triggered("animate_qv")
    assert called["qv"] == 1


def test_triggering_the_action_runs_the_callback(tmp_settings, config_dir, main_window):
    mgr = sm.ShortcutManager(main_window, config_dir)
    hits = []
    mgr.add_callback("animate_qvq", lambda: hits.append("qvq"))
    mgr._actions["animate_qvq"].trigger()
    assert hits == ["qvq"]


def test_unknown_command_cannot_get_callback(tmp_settings, config_dir, main_window):
    mgr = sm.ShortcutManager(main_window, config_dir)
    with pytest.raises(KeyError):
        mgr.add_callback("spin_forever", lambda: None)


def test_unregistered_shortcut_notifier(tmp_settings, config_dir, main_window):
    mgr = sm.ShortcutManager(main_window, config_dir)
    mgr._on_action_triggered("nonexistent")
    assert len(StubNotifier.calls) == 1
    note = StubNotifier.calls[0]
    assert note["title"].startswith("Unregistered")
    assert "not registered" in note["msg"]


def test_development_mode_raises_after_notify(tmp_settings, config_dir, main_window):
    settings_manager = sm.AppSettingsManager()
    settings_manager.set_run_mode("development")
    mgr = sm.ShortcutManager(main_window, config_dir, settings_manager=settings_manager)

    def bad():
        raise RuntimeError("boom")

    mgr.add_callback("animate_qv", bad)
    with pytest.raises(RuntimeError):
        mgr._on_action_triggered("animate_qv")
    assert StubNotifier.calls, "Notifier should be called before re-raise"
    assert "Error" in StubNotifier.calls[0]["title"]


def test_production_mode_swallows_and_continues(tmp_settings, config_dir, main_window):
    settings_manager = sm.AppSettingsManager()
    settings_manager.set_run_mode("production")
    mgr = sm.ShortcutManager(main_window, config_dir, settings_manager=settings_manager)

    def bad():
        raise ValueError("bad")

    mgr.add_callback("animate_qv", bad)
    mgr._on_action_triggered("animate_qv")
    assert StubNotifier.calls, "Notifier should be called in production mode"


def test_update_shortcut_conflict(tmp_settings, config_dir, main_window):
    mgr = sm.ShortcutManager(main_window, config_dir)
    existing = mgr.shortcut_text("animate_qv")
    assert mgr.update_shortcut("animate_qvq", existing) is False
    assert mgr.shortcut_text("animate_qvq") == "Ctrl+2"


def test_update_and_reset_shortcut(tmp_settings, config_dir, main_window):
    mgr = sm.ShortcutManager(main_window, config_dir)
    assert mgr.update_shortcut("toggle_mode", "Ctrl+M")
    assert QSettings(sm.SETTINGS_ORG, sm.SETTINGS_APP).value("shortcuts/toggle_mode") == "Ctrl+M"

    mgr.reset_to_default()
    assert mgr.shortcut_text("toggle_mode") == "M"


def test_user_overrides_are_loaded(tmp_settings, config_dir, main_window):
    s = QSettings(sm.SETTINGS_ORG, sm.SETTINGS_APP)
    s.setValue("shortcuts/animate_qvq", "Ctrl+9")
    mgr = sm.ShortcutManager(main_window, config_dir)
    assert mgr.shortcut_text("animate_qvq") == "Ctrl+9"


def test_missing_shortcuts_file_registers_nothing(tmp_settings, tmp_path, main_window):
    mgr = sm.ShortcutManager(main_window, tmp_path / "nowhere")
    assert list(mgr.actions()) == []


def test_info_logging_contains_command_and_callback(
        tmp_settings, config_dir, main_window, caplog):
    caplog.set_level(logging.INFO, logger=sm.__name__)
    mgr = sm.ShortcutManager(main_window, config_dir)

    def cb():
        pass

    mgr.add_callback("animate_qv", cb)
    mgr._on_action_triggered("animate_qv")
    assert "Shortcut triggered: animate_qv" in caplog.text
    assert "cb" in caplog.text


def test_actions_are_labelled_by_command(tmp_settings, config_dir, main_window):
    mgr = sm.ShortcutManager(main_window, config_dir)
    assert mgr._actions["animate_qvq"].text() == "Animate Q·V·Q⁻¹"
    assert mgr._actions["toggle_mode"].text() == "Toggle Algebra Mode"
    assert set(main_window.actions()) == set(mgr.actions())


def test_non_table_shortcut_file_is_ignored(tmp_path, caplog):
    (tmp_path / "shortcuts.json").write_text('["animate_qv"]', encoding="utf-8")
    assert sm.read_shortcut_file(tmp_path) == {}
    assert "not a command table" in caplog.text
