import json
import logging
import sys

from pathlib import Path
from typing import Callable, Optional
from PySide6.QtWidgets import QMainWindow
from PySide6.QtGui import QKeySequence, QAction
from PySide6.QtCore import QSettings

from qvq.ui.error_notifier import ErrorNotifier
from qvq.app.app_settings_manager import AppSettingsManager


logger = logging.getLogger(__name__)

SETTINGS_ORG = "QvqApp.org"
SETTINGS_APP = "QVQ"
SETTINGS_GROUP = "shortcuts"

COMMAND_LABELS = {
    "animate_qv": "Animate Q·V",
    "animate_qvq": "Animate Q·V·Q⁻¹",
    "reset_parameters": "Reset Parameters",
    "toggle_final_result": "Toggle Final Result",
    "toggle_mode": "Toggle Algebra Mode",
    "reset_view": "Reset View",
}


def read_shortcut_file(path: Path) -> dict[str, str]:
    """
    Command -> key sequence table from ``<path>/shortcuts.json``.
    A missing or malformed file gives an empty table.
    """
    file = path / "shortcuts.json"
    try:
        data = json.loads(file.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.error("Cannot read %s: %s", file, e)
        return {}
    if not isinstance(data, dict):
        logger.error("%s is not a command table", file)
        return {}
    return {str(cmd): str(seq) for cmd, seq in data.items()}


class ShortcutManager:
    """
    One QAction per command of ``shortcuts.json``, bound to the main window.

    Key sequences saved in QSettings (``shortcuts/<command>``) take
    precedence over the file. A callback that raises is reported through
    ErrorNotifier and re-raised in development mode.
    """
    def __init__(self, parent: QMainWindow, config_path: Path,
                 settings_manager: Optional[AppSettingsManager] = None):
        self.parent = parent
        self.config_path = config_path
        self._store = QSettings(SETTINGS_ORG, SETTINGS_APP)
        self._settings_manager = settings_manager or AppSettingsManager()

        self._file_sequences = read_shortcut_file(config_path)
        self._actions: dict[str, QAction] = {}
        self._callbacks: dict[str, Callable[[], None]] = {}
        for cmd in self._file_sequences:
            self._actions[cmd] = self._make_action(cmd)

        logger.debug("%d shortcuts bound (run mode %s)",
                     len(self._actions), self._settings_manager.run_mode.value)

    def _sequence_for(self, cmd: str) -> str:
        default = self._file_sequences[cmd]
        return self._store.value(f"{SETTINGS_GROUP}/{cmd}", default) or default

    def _make_action(self, cmd: str) -> QAction:
        action = QAction(COMMAND_LABELS.get(cmd, cmd.replace("_", " ").title()), self.parent)
        action.setShortcut(QKeySequence(self._sequence_for(cmd)))
        action.triggered.connect(lambda checked=False, c=cmd: self._on_action_triggered(c))
        self.parent.addAction(action)
        return action

    def _on_action_triggered(self, cmd: str):
        cb = self._callbacks.get(cmd)
        if cb is None:
            ErrorNotifier.instance().notify(
                title="Unregistered Shortcut",
                msg=f"Command '{cmd}' is not registered.",
                severity="error",
                dedup_seconds=1.0,
            )
            return

        logger.info("Shortcut triggered: %s -> %s.%s", cmd,
                    getattr(cb, "__module__", ""), getattr(cb, "__qualname__", repr(cb)))
        try:
            cb()
        except Exception:
            ErrorNotifier.instance().notify(
                title="Shortcut Error",
                msg=f"Command '{cmd}' failed.",
                exc_info=sys.exc_info(),
                severity="error",
                dedup_seconds=1.0,
            )
            if self._settings_manager.dev_mode:
                raise

    def add_callback(self, command_name: str, callback: Callable[[], None]):
        """:raise KeyError: if *command_name* is not in ``shortcuts.json``."""
        if command_name not in self._actions:
            raise KeyError(f"Command '{command_name}' not found in registered actions.")
        self._callbacks[command_name] = callback

    def update_shortcut(self, cmd: str, new_seq: str) -> bool:
        """Rebind *cmd* and save it; False on an unknown command or a taken sequence."""
        action = self._actions.get(cmd)
        if action is None:
            return False
        normalized = QKeySequence(new_seq).toString()
        if any(a.shortcut().toString() == normalized for a in self._actions.values()):
            logger.info("Shortcut %s already bound, %s unchanged", normalized, cmd)
            return False
        action.setShortcut(QKeySequence(new_seq))
        self._store.setValue(f"{SETTINGS_GROUP}/{cmd}", new_seq)
        return True

    def reset_to_default(self):
        self._store.remove(SETTINGS_GROUP)
        for cmd, action in self._actions.items():
            action.setShortcut(QKeySequence(self._file_sequences[cmd]))

    def shortcut_text(self, cmd: str) -> str:
        action = self._actions.get(cmd)
        return action.shortcut().toString() if action else ""

    def actions(self):
        return self._actions.values()
