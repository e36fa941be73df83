from __future__ import annotations
import os, time, traceback, logging
from typing import Optional
from PySide6.QtWidgets import QApplication, QMessageBox, QErrorMessage
from PySide6.QtCore import QObject, QTimer, Qt


logger = logging.getLogger(__name__)


class ErrorNotifier(QObject):
    """
    Logs errors and shows them to the user.

    Errors and critical messages open a QMessageBox, warnings go to a
    QErrorMessage and anything else to the active window's status bar.
    Identical notifications within ``dedup_seconds`` are shown only once.
    The dialog is always created on the GUI thread through
    ``QTimer.singleShot``.

    :ivar dev_mode: True when $QVQ_DEV is set; makes details selectable.

    Usage:
    >>> ErrorNotifier.instance().notify("Error", "Something went wrong")
    >>> ErrorNotifier.instance().notify("Warning", "Something might be wrong", severity="warning")
    """
    _instance: Optional[ErrorNotifier] = None

    def __init__(self):
        super().__init__()
        self.dev_mode = str(os.getenv("QVQ_DEV", "")).lower() in ("1", "true", "yes")
        self._last_shown: dict[str, float] = {}  # key -> timestamp
        self._suppress_window: Optional[QErrorMessage] = None

    @classmethod
    def instance(cls) -> ErrorNotifier:
        if cls._instance is None:
            cls._instance = ErrorNotifier()
        return cls._instance

    @classmethod
    def configure(cls, settings_manager) -> ErrorNotifier:
        """Follow the run mode of the application settings."""
        notifier = cls.instance()
        notifier.dev_mode = notifier.dev_mode or settings_manager.dev_mode
        return notifier

    def _should_show(self, key: str, dedup_seconds: float) -> bool:
        now = time.monotonic()
        last = self._last_shown.get(key)
        if last is not None and now - last < dedup_seconds:
            return False
        self._last_shown[key] = now
        return True

    def notify(self,
               title: str,
               msg: str,
               *,
               detail: Optional[str] = None,
               exc_info: Optional[tuple] = None,
               severity: str = "error",
               dedup_seconds: float = 2.0,
               ) -> None:
        if exc_info and exc_info[0] is not None:
            logger.error("%s: %s", title, msg, exc_info=exc_info)
        else:
            exc_info = None
            if severity in ("error", "critical"):
                logger.error("%s: %s", title, msg)
            elif severity == "warning":
                logger.warning("%s: %s", title, msg)
            else:
                logger.info("%s: %s", title, msg)

        if not self._should_show(f"{severity}:{title}:{msg}", dedup_seconds):
            return

        # execute on GUI thread
        def _show():
            if severity in ("error", "critical"):
                box = QMessageBox()
                box.setIcon(QMessageBox.Critical if severity == "critical"
                            else QMessageBox.Warning)
                box.setWindowTitle(title)
                box.setText(msg)

                det = detail
                if exc_info and not det:
                    det = "".join(traceback.format_exception(*exc_info))
                if det:
                    box.setDetailedText(det)
                    if self.dev_mode:
                        box.setTextInteractionFlags(Qt.TextSelectableByMouse)
                box.exec()
            elif severity == "warning":
                if self._suppress_window is None:
                    self._suppress_window = QErrorMessage()
                self._suppress_window.showMessage(f"{title}: {msg}")
            else:
                app = QApplication.instance()
                w = app.activeWindow() if app else None
                if w is not None and hasattr(w, "statusBar"):
                    w.statusBar().showMessage(f"{title}: {msg}", 5000)

        QTimer.singleShot(0, _show)
