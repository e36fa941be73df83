import logging
import sys

from PySide6 import QtWidgets

from qvq.app.app_settings_manager import AppSettingsManager
from qvq.app.logging_setup import (LogSystem, apply_logging_policy, install_qt_message_handler,
                                   setup_startup_logging)

logger = logging.getLogger(__name__)


def main():
    # Startup diagnostics must be in place before the QApplication exists.
    paths = setup_startup_logging(app_name="qvq")
    install_qt_message_handler()
    logs = LogSystem.from_levels("qvq", log_dir=paths.log_dir)

    from qvq.ui.error_notifier import ErrorNotifier
    from qvq.ui.mainwindow import MainWindow

    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication(sys.argv)

    logger.info("App start")
    settings_mgr = AppSettingsManager()
    apply_logging_policy(logs, settings_mgr)
    ErrorNotifier.configure(settings_mgr)

    main_window = MainWindow(settings_mgr)

    # stop the listener when Qt quits
    app.aboutToQuit.connect(logs.stop)
    try:
        rc = app.exec()
        logger.info("App exit (rc=%s)", rc)
        sys.exit(rc)
    finally:
        main_window.controller.stop_render_loop()


if __name__ == "__main__":
    main()
