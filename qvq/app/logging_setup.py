from __future__ import annotations

import faulthandler
import logging
import logging.config
import os
import queue
import sys
import traceback
from dataclasses import dataclass
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path

from qvq.app.app_settings_manager import AppSettingsManager, RunMode
from qvq.utils.log_util import level_from_name
from qvq.utils.resource_paths import app_base_dir

STARTUP_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass(frozen=True)
class LogPaths:
    log_dir: Path
    log_file: Path
    crash_file: Path

    @classmethod
    def in_dir(cls, log_dir: Path, app_name: str) -> LogPaths:
        return cls(log_dir, log_dir / f"{app_name}.log", log_dir / f"{app_name}.crash.log")


def _log_dir_candidates(app_name: str) -> list[Path]:
    """
    <exe dir>/logs when frozen, <project root>/logs in development,
    then ~/.<app_name>/logs.
    """
    if getattr(sys, "frozen", False):
        base = Path(sys.executable).resolve().parent
    else:
        base = app_base_dir()
    return [base / "logs", Path.home() / f".{app_name.lower()}" / "logs"]


def _is_writable(d: Path) -> bool:
    try:
        d.mkdir(parents=True, exist_ok=True)
        probe = d / ".write_test"
        probe.write_text("ok", encoding="utf-8")
        probe.unlink(missing_ok=True)
    except OSError:
        return False
    return True


def default_log_dir(app_name: str) -> Path:
    """First writable candidate directory; ./logs as the last resort."""
    for d in _log_dir_candidates(app_name):
        if _is_writable(d):
            return d
    fallback = Path.cwd() / "logs"
    fallback.mkdir(parents=True, exist_ok=True)
    return fallback


def _enable_crash_log(crash_file: Path) -> None:
    """Route faulthandler dumps (segfaults in VTK / Qt) to *crash_file*."""
    try:
        f = open(crash_file, "w", encoding="utf-8")
    except OSError:
        logging.getLogger(__name__).warning("Crash log unavailable: %s", crash_file)
        return
    faulthandler.enable(file=f)
    # faulthandler writes to the fd; the file object must stay referenced
    logging.getLogger()._qvq_crash_fh = f


def _log_uncaught(exc_type, exc, tb) -> None:
    logging.critical("Uncaught exception:\n%s",
                     "".join(traceback.format_exception(exc_type, exc, tb)))


def setup_startup_logging(
        app_name: str,
        *,
        level_file: int = logging.DEBUG,
        level_console: int = logging.INFO,
        max_bytes: int = 2_000_000,
        backup_count: int = 5,
    ) -> LogPaths:
    """
    Logging for the time before the settings are read.

    Installs a rotating file and a console handler on the root logger,
    a faulthandler crash file and a ``sys.excepthook`` that logs uncaught
    exceptions. LogSystem takes over the root handlers afterwards.
    """
    paths = LogPaths.in_dir(default_log_dir(app_name), app_name)
    formatter = logging.Formatter(STARTUP_FORMAT)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()

    file_handler = RotatingFileHandler(paths.log_file, maxBytes=max_bytes,
                                       backupCount=backup_count, encoding="utf-8")
    console_handler = logging.StreamHandler(sys.stdout)
    for handler, level in ((file_handler, level_file), (console_handler, level_console)):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    _enable_crash_log(paths.crash_file)
    sys.excepthook = _log_uncaught

    log = logging.getLogger(__name__)
    log.info("%s starting (frozen=%s)", app_name, getattr(sys, "frozen", False))
    log.info("executable=%s cwd=%s", sys.executable, os.getcwd())
    log.info("log_file=%s crash_file=%s", paths.log_file, paths.crash_file)
    return paths


def build_config(app_name: str,
                 root_level: int | str | None = None,
                 console_level: int | str | None = None,
                 log_dir: Path | None = None) -> dict:
    """
    Build a logging config dict.

    :param root_level: Root logger level; defaults to $QVQ_LOG_LEVEL or INFO.
    :param console_level: Console handler level; defaults to INFO.
    """
    root = level_from_name(root_level if root_level is not None else os.getenv("QVQ_LOG_LEVEL", "INFO"))
    console = level_from_name(console_level if console_level is not None else logging.INFO)
    log_dir = log_dir or default_log_dir(app_name)
    log_file = str(log_dir / f"{app_name}.log")

    fmt = "%(asctime)s.%(msecs)03dZ %(levelname)s %(process)d %(threadName)s %(name)s %(message)s"
    datefmt = "%Y-%m-%dT%H:%M:%S"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": fmt, "datefmt": datefmt,
            },
        },
        "handlers": {
            # records go through a queue
            "queue": {"class": "logging.handlers.QueueHandler", "queue": queue.Queue(-1)},
            "console": {"class": "logging.StreamHandler", "formatter": "standard",
                        "level": logging.getLevelName(console)},
        },
        "root": {"level": logging.getLevelName(root), "handlers": ["queue", "console"]},
        # the listener end of the queue writes the file
        "_file_settings": {
            "filename": log_file,
            "maxBytes": 1024 * 1024 * 5,
            "backupCount": int(os.getenv("QVQ_LOG_BACKUP_COUNT", 5)),
            "encoding": "utf-8",
            "format": fmt,
            "datefmt": datefmt
        },
    }


class LogSystem:
    """Thin wrapper owning the QueueListener."""
    def __init__(self, cfg: dict):
        # dictConfig would reject the private key
        file_settings = cfg.pop("_file_settings")
        logging.config.dictConfig(cfg)

        qh: QueueHandler | None = None
        for h in logging.getLogger().handlers:
            if isinstance(h, QueueHandler):
                qh = h
                break
        if qh is None:
            raise RuntimeError("QueueHandler not found.")

        # kept so levels can be changed later
        self._console_handler = None
        for h in logging.getLogger().handlers:
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
                self._console_handler = h
                break

        self._file_handler = RotatingFileHandler(
            file_settings["filename"],
            maxBytes=file_settings["maxBytes"],
            backupCount=file_settings["backupCount"],
            encoding=file_settings["encoding"],
        )
        self._file_handler.setFormatter(logging.Formatter(file_settings["format"], file_settings["datefmt"]))

        self.listener = QueueListener(qh.queue, self._file_handler, respect_handler_level=True)
        self.listener.start()

    @classmethod
    def from_levels(cls, app_name: str,
                    root_level: int | str | None = None,
                    console_level: int | str | None = None,
                    log_dir: Path | None = None) -> LogSystem:
        return cls(build_config(app_name, root_level, console_level, log_dir))

    def apply_levels(self, root_level: int, console_level: int | None = None, file_level: int | None = None) -> None:
        """Change levels after startup."""
        logging.getLogger().setLevel(root_level)
        if self._console_handler is not None and console_level is not None:
            self._console_handler.setLevel(console_level)
        if file_level is not None:
            self._file_handler.setLevel(file_level)

    def stop(self):
        self.listener.stop()
        self._file_handler.close()


def apply_logging_policy(logs: LogSystem, settings: AppSettingsManager) -> None:
    """Switch output levels according to the run mode."""
    mode = getattr(settings, "run_mode", None)
    if mode is None:
        mode = RunMode.DEVELOPMENT if getattr(settings, "dev_mode", False) else RunMode.PRODUCTION

    if mode == RunMode.DEVELOPMENT or mode == RunMode.VERBOSE:
        root = logging.DEBUG
        console = logging.DEBUG
        file = logging.DEBUG
    else:
        root = logging.DEBUG
        console = level_from_name(getattr(settings, "logging_level", "INFO"))
        file = logging.DEBUG

    logs.apply_levels(root_level=root, console_level=console, file_level=file)


def install_qt_message_handler():
    try:
        from PySide6.QtCore import QtMsgType, qInstallMessageHandler

        levels = {
            QtMsgType.QtDebugMsg: logging.DEBUG,
            QtMsgType.QtInfoMsg: logging.INFO,
            QtMsgType.QtWarningMsg: logging.WARNING,
            QtMsgType.QtCriticalMsg: logging.ERROR,
            QtMsgType.QtFatalMsg: logging.CRITICAL,
        }

        def handler(msg_type, context, message):
            logging.getLogger("Qt").log(levels.get(msg_type, logging.ERROR), message)

        qInstallMessageHandler(handler)
        logging.getLogger("Qt").info("Qt message handler installed.")
    except ImportError:
        logging.getLogger(__name__).exception("Failed to install Qt message handler.")
