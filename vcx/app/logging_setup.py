from __future__ import annotations

import logging
import logging.config
import os
import queue
import sys
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from typing import TextIO

import faulthandler

from vcx.app.app_settings_manager import AppSettingsManager, RunMode
from vcx.utils.log_util import level_from_name

logger = logging.getLogger(__name__)

# kept open for the life of the process; faulthandler writes to its fd
_crash_stream: TextIO | None = None


def install_crash_handlers(log_dir: Path, app_name: str = "vcx") -> Path | None:
    """
    Route fatal errors into the log directory.

    - faulthandler dumps native crashes to `<app_name>.crash.log`
    - uncaught Python exceptions go to the root logger at CRITICAL

    Safe to call more than once; the crash file is only opened the first time.

    :param log_dir: Directory holding the log files
    :param app_name: Prefix of the crash file name
    :return: Path of the crash file, or None if it could not be opened
    """
    global _crash_stream

    def _excepthook(exc_type, exc, tb):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc, tb)
            return
        logging.getLogger().critical("Uncaught exception", exc_info=(exc_type, exc, tb))

    sys.excepthook = _excepthook

    crash_file = Path(log_dir) / f"{app_name}.crash.log"
    if _crash_stream is None:
        try:
            _crash_stream = open(crash_file, "w", encoding="utf-8")
        except OSError:
            logger.warning("Crash log unavailable: %s", crash_file)
            return None
    faulthandler.enable(file=_crash_stream)
    crash_file = Path(_crash_stream.name)

    logger.info("%s started (frozen=%s, python=%s, cwd=%s)",
                app_name, getattr(sys, "frozen", False), sys.version.split()[0], os.getcwd())
    logger.info("Crash log: %s", crash_file)
    return crash_file


def default_log_dir(app_name: str) -> Path:
    base = Path.home() / f".{app_name.lower()}" / "logs"
    base.mkdir(parents=True, exist_ok=True)
    return base


def build_config(app_name: str, level: str | None = None, log_dir: Path | None = None) -> dict:
    """Build a logging config dict."""
    level = level or os.getenv("VCX_LOG_LEVEL", "INFO").upper()
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
            "queue": {"class": "logging.handlers.QueueHandler", "queue": queue.Queue(-1)},
            "console": {"class": "logging.StreamHandler", "formatter": "standard", "level": "INFO"},
        },
        "root": {"level": level, "handlers": ["queue", "console"]},
        # written by the QueueListener
        "_file_settings": {
            "filename": log_file,
            "maxBytes": 1024 * 1024 * 5,
            "backupCount": int(os.getenv("VCX_LOG_BACKUP_COUNT", 5)),
            "encoding": "utf-8",
            "format": fmt,
            "datefmt": datefmt
        },
    }


class LogSystem:
    """Thin wrapper owning the QueueListener that writes the log file."""
    def __init__(self, app_name: str, level: str | None = None):
        cfg = build_config(app_name, level)
        logging.config.dictConfig(cfg)

        # dictConfig does not hand back the queue, so look the handler up.
        qh: QueueHandler | None = None
        for h in logging.getLogger().handlers:
            if isinstance(h, QueueHandler):
                qh = h
                break
        if qh is None:
            raise RuntimeError("QueueHandler not found.")

        self._console_handler: logging.Handler | None = None
        for h in logging.getLogger().handlers:
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
                self._console_handler = h
                break

        file_settings = cfg["_file_settings"]
        file_handler = RotatingFileHandler(
            file_settings["filename"],
            maxBytes=file_settings["maxBytes"],
            backupCount=file_settings["backupCount"],
            encoding=file_settings["encoding"],
        )
        file_handler.setFormatter(logging.Formatter(file_settings["format"], file_settings["datefmt"]))
        self._file_handler: logging.Handler = file_handler
        self.log_file = Path(file_settings["filename"])

        self.listener = QueueListener(qh.queue, file_handler, respect_handler_level=True)
        self.listener.start()
        self._stopped = False

    @classmethod
    def from_levels(cls, app_name: str, root_level: int, console_level: int | None = None,
                    file_level: int | None = None) -> LogSystem:
        """Create the log system and apply numeric levels right away."""
        logs = cls(app_name, logging.getLevelName(root_level))
        logs.apply_levels(root_level, console_level, file_level)
        return logs

    def apply_levels(self, root_level: int, console_level: int | None = None, file_level: int | None = None) -> None:
        """Update levels after startup."""
        logging.getLogger().setLevel(root_level)
        if self._console_handler is not None and console_level is not None:
            self._console_handler.setLevel(console_level)
        if file_level is not None:
            self._file_handler.setLevel(file_level)

    def stop(self):
        if self._stopped:
            return
        self._stopped = True
        self.listener.stop()
        self._file_handler.close()


def apply_logging_policy(logs: LogSystem, settings: AppSettingsManager) -> None:
    """Pick log levels from the run mode and the configured level."""
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
        from PySide6.QtCore import qInstallMessageHandler

        def handler(msg_type, context, message):
            logging.getLogger("Qt").error(message)

        qInstallMessageHandler(handler)
        logging.getLogger("Qt").info("Qt message handler installed.")
    except Exception:
        logging.getLogger(__name__).exception("Failed to install Qt message handler.")
