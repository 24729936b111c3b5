# NOTE:
# Logging, crash handlers and the Qt message handler must be set up
#  before creating the QApplication instance.

import logging
import sys

from PySide6 import QtWidgets

from vcx.app.app_settings_manager import AppSettingsManager
from vcx.app.logging_setup import (
    apply_logging_policy,
    install_crash_handlers,
    install_qt_message_handler,
    LogSystem,
)
from vcx.ui.mainwindow import MainWindow

logger = logging.getLogger(__name__)


def main():
    logs = LogSystem("vcx")
    install_crash_handlers(logs.log_file.parent, "vcx")
    install_qt_message_handler()

    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication(sys.argv)

    logger.info("App start")
    settings_mgr = AppSettingsManager()
    apply_logging_policy(logs, settings_mgr)

    main_window = MainWindow(settings_mgr)
    main_window.show()

    app.aboutToQuit.connect(logs.stop)
    try:
        rc = app.exec()
        logger.info("App exit (rc=%s)", rc)
        sys.exit(rc)
    finally:
        logs.stop()


if __name__ == "__main__":
    main()
