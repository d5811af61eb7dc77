# NOTE:
# Logging must be set up before the QApplication instance is created so that
# Qt startup messages are captured.
import logging
import sys

from PySide6 import QtWidgets

from cubeview.app.app_settings_manager import AppSettingsManager
from cubeview.app.logging_setup import (
    LogSystem,
    apply_logging_policy,
    install_crash_handlers,
    install_qt_message_handler,
)
from cubeview.ui.error_notifier import ErrorNotifier
from cubeview.ui.preview_window import PreviewWindow

logger = logging.getLogger(__name__)

APP_NAME = "cubeview"


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv if argv is None else argv
    logs = LogSystem(APP_NAME)
    install_crash_handlers(logs.log_file.parent, APP_NAME)
    install_qt_message_handler()

    # 既存の QApplication インスタンスを取得。なければ新規作成。
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication(argv)

    settings_mgr = AppSettingsManager()
    apply_logging_policy(logs, settings_mgr)
    ErrorNotifier.configure(settings_mgr)
    logger.info("App start (run mode: %s)", settings_mgr.run_mode)

    title = argv[1] if len(argv) > 1 else "3D Preview"
    window = PreviewWindow(settings_mgr, title=title)
    window.show()

    # Qt 終了時にログを確実に止める
    app.aboutToQuit.connect(logs.stop)
    try:
        rc = app.exec()
        logger.info("App exit (rc=%s)", rc)
        return rc
    finally:
        logs.stop()


if __name__ == "__main__":
    sys.exit(main())
