from __future__ import annotations

import logging
import sys

from PySide6.QtWidgets import QApplication

from revenuecalc.config import get_settings
from revenuecalc.services.customer_directory import load_customer_directory
from revenuecalc.services.dispatch import ThreadDispatcher
from revenuecalc.services.report_client import ReportingServiceClient
from revenuecalc.ui.main_window import APP_NAME, MainWindow
from revenuecalc.viewmodels.report_view_model import ReportViewModel

APP_VERSION = "v1.0"


def main() -> int:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)

    dispatcher = ThreadDispatcher()
    view_model = ReportViewModel(
        ReportingServiceClient(settings.api_base),
        load_customer_directory(settings.customer_directory_path),
        dispatcher=dispatcher,
    )
    window = MainWindow(view_model)
    window.show()
    exit_code = app.exec()
    dispatcher.shutdown()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
