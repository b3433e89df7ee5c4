from __future__ import annotations
import logging
import sys

from PySide6.QtWidgets import QApplication

from core.config import get_settings
from core.services.client_service import ClientService
from core.services.sale_service import SaleService
from core.storage.factory import build_repositories
from ui.main_window import MainWindow


def main() -> int:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    clients_repo, sales_repo = build_repositories(settings)

    app = QApplication(sys.argv)
    win = MainWindow(ClientService(clients_repo), SaleService(sales_repo), settings)
    win.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
