"""Allow running TwinTimer as a module: python -m twintimer."""

import logging
import sys

from PyQt6.QtWidgets import QApplication

from .app import TwinTimerApp


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = QApplication(sys.argv)
    app.setApplicationName("TwinTimer")
    app.setOrganizationName("TwinTimer")

    window = TwinTimerApp()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
