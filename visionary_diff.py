import logging
import sys

from PyQt5.QtWidgets import QApplication

from VD_Libs.ViewerLib.comparison_window import ComparisonWindow


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = QApplication(sys.argv)
    window = ComparisonWindow()
    window.show()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
