import sys
from PySide6.QtWidgets import QApplication
from core.log import configure_logging
from ui.main_window import MainWindow


def main():
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("ImageTrimmer")
    window = MainWindow()
    window.show()
    if len(sys.argv) > 1:
        window.open_image(sys.argv[1])
    sys.exit(app.exec())

if __name__ == "__main__":
    main()
