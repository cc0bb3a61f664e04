from PySide6.QtCore import QRunnable, Signal, QObject
from PySide6.QtGui import QImage, QImageReader

class LoaderSignals(QObject):
    finished = Signal(str, QImage) # path, image
    error = Signal(str, str)

class ImageLoaderWorker(QRunnable):
    """Decodes one file off the GUI thread. Results arrive through queued signals."""
    def __init__(self, path):
        super().__init__()
        self.path = path
        self.signals = LoaderSignals()

    def run(self):
        try:
            reader = QImageReader(self.path)
            # Apply EXIF orientation so pixel coords match what is shown
            reader.setAutoTransform(True)

            if not reader.canRead():
                self.signals.error.emit(self.path, f"invalid image file: {reader.errorString()}")
                return

            image = reader.read()

            if image.isNull() or image.width() <= 0 or image.height() <= 0:
                self.signals.error.emit(self.path, f"failed to load image: {reader.errorString()}")
            else:
                self.signals.finished.emit(self.path, image)
        except Exception as e:
            self.signals.error.emit(self.path, str(e))
