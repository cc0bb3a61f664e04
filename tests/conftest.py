import os

# Must be set before the first QApplication is created
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PIL import Image
from PySide6.QtCore import QSettings
from PySide6.QtGui import QImage

from core.image_loader import ImageHandle


@pytest.fixture
def settings(tmp_path):
    """QSettings backed by a throwaway ini file."""
    return QSettings(str(tmp_path / "settings.ini"), QSettings.Format.IniFormat)


@pytest.fixture
def sample_png(tmp_path):
    path = tmp_path / "sample.png"
    Image.new("RGB", (800, 600), (30, 60, 90)).save(path)
    return str(path)


@pytest.fixture
def landscape_handle():
    image = QImage(800, 600, QImage.Format.Format_RGB32)
    image.fill(0)
    return ImageHandle.from_image("landscape.png", image)
