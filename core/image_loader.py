import os
from dataclasses import dataclass
from typing import Optional

from PySide6.QtCore import QMimeData
from PySide6.QtGui import QImage

VALID_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.tiff', '.tif', '.bmp', '.gif', '.webp')


@dataclass(frozen=True)
class ImageHandle:
    """A decoded image. Sizes are in pixels, DPI is ignored."""
    path: str
    image: QImage
    width: int
    height: int

    @classmethod
    def from_image(cls, path: str, image: QImage) -> "ImageHandle":
        return cls(path, image, image.width(), image.height())

    @property
    def size(self):
        return (self.width, self.height)

    @property
    def name(self):
        return os.path.basename(self.path)


def file_dialog_filter() -> str:
    patterns = " ".join(f"*{ext}" for ext in VALID_EXTENSIONS)
    return f"Images ({patterns});;All Files (*)"


def local_file_from_mime(mime_data: QMimeData) -> Optional[str]:
    """First local file in a drop payload, None if there is none."""
    if not mime_data.hasUrls():
        return None
    for url in mime_data.urls():
        if url.isLocalFile():
            return url.toLocalFile()
    return None
