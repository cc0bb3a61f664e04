from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from core.log import get_logger
from core.trim_rect import TrimRect

logger = get_logger(__name__)


class RedrawPipeline(QObject):
    """Merges every redraw trigger into redraw_requested.

    Holds the latest TrimRect in a single slot. Triggers without a payload
    (image loaded, view resized, transform changed) replay that slot, so a
    redraw always sees the current rectangle no matter which source fired.
    Until a rectangle has been set, those triggers are dropped.
    """

    redraw_requested = Signal(object)  # TrimRect
    trim_rect_changed = Signal(object)  # TrimRect

    def __init__(self, reset_transform: Optional[Callable[[], None]] = None, parent=None):
        super().__init__(parent)
        self._reset_transform = reset_transform
        self._latest: Optional[TrimRect] = None

    @property
    def trim_rect(self) -> Optional[TrimRect]:
        return self._latest

    def subscribe(self, slot: Callable[[TrimRect], None]):
        """Connect slot and replay the latest rectangle to it once."""
        self.redraw_requested.connect(slot)
        if self._latest is not None:
            slot(self._latest)

    # ---- Sources ----
    def set_trim_rect(self, rect):
        rect = TrimRect(*rect)
        self._latest = rect
        self.trim_rect_changed.emit(rect)
        self.redraw_requested.emit(rect)

    def image_loaded(self):
        # Transform must be back to identity before the replayed draw
        if self._reset_transform is not None:
            self._reset_transform()
        self._replay()

    def view_resized(self):
        self._replay()

    def transform_changed(self):
        self._replay()

    def _replay(self):
        if self._latest is None:
            logger.debug("no trim rect yet, skipping redraw")
            return
        self.redraw_requested.emit(self._latest)
