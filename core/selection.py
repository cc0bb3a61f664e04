from __future__ import annotations

from typing import Optional, Tuple

from PySide6.QtCore import QObject, QPointF, Signal
from PySide6.QtGui import QTransform

from core.geometry import DegenerateGeometryError, FitTransform, screen_to_image
from core.log import get_logger

logger = get_logger(__name__)


class SelectionTracker(QObject):
    """Turns screen-space pointer samples into image pixels.

    Rectangle assembly is left to whoever listens to pixel_selected.
    """

    selection_started = Signal()
    pixel_selected = Signal(int, int)

    def select(
        self,
        screen_point: QPointF,
        fit: Optional[FitTransform],
        user: QTransform,
        begins: bool = False,
    ) -> Optional[Tuple[int, int]]:
        if fit is None:
            return None

        try:
            pt = screen_to_image(screen_point, fit, user)
        except DegenerateGeometryError as e:
            logger.debug(f"Skipping selection: {e}")
            return None
        # Truncate toward zero, not floor
        pixel = (int(pt.x()), int(pt.y()))

        if begins:
            self.selection_started.emit()
        self.pixel_selected.emit(*pixel)
        return pixel
