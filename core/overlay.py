from __future__ import annotations

from typing import NamedTuple, Optional

from PySide6.QtCore import QPointF, QRectF
from PySide6.QtGui import QTransform

from core.geometry import FitTransform, Size, effective_scale, image_to_screen, is_degenerate
from core.trim_rect import TrimRect

DEFAULT_BORDER_RATIO = 0.3


class OverlayState(NamedTuple):
    visible: bool
    rect: QRectF
    border_width: float


HIDDEN = OverlayState(False, QRectF(), 0.0)


def compute_overlay(
    trim_rect: TrimRect,
    fit: Optional[FitTransform],
    user: QTransform,
    view_size: Size,
    border_ratio: float = DEFAULT_BORDER_RATIO,
) -> OverlayState:
    """Screen-space bounds of the trim overlay.

    The border grows with the total scale so the outline keeps the same
    weight relative to the image at every zoom level.
    """
    if trim_rect.is_empty or fit is None or is_degenerate(view_size):
        return HIDDEN

    scale = effective_scale(fit, user)
    top_left = image_to_screen(QPointF(trim_rect.x, trim_rect.y), fit, user)
    rect = QRectF(top_left.x(), top_left.y(), trim_rect.width * scale, trim_rect.height * scale)
    return OverlayState(True, rect, border_ratio * scale)
