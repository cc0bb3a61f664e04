from __future__ import annotations

import math

from PySide6.QtCore import QPointF
from PySide6.QtGui import QTransform

from core.log import get_logger

logger = get_logger(__name__)


def magnification_factor(magnification: float) -> float:
    """Scale factor for a magnification delta.

    Positive deltas grow linearly; negative ones shrink by the reciprocal
    of the matching growth, so the factor stays positive for any delta.
    """
    if magnification >= 0.0:
        return 1.0 + magnification
    return 1.0 / (1.0 - magnification)


class TransformState:
    """Accumulated pan/zoom applied on top of the fit transform.

    Every update is post-multiplied onto the current transform, i.e. it acts
    in screen space after everything accumulated so far. Scale and
    translation are unbounded.
    """

    def __init__(self):
        self._transform = QTransform()

    @property
    def transform(self) -> QTransform:
        return QTransform(self._transform)

    @property
    def scale(self) -> float:
        return math.sqrt(abs(self._transform.determinant()))

    def is_identity(self) -> bool:
        return self._transform.isIdentity()

    def reset(self):
        self._transform = QTransform()

    def zoom(self, magnification: float, pivot: QPointF) -> float:
        """Zoom about a screen-space pivot; the pivot stays where it is on screen."""
        factor = magnification_factor(magnification)
        move_x = pivot.x() * (factor - 1)
        move_y = pivot.y() * (factor - 1)

        self._transform = (
            self._transform
            * QTransform.fromScale(factor, factor)
            * QTransform.fromTranslate(-move_x, -move_y)
        )
        logger.debug(f"zoom m={magnification:.3f} factor={factor:.3f} pivot=({pivot.x():.1f}, {pivot.y():.1f})")
        return factor

    def pan(self, dx: float, dy: float):
        self._transform = self._transform * QTransform.fromTranslate(dx, dy)
