"""
Pure geometry for the trimming canvas.

Three spaces are involved:

* image space: pixels of the decoded image, origin at its top-left texel;
* fitted space: the image letterboxed into the view (``FitTransform``);
* screen space: fitted space after the user's pan/zoom ``QTransform``.

``screen = user ∘ fit ∘ image``. QTransform composes left to right
(``a * b`` applies ``a`` first), so the full mapping is ``fit * user``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from PySide6.QtCore import QPointF
from PySide6.QtGui import QTransform

Size = Tuple[float, float]


class DegenerateGeometryError(ValueError):
    """Image or view has a zero/negative extent, or the transform can't be inverted."""


@dataclass(frozen=True)
class FitTransform:
    scale: float
    origin: QPointF

    def to_qtransform(self) -> QTransform:
        return QTransform(self.scale, 0.0, 0.0, self.scale, self.origin.x(), self.origin.y())


def is_degenerate(size: Size) -> bool:
    width, height = size
    return not (width > 0 and height > 0)


def fit_transform(image_size: Size, view_size: Size) -> FitTransform:
    """
    Scale and origin that letterbox the image into the view.

    The image keeps its aspect ratio and is centered on the axis that has
    spare room; the other axis is flush with the view edges.
    """
    if is_degenerate(image_size) or is_degenerate(view_size):
        raise DegenerateGeometryError(f"cannot fit image {image_size} into view {view_size}")

    img_w, img_h = image_size
    view_w, view_h = view_size

    if img_w / img_h < view_w / view_h:
        # Relatively taller than the view: fit height, pillarbox
        scale = view_h / img_h
        origin = QPointF((view_w - img_w * scale) / 2, 0.0)
    else:
        scale = view_w / img_w
        origin = QPointF(0.0, (view_h - img_h * scale) / 2)
    return FitTransform(scale, origin)


def combined_transform(fit: FitTransform, user: QTransform) -> QTransform:
    """Full image -> screen transform."""
    return fit.to_qtransform() * user


def effective_scale(fit: FitTransform, user: QTransform) -> float:
    """Uniform scale of ``fit`` followed by ``user``."""
    return fit.scale * math.sqrt(abs(user.determinant()))


def image_to_screen(point: QPointF, fit: FitTransform, user: QTransform) -> QPointF:
    fitted = QPointF(point.x() * fit.scale, point.y() * fit.scale) + fit.origin
    return user.map(fitted)


def screen_to_image(point: QPointF, fit: FitTransform, user: QTransform) -> QPointF:
    """Inverse of image_to_screen: undo the user transform, then the fit."""
    inverse, invertible = user.inverted()
    if not invertible:
        raise DegenerateGeometryError("user transform is not invertible")
    fitted = inverse.map(point) - fit.origin
    return QPointF(fitted.x() / fit.scale, fitted.y() / fit.scale)
