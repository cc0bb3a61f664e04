from __future__ import annotations

from typing import NamedTuple, Optional, Tuple


class TrimRect(NamedTuple):
    """Region to trim, in image pixels. Non-positive width or height means no selection."""

    x: int
    y: int
    width: int
    height: int

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @classmethod
    def from_corners(cls, ax: int, ay: int, bx: int, by: int) -> "TrimRect":
        return cls(min(ax, bx), min(ay, by), abs(bx - ax), abs(by - ay))

    def clamped(self, bound_width: int, bound_height: int) -> "TrimRect":
        """Intersection with (0, 0, bound_width, bound_height)."""
        left = max(0, self.x)
        top = max(0, self.y)
        right = min(bound_width, self.x + self.width)
        bottom = min(bound_height, self.y + self.height)
        if right <= left or bottom <= top:
            return NO_SELECTION
        return TrimRect(left, top, right - left, bottom - top)


NO_SELECTION = TrimRect(0, 0, 0, 0)


class TrimRectAssembler:
    """Builds a TrimRect from a stream of selected pixels.

    The first pixel after reset() anchors the rectangle; each later pixel
    yields the rectangle spanning anchor and pixel. A lone click therefore
    produces an empty rect, which hides the overlay.
    """

    def __init__(self, bounds: Optional[Tuple[int, int]] = None):
        self.bounds = bounds
        self.anchor: Optional[Tuple[int, int]] = None

    def reset(self):
        self.anchor = None

    def extend(self, x: int, y: int) -> TrimRect:
        if self.anchor is None:
            self.anchor = (x, y)
        ax, ay = self.anchor
        rect = TrimRect.from_corners(ax, ay, x, y)
        if self.bounds is not None:
            rect = rect.clamped(*self.bounds)
        return rect
