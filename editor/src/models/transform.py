"""Geometry data structures for coordinate and rectangle representation."""
import math
from dataclasses import dataclass


@dataclass
class Vec2:
    """2D vector for coordinate pairs.

    Used for any x/y coordinate pair across different spaces:
    - Display pixels (CSS-scaled canvas on screen)
    - Canvas pixels (native output surface)
    - Layer source pixels
    """
    x: float
    y: float

    def __iter__(self):
        """Allow tuple unpacking: x, y = vec2"""
        return iter((self.x, self.y))


@dataclass
class Rect:
    """Axis-aligned rectangle stored as edges (right/bottom exclusive).

    Used across coordinate spaces:
    - Canvas space: layer footprints, crop and resize rectangles
    - Display space: overlay placement
    """
    left: float
    top: float
    right: float
    bottom: float

    @classmethod
    def from_xywh(cls, x, y, width, height) -> 'Rect':
        return cls(x, y, x + width, y + height)

    @property
    def width(self):
        return self.right - self.left

    @property
    def height(self):
        return self.bottom - self.top

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains(self, x, y) -> bool:
        """Inclusive hit test (edges count as inside)"""
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    def intersection(self, other: 'Rect') -> 'Rect':
        """Overlap of two rectangles; may be empty (zero or negative size)"""
        return Rect(
            max(self.left, other.left),
            max(self.top, other.top),
            min(self.right, other.right),
            min(self.bottom, other.bottom),
        )

    def rounded(self) -> 'Rect':
        """Snap every edge to the nearest pixel (halves round up)"""
        return Rect(*(int(math.floor(v + 0.5)) for v in self))

    def __iter__(self):
        """Allow tuple unpacking: left, top, right, bottom = rect"""
        return iter((self.left, self.top, self.right, self.bottom))
