"""
Rectangle math on the local lot plane.

All coordinates are feet from the lot's front-left corner, y increasing
away from the street. Everything is axis-aligned; rotation is ignored.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Rect:
    """An axis-aligned rectangle: (x, y) is the street-side left corner."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        """Edge farthest from the street."""
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> tuple:
        return (self.x + self.width / 2, self.y + self.height / 2)


def rects_overlap(a: Rect, b: Rect) -> bool:
    """True when the interiors intersect. Touching edges do not overlap."""
    return a.x < b.right and a.right > b.x and a.y < b.bottom and a.bottom > b.y


def rect_gap(a: Rect, b: Rect) -> float:
    """
    Nearest distance between two rectangles.

    Zero when they overlap or touch, otherwise the Euclidean gap between
    the closest edges/corners.
    """
    dx = max(b.x - a.right, a.x - b.right, 0.0)
    dy = max(b.y - a.bottom, a.y - b.bottom, 0.0)
    return math.hypot(dx, dy)


def point_gap(rect: Rect, px: float, py: float) -> float:
    """Distance from a point to the nearest part of a rectangle (0 inside)."""
    dx = max(rect.x - px, px - rect.right, 0.0)
    dy = max(rect.y - py, py - rect.bottom, 0.0)
    return math.hypot(dx, dy)
