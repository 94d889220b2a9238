"""
Geometry helper functions shared by the ball estimator, event detector,
and statistics aggregator.

All coordinates are image pixels with a top-left origin.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..data_structures import Point


@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned rectangle; containment is strict on every edge.
    """

    left: float
    top: float
    right: float
    bottom: float

    def contains(self, point: Point) -> bool:
        return self.left < point.x < self.right and self.top < point.y < self.bottom


def euclidean_distance(a: Point, b: Point) -> float:
    """
    Compute Euclidean distance between two 2D points.
    """
    return float(np.hypot(a.x - b.x, a.y - b.y))
