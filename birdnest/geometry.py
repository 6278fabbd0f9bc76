"""
Planar geometry for the no-fly zone.

Drone positions are reported in millimeters on a flat plane, so plain
Euclidean distance is exact here (no great-circle correction needed).
"""

import math
from typing import Iterable, Sequence, Tuple

import numpy as np

Point = Tuple[float, float]


def distance_to_center(position: Point, center: Point) -> float:
    """Euclidean distance in millimeters between a position and the zone center."""
    dx = position[0] - center[0]
    dy = position[1] - center[1]
    return math.sqrt(dx ** 2 + dy ** 2)


def distances_to_center(positions: Iterable[Sequence[float]], center: Point) -> np.ndarray:
    """
    Vectorised distance_to_center for a whole snapshot.

    Returns a 1-D float array in the same order as positions.
    """
    points = np.asarray(list(positions), dtype=float).reshape(-1, 2)
    deltas = points - np.asarray(center, dtype=float)
    return np.sqrt(np.sum(deltas ** 2, axis=1))


def is_within_zone(distance_mm: float, radius_mm: float) -> bool:
    """Zone boundary is inclusive."""
    return distance_mm <= radius_mm
