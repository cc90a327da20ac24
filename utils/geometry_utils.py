"""
Geometry utility functions for plan-view ray casting and angle calculations.
"""

import math
from typing import Optional, Tuple

import numpy as np

from models.geometry import BoundingBox

MM_TO_M = 0.001
M_TO_MM = 1000.0


def normalize_vector(vector) -> Optional[np.ndarray]:
    """
    Normalize a vector to unit length.

    Args:
        vector: Input vector

    Returns:
        Unit vector, or None for a (near) zero vector
    """
    v = np.asarray(vector, dtype=float)
    magnitude = float(np.linalg.norm(v))
    if magnitude < 1e-9:
        return None
    return v / magnitude


def horizontal_direction(vector) -> Optional[np.ndarray]:
    """Unit projection of a 3D vector onto the XY plane, or None if it is vertical."""
    v = np.asarray(vector, dtype=float)
    return normalize_vector((v[0], v[1], 0.0))


def rotate_xy(direction, angle_rad: float) -> np.ndarray:
    """Rotate a direction about the Z axis; the result is horizontal."""
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    d = np.asarray(direction, dtype=float)
    return np.array([d[0] * c - d[1] * s, d[0] * s + d[1] * c, 0.0])


def ray_box_2d_distance(origin, direction, bbox: BoundingBox, eps: float = 1e-9) -> Optional[float]:
    """
    Slab test of a plan-view ray against the XY footprint of a box.

    Args:
        origin: Ray origin (only X, Y used)
        direction: Ray direction (only X, Y used, need not be unit)
        bbox: Box to test
        eps: Parallel tolerance

    Returns:
        Ray parameter of the first hit at or beyond the origin, or None
    """
    ox, oy = float(origin[0]), float(origin[1])
    dx, dy = float(direction[0]), float(direction[1])
    tmin, tmax = -1e30, 1e30

    for o, d, lo, hi in ((ox, dx, bbox.min[0], bbox.max[0]), (oy, dy, bbox.min[1], bbox.max[1])):
        if abs(d) < eps:
            if o < lo or o > hi:
                return None
            continue
        t1 = (lo - o) / d
        t2 = (hi - o) / d
        tmin = max(tmin, min(t1, t2))
        tmax = min(tmax, max(t1, t2))

    if tmax < max(tmin, 0.0):
        return None
    t_hit = tmin if tmin >= 0 else tmax
    if t_hit < 0:
        return None
    return t_hit


def elevation_angle_deg(dz: float, horizontal_distance: float, floor_deg: float = 20.0) -> float:
    """
    Elevation angle atan(dz / x) in degrees, never below `floor_deg`.
    Degenerate input (x <= 0, dz <= 0, non-finite) yields the floor.
    """
    if not (horizontal_distance > 0) or not (dz > 0):
        return floor_deg
    angle = math.degrees(math.atan(dz / horizontal_distance))
    if not math.isfinite(angle):
        return floor_deg
    return max(floor_deg, angle)


def point_in_polygon(point: Tuple[float, float], polygon) -> bool:
    """
    Even-odd crossing test with a ray towards +X. Horizontal edges are ignored,
    so a point exactly on a vertex is classified deterministically.

    Args:
        point: (x, y)
        polygon: Sequence of (x, y[, z]) vertices, open or closed

    Returns:
        True if the point is inside
    """
    if polygon is None or len(polygon) < 3:
        return False

    x, y = float(point[0]), float(point[1])
    inside = False
    n = len(polygon)
    for i in range(n):
        x1, y1 = float(polygon[i][0]), float(polygon[i][1])
        x2, y2 = float(polygon[(i + 1) % n][0]), float(polygon[(i + 1) % n][1])
        if abs(y2 - y1) < 1e-9:
            continue
        if (y1 > y) != (y2 > y):
            x_inters = (y - y1) * (x2 - x1) / (y2 - y1) + x1
            if x < x_inters:
                inside = not inside
    return inside
