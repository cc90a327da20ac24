"""
Geometry primitives: bounding boxes, rigid transforms, planes and edge surfaces.
All coordinates are in meters in the host (project) frame unless stated otherwise.
"""

from typing import List, Tuple, Optional
from dataclasses import dataclass, field
import math

import numpy as np
import trimesh


Point3 = Tuple[float, float, float]

# Index pairs into BoundingBox.corners()
BOX_EDGES: List[Tuple[int, int]] = [
    (0, 1), (0, 2), (1, 3), (2, 3),
    (4, 5), (4, 6), (5, 7), (6, 7),
    (0, 4), (1, 5), (2, 6), (3, 7),
]


@dataclass(frozen=True, eq=False)
class Transform:
    """Rigid transform: p_host = rotation @ p_local + origin."""

    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))
    origin: np.ndarray = field(default_factory=lambda: np.zeros(3))

    @classmethod
    def identity(cls) -> 'Transform':
        return cls(np.eye(3), np.zeros(3))

    @classmethod
    def translation(cls, x: float, y: float, z: float) -> 'Transform':
        return cls(np.eye(3), np.array([x, y, z], dtype=float))

    @classmethod
    def rotation_z(cls, angle_rad: float, origin: Point3 = (0.0, 0.0, 0.0)) -> 'Transform':
        """Rotation about the world Z axis followed by a translation to `origin`."""
        c, s = math.cos(angle_rad), math.sin(angle_rad)
        rot = np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])
        return cls(rot, np.asarray(origin, dtype=float))

    @property
    def is_identity(self) -> bool:
        return bool(np.allclose(self.rotation, np.eye(3)) and np.allclose(self.origin, 0.0))

    def of_point(self, point) -> np.ndarray:
        return self.rotation @ np.asarray(point, dtype=float) + self.origin

    def of_points(self, points) -> np.ndarray:
        pts = np.asarray(points, dtype=float).reshape(-1, 3)
        return pts @ self.rotation.T + self.origin

    def of_vector(self, vector) -> np.ndarray:
        return self.rotation @ np.asarray(vector, dtype=float)


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounding box."""

    min: Point3
    max: Point3

    @property
    def center(self) -> Point3:
        return (
            0.5 * (self.min[0] + self.max[0]),
            0.5 * (self.min[1] + self.max[1]),
            0.5 * (self.min[2] + self.max[2]),
        )

    @property
    def size(self) -> Point3:
        return (
            self.max[0] - self.min[0],
            self.max[1] - self.min[1],
            self.max[2] - self.min[2],
        )

    def corners(self) -> np.ndarray:
        """8 corners, ordered to match BOX_EDGES."""
        (x0, y0, z0), (x1, y1, z1) = self.min, self.max
        return np.array([
            [x0, y0, z0], [x0, y1, z0], [x1, y0, z0], [x1, y1, z0],
            [x0, y0, z1], [x0, y1, z1], [x1, y0, z1], [x1, y1, z1],
        ], dtype=float)

    def transformed(self, transform: Optional[Transform]) -> 'BoundingBox':
        if transform is None or transform.is_identity:
            return self
        return BoundingBox.from_points(transform.of_points(self.corners()))

    @classmethod
    def from_points(cls, points) -> 'BoundingBox':
        pts = np.asarray(points, dtype=float).reshape(-1, 3)
        lo = pts.min(axis=0)
        hi = pts.max(axis=0)
        return cls(tuple(float(v) for v in lo), tuple(float(v) for v in hi))

    def intersects_xy(self, other: 'BoundingBox', tolerance: float = 0.0) -> bool:
        """
        Plan-view overlap test with both boxes grown by `tolerance`.

        Args:
            other: Box to test against
            tolerance: Growth applied to each box in meters

        Returns:
            True if the grown boxes overlap in X and Y
        """
        if other is None:
            return False
        x_overlap = min(self.max[0], other.max[0]) + tolerance - (max(self.min[0], other.min[0]) - tolerance)
        y_overlap = min(self.max[1], other.max[1]) + tolerance - (max(self.min[1], other.min[1]) - tolerance)
        return x_overlap > 0 and y_overlap > 0

    def within_xy_radius(self, point, radius: float) -> bool:
        """True if the box overlaps the square of half-size `radius` around `point`."""
        return (
            self.min[0] < point[0] + radius and self.max[0] > point[0] - radius and
            self.min[1] < point[1] + radius and self.max[1] > point[1] - radius
        )


@dataclass(frozen=True)
class Plane:
    """Plane through `origin` with unit `normal`. Used for wall interior faces."""

    origin: Point3
    normal: Point3

    def transformed(self, transform: Optional[Transform]) -> 'Plane':
        if transform is None or transform.is_identity:
            return self
        return Plane(
            tuple(float(v) for v in transform.of_point(self.origin)),
            tuple(float(v) for v in transform.of_vector(self.normal)),
        )

    def intersect_line(self, point, direction) -> Optional[float]:
        """Parameter d such that point + d * direction lies on the plane, or None if parallel."""
        n = np.asarray(self.normal, dtype=float)
        denom = float(n @ np.asarray(direction, dtype=float))
        if abs(denom) <= 1e-6:
            return None
        return float(n @ (np.asarray(self.origin, dtype=float) - np.asarray(point, dtype=float))) / denom


@dataclass
class SurfaceGeometry:
    """
    Triangulated surface reduced to what the silhouette search needs:
    unique corner points and unique undirected edges between them.
    """

    vertices: np.ndarray  # (N, 3)
    edges: np.ndarray  # (M, 2) int

    @classmethod
    def from_trimesh(cls, mesh: trimesh.Trimesh) -> Optional['SurfaceGeometry']:
        """Build from a trimesh mesh; returns None for empty meshes."""
        if mesh is None or len(mesh.vertices) == 0 or len(mesh.faces) == 0:
            return None
        mesh = mesh.copy()
        mesh.merge_vertices()
        return cls(np.asarray(mesh.vertices, dtype=float), np.asarray(mesh.edges_unique, dtype=int))

    @classmethod
    def from_bounding_box(cls, bbox: BoundingBox) -> 'SurfaceGeometry':
        return cls(bbox.corners(), np.array(BOX_EDGES, dtype=int))

    def transformed(self, transform: Optional[Transform]) -> 'SurfaceGeometry':
        if transform is None or transform.is_identity:
            return self
        return SurfaceGeometry(transform.of_points(self.vertices), self.edges)

    @property
    def edge_count(self) -> int:
        return int(len(self.edges))
