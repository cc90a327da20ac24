"""
Daylight calculator: obstruction angle α (horizontal ray fan) and overhang
angle β/ε (vertical cross-section silhouette search) per window.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

import numpy as np

from models.building import Obstruction, Window
from models.calculation_result import RayResult, WindowResult
from utils.config_loader import DaylightConfig
from utils.geometry_utils import (
    MM_TO_M, M_TO_MM, elevation_angle_deg, horizontal_direction, normalize_vector,
    ray_box_2d_distance, rotate_xy
)
from .glazing_geometry import GlassBounds, GlazingGeometryResolver
from .scene_index import SceneIndex

logger = logging.getLogger(__name__)

OPENING_MAKER_MESSAGE = 'Element is sparingmaker; α/β/glas niet berekend.'
OPENING_MAKER_REASON = 'Sparingmaker'
NO_SECTION_OBSTRUCTION = 'Geen belemmeringen in doorsnedevlak (≤5 m) gevonden.'
NO_OBSTRUCTION_ABOVE_MID = 'Geen belemmeringen boven midden effectieve glas gevonden.'
WALL_REASON = 'Wand / sparing (geometrie)'

PLANE_EPS = 1e-9


@dataclass
class FanFrame:
    """Horizontal fan orientation for one window."""

    base_dir: np.ndarray  # Fan centre direction (inward unless flipped)
    normal: np.ndarray  # Optical axis used for distances (opposite of base_dir)


@dataclass
class BetaResult:
    """Outcome of the cross-section search."""

    beta_deg: Optional[float] = None
    beta_rad: Optional[float] = None
    reason: Optional[str] = None
    point: Optional[Tuple[float, float, float]] = None
    obstruction_id: Optional[str] = None
    bounds: Optional[GlassBounds] = None
    edges_tested: int = 0


@dataclass
class _SectionPoint:
    point: np.ndarray
    obstruction: Obstruction


class DaylightCalculator:
    """
    Per-window α/β calculator working against a shared, read-only SceneIndex.
    """

    def __init__(self, scene: SceneIndex, config: Optional[DaylightConfig] = None):
        self.scene = scene
        self.config = config or DaylightConfig()
        self.glazing = GlazingGeometryResolver(self.config, scene)

    def fan_frame(self, window: Window) -> Optional[FanFrame]:
        """Fan directions from the window facing, None if the facing is vertical or missing."""
        if window.facing is None:
            return None
        horiz = horizontal_direction(window.facing)
        if horiz is None:
            return None
        base_dir, normal = -horiz, horiz
        if self.config.flip_alpha_fan:
            base_dir, normal = -base_dir, -normal
        return FanFrame(base_dir=base_dir, normal=normal)

    def process_window(self, window: Window) -> WindowResult:
        """
        Run glass area, α and β for a single window.

        Degenerate input never raises; it leaves the affected fields None and
        explains why in `message` / `beta_reason`.

        Args:
            window: Window to process

        Returns:
            WindowResult
        """
        result = WindowResult(window_id=window.id)

        if window.is_opening_maker():
            result.message = OPENING_MAKER_MESSAGE
            result.beta_reason = OPENING_MAKER_REASON
            return result

        if window.bbox is None:
            result.message = 'Geen bounding box gevonden voor kozijn.'
            return result

        if window.facing is None:
            result.message = 'Element is geen kozijn (geen FacingOrientation).'
            return result

        fan = self.fan_frame(window)
        if fan is None:
            result.message = 'FacingOrientation is nulvector.'
            return result

        if self.config.do_glass:
            result.glass_m2 = self.glazing.compute_glazing_area(window)

        z_ref, z_ref_mm = self.glazing.resolve_reference_height(window)
        result.z_ref_mm = z_ref_mm
        sash_mm = self.glazing.sash_offset_mm(window)

        center = np.array([window.bbox.center[0], window.bbox.center[1], z_ref])
        face_walls = self.face_candidate_walls(window)
        start = self.start_on_interior_face(face_walls, center, fan.normal)
        assembly_ids = self.assembly_wall_ids(window, face_walls)

        if self.config.do_alpha:
            result.alpha_avg_deg, result.rays = self.compute_alpha(start, fan, z_ref, assembly_ids)

        if self.config.do_beta:
            beta = self.compute_beta(window, start, fan.base_dir)
            result.beta_deg = beta.beta_deg
            result.beta_rad = beta.beta_rad
            result.beta_reason = beta.reason
            result.beta_obstruct_point = beta.point

        if result.alpha_avg_deg is not None and result.beta_obstruct_point is not None:
            capped = self.apply_overhang_rule(result.alpha_avg_deg, start, result.beta_obstruct_point)
            if capped != result.alpha_avg_deg:
                logger.debug(f"Window {window.id}: α {result.alpha_avg_deg:.2f}° capped by overhang to {capped:.2f}°")
                result.alpha_avg_deg = capped

        result.message = (
            f"P={z_ref_mm:.0f}mm (sash={sash_mm:.0f}) | "
            f"α {'aan' if self.config.do_alpha else 'uit'} / β {'aan' if self.config.do_beta else 'uit'}"
        )
        return result

    def face_candidate_walls(self, window: Window) -> List[Obstruction]:
        """Walls near enough to the window box to carry its interior face."""
        tolerance = self.config.face_search_tolerance_mm * MM_TO_M
        return [w for w in self.scene.walls() if w.bbox.intersects_xy(window.bbox, tolerance)]

    def start_on_interior_face(self, walls: List[Obstruction], center: np.ndarray, direction: np.ndarray) -> np.ndarray:
        """
        Project the window centre onto the interior wall faces along the optical
        axis `direction` (pointing out of the room) and keep the largest
        parameter: the face nearest the window centre.
        Falls back to the centre itself.
        """
        best = center
        best_d = -math.inf
        for wall in walls:
            for face in wall.interior_faces():
                d = face.intersect_line(center, direction)
                if d is not None and d > best_d:
                    best_d = d
                    best = center + d * np.asarray(direction, dtype=float)
        return best

    def assembly_wall_ids(self, window: Window, face_walls: List[Obstruction]) -> Set[str]:
        """
        Walls that belong to the window's own wall assembly and must not
        shade it: the host, plus tight-fitting walls running along the facade.
        Curved walls (no direction) within tolerance count as assembly too.
        """
        ids: Set[str] = set()
        if window.host_wall_id:
            ids.add(window.host_wall_id)

        tolerance = self.config.assembly_tolerance_mm * MM_TO_M
        facing = np.asarray(window.facing, dtype=float)
        for wall in face_walls:
            if not wall.bbox.intersects_xy(window.bbox, tolerance):
                continue
            direction = wall.direction
            if direction is None:
                ids.add(wall.id)
                continue
            wall_dir = normalize_vector(direction)
            if wall_dir is None or abs(float(wall_dir @ facing)) < 0.1:
                ids.add(wall.id)
        return ids

    def compute_alpha(
        self,
        start: np.ndarray,
        fan: FanFrame,
        z_ref: float,
        excluded_ids: Set[str]
    ) -> Tuple[float, List[RayResult]]:
        """
        Cast the horizontal fan against nearby wall footprints.

        Args:
            start: Ray origin on the interior face, at the reference height
            fan: Fan orientation
            z_ref: Glazing reference height (m)
            excluded_ids: Wall ids of the window's own assembly

        Returns:
            (average α in degrees, per-ray results)
        """
        cfg = self.config
        max_dist = cfg.alpha_max_distance_m
        candidates = [
            w for w in self.scene.walls()
            if w.id not in excluded_ids and w.bbox.within_xy_radius(start, max_dist)
        ]
        logger.debug(f"α: {len(candidates)} candidate wall(s) within {max_dist} m")

        rays: List[RayResult] = []
        for i in range(cfg.ray_count):
            angle_deg = cfg.angle_start_deg + i * cfg.angle_step_deg
            direction = rotate_xy(fan.base_dir, math.radians(angle_deg))

            best_t: Optional[float] = None
            best_wall: Optional[Obstruction] = None
            for wall in candidates:
                t = ray_box_2d_distance(start, direction, wall.bbox)
                if t is not None and 0 < t <= max_dist and (best_t is None or t < best_t):
                    best_t, best_wall = t, wall

            ray = RayResult(
                index=i,
                angle_offset_deg=angle_deg,
                alpha_deg=cfg.min_alpha_deg,
                z_ref_mm=z_ref * M_TO_MM,
                line_length_mm=max_dist * M_TO_MM,
            )

            end = start + direction * max_dist
            if best_wall is not None:
                z_obst = best_wall.bbox.max[2]
                hit = start + direction * best_t
                end = hit
                dist_n = float((hit - start)[:2] @ fan.normal[:2])
                if abs(dist_n) > 1e-6:
                    x_dist = abs(dist_n)
                    ray.x_dist_mm = x_dist * M_TO_MM
                    ray.alpha_deg = elevation_angle_deg(z_obst - z_ref, x_dist, cfg.min_alpha_deg)
                ray.d_horiz_mm = best_t * M_TO_MM
                ray.z_obst_mm = z_obst * M_TO_MM
                ray.line_length_mm = min(max_dist, best_t) * M_TO_MM
                ray.obstacle_id = best_wall.id

            ray.segment = (tuple(float(v) for v in start), tuple(float(v) for v in end))
            rays.append(ray)

        avg = sum(r.alpha_deg for r in rays) / len(rays) if rays else cfg.min_alpha_deg
        return avg, rays

    def apply_overhang_rule(self, alpha_deg: float, start: np.ndarray, point) -> float:
        """
        Cap α by the angle from the α reference point to β's obstruction point:
        an overhang in front of the fan hides anything steeper behind it.
        """
        p = np.asarray(point, dtype=float)
        dist_hor = float(np.hypot(p[0] - start[0], p[1] - start[1]))
        if dist_hor <= 1e-9:
            return alpha_deg
        angle_to_overhang = math.degrees(math.atan2(p[2] - start[2], dist_hor))
        if alpha_deg > angle_to_overhang:
            return max(self.config.min_alpha_deg, angle_to_overhang)
        return alpha_deg

    def compute_beta(self, window: Window, start_alpha: np.ndarray, fan_dir: np.ndarray) -> BetaResult:
        """
        Steepest overhang angle in the vertical plane through the optical axis.

        Every obstruction within the search square that reaches above the glass
        midpoint is cut by the plane; cut points in front of the window give
        candidate angles atan2(forward distance, height above midpoint).

        Args:
            window: Window being processed
            start_alpha: α ray origin; β uses its plan position
            fan_dir: Forward direction (horizontal unit vector)

        Returns:
            BetaResult (beta None with a reason when nothing qualifies)
        """
        cfg = self.config
        bounds = self.glazing.resolve_glass_bounds(window)
        b_eff, glass_top = bounds.b_eff, bounds.top_abs
        z_mid = 0.5 * (b_eff + glass_top)
        start = np.array([start_alpha[0], start_alpha[1], z_mid])
        fan_dir = np.asarray(fan_dir, dtype=float)

        t_vec = normalize_vector(np.cross([0.0, 0.0, 1.0], fan_dir))
        if t_vec is None:
            t_vec = np.array([1.0, 0.0, 0.0])

        max_dist = cfg.beta_max_distance_m
        excluded = {window.id, *window.sub_component_ids}
        nearby = [
            o for o in self.scene
            if o.id not in excluded and o.bbox.within_xy_radius(start, max_dist) and o.bbox.max[2] > z_mid
        ]

        section: List[_SectionPoint] = []
        edges_tested = 0
        budget_hit = False
        for obstruction in nearby:
            surface = self.scene.surface(obstruction)
            if surface.edge_count == 0:
                continue
            if edges_tested + surface.edge_count > cfg.max_edge_tests:
                budget_hit = True
                break
            edges_tested += surface.edge_count

            points = self._section_points(surface.vertices, surface.edges, start, t_vec)
            if len(points) == 0:
                continue

            forward = (points - start) @ fan_dir
            keep = points[(forward > 0) & (forward <= max_dist)]
            for p in keep:
                section.append(_SectionPoint(p, obstruction))
                if b_eff + PLANE_EPS < p[2] < glass_top - PLANE_EPS:
                    glass_top = float(p[2])

        if budget_hit:
            logger.warning(
                f"Window {window.id}: edge-test budget of {cfg.max_edge_tests} reached, "
                f"β based on {edges_tested} edges"
            )

        result = BetaResult(bounds=GlassBounds(b_eff, bounds.bottom_abs, glass_top), edges_tested=edges_tested)
        if not section:
            result.reason = NO_SECTION_OBSTRUCTION
            return result

        z_mid = 0.5 * (b_eff + glass_top)
        start = np.array([start_alpha[0], start_alpha[1], z_mid])

        best: Optional[Tuple[float, _SectionPoint]] = None
        for sp in section:
            d = float((sp.point[:2] - start[:2]) @ fan_dir[:2])
            if d <= 0 or d > max_dist:
                continue
            h = float(sp.point[2] - z_mid)
            if h <= 0:
                continue
            beta_rad = math.atan2(d, h)
            if best is None or beta_rad > best[0]:
                best = (beta_rad, sp)

        if best is None:
            result.reason = NO_OBSTRUCTION_ABOVE_MID
            return result

        beta_rad, sp = best
        result.beta_rad = beta_rad
        result.beta_deg = math.degrees(beta_rad)
        result.point = tuple(float(v) for v in sp.point)
        result.obstruction_id = sp.obstruction.id
        result.reason = WALL_REASON if sp.obstruction.is_wall else sp.obstruction.category_label
        logger.debug(f"Window {window.id}: β={result.beta_deg:.2f}° from {sp.obstruction.id}")
        return result

    @staticmethod
    def _section_points(vertices: np.ndarray, edges: np.ndarray, start: np.ndarray, t_vec: np.ndarray) -> np.ndarray:
        """
        Points where the edges of a surface meet the plane through `start`
        with normal `t_vec`. Surfaces lying wholly on one side give nothing.
        """
        t_vals = (vertices - start) @ t_vec
        if np.all(t_vals > PLANE_EPS) or np.all(t_vals < -PLANE_EPS):
            return np.empty((0, 3))

        i, j = edges[:, 0], edges[:, 1]
        ti, tj = t_vals[i], t_vals[j]
        pi, pj = vertices[i], vertices[j]
        on_i = np.abs(ti) <= PLANE_EPS
        on_j = np.abs(tj) <= PLANE_EPS

        parts = [pi[on_i], pj[on_j]]

        denom = tj - ti
        crossing = (ti * tj <= 0) & (np.abs(denom) > PLANE_EPS)
        if crossing.any():
            s = -ti[crossing] / denom[crossing]
            in_range = (s >= -0.01) & (s <= 1.01)
            s = s[in_range]
            a = pi[crossing][in_range]
            b = pj[crossing][in_range]
            parts.append(a + (b - a) * s[:, None])

        return np.vstack(parts) if parts else np.empty((0, 3))
