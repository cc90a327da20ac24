"""
Glazing geometry resolver.

Turns a window's typed frame parameters into:
- the reference height P used for obstruction angles,
- the effective glass band (bottom/top) used by the overhang search,
- the net glazed area Ad (grid of panes minus frame, mullions, sashes,
  the 600 mm floor cut and any physical obstruction above the glass).
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set, Tuple

import numpy as np

from models.building import Window, WindowFrame
from utils.config_loader import DaylightConfig
from utils.geometry_utils import MM_TO_M, M_TO_MM, horizontal_direction
from .scene_index import SceneIndex

logger = logging.getLogger(__name__)

# Name fragments that mark a window as having an operable sash
WINDOW_OPERABLE_TOKENS = (
    'draai', 'kiep', 'val', 'schuif', 'stolp', 'dk',
    'openend', 'vleugel', 'sash', 'operable', 'vent',
)

# Per-pane filling labels
PANEL_TOKENS = ('paneel', 'panel', 'dicht', 'bord', 'plaat')
OPERABLE_PANE_TOKENS = ('raam', 'draai', 'kiep', 'val', 'opend', 'openend', 'open', 'schuif', 'dk', ' op ')

# Upward scan pattern: fractions of the window width, offsets along the facing (m)
TOP_SCAN_WIDTH_STEPS = (-0.5, -0.25, 0.0, 0.25, 0.5)
TOP_SCAN_DEPTH_OFFSETS = (-0.3048, -0.06096, 0.06096, 0.3048, 0.762)
TOP_SCAN_START_OFFSET = 0.03048


@dataclass
class GlassBounds:
    """Absolute heights (m) of the effective glass band."""

    b_eff: float  # Bottom after the 600 mm rule
    bottom_abs: float
    top_abs: float

    @property
    def mid(self) -> float:
        return 0.5 * (self.b_eff + self.top_abs)


def is_panel_label(label: str) -> bool:
    if not label or not label.strip():
        return False
    text = label.lower()
    return any(tok in text for tok in PANEL_TOKENS)


def is_operable_label(label: str) -> bool:
    if not label or not label.strip():
        return False
    text = label.lower()
    return any(tok in text for tok in OPERABLE_PANE_TOKENS)


def axis_sizes(net_length: float, count: int, distribution: Optional[List[float]]) -> List[float]:
    """
    Split a net length over `count` cells.

    A distribution whose sum exceeds 1.5 × count is read as millimetres,
    otherwise as relative weights; both are scaled to `net_length`.
    Missing and negative entries become zero, surplus entries are dropped.
    """
    if count <= 0 or net_length <= 0:
        return [0.0] * max(0, count)

    if distribution:
        weights = [max(0.0, x) for x in distribution]
        total = sum(weights)
        if total > 0:
            # Millimetre lists and weight lists scale identically once normalised.
            sizes = [x * net_length / total for x in weights]
            sizes.extend([0.0] * (count - len(sizes)))
            return sizes[:count]

    return [net_length / count] * count


def consume(sizes: List[float], amount: float, from_top: bool = False) -> List[float]:
    """
    Remove `amount` from consecutive cells, bottom-up (or top-down).

    Returns:
        Per-cell amount taken (same order as `sizes`); `sizes` is updated in place
    """
    used = [0.0] * len(sizes)
    rem = min(amount, sum(sizes))
    order = range(len(sizes) - 1, -1, -1) if from_top else range(len(sizes))
    for i in order:
        if rem <= 0:
            break
        take = min(sizes[i], rem)
        sizes[i] = max(0.0, sizes[i] - take)
        used[i] = take
        rem -= take
    return used


class GlazingGeometryResolver:
    """Reference height, glass band and net glazed area for a window."""

    def __init__(self, config: DaylightConfig, scene: Optional[SceneIndex] = None):
        self.config = config
        self.scene = scene

    def level_elevation(self, window: Window) -> float:
        if window.level_elevation is not None:
            return window.level_elevation
        return window.bbox.min[2] if window.bbox is not None else 0.0

    def is_operable(self, window: Window) -> bool:
        """True if names or filling labels mention an operable sash."""
        names = list(window.names) + [v for v in window.frame.fillings.values() if v]
        combined = ' '.join(names).lower()
        return any(tok in combined for tok in WINDOW_OPERABLE_TOKENS)

    def sash_offset_mm(self, window: Window) -> float:
        return self.config.default_sash_width_mm if self.is_operable(window) else 0.0

    def _glass_bottom_rel_mm(self, frame: WindowFrame, sash_offset_mm: float = 0.0) -> float:
        if frame.is_aluminium:
            off_side = frame.alu_offset_side_mm or 0.0
            extra_under = frame.alu_extra_under_mm or 0.0
            view_sill = self._alu_view_sill(frame)
            bottom = frame.sill_height_mm - off_side + extra_under + view_sill
        else:
            bottom_frame = frame.bottom_mm if frame.bottom_mm is not None else self.config.default_frame_height_mm
            bottom = frame.sill_height_mm + bottom_frame + self.config.wood_glass_offset_mm
        return bottom + sash_offset_mm

    @staticmethod
    def _alu_view_sill(frame: WindowFrame) -> float:
        if frame.alu_view_sill_mm is not None:
            return frame.alu_view_sill_mm
        if frame.alu_top_bottom_mm is not None:
            return frame.alu_top_bottom_mm
        return 0.0

    def resolve_reference_height(self, window: Window) -> Tuple[float, float]:
        """
        Reference height P for the obstruction angle.

        Args:
            window: Window with frame parameters

        Returns:
            (z_ref in meters absolute, z_ref in millimetres absolute)
        """
        z_level = self.level_elevation(window)
        bottom_rel_mm = self._glass_bottom_rel_mm(window.frame, self.sash_offset_mm(window))
        z_ref = max(z_level + self.config.floor_cut_mm * MM_TO_M, z_level + bottom_rel_mm * MM_TO_M)
        return z_ref, z_ref * M_TO_MM

    def resolve_glass_bounds(self, window: Window) -> GlassBounds:
        """
        Effective glass band: bottom raised to the 600 mm floor, top below the
        head profile. Degenerate bands fall back to the full window box.
        """
        frame = window.frame
        bbox = window.bbox
        z_level = self.level_elevation(window)

        bottom_abs = z_level + self._glass_bottom_rel_mm(frame) * MM_TO_M
        if frame.is_aluminium:
            view_sill = self._alu_view_sill(frame)
            top_profile = view_sill if view_sill > 0 else (frame.alu_offset_side_mm or 0.0)
        else:
            top_profile = frame.top_mm if frame.top_mm is not None else (frame.bottom_mm or 0.0)
        top_abs = bbox.max[2] - top_profile * MM_TO_M

        b_eff = max(bottom_abs, z_level + self.config.floor_cut_mm * MM_TO_M)
        if top_abs <= b_eff:
            logger.debug(f"Window {window.id}: glass band collapsed, using full window box")
            return GlassBounds(b_eff=bbox.min[2], bottom_abs=bbox.min[2], top_abs=bbox.max[2])
        return GlassBounds(b_eff=b_eff, bottom_abs=bottom_abs, top_abs=top_abs)

    def compute_glazing_area(self, window: Window, exclude_ids: Iterable[str] = ()) -> Optional[float]:
        """
        Net glazed area Ad in m².

        Args:
            window: Window with frame parameters
            exclude_ids: Obstruction ids ignored by the top scan (host wall, sub-components)

        Returns:
            Area in m², or None when a required parameter is missing
        """
        frame = window.frame
        if frame.width_mm is None or frame.height_mm is None:
            logger.debug(f"Window {window.id}: no width/height parameter, area not computed")
            return None

        if frame.is_aluminium:
            side = frame.alu_side_mm or 0.0
            top_bot = frame.alu_top_bottom_mm or 0.0
            extra_under = frame.alu_extra_under_mm or 0.0
            mull_v = frame.alu_mullion_v_mm if frame.alu_mullion_v_mm is not None else side
            mull_h = frame.alu_mullion_h_mm if frame.alu_mullion_h_mm is not None else top_bot
            nv, nh = max(0, frame.mullion_count_v), max(0, frame.mullion_count_h)
            top = top_bot

            net_w = max(0.0, frame.width_mm - 2.0 * side - nv * mull_v)
            net_h = max(0.0, frame.height_mm - 2.0 * top_bot - nh * mull_h - extra_under)
            glass_bottom_mm = frame.sill_height_mm + max(0.0, top_bot - (frame.alu_offset_side_mm or 0.0)) + extra_under
        else:
            if frame.top_mm is None or frame.side_mm is None or frame.bottom_mm is None:
                logger.debug(f"Window {window.id}: wood frame thickness missing, area not computed")
                return None
            top, side, bottom = frame.top_mm, frame.side_mm, frame.bottom_mm
            nv, nh = max(0, frame.mullion_count_v), max(0, frame.mullion_count_h)
            extra_h = self.config.wood_glass_offset_mm * (1 + nh)

            net_w = max(0.0, frame.width_mm - 2.0 * side - nv * frame.mullion_v_mm)
            net_h = max(0.0, frame.height_mm - (top + bottom + nh * frame.mullion_h_mm) - extra_h)
            glass_bottom_mm = frame.sill_height_mm + bottom + self.config.wood_glass_offset_mm

        if net_w <= 0 or net_h <= 0:
            return 0.0

        cols = max(1, nv + 1)
        rows = max(1, nh + 1)
        col_sizes = axis_sizes(net_w, cols, frame.column_distribution)
        row_sizes = axis_sizes(net_h, rows, frame.row_distribution)

        cut_from_bottom = max(0.0, self.config.floor_cut_mm - glass_bottom_mm)
        row_cut_used = [0.0] * rows
        if cut_from_bottom > 0 and sum(row_sizes) > 0:
            row_cut_used = consume(row_sizes, cut_from_bottom)

        top_cut = self.scan_top_obstruction(window, top, exclude_ids)
        if top_cut > 0 and sum(row_sizes) > 0:
            consume(row_sizes, top_cut, from_top=True)

        sash = self._sash_width(frame)

        total_mm2 = 0.0
        for r_idx, ph in enumerate(row_sizes):
            for c_idx, pw in enumerate(col_sizes):
                label = frame.filling(c_idx + 1, r_idx + 1)
                if is_panel_label(label):
                    continue
                if is_operable_label(label):
                    gw = max(0.0, pw - 2.0 * sash)
                    bottom_sash_rem = max(0.0, sash - row_cut_used[r_idx])
                    gh = max(0.0, ph - sash - bottom_sash_rem)
                else:
                    gw, gh = pw, ph
                total_mm2 += gw * gh

        return total_mm2 / 1e6

    @staticmethod
    def _sash_width(frame: WindowFrame) -> float:
        for value in (frame.sash_width_mm, frame.side_mm, frame.alu_side_mm):
            if value is not None:
                return max(0.0, value)
        return 0.0

    def scan_top_obstruction(self, window: Window, top_frame_mm: float, exclude_ids: Iterable[str] = ()) -> float:
        """
        Cast vertical rays from a grid under the window and report how far the
        lowest obstruction underside reaches below the top of the glass.

        Returns:
            Height (mm) to trim from the top rows, 0 if nothing obstructs
        """
        if self.scene is None or window.bbox is None or len(self.scene) == 0:
            return 0.0

        facing = horizontal_direction(window.facing) if window.facing is not None else None
        if facing is None:
            return 0.0

        bbox = window.bbox
        excluded: Set[str] = {window.id, *window.sub_component_ids, *exclude_ids}
        if window.host_wall_id:
            excluded.add(window.host_wall_id)

        candidates = [o for o in self.scene if o.id not in excluded and o.record.id not in excluded]
        if not candidates:
            return 0.0
        lo = np.array([o.bbox.min for o in candidates])
        hi = np.array([o.bbox.max for o in candidates])

        glass_top_z = bbox.max[2] - top_frame_mm * MM_TO_M
        center = np.asarray(bbox.center, dtype=float)
        side_dir = np.cross(facing, [0.0, 0.0, 1.0])
        win_width = float(np.hypot(bbox.size[0], bbox.size[1])) * 0.8

        max_cut = 0.0
        for w_step in TOP_SCAN_WIDTH_STEPS:
            base = center + side_dir * (w_step * win_width)
            for t_offset in TOP_SCAN_DEPTH_OFFSETS:
                origin = base + facing * t_offset
                oz = bbox.min[2] + TOP_SCAN_START_OFFSET
                above = (
                    (lo[:, 0] <= origin[0]) & (hi[:, 0] >= origin[0]) &
                    (lo[:, 1] <= origin[1]) & (hi[:, 1] >= origin[1]) &
                    (lo[:, 2] > oz)
                )
                if not above.any():
                    continue
                hit_z = float(lo[above, 2].min())
                if hit_z < glass_top_z - 0.0003:
                    max_cut = max(max_cut, glass_top_z - hit_z)

        if max_cut > 0:
            logger.debug(f"Window {window.id}: obstruction {max_cut * M_TO_MM:.0f}mm below glass top")
        return max_cut * M_TO_MM
