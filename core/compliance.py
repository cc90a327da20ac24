"""
NEN 2057 compliance aggregation: Cb per window, Ae sums per habitable area
(verblijfsgebied) and the Cbi ratio with pass/fail status.
"""

import logging
from typing import Dict, List, Optional

from models.building import HabitableArea, Window
from models.calculation_result import (
    STATUS_NOT_OK, STATUS_OK, AreaComplianceResult, ComplianceReport,
    WindowCompliance, WindowResult
)
from utils.geometry_utils import point_in_polygon
from .cb_table import CbTable

logger = logging.getLogger(__name__)

REQUIRED_RATIO = 0.55

# Cbi at exactly 1.0 must pass despite float rounding in 0.55 × area
CBI_TOLERANCE = 1e-9


class ComplianceAggregator:
    """Turns window results and area polygons into a ComplianceReport."""

    def __init__(self, required_ratio: float = REQUIRED_RATIO):
        self.required_ratio = required_ratio

    def window_compliance(self, window: Window, result: Optional[WindowResult]) -> WindowCompliance:
        """Cb and Ae for one window; both stay None unless α and β are known."""
        record = WindowCompliance(window_id=window.id, code=window.display_code, room_name=window.room_name)
        if result is None:
            return record

        record.alpha_deg = result.alpha_avg_deg
        record.beta_deg = result.beta_deg
        record.ad_m2 = result.glass_m2

        if result.alpha_avg_deg is not None and result.beta_deg is not None:
            record.cb = CbTable.lookup(result.alpha_avg_deg, result.beta_deg)
            if record.cb is not None and record.ad_m2 is not None:
                record.ae_m2 = record.ad_m2 * record.cb
        return record

    @staticmethod
    def find_area(window: Window, areas: List[HabitableArea]) -> Optional[HabitableArea]:
        """First area with a loop containing the window's plan centre."""
        if window.bbox is None:
            return None
        center = window.bbox.center
        for area in areas:
            if any(point_in_polygon(center, loop) for loop in area.loops):
                return area
        return None

    def evaluate_area(self, area: HabitableArea, ae_sum: float, window_ids: List[str]) -> AreaComplianceResult:
        """
        Ratio, Cbi, deficit and required area reduction for one area.

        Args:
            area: Habitable area
            ae_sum: Summed Ae (m²) of its windows
            window_ids: Ids of the windows assigned to it

        Returns:
            AreaComplianceResult
        """
        required_ae = self.required_ratio * area.area_m2
        ratio = ae_sum / area.area_m2 if area.area_m2 > 0 else 0.0
        cbi = ae_sum / required_ae if required_ae > 0 else 0.0
        max_area = ae_sum / self.required_ratio if self.required_ratio > 0 else area.area_m2

        return AreaComplianceResult(
            area_id=area.id,
            name=area.name,
            area_m2=area.area_m2,
            ae_sum_m2=ae_sum,
            ratio=ratio,
            cbi=cbi,
            required_ratio=self.required_ratio,
            required_ae_m2=required_ae,
            deficit_m2=max(0.0, required_ae - ae_sum),
            area_reduction_m2=max(0.0, area.area_m2 - max_area),
            status=STATUS_OK if cbi >= 1.0 - CBI_TOLERANCE else STATUS_NOT_OK,
            window_ids=list(window_ids),
            group=area.group,
            level=area.level,
        )

    def aggregate(
        self,
        window_results: List[WindowResult],
        windows: List[Window],
        areas: List[HabitableArea]
    ) -> ComplianceReport:
        """
        Assign windows to areas (first match wins) and evaluate each area.

        Windows outside every area are still reported, with area_id None.
        Areas without a positive area or without loops are skipped.
        """
        by_id: Dict[str, WindowResult] = {r.window_id: r for r in window_results}
        valid_areas = [a for a in areas if a.area_m2 > 0 and a.loops]
        if len(valid_areas) != len(areas):
            logger.info(f"Skipped {len(areas) - len(valid_areas)} area(s) without surface or boundary")

        ae_sums: Dict[str, float] = {a.id: 0.0 for a in valid_areas}
        members: Dict[str, List[str]] = {a.id: [] for a in valid_areas}

        report = ComplianceReport()
        for window in windows:
            record = self.window_compliance(window, by_id.get(window.id))
            area = self.find_area(window, valid_areas)
            if area is not None:
                record.area_id = area.id
                members[area.id].append(window.id)
                if record.ae_m2 is not None:
                    ae_sums[area.id] += record.ae_m2
            report.windows.append(record)

        for area in valid_areas:
            report.areas.append(self.evaluate_area(area, ae_sums[area.id], members[area.id]))

        summary = report.get_compliance_summary()
        logger.info(
            f"Compliance: {summary['compliant_areas']}/{summary['total_areas']} area(s) OK, "
            f"{summary['unassigned_windows']} window(s) outside any area"
        )
        return report
