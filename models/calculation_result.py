"""
Calculation result models for the daylight (α/β/Ad) and NEN 2057 compliance checks.
"""

from typing import List, Dict, Optional, Tuple
from dataclasses import dataclass, field

STATUS_OK = 'OK'
STATUS_NOT_OK = 'NIET_OK'


@dataclass
class RayResult:
    """One sample of the α fan."""

    index: int
    angle_offset_deg: float
    alpha_deg: float
    z_ref_mm: float
    line_length_mm: float
    x_dist_mm: Optional[float] = None  # Distance along the optical axis
    d_horiz_mm: Optional[float] = None  # Distance along the ray
    z_obst_mm: Optional[float] = None
    obstacle_id: Optional[str] = None
    segment: Optional[Tuple[Tuple[float, float, float], Tuple[float, float, float]]] = None

    @property
    def is_hit(self) -> bool:
        return self.obstacle_id is not None


@dataclass
class WindowResult:
    """Daylight result for a single window. None means "not computed"."""

    window_id: str
    alpha_avg_deg: Optional[float] = None
    beta_deg: Optional[float] = None
    beta_rad: Optional[float] = None
    beta_reason: Optional[str] = None
    beta_obstruct_point: Optional[Tuple[float, float, float]] = None
    glass_m2: Optional[float] = None
    z_ref_mm: Optional[float] = None
    rays: List[RayResult] = field(default_factory=list)
    message: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        """α and β both known (Cb can be looked up)."""
        return self.alpha_avg_deg is not None and self.beta_deg is not None


@dataclass
class WindowCompliance:
    """Per-window NEN 2057 record."""

    window_id: str
    code: str
    room_name: Optional[str] = None
    alpha_deg: Optional[float] = None
    beta_deg: Optional[float] = None
    ad_m2: Optional[float] = None
    cb: Optional[float] = None
    ae_m2: Optional[float] = None
    area_id: Optional[str] = None


@dataclass
class AreaComplianceResult:
    """Per-verblijfsgebied NEN 2057 record."""

    area_id: str
    name: str
    area_m2: float
    ae_sum_m2: float = 0.0
    ratio: float = 0.0  # Ae / A
    cbi: float = 0.0
    required_ratio: float = 0.55
    required_ae_m2: float = 0.0
    deficit_m2: float = 0.0
    area_reduction_m2: float = 0.0
    status: str = STATUS_NOT_OK
    window_ids: List[str] = field(default_factory=list)
    group: Optional[str] = None
    level: Optional[str] = None

    def is_compliant(self) -> bool:
        return self.status == STATUS_OK

    @property
    def window_count(self) -> int:
        return len(self.window_ids)


@dataclass
class ComplianceReport:
    """Aggregator output: every window, every area."""

    windows: List[WindowCompliance] = field(default_factory=list)
    areas: List[AreaComplianceResult] = field(default_factory=list)

    def get_area(self, area_id: str) -> Optional[AreaComplianceResult]:
        return next((a for a in self.areas if a.area_id == area_id), None)

    def get_window(self, window_id: str) -> Optional[WindowCompliance]:
        return next((w for w in self.windows if w.window_id == window_id), None)

    def get_compliance_summary(self) -> Dict:
        """Summary over areas that have at least one linked window."""
        linked = [a for a in self.areas if a.window_count > 0]
        compliant = sum(1 for a in linked if a.is_compliant())
        return {
            'total_areas': len(linked),
            'compliant_areas': compliant,
            'non_compliant_areas': len(linked) - compliant,
            'unassigned_windows': sum(1 for w in self.windows if w.area_id is None),
        }


@dataclass
class DaylightRunResult:
    """Everything a report/export layer needs without re-running geometry."""

    window_results: List[WindowResult] = field(default_factory=list)
    compliance: ComplianceReport = field(default_factory=ComplianceReport)
    warnings: List[str] = field(default_factory=list)

    def get_window_result(self, window_id: str) -> Optional[WindowResult]:
        return next((r for r in self.window_results if r.window_id == window_id), None)
