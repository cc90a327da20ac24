"""
Building data models: windows, obstructions and habitable areas (verblijfsgebieden).
Window dimensions that come from family parameters are in millimetres;
everything positional (boxes, elevations, loops) is in meters.
"""

from typing import List, Tuple, Optional, Dict
from dataclasses import dataclass, field
from enum import Enum

from .geometry import BoundingBox, Plane, Point3, Transform


class Category(str, Enum):
    """Element categories that can block daylight."""

    WALL = 'wall'
    FLOOR = 'floor'
    ROOF = 'roof'
    CEILING = 'ceiling'
    GENERIC_MODEL = 'generic_model'
    STRUCTURAL_FRAMING = 'structural_framing'
    STRUCTURAL_COLUMN = 'structural_column'


OBSTRUCTION_CATEGORIES = tuple(Category)

CATEGORY_LABELS = {
    Category.WALL: 'Walls',
    Category.FLOOR: 'Floors',
    Category.ROOF: 'Roofs',
    Category.CEILING: 'Ceilings',
    Category.GENERIC_MODEL: 'Generic Models',
    Category.STRUCTURAL_FRAMING: 'Structural Framing',
    Category.STRUCTURAL_COLUMN: 'Structural Columns',
}


class Construction(str, Enum):
    """Frame construction, decides which glass rules apply."""

    WOOD = 'wood'
    ALUMINIUM = 'aluminium'


@dataclass
class ElementRecord:
    """Raw element as returned by a model query, in its own document's coordinates."""

    id: str
    category: Category
    bbox: Optional[BoundingBox]
    name: Optional[str] = None
    direction: Optional[Point3] = None  # Wall location line direction (None for curved walls)
    interior_faces: List[Plane] = field(default_factory=list)


@dataclass
class Obstruction:
    """Opaque solid in host coordinates, candidate for blocking light."""

    id: str
    category: Category
    bbox: BoundingBox  # Host frame
    transform: Transform
    record: ElementRecord
    link_name: Optional[str] = None

    @property
    def is_wall(self) -> bool:
        return self.category == Category.WALL

    @property
    def category_label(self) -> str:
        return CATEGORY_LABELS.get(self.category, 'Belemmering')

    @property
    def direction(self) -> Optional[Point3]:
        """Wall direction rotated into the host frame."""
        if self.record.direction is None:
            return None
        return tuple(float(v) for v in self.transform.of_vector(self.record.direction))

    def interior_faces(self) -> List[Plane]:
        return [face.transformed(self.transform) for face in self.record.interior_faces]


@dataclass
class WindowRecord:
    """Raw window instance as returned by a model query, before parameter decoding."""

    id: str
    bbox: Optional[BoundingBox]
    facing: Optional[Point3]
    level_id: Optional[str] = None
    host_wall_id: Optional[str] = None
    room_name: Optional[str] = None
    names: List[str] = field(default_factory=list)
    sub_component_ids: List[str] = field(default_factory=list)


@dataclass
class WindowFrame:
    """
    Typed window parameters, filled once by the parameter adapter.
    Lengths in millimetres. None means "parameter not present".
    """

    width_mm: Optional[float] = None
    height_mm: Optional[float] = None
    sill_height_mm: float = 0.0
    construction: Construction = Construction.WOOD

    # Wood frame
    top_mm: Optional[float] = None
    side_mm: Optional[float] = None
    bottom_mm: Optional[float] = None

    # Aluminium frame
    alu_side_mm: Optional[float] = None
    alu_top_bottom_mm: Optional[float] = None
    alu_offset_side_mm: Optional[float] = None
    alu_extra_under_mm: Optional[float] = None
    alu_view_sill_mm: Optional[float] = None
    alu_mullion_v_mm: Optional[float] = None
    alu_mullion_h_mm: Optional[float] = None

    # Mullions (counts and thicknesses default to zero when absent)
    mullion_count_v: int = 0
    mullion_count_h: int = 0
    mullion_v_mm: float = 0.0
    mullion_h_mm: float = 0.0

    sash_width_mm: Optional[float] = None
    column_distribution: Optional[List[float]] = None
    row_distribution: Optional[List[float]] = None
    fillings: Dict[Tuple[int, int], str] = field(default_factory=dict)  # (col, row), 1-based

    @property
    def is_aluminium(self) -> bool:
        return self.construction == Construction.ALUMINIUM

    def filling(self, col: int, row: int) -> str:
        return self.fillings.get((col, row), '')


@dataclass
class Window:
    """Window (kozijn) subject to the daylight calculation."""

    id: str
    bbox: Optional[BoundingBox]
    facing: Optional[Point3]  # Outward normal
    frame: WindowFrame = field(default_factory=WindowFrame)
    level_elevation: Optional[float] = None  # meters
    host_wall_id: Optional[str] = None
    code: Optional[str] = None  # Kozijn mark
    room_name: Optional[str] = None
    category_label: Optional[str] = None
    names: List[str] = field(default_factory=list)  # Instance/type/family names
    sub_component_ids: List[str] = field(default_factory=list)

    @property
    def display_code(self) -> str:
        return self.code or f"Koz_{self.id}"

    def is_opening_maker(self) -> bool:
        """Sparingmaker families are wall openings modelled as windows."""
        if self.category_label and 'sparing' in self.category_label.lower():
            return True
        return 'sparing' in ' '.join(self.names).lower()


@dataclass
class HabitableArea:
    """Verblijfsgebied: plan polygon(s) with a known area."""

    id: str
    name: str
    area_m2: float
    loops: List[List[Tuple[float, float]]] = field(default_factory=list)
    group: Optional[str] = None
    level: Optional[str] = None
