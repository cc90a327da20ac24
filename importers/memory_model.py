"""
In-memory building model.

Implements the model query, parameter access and area source interfaces
over plain Python containers. Used for tests, scripted checks and as the
target of host-application extractors that dump their model up front.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Set

import trimesh

from models.building import Category, ElementRecord, HabitableArea, WindowRecord
from models.geometry import BoundingBox, Plane, Point3, SurfaceGeometry, Transform
from .base_importer import AreaPolygonSource, LinkedModel, ModelQuery, ParameterAccess

logger = logging.getLogger(__name__)


class InMemoryModel(ModelQuery, ParameterAccess, AreaPolygonSource):
    """
    Building model held in memory.
    Element geometry is given as bounding boxes and, optionally, trimesh meshes.
    """

    def __init__(self, name: str = 'host'):
        self.name = name
        self._elements: Dict[str, ElementRecord] = {}
        self._meshes: Dict[str, trimesh.Trimesh] = {}
        self._links: List[LinkedModel] = []
        self._windows: List[WindowRecord] = []
        self._levels: Dict[str, float] = {}
        self._areas: List[HabitableArea] = []
        self._instance_params: Dict[str, Dict[str, Any]] = {}
        self._type_params: Dict[str, Dict[str, Any]] = {}
        self._read_only: Dict[str, Set[str]] = {}

    # Model content

    def add_element(
        self,
        element_id: str,
        category: Category,
        bbox: Optional[BoundingBox] = None,
        mesh: Optional[trimesh.Trimesh] = None,
        direction: Optional[Point3] = None,
        interior_faces: Optional[List[Plane]] = None,
        name: Optional[str] = None
    ) -> ElementRecord:
        """
        Add an obstruction element.

        Args:
            element_id: Element id, unique within this model
            category: Element category
            bbox: Bounding box; derived from `mesh` when omitted
            mesh: Triangulated solid used by the silhouette search
            direction: Wall location line direction (walls only, None if curved)
            interior_faces: Interior face planes (walls only)
            name: Element name

        Returns:
            The stored ElementRecord
        """
        if bbox is None and mesh is not None and len(mesh.vertices) > 0:
            lo, hi = mesh.bounds
            bbox = BoundingBox(tuple(float(v) for v in lo), tuple(float(v) for v in hi))
        record = ElementRecord(
            id=element_id,
            category=category,
            bbox=bbox,
            name=name,
            direction=direction,
            interior_faces=list(interior_faces or []),
        )
        self._elements[element_id] = record
        if mesh is not None:
            self._meshes[element_id] = mesh
        return record

    def add_box(self, element_id: str, category: Category, lo: Point3, hi: Point3, solid: bool = False, **kwargs) -> ElementRecord:
        """Box-shaped element; with `solid=True` it also carries a triangulated mesh."""
        mesh = None
        if solid:
            mesh = trimesh.creation.box(bounds=[lo, hi])
        return self.add_element(element_id, category, bbox=BoundingBox(tuple(lo), tuple(hi)), mesh=mesh, **kwargs)

    def add_link(self, name: str, transform: Transform, model: Optional['InMemoryModel']) -> LinkedModel:
        """Add a linked model; pass None to model an unloaded link."""
        link = LinkedModel(name=name, transform=transform, model=model)
        self._links.append(link)
        return link

    def add_level(self, level_id: str, elevation: float):
        self._levels[level_id] = elevation

    def add_window(
        self,
        record: WindowRecord,
        parameters: Optional[Dict[str, Any]] = None,
        type_parameters: Optional[Dict[str, Any]] = None
    ) -> WindowRecord:
        self._windows.append(record)
        self.set_parameters(record.id, parameters or {}, type_parameters)
        return record

    def add_area(self, area: HabitableArea) -> HabitableArea:
        self._areas.append(area)
        return area

    def set_parameters(self, element_id: str, parameters: Dict[str, Any], type_parameters: Optional[Dict[str, Any]] = None):
        self._instance_params.setdefault(element_id, {}).update(parameters)
        if type_parameters:
            self._type_params.setdefault(element_id, {}).update(type_parameters)

    def set_read_only(self, element_id: str, *names: str):
        self._read_only.setdefault(element_id, set()).update(names)

    # ModelQuery

    def elements(self, categories: Iterable[Category]) -> List[ElementRecord]:
        wanted = set(categories)
        return [e for e in self._elements.values() if e.category in wanted]

    def linked_models(self) -> List[LinkedModel]:
        return list(self._links)

    def surface_geometry(self, element_id: str) -> Optional[SurfaceGeometry]:
        mesh = self._meshes.get(element_id)
        if mesh is None:
            return None
        return SurfaceGeometry.from_trimesh(mesh)

    def window_records(self) -> List[WindowRecord]:
        return list(self._windows)

    def level_elevation(self, level_id: Optional[str]) -> Optional[float]:
        if level_id is None:
            return None
        return self._levels.get(level_id)

    # ParameterAccess

    def read(self, element_id: str, name: str) -> Optional[Any]:
        instance = self._instance_params.get(element_id, {})
        if name in instance:
            return instance[name]
        return self._type_params.get(element_id, {}).get(name)

    def names(self, element_id: str) -> List[str]:
        names = list(self._instance_params.get(element_id, {}))
        names.extend(n for n in self._type_params.get(element_id, {}) if n not in names)
        return names

    def write(self, element_id: str, name: str, value: float) -> bool:
        instance = self._instance_params.get(element_id)
        if instance is None or name not in instance:
            return False
        if name in self._read_only.get(element_id, set()):
            return False
        instance[name] = value
        return True

    # AreaPolygonSource

    def areas(self) -> List[HabitableArea]:
        return list(self._areas)
