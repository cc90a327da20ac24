"""
Collaborator interfaces consumed by the daylight engine: model query,
parameter access and habitable-area polygons.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from models.building import Category, ElementRecord, HabitableArea, WindowRecord
from models.geometry import SurfaceGeometry, Transform


@dataclass
class LinkedModel:
    """Placement of a linked sub-model. `model` is None when the link is unloaded."""

    name: str
    transform: Transform
    model: Optional['ModelQuery']


class ModelQuery(ABC):
    """Read-only access to a building model's elements."""

    @abstractmethod
    def elements(self, categories: Iterable[Category]) -> List[ElementRecord]:
        """
        Enumerate non-type elements of the given categories.

        Args:
            categories: Categories to collect

        Returns:
            Element records in this model's own coordinates
        """
        pass

    @abstractmethod
    def linked_models(self) -> List[LinkedModel]:
        """
        Enumerate linked sub-models with their placement transforms.

        Returns:
            List of LinkedModel entries
        """
        pass

    @abstractmethod
    def surface_geometry(self, element_id: str) -> Optional[SurfaceGeometry]:
        """
        Triangulated solid geometry of an element.

        Returns:
            SurfaceGeometry in model coordinates, or None to fall back to the bounding box
        """
        pass

    @abstractmethod
    def window_records(self) -> List[WindowRecord]:
        """
        Window instances selected for calculation.

        Returns:
            Raw window records; parameters are decoded by WindowParameterAdapter
        """
        pass

    @abstractmethod
    def level_elevation(self, level_id: Optional[str]) -> Optional[float]:
        """Elevation of a level in meters, or None if unknown."""
        pass


class ParameterAccess(ABC):
    """Named parameter read/write on elements (instance first, then type)."""

    @abstractmethod
    def read(self, element_id: str, name: str) -> Optional[Any]:
        """Value of a parameter, or None if it does not exist."""
        pass

    @abstractmethod
    def names(self, element_id: str) -> List[str]:
        """All parameter names visible on the element and its type."""
        pass

    @abstractmethod
    def write(self, element_id: str, name: str, value: float) -> bool:
        """
        Best-effort write.

        Returns:
            True if written, False if the parameter is missing or read-only

        Raises:
            ParameterWriteError: if the host rejects the value
        """
        pass


class AreaPolygonSource(ABC):
    """Source of habitable-area (verblijfsgebied) polygons."""

    @abstractmethod
    def areas(self) -> List[HabitableArea]:
        pass
