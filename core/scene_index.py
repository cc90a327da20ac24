"""
Scene index: flat, transform-resolved list of obstruction candidates collected
once per run from the host model and its linked models.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from models.building import OBSTRUCTION_CATEGORIES, Category, ElementRecord, Obstruction
from models.geometry import SurfaceGeometry, Transform
from importers.base_importer import ModelQuery
from .exceptions import ModelQueryError

logger = logging.getLogger(__name__)


class SceneIndex:
    """
    Read-only obstruction list. Built once, shared by every window of a run.
    No distance filtering happens here; calculators narrow per window.
    """

    def __init__(self, obstructions: List[Obstruction], sources: Optional[Dict[str, ModelQuery]] = None):
        self.obstructions = obstructions
        self._sources = sources or {}
        self._by_id = {o.id: o for o in obstructions}
        self._surface_cache: Dict[str, SurfaceGeometry] = {}

    @classmethod
    def build(cls, model: ModelQuery, categories: Iterable[Category] = OBSTRUCTION_CATEGORIES) -> 'SceneIndex':
        """
        Collect obstructions from `model` and every loaded link.

        Args:
            model: Host model query
            categories: Categories treated as opaque

        Returns:
            SceneIndex with every element tagged by its host transform
        """
        categories = tuple(categories)
        obstructions: List[Obstruction] = []
        sources: Dict[str, ModelQuery] = {}

        local = model.elements(categories)
        for record in local:
            cls._add(obstructions, sources, record, Transform.identity(), model, None)
        logger.info(f"Scene index: {len(obstructions)} local obstruction(s)")

        try:
            links = model.linked_models()
        except ModelQueryError as e:
            logger.warning(f"Could not enumerate linked models: {e}")
            links = []

        for link in links:
            if link.model is None:
                logger.warning(f"Linked model '{link.name}' is not loaded; skipping its elements")
                continue
            try:
                records = link.model.elements(categories)
            except ModelQueryError as e:
                logger.warning(f"Linked model '{link.name}' could not be read: {e}")
                continue
            before = len(obstructions)
            for record in records:
                cls._add(obstructions, sources, record, link.transform, link.model, link.name)
            logger.info(f"Scene index: {len(obstructions) - before} obstruction(s) from link '{link.name}'")

        return cls(obstructions, sources)

    @staticmethod
    def _add(
        obstructions: List[Obstruction],
        sources: Dict[str, ModelQuery],
        record: ElementRecord,
        transform: Transform,
        model: ModelQuery,
        link_name: Optional[str]
    ):
        if record.bbox is None:
            logger.debug(f"Element {record.id} has no bounding box; not an obstruction")
            return
        key = record.id if link_name is None else f"{link_name}:{record.id}"
        obstructions.append(Obstruction(
            id=key,
            category=record.category,
            bbox=record.bbox.transformed(transform),
            transform=transform,
            record=record,
            link_name=link_name,
        ))
        sources[key] = model

    def __len__(self) -> int:
        return len(self.obstructions)

    def __iter__(self):
        return iter(self.obstructions)

    def get(self, obstruction_id: str) -> Optional[Obstruction]:
        return self._by_id.get(obstruction_id)

    def walls(self) -> List[Obstruction]:
        return [o for o in self.obstructions if o.is_wall]

    def entries(self) -> List[Tuple[Obstruction, Transform]]:
        """(obstruction, transform) pairs, the index's external contract."""
        return [(o, o.transform) for o in self.obstructions]

    def surface(self, obstruction: Obstruction) -> SurfaceGeometry:
        """
        Corner points and edges of an obstruction in host coordinates.
        Falls back to the 8-corner box when the model has no solid geometry.
        """
        cached = self._surface_cache.get(obstruction.id)
        if cached is not None:
            return cached

        geometry = None
        source = self._sources.get(obstruction.id)
        if source is not None:
            try:
                geometry = source.surface_geometry(obstruction.record.id)
            except ModelQueryError as e:
                logger.warning(f"Geometry of {obstruction.id} unavailable, using bounding box: {e}")

        if geometry is None or len(geometry.vertices) == 0:
            geometry = SurfaceGeometry.from_bounding_box(obstruction.record.bbox)

        host_geometry = geometry.transformed(obstruction.transform)
        self._surface_cache[obstruction.id] = host_geometry
        return host_geometry
