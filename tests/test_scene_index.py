"""
Tests for the scene index: local and linked obstructions, failing links,
surface geometry fallback.
"""

import math

import pytest

from core.exceptions import ModelQueryError
from core.scene_index import SceneIndex
from importers.memory_model import InMemoryModel
from models.building import Category
from models.geometry import BoundingBox, Transform


class BrokenModel(InMemoryModel):
    """Linked document that cannot be read."""

    def elements(self, categories):
        raise ModelQueryError('document is corrupt')


class NoGeometryModel(InMemoryModel):

    def surface_geometry(self, element_id):
        raise ModelQueryError('geometry not accessible')


class TestBuild:

    def test_local_elements_use_identity(self):
        model = InMemoryModel()
        model.add_box('w1', Category.WALL, (0, 0, 0), (1, 1, 3))
        scene = SceneIndex.build(model)

        assert len(scene) == 1
        obstruction, transform = scene.entries()[0]
        assert obstruction.id == 'w1'
        assert transform.is_identity
        assert obstruction.link_name is None

    def test_linked_elements_are_transformed(self):
        linked = InMemoryModel('buren')
        linked.add_box('w1', Category.WALL, (0, 0, 0), (2, 1, 3))
        host = InMemoryModel()
        host.add_link('buren', Transform.translation(10.0, 0.0, 0.0), linked)

        scene = SceneIndex.build(host)
        obstruction = scene.get('buren:w1')
        assert obstruction is not None
        assert obstruction.bbox.min == pytest.approx((10.0, 0.0, 0.0))
        assert obstruction.bbox.max == pytest.approx((12.0, 1.0, 3.0))
        assert obstruction.record.bbox.min == (0, 0, 0)

    def test_rotated_link_rebounds_all_corners(self):
        """A 2 × 1 m box turned 90° about Z occupies x -1..0, y 0..2."""
        linked = InMemoryModel('rotated')
        linked.add_box('f1', Category.FLOOR, (0, 0, 0), (2, 1, 0.3))
        host = InMemoryModel()
        host.add_link('rotated', Transform.rotation_z(math.pi / 2), linked)

        bbox = SceneIndex.build(host).get('rotated:f1').bbox
        assert bbox.min == pytest.approx((-1.0, 0.0, 0.0))
        assert bbox.max == pytest.approx((0.0, 2.0, 0.3))

    def test_rotated_link_turns_wall_direction(self):
        linked = InMemoryModel('rotated')
        linked.add_box('w1', Category.WALL, (0, 0, 0), (2, 0.2, 3), direction=(1.0, 0.0, 0.0))
        host = InMemoryModel()
        host.add_link('rotated', Transform.rotation_z(math.pi / 2), linked)

        wall = SceneIndex.build(host).get('rotated:w1')
        assert wall.direction == pytest.approx((0.0, 1.0, 0.0))

    def test_unloaded_link_is_skipped(self):
        host = InMemoryModel()
        host.add_box('w1', Category.WALL, (0, 0, 0), (1, 1, 3))
        host.add_link('missing', Transform.identity(), None)
        assert len(SceneIndex.build(host)) == 1

    def test_unreadable_link_is_skipped(self):
        host = InMemoryModel()
        host.add_box('w1', Category.WALL, (0, 0, 0), (1, 1, 3))
        host.add_link('broken', Transform.identity(), BrokenModel('broken'))
        assert [o.id for o in SceneIndex.build(host)] == ['w1']

    def test_element_without_bbox_is_skipped(self):
        model = InMemoryModel()
        model.add_element('ghost', Category.GENERIC_MODEL, bbox=None)
        model.add_box('w1', Category.WALL, (0, 0, 0), (1, 1, 3))
        assert [o.id for o in SceneIndex.build(model)] == ['w1']

    def test_only_requested_categories(self):
        model = InMemoryModel()
        model.add_box('w1', Category.WALL, (0, 0, 0), (1, 1, 3))
        model.add_box('r1', Category.ROOF, (0, 0, 3), (1, 1, 3.3))
        scene = SceneIndex.build(model, categories=[Category.ROOF])
        assert [o.id for o in scene] == ['r1']
        assert scene.walls() == []


class TestSurface:

    def test_box_fallback_has_twelve_edges(self):
        model = InMemoryModel()
        model.add_box('w1', Category.WALL, (0, 0, 0), (1, 1, 3))
        scene = SceneIndex.build(model)
        surface = scene.surface(scene.get('w1'))
        assert len(surface.vertices) == 8
        assert surface.edge_count == 12

    def test_mesh_surface_in_host_coordinates(self):
        linked = InMemoryModel('buren')
        linked.add_box('b1', Category.GENERIC_MODEL, (0, 0, 0), (1, 1, 1), solid=True)
        host = InMemoryModel()
        host.add_link('buren', Transform.translation(0.0, 5.0, 0.0), linked)

        scene = SceneIndex.build(host)
        surface = scene.surface(scene.get('buren:b1'))
        assert len(surface.vertices) == 8
        assert surface.edge_count == 18
        assert surface.vertices[:, 1].min() == pytest.approx(5.0)
        assert BoundingBox.from_points(surface.vertices).max == pytest.approx((1.0, 6.0, 1.0))

    def test_geometry_failure_falls_back_to_box(self):
        model = NoGeometryModel()
        model.add_box('b1', Category.GENERIC_MODEL, (0, 0, 0), (1, 1, 1), solid=True)
        scene = SceneIndex.build(model)
        assert scene.surface(scene.get('b1')).edge_count == 12

    def test_surface_is_cached(self):
        model = InMemoryModel()
        model.add_box('w1', Category.WALL, (0, 0, 0), (1, 1, 3), solid=True)
        scene = SceneIndex.build(model)
        obstruction = scene.get('w1')
        assert scene.surface(obstruction) is scene.surface(obstruction)
