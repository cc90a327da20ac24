"""
End-to-end tests: in-memory model → daylight run → compliance → write-back.
"""

import logging
import math

import pytest

from conftest import WINDOW_BBOX, Z_MID, Z_REF
from core.cb_table import CbTable
from core.daylight_calculator import DaylightCalculator
from importers.memory_model import InMemoryModel
from models.building import Category, HabitableArea, WindowRecord
from models.calculation_result import STATUS_NOT_OK
from models.geometry import Transform
from utils.config_loader import DaylightConfig, get_config_value, load_config
from workflow import load_run_config, run_daylight_check

RESULT_PARAMS = {
    'VH_kozijn_α': 0.0,
    'VH_kozijn_β/ε': 0.0,
    'VH_kozijn_Ad': 0.0,
    'VH_kozijn_Cb': 0.0,
    'VH_kozijn_Ae': 0.0,
    'VH_kozijn_Cbi': 0.0,
}


def window_params(code, **extra):
    params = {
        'Width': 1000, 'Height': 1500, 'Sill Height': 900,
        'dikte_bovendorpel': 60, 'dikte_onderdorpel': 60, 'dikte_eindstijlen': 60,
        'VH_kozijn_code': code,
    }
    params.update(RESULT_PARAMS)
    params.update(extra)
    return params


@pytest.fixture
def building(wall_in_front_model):
    """
    One window facing -Y with the 3 m wall 4 m along its fan direction,
    inside a 20 m² habitable area.
    """
    model = wall_in_front_model
    model.add_level('L0', 0.0)
    model.add_window(
        WindowRecord(id='w1', bbox=WINDOW_BBOX, facing=(0.0, -1.0, 0.0), level_id='L0', room_name='Woonkamer'),
        window_params('K01'),
    )
    model.add_area(HabitableArea(
        id='vg1', name='VG 1.01', area_m2=20.0,
        loops=[[(-2.5, -4.0), (2.5, -4.0), (2.5, 0.5), (-2.5, 0.5)]],
        level='00',
    ))
    return model


def expected_angles():
    hit = math.degrees(math.atan((3.0 - Z_REF) / 4.0))
    alpha = (7 * hit + 4 * 20.0) / 11
    beta = math.degrees(math.atan2(4.2, 3.0 - Z_MID))
    return alpha, beta


class TestRun:

    def test_single_window_end_to_end(self, building):
        run = run_daylight_check(building, building, building)
        alpha, beta = expected_angles()

        result = run.get_window_result('w1')
        assert result.alpha_avg_deg == pytest.approx(alpha)
        assert result.beta_deg == pytest.approx(beta)
        assert result.glass_m2 == pytest.approx(1.19944)

        record = run.compliance.get_window('w1')
        cb = CbTable.lookup(alpha, beta)
        assert record.code == 'K01'
        assert record.area_id == 'vg1'
        assert record.cb == pytest.approx(cb)
        assert record.ae_m2 == pytest.approx(1.19944 * cb)

        area = run.compliance.get_area('vg1')
        assert area.required_ae_m2 == pytest.approx(11.0)
        assert area.cbi == pytest.approx(1.19944 * cb / 11.0)
        assert area.status == STATUS_NOT_OK
        assert run.warnings == []

    def test_results_written_back(self, building):
        run = run_daylight_check(building, building, building)
        alpha, beta = expected_angles()

        assert building.read('w1', 'VH_kozijn_α') == pytest.approx(math.radians(alpha))
        assert building.read('w1', 'VH_kozijn_β/ε') == pytest.approx(math.radians(beta))
        assert building.read('w1', 'VH_kozijn_Ad') == pytest.approx(1.19944)
        assert building.read('w1', 'VH_kozijn_Cbi') == pytest.approx(run.compliance.get_area('vg1').cbi)

    def test_dry_run_leaves_model_untouched(self, building):
        run_daylight_check(building, building, building, write_results=False)
        assert building.read('w1', 'VH_kozijn_α') == 0.0
        assert building.read('w1', 'VH_kozijn_Ae') == 0.0

    def test_without_areas(self, building):
        run = run_daylight_check(building, building)
        assert run.compliance.windows == []
        assert run.get_window_result('w1').is_complete

    def test_linked_obstruction(self):
        """The same wall, now in a linked model shifted 4 m along Y."""
        linked = InMemoryModel('buren')
        linked.add_box('front', Category.WALL, (-10.0, 0.0, 0.0), (10.0, 0.2, 3.0), direction=(1.0, 0.0, 0.0))
        model = InMemoryModel()
        model.add_link('buren', Transform.translation(0.0, 4.0, 0.0), linked)
        model.add_level('L0', 0.0)
        model.add_window(WindowRecord(id='w1', bbox=WINDOW_BBOX, facing=(0.0, -1.0, 0.0), level_id='L0'),
                         window_params('K01'))

        run = run_daylight_check(model, model, write_results=False)
        alpha, beta = expected_angles()
        result = run.get_window_result('w1')
        assert result.alpha_avg_deg == pytest.approx(alpha)
        assert result.beta_deg == pytest.approx(beta)
        assert {r.obstacle_id for r in result.rays if r.is_hit} == {'buren:front'}

    def test_failing_window_does_not_stop_batch(self, building, monkeypatch):
        building.add_window(
            WindowRecord(id='w2', bbox=WINDOW_BBOX, facing=(0.0, -1.0, 0.0), level_id='L0'),
            window_params('K02'),
        )
        original = DaylightCalculator.process_window

        def process_window(self, window):
            if window.id == 'w2':
                raise RuntimeError('geometry kernel failure')
            return original(self, window)

        monkeypatch.setattr(DaylightCalculator, 'process_window', process_window)
        run = run_daylight_check(building, building, building)

        assert run.get_window_result('w1').is_complete
        failed = run.get_window_result('w2')
        assert failed.message == 'Fout in berekening: geometry kernel failure'
        assert failed.alpha_avg_deg is None
        assert run.compliance.get_window('w2').cb is None
        assert run.compliance.get_area('vg1').window_ids == ['w1', 'w2']


class TestConfig:

    def test_missing_file_gives_empty_config(self, tmp_path):
        assert load_config(str(tmp_path / 'absent.yaml')) == {}

    def test_yaml_overrides_defaults(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text(
            "daylight:\n"
            "  flip_alpha_fan: true\n"
            "  alpha:\n"
            "    ray_count: 5\n"
            "  compliance:\n"
            "    required_ratio: 0.5\n",
            encoding='utf-8',
        )
        raw = load_config(str(path))
        assert get_config_value(raw, 'daylight.alpha.ray_count') == 5
        assert get_config_value(raw, 'daylight.beta.max_edge_tests', 7) == 7

        config = DaylightConfig.from_config(raw)
        assert config.flip_alpha_fan is True
        assert config.ray_count == 5
        assert config.required_ratio == 0.5
        assert config.angle_step_deg == 10.0

    def test_invalid_yaml_gives_empty_config(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text("daylight: [unclosed\n", encoding='utf-8')
        assert load_config(str(path)) == {}

    def test_defaults_without_config(self):
        config = DaylightConfig.from_config(None)
        assert config == DaylightConfig()

    def test_run_config_sets_log_level(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text("daylight:\n  do_beta: false\nlogging:\n  level: DEBUG\n", encoding='utf-8')
        root = logging.getLogger()
        level, handlers = root.level, root.handlers[:]
        try:
            config = load_run_config(str(path))
            assert config.do_beta is False
            assert root.level == logging.DEBUG
            assert sum(type(h) is logging.StreamHandler for h in root.handlers) == 1
        finally:
            root.setLevel(level)
            root.handlers = handlers
