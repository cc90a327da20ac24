"""
Tests for decoding window parameters and writing results back.
"""

import math

import pytest

from importers.memory_model import InMemoryModel
from importers.parameter_adapter import WindowParameterAdapter, column_index, parse_distribution, to_float
from models.building import Construction, WindowRecord
from models.calculation_result import WindowCompliance, WindowResult
from models.geometry import BoundingBox

BBOX = BoundingBox((-0.5, -0.05, 0.9), (0.5, 0.05, 2.4))


def model_with_window(params, type_params=None, **record_kwargs) -> InMemoryModel:
    model = InMemoryModel()
    model.add_level('L0', 3.0)
    record = WindowRecord(id='w1', bbox=BBOX, facing=(0.0, -1.0, 0.0), level_id='L0', **record_kwargs)
    model.add_window(record, params, type_params)
    return model


class TestParsing:

    def test_number_parsing(self):
        assert to_float(60) == 60.0
        assert to_float('67,5') == 67.5
        assert to_float('') is None
        assert to_float('n.v.t.') is None
        assert to_float(True) is None

    @pytest.mark.parametrize('text, expected', [
        ('1|2|1', [1.0, 2.0, 1.0]),
        ('600;900', [600.0, 900.0]),
        ('1, 1, 2', [1.0, 1.0, 2.0]),
        ('  ', None),
        ('1|twee', None),
        ('-1|3', None),
        (750, [750.0]),
        (None, None),
    ])
    def test_distribution(self, text, expected):
        assert parse_distribution(text) == expected

    def test_column_letters(self):
        assert column_index('A') == 1
        assert column_index('c') == 3
        assert column_index('AA') == 27


class TestDecode:

    def test_wood_window(self):
        model = model_with_window({
            'Width': 1000, 'Height': 1500, 'Sill Height': 900,
            'dikte_bovendorpel': 60, 'dikte_onderdorpel': 60, 'dikte_eindstijlen': 60,
            'aantal_tussenstijlen': 1, 'dikte_tussenstijl': 50,
            'VH_verdeling_kolommen': '1|3',
            'VH_vlakvulling_A1': 'Paneel', 'VH_vlakvulling_B1': ' Draairaam ',
            'VH_kozijn_code': 'K01',
        })
        window = WindowParameterAdapter(model, model).build_window(model.window_records()[0])
        frame = window.frame

        assert window.level_elevation == 3.0
        assert window.code == 'K01'
        assert frame.construction == Construction.WOOD
        assert (frame.width_mm, frame.height_mm, frame.sill_height_mm) == (1000.0, 1500.0, 900.0)
        assert (frame.top_mm, frame.side_mm, frame.bottom_mm) == (60.0, 60.0, 60.0)
        assert frame.mullion_count_v == 1 and frame.mullion_v_mm == 50.0
        assert frame.mullion_count_h == 0 and frame.mullion_h_mm == 0.0
        assert frame.column_distribution == [1.0, 3.0]
        assert frame.row_distribution is None
        assert frame.fillings == {(1, 1): 'paneel', (2, 1): 'draairaam'}

    def test_first_matching_size_name_wins(self):
        model = model_with_window({'VH_kozijn_breedte': 1200, 'Width': 1000, 'Hoogte': 1400})
        frame = WindowParameterAdapter(model, model).decode_frame(model.window_records()[0])
        assert frame.width_mm == 1200.0
        assert frame.height_mm == 1400.0

    def test_type_parameters_are_read(self):
        model = model_with_window({'Width': 1000}, type_params={'Height': 2000, 'dikte_bovendorpel': 70})
        frame = WindowParameterAdapter(model, model).decode_frame(model.window_records()[0])
        assert frame.height_mm == 2000.0
        assert frame.top_mm == 70.0

    def test_aluminium_detection(self):
        model = model_with_window({
            'Width': 1200, 'Height': 1400,
            'aanzicht_stijl': 50, 'aanzicht_raamprofiel': 60, 'offset_stijl': 10, 'extra_stelruimte_onder': 5,
        })
        frame = WindowParameterAdapter(model, model).decode_frame(model.window_records()[0])
        assert frame.construction == Construction.ALUMINIUM
        assert frame.alu_side_mm == 50.0
        assert frame.alu_offset_side_mm == 10.0
        assert frame.alu_mullion_v_mm is None

    def test_missing_parameters_stay_none(self):
        model = model_with_window({})
        frame = WindowParameterAdapter(model, model).decode_frame(model.window_records()[0])
        assert frame.width_mm is None
        assert frame.top_mm is None
        assert frame.sill_height_mm == 0.0

    def test_sash_width_from_sub_component(self):
        model = model_with_window({'Width': 1000}, sub_component_ids=['sub1'])
        model.set_parameters('sub1', {'glas_offset': 72})
        frame = WindowParameterAdapter(model, model).decode_frame(model.window_records()[0])
        assert frame.sash_width_mm == 72.0

    def test_widest_sash_wins(self):
        model = model_with_window({'Width': 1000}, sub_component_ids=['sub1', 'sub2', 'sub3'])
        model.set_parameters('sub1', {'glas_offset': 60})
        model.set_parameters('sub2', {'Glas_Offset': 84})
        model.set_parameters('sub3', {'glas_offset': 0})
        frame = WindowParameterAdapter(model, model).decode_frame(model.window_records()[0])
        assert frame.sash_width_mm == 84.0

    def test_category_label_and_code_fallback(self):
        model = model_with_window({'VH_categorie': 'Sparingmaker'})
        window = WindowParameterAdapter(model, model).build_window(model.window_records()[0])
        assert window.is_opening_maker()
        assert window.display_code == 'Koz_w1'


class TestWriteBack:

    def test_angles_written_in_radians(self):
        model = model_with_window({'VH_kozijn_α': 0.0, 'VH_kozijn_β': 0.0, 'VH_kozijn_Ad': 0.0})
        adapter = WindowParameterAdapter(model, model)
        result = WindowResult(window_id='w1', alpha_avg_deg=30.0, beta_deg=45.0, beta_rad=math.pi / 4, glass_m2=1.2)

        assert adapter.write_window_result(result) == 3
        assert model.read('w1', 'VH_kozijn_α') == pytest.approx(math.radians(30.0))
        assert model.read('w1', 'VH_kozijn_β') == pytest.approx(math.pi / 4)
        assert model.read('w1', 'VH_kozijn_Ad') == 1.2

    def test_missing_and_read_only_parameters_are_skipped(self):
        model = model_with_window({'VH_kozijn_Cb': 0.0, 'VH_kozijn_Ae': 0.0})
        model.set_read_only('w1', 'VH_kozijn_Ae')
        adapter = WindowParameterAdapter(model, model)
        record = WindowCompliance(window_id='w1', code='K01', cb=0.7, ae_m2=0.84)

        assert adapter.write_compliance(record, cbi=0.5) == 1
        assert model.read('w1', 'VH_kozijn_Cb') == 0.7
        assert model.read('w1', 'VH_kozijn_Ae') == 0.0
