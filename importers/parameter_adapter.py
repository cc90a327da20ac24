"""
Window parameter adapter.

The only place where parameters are looked up by name: family parameters
are decoded once into a typed WindowFrame, and computed values are written
back after the run. The geometry code never sees parameter names.
"""

import logging
import math
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from models.building import Construction, Window, WindowFrame, WindowRecord
from models.calculation_result import WindowCompliance, WindowResult
from .base_importer import ModelQuery, ParameterAccess

logger = logging.getLogger(__name__)

# Overall size, first match wins
WIDTH_NAMES = ('VH_kozijn_breedte', 'Width', 'Breedte', 'Rough Width', 'Nominal Width')
HEIGHT_NAMES = ('VH_kozijn_hoogte', 'Height', 'Hoogte', 'Rough Height', 'Nominal Height')
SILL_NAMES = ('Sill Height', 'Borstweringshoogte', 'Default Sill Height')

# Wood frame
P_TOP = 'dikte_bovendorpel'
P_BOT = 'dikte_onderdorpel'
P_SIDE = 'dikte_eindstijlen'
P_MULL_V_T = 'dikte_tussenstijl'
P_MULL_H_T = 'dikte_tussendorpel'
P_MULL_V_N = 'aantal_tussenstijlen'
P_MULL_H_N = 'aantal_tussendorpels'

# Aluminium frame
AL_SIDE = 'aanzicht_stijl'
AL_TOP_BOT = 'aanzicht_raamprofiel'
AL_OFF_SIDE = 'offset_stijl'
AL_EXTRA_UNDER = 'extra_stelruimte_onder'
AL_VIEW_SILL = 'aanzicht_onderdorpel'
AL_MULL_V = 'aanzicht_tussenstijl'
AL_MULL_H = 'aanzicht_tussendorpel'
ALUMINIUM_MARKERS = (AL_SIDE, AL_TOP_BOT, AL_OFF_SIDE, AL_EXTRA_UNDER)

SASH_NAMES = ('glas_offset', 'Glas_offset', 'Glas_Offset')
COLUMN_DISTRIBUTION_NAMES = ('VH_verdeling_kolommen', 'verdeling_kolommen', 'kolom_breedtes', 'kolombreedtes_mm')
ROW_DISTRIBUTION_NAMES = ('VH_verdeling_rijen', 'verdeling_rijen', 'rij_hoogtes', 'rijhoogtes_mm')
FILLING_PREFIX = 'VH_vlakvulling_'
FILLING_PATTERN = re.compile(r'^VH_vlakvulling_([A-Za-z]+)(\d+)$')

CATEGORY_NAME = 'VH_categorie'
CODE_NAMES = ('VH_kozijn_code', 'Kozijnnummer', 'Kozijn', 'Mark', 'Type Mark')

# Write-back
PARAM_ALPHA = 'VH_kozijn_α'
PARAM_BETA_NAMES = ('VH_kozijn_β/ε', 'VH_kozijn_β', 'VH_kozijn_ε')
PARAM_AD = 'VH_kozijn_Ad'
PARAM_CB = 'VH_kozijn_Cb'
PARAM_AE = 'VH_kozijn_Ae'
PARAM_CBI = 'VH_kozijn_Cbi'

_SPLIT = re.compile(r'[|,;]')


def to_float(value: Any) -> Optional[float]:
    """Numeric parameter value; strings accept a decimal comma. None if not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    text = str(value).strip().replace(',', '.')
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_distribution(text: Any) -> Optional[List[float]]:
    """
    Parse a distribution list such as "1|2|1", "600;900" or "1,1,2".

    Returns:
        List of numbers, or None when empty or any entry is not a
        non-negative number
    """
    if text is None:
        return None

    parts = [p.strip() for p in _SPLIT.split(str(text))]
    parts = [p for p in parts if p]
    if not parts:
        return None

    values = []
    for part in parts:
        try:
            value = float(part)
        except ValueError:
            return None
        if not math.isfinite(value) or value < 0:
            return None
        values.append(value)
    return values


def column_index(letters: str) -> int:
    """Spreadsheet-style column letters to a 1-based index (A=1, Z=26, AA=27)."""
    index = 0
    for ch in letters.upper():
        index = index * 26 + (ord(ch) - ord('A') + 1)
    return index


class WindowParameterAdapter:
    """Decodes window parameters into typed records and writes results back."""

    def __init__(self, params: ParameterAccess, model: Optional[ModelQuery] = None):
        self.params = params
        self.model = model

    def _first_number(self, element_id: str, names: Iterable[str]) -> Optional[float]:
        for name in names:
            value = to_float(self.params.read(element_id, name))
            if value is not None:
                return value
        return None

    def _number(self, element_id: str, name: str) -> Optional[float]:
        return to_float(self.params.read(element_id, name))

    def _text(self, element_id: str, names: Iterable[str]) -> Optional[str]:
        for name in names:
            value = self.params.read(element_id, name)
            if value is not None and str(value).strip():
                return str(value).strip()
        return None

    def read_fillings(self, element_id: str) -> Dict[Tuple[int, int], str]:
        """All VH_vlakvulling_<Col><Row> labels, lowercased, keyed by (col, row)."""
        fillings = {}
        for name in self.params.names(element_id):
            match = FILLING_PATTERN.match(name)
            if not match:
                continue
            value = self.params.read(element_id, name)
            if value is None:
                continue
            fillings[(column_index(match.group(1)), int(match.group(2)))] = str(value).strip().lower()
        return fillings

    def read_sash_width(self, record: WindowRecord) -> Optional[float]:
        """Explicit sash width: the largest glas_offset on the window or any of its sub-components."""
        widths = [self._first_number(element_id, SASH_NAMES) for element_id in [record.id, *record.sub_component_ids]]
        widths = [w for w in widths if w is not None and w > 0]
        return max(widths) if widths else None

    def decode_frame(self, record: WindowRecord) -> WindowFrame:
        """
        Read every frame parameter of a window into a WindowFrame.

        Args:
            record: Raw window record

        Returns:
            WindowFrame with None for parameters that do not exist
        """
        wid = record.id
        names = set(self.params.names(wid))
        aluminium = any(name in names for name in ALUMINIUM_MARKERS)

        frame = WindowFrame(
            width_mm=self._first_number(wid, WIDTH_NAMES),
            height_mm=self._first_number(wid, HEIGHT_NAMES),
            sill_height_mm=self._first_number(wid, SILL_NAMES) or 0.0,
            construction=Construction.ALUMINIUM if aluminium else Construction.WOOD,
            top_mm=self._number(wid, P_TOP),
            side_mm=self._number(wid, P_SIDE),
            bottom_mm=self._number(wid, P_BOT),
            mullion_count_v=int(self._number(wid, P_MULL_V_N) or 0),
            mullion_count_h=int(self._number(wid, P_MULL_H_N) or 0),
            mullion_v_mm=self._number(wid, P_MULL_V_T) or 0.0,
            mullion_h_mm=self._number(wid, P_MULL_H_T) or 0.0,
            sash_width_mm=self.read_sash_width(record),
            column_distribution=parse_distribution(self._text(wid, COLUMN_DISTRIBUTION_NAMES)),
            row_distribution=parse_distribution(self._text(wid, ROW_DISTRIBUTION_NAMES)),
            fillings=self.read_fillings(wid),
        )
        if aluminium:
            frame.alu_side_mm = self._number(wid, AL_SIDE)
            frame.alu_top_bottom_mm = self._number(wid, AL_TOP_BOT)
            frame.alu_offset_side_mm = self._number(wid, AL_OFF_SIDE)
            frame.alu_extra_under_mm = self._number(wid, AL_EXTRA_UNDER)
            frame.alu_view_sill_mm = self._number(wid, AL_VIEW_SILL)
            frame.alu_mullion_v_mm = self._number(wid, AL_MULL_V)
            frame.alu_mullion_h_mm = self._number(wid, AL_MULL_H)
        return frame

    def build_window(self, record: WindowRecord) -> Window:
        """Typed Window from a raw record plus its parameters."""
        level_elevation = None
        if self.model is not None and record.level_id is not None:
            level_elevation = self.model.level_elevation(record.level_id)

        return Window(
            id=record.id,
            bbox=record.bbox,
            facing=record.facing,
            frame=self.decode_frame(record),
            level_elevation=level_elevation,
            host_wall_id=record.host_wall_id,
            code=self._text(record.id, CODE_NAMES),
            room_name=record.room_name,
            category_label=self._text(record.id, (CATEGORY_NAME,)),
            names=list(record.names),
            sub_component_ids=list(record.sub_component_ids),
        )

    def _write(self, element_id: str, name: str, value: float) -> bool:
        written = self.params.write(element_id, name, value)
        if not written:
            logger.debug(f"Parameter {name} not writable on {element_id}")
        return written

    def write_window_result(self, result: WindowResult) -> int:
        """
        Write α, β (radians) and Ad back onto the window.

        Returns:
            Number of parameters written

        Raises:
            ParameterWriteError: propagated from the parameter access
        """
        count = 0
        wid = result.window_id
        if result.alpha_avg_deg is not None:
            count += self._write(wid, PARAM_ALPHA, math.radians(result.alpha_avg_deg))
        if result.beta_rad is not None:
            existing = set(self.params.names(wid))
            name = next((n for n in PARAM_BETA_NAMES if n in existing), PARAM_BETA_NAMES[0])
            count += self._write(wid, name, result.beta_rad)
        if result.glass_m2 is not None:
            count += self._write(wid, PARAM_AD, result.glass_m2)
        return count

    def write_compliance(self, record: WindowCompliance, cbi: Optional[float] = None) -> int:
        """Write Cb, Ae and the area's Cbi back onto the window."""
        count = 0
        if record.cb is not None:
            count += self._write(record.window_id, PARAM_CB, record.cb)
        if record.ae_m2 is not None:
            count += self._write(record.window_id, PARAM_AE, record.ae_m2)
        if cbi is not None:
            count += self._write(record.window_id, PARAM_CBI, cbi)
        return count
