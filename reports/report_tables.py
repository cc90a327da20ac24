"""
Tabular NEN 2057 results for the export layer.

Builds pandas DataFrames from a DaylightRunResult without touching geometry:
- area sheet ("Gebieden"): one row per habitable area with linked windows
- window list ("Kozijnlijst"): every window, sorted by window code
- ray diagnostics ("Stralen"): the α fan of every window
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from models.calculation_result import ComplianceReport, DaylightRunResult

logger = logging.getLogger(__name__)

STATUS_TEXT = {True: 'VOLDOET', False: 'VOLDOET NIET'}

AREA_SHEET = 'Gebieden'
WINDOW_SHEET = 'Kozijnlijst'
RAY_SHEET = 'Stralen'

WINDOW_COLUMNS = ['Koz', 'Ruimte', 'VG', 'Ad,i', 'α', 'β / ε', 'Cb,i', 'Cu,i', 'CLTA', 'Aantal', 'Ae,i']


def area_table(report: ComplianceReport) -> pd.DataFrame:
    """
    One row per habitable area that has at least one linked window.

    Args:
        report: Compliance report

    Returns:
        DataFrame with area, Ae totals, required Ae, reduction and status
    """
    rows = []
    for area in report.areas:
        if area.window_count == 0:
            continue
        rows.append({
            'Verblijfsgebied': area.name,
            'Groep': area.group,
            'Bouwlaag': area.level,
            'A_VG': area.area_m2,
            'Totaal Ae,i aanwezig': area.ae_sum_m2,
            'Totaal Ae,i eis': area.required_ae_m2,
            'Tekort': area.deficit_m2,
            'Benodigde reductie VG': area.area_reduction_m2,
            'Cbi': area.cbi,
            'Status': STATUS_TEXT[area.is_compliant()],
            'Aantal kozijnen': area.window_count,
        })
    return pd.DataFrame(rows, columns=[
        'Verblijfsgebied', 'Groep', 'Bouwlaag', 'A_VG', 'Totaal Ae,i aanwezig', 'Totaal Ae,i eis',
        'Tekort', 'Benodigde reductie VG', 'Cbi', 'Status', 'Aantal kozijnen',
    ])


def window_table(report: ComplianceReport) -> pd.DataFrame:
    """Every window, sorted by code. Cu, CLTA and count are fixed at 1."""
    area_names: Dict[str, str] = {a.area_id: a.name for a in report.areas}
    rows = []
    for w in report.windows:
        rows.append({
            'Koz': w.code,
            'Ruimte': w.room_name or '',
            'VG': area_names.get(w.area_id, '') if w.area_id else '',
            'Ad,i': w.ad_m2,
            'α': w.alpha_deg,
            'β / ε': w.beta_deg,
            'Cb,i': w.cb,
            'Cu,i': 1.0,
            'CLTA': 1.0,
            'Aantal': 1,
            'Ae,i': w.ae_m2,
        })
    df = pd.DataFrame(rows, columns=WINDOW_COLUMNS)
    if not df.empty:
        df = df.sort_values('Koz', kind='stable').reset_index(drop=True)
    return df


def ray_table(run: DaylightRunResult) -> pd.DataFrame:
    """Flattened α fan diagnostics, one row per ray."""
    rows = []
    for result in run.window_results:
        for ray in result.rays:
            rows.append({
                'window_id': result.window_id,
                'index': ray.index,
                'angle_offset_deg': ray.angle_offset_deg,
                'alpha_deg': ray.alpha_deg,
                'x_dist_mm': ray.x_dist_mm,
                'd_horiz_mm': ray.d_horiz_mm,
                'z_ref_mm': ray.z_ref_mm,
                'z_obst_mm': ray.z_obst_mm,
                'line_length_mm': ray.line_length_mm,
                'obstacle_id': ray.obstacle_id,
            })
    return pd.DataFrame(rows, columns=[
        'window_id', 'index', 'angle_offset_deg', 'alpha_deg', 'x_dist_mm', 'd_horiz_mm',
        'z_ref_mm', 'z_obst_mm', 'line_length_mm', 'obstacle_id',
    ])


def build_tables(run: DaylightRunResult) -> Dict[str, pd.DataFrame]:
    return {
        AREA_SHEET: area_table(run.compliance),
        WINDOW_SHEET: window_table(run.compliance),
        RAY_SHEET: ray_table(run),
    }


def export_excel(run: DaylightRunResult, output_path: str) -> str:
    """
    Write all tables to one workbook, one sheet per table.

    Returns:
        Path of the written file
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine='openpyxl') as writer:
        for sheet, df in build_tables(run).items():
            df.to_excel(writer, sheet_name=sheet, index=False)
    logger.info(f"NEN 2057 workbook written to {path}")
    return str(path)


def export_csv(run: DaylightRunResult, output_dir: str, prefix: Optional[str] = 'daglicht') -> Dict[str, str]:
    """
    Write every table as a semicolon-separated CSV with decimal commas.

    Returns:
        Mapping of sheet name to written path
    """
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    written = {}
    for sheet, df in build_tables(run).items():
        path = directory / f"{prefix}_{sheet.lower()}.csv"
        df.to_csv(path, sep=';', decimal=',', index=False, encoding='utf-8')
        written[sheet] = str(path)
    logger.info(f"NEN 2057 tables written to {directory}")
    return written
