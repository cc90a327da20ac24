"""
Export tables for daylight calculation results.
"""

from .report_tables import (
    AREA_SHEET, WINDOW_SHEET, RAY_SHEET,
    area_table, window_table, ray_table, build_tables, export_excel, export_csv
)

__all__ = [
    'AREA_SHEET',
    'WINDOW_SHEET',
    'RAY_SHEET',
    'area_table',
    'window_table',
    'ray_table',
    'build_tables',
    'export_excel',
    'export_csv',
]
