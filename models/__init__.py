"""
Data models for windows, obstructions, habitable areas and calculation results.
"""

from .geometry import BoundingBox, Transform, Plane, SurfaceGeometry
from .building import (
    Category, Construction, ElementRecord, Obstruction, WindowFrame, Window, HabitableArea
)
from .calculation_result import (
    RayResult, WindowResult, WindowCompliance, AreaComplianceResult, ComplianceReport, DaylightRunResult
)

__all__ = [
    'BoundingBox',
    'Transform',
    'Plane',
    'SurfaceGeometry',
    'Category',
    'Construction',
    'ElementRecord',
    'Obstruction',
    'WindowFrame',
    'Window',
    'HabitableArea',
    'RayResult',
    'WindowResult',
    'WindowCompliance',
    'AreaComplianceResult',
    'ComplianceReport',
    'DaylightRunResult',
]
