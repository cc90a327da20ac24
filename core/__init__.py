"""
Core calculation engines for the NEN 2057 daylight check.
"""

from .exceptions import DaglichtError, ModelQueryError, ParameterWriteError
from .cb_table import CbTable
from .scene_index import SceneIndex
from .glazing_geometry import GlazingGeometryResolver, GlassBounds
from .daylight_calculator import DaylightCalculator, BetaResult
from .compliance import ComplianceAggregator

__all__ = [
    'DaglichtError',
    'ModelQueryError',
    'ParameterWriteError',
    'CbTable',
    'SceneIndex',
    'GlazingGeometryResolver',
    'GlassBounds',
    'DaylightCalculator',
    'BetaResult',
    'ComplianceAggregator',
]
