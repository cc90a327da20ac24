"""
Model access for the daylight engine: collaborator interfaces, the in-memory
model and the window parameter adapter.
"""

from .base_importer import AreaPolygonSource, LinkedModel, ModelQuery, ParameterAccess
from .memory_model import InMemoryModel
from .parameter_adapter import WindowParameterAdapter, parse_distribution

__all__ = [
    'AreaPolygonSource',
    'LinkedModel',
    'ModelQuery',
    'ParameterAccess',
    'InMemoryModel',
    'WindowParameterAdapter',
    'parse_distribution',
]
