"""
Utility functions and helpers.
"""

from .config_loader import load_config, get_config_value, DaylightConfig
from .geometry_utils import (
    normalize_vector, horizontal_direction, rotate_xy, ray_box_2d_distance,
    elevation_angle_deg, point_in_polygon
)
from .logging_config import setup_logging

__all__ = [
    'load_config',
    'get_config_value',
    'DaylightConfig',
    'normalize_vector',
    'horizontal_direction',
    'rotate_xy',
    'ray_box_2d_distance',
    'elevation_angle_deg',
    'point_in_polygon',
    'setup_logging',
]
