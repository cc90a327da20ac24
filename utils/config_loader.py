"""
Configuration loading utilities.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)


def load_config(config_path: str = 'config.yaml') -> dict:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary (empty if the file is missing or unreadable)
    """
    config_file = Path(config_path)

    if not config_file.exists():
        return {}

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Error loading config {config_file}: {e}")
        return {}


def get_config_value(config: dict, key_path: str, default: Any = None) -> Any:
    """
    Get configuration value using dot-notation path.

    Args:
        config: Configuration dictionary
        key_path: Dot-separated path (e.g., 'daylight.alpha.ray_count')
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    keys = key_path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


@dataclass(frozen=True)
class DaylightConfig:
    """Immutable tunables for one calculation run."""

    do_alpha: bool = True
    do_beta: bool = True
    do_glass: bool = True
    flip_alpha_fan: bool = False

    default_sash_width_mm: float = 69.0
    default_frame_height_mm: float = 67.0

    ray_count: int = 11
    angle_start_deg: float = -50.0
    angle_step_deg: float = 10.0
    alpha_max_distance_m: float = 5.0
    min_alpha_deg: float = 20.0
    face_search_tolerance_mm: float = 500.0
    assembly_tolerance_mm: float = 10.0

    beta_max_distance_m: float = 5.0
    max_edge_tests: int = 250000

    floor_cut_mm: float = 600.0
    wood_glass_offset_mm: float = 17.0

    required_ratio: float = 0.55

    @classmethod
    def from_config(cls, config: Optional[dict]) -> 'DaylightConfig':
        """Build from a loaded config.yaml dictionary; missing keys keep their defaults."""
        config = config or {}
        d = cls()
        return cls(
            do_alpha=bool(get_config_value(config, 'daylight.do_alpha', d.do_alpha)),
            do_beta=bool(get_config_value(config, 'daylight.do_beta', d.do_beta)),
            do_glass=bool(get_config_value(config, 'daylight.do_glass', d.do_glass)),
            flip_alpha_fan=bool(get_config_value(config, 'daylight.flip_alpha_fan', d.flip_alpha_fan)),
            default_sash_width_mm=float(get_config_value(config, 'daylight.default_sash_width_mm', d.default_sash_width_mm)),
            default_frame_height_mm=float(get_config_value(config, 'daylight.default_frame_height_mm', d.default_frame_height_mm)),
            ray_count=int(get_config_value(config, 'daylight.alpha.ray_count', d.ray_count)),
            angle_start_deg=float(get_config_value(config, 'daylight.alpha.angle_start_deg', d.angle_start_deg)),
            angle_step_deg=float(get_config_value(config, 'daylight.alpha.angle_step_deg', d.angle_step_deg)),
            alpha_max_distance_m=float(get_config_value(config, 'daylight.alpha.max_distance_m', d.alpha_max_distance_m)),
            min_alpha_deg=float(get_config_value(config, 'daylight.alpha.min_alpha_deg', d.min_alpha_deg)),
            face_search_tolerance_mm=float(get_config_value(config, 'daylight.alpha.face_search_tolerance_mm', d.face_search_tolerance_mm)),
            assembly_tolerance_mm=float(get_config_value(config, 'daylight.alpha.assembly_tolerance_mm', d.assembly_tolerance_mm)),
            beta_max_distance_m=float(get_config_value(config, 'daylight.beta.max_distance_m', d.beta_max_distance_m)),
            max_edge_tests=int(get_config_value(config, 'daylight.beta.max_edge_tests', d.max_edge_tests)),
            floor_cut_mm=float(get_config_value(config, 'daylight.glass.floor_cut_mm', d.floor_cut_mm)),
            wood_glass_offset_mm=float(get_config_value(config, 'daylight.glass.wood_glass_offset_mm', d.wood_glass_offset_mm)),
            required_ratio=float(get_config_value(config, 'daylight.compliance.required_ratio', d.required_ratio)),
        )
