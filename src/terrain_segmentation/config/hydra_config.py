"""
Hydra Configuration Classes

This module defines the structured configuration of the plane extraction
pipeline and registers it, together with parameter presets for common terrain
types, with the Hydra ConfigStore.
"""

from typing import Dict, Any
from dataclasses import dataclass, field
from enum import Enum
from hydra.core.config_store import ConfigStore

from ..plane_extraction.plane_models import SlidingWindowParameters
from ..plane_extraction.ransac_models import RansacParameters


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class ExtractionConfig:
    """Complete plane extraction configuration."""

    # Input
    layer_name: str = "elevation"

    # Logging
    log_level: LogLevel = LogLevel.INFO

    # Configuration sections
    sliding_window: SlidingWindowParameters = field(default_factory=SlidingWindowParameters)
    ransac: RansacParameters = field(default_factory=RansacParameters)


# Parameter presets, applied as overrides on top of the defaults
PRESETS: Dict[str, Dict[str, Any]] = {
    "rough_terrain": {
        "sliding_window": {
            "kernel_size": 5,
            "plane_patch_error_threshold": 0.03,
            "plane_inclination_threshold_degrees": 35.0,
            "planarity_erosion": 1,
            "min_number_points_per_label": 8
        },
        "ransac": {
            "epsilon": 0.035,
            "normal_threshold": 30.0
        }
    },
    "stairs": {
        "sliding_window": {
            "kernel_size": 3,
            "plane_patch_error_threshold": 0.01,
            "plane_inclination_threshold_degrees": 20.0,
            "connectivity": 4,
            "global_plane_fit_distance_error_threshold": 0.015
        },
        "ransac": {
            "epsilon": 0.015,
            "cluster_epsilon": 0.05,
            "normal_threshold": 15.0
        }
    },
    "fast": {
        "sliding_window": {
            "include_ransac_refinement": False,
            "connectivity": 8
        }
    }
}


# Hydra configuration registration
def register_configs():
    """Register configurations with Hydra ConfigStore."""
    cs = ConfigStore.instance()

    # Main config
    cs.store(name="extraction", node=ExtractionConfig)

    # Terrain presets
    for name, overrides in PRESETS.items():
        cs.store(group="preset", name=name, node=overrides, package="_global_")


# Register configurations on import
register_configs()
