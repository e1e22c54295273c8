"""
Terrain Plane Segmentation

Segmentation of elevation grids into planar terrain regions for contact and
footstep planning.

Features:
- Sliding-window local plane fits with covariance/eigen analysis
- Planarity mask with morphological cleanup and connected-component labeling
- Global per-region plane fitting with acceptance tests
- Deterministic RANSAC refinement of non-planar regions
- Hydra/OmegaConf structured configuration with terrain presets
"""

from .grid_map import ElevationGrid

from .plane_extraction import (
    # Main classes
    SlidingWindowPlaneExtractor,
    SlidingWindowParameters,
    RansacParameters,
    RansacPlaneExtractor,

    # Data models
    TerrainPlane,
    SegmentedPlanesMap,
    DetectedPlane,
    RansacResult,

    # Utilities
    GeometryUtils,
    orientation_world_to_terrain_from_surface_normal,
)

from .config import ExtractionConfig, ConfigManager, ConfigValidator

from .pipeline import build_extractor, extract_planes

__all__ = [
    'ElevationGrid',
    'SlidingWindowPlaneExtractor',
    'SlidingWindowParameters',
    'RansacParameters',
    'RansacPlaneExtractor',
    'TerrainPlane',
    'SegmentedPlanesMap',
    'DetectedPlane',
    'RansacResult',
    'GeometryUtils',
    'orientation_world_to_terrain_from_surface_normal',
    'ExtractionConfig',
    'ConfigManager',
    'ConfigValidator',
    'build_extractor',
    'extract_planes',
]

__version__ = "1.0.0"
__description__ = "Planar region extraction from elevation grids"

