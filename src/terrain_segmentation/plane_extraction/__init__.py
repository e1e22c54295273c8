"""
Sliding-Window Plane Extraction Module

This module segments elevation grids into planar terrain regions suitable for
contact and footstep planning.

Features:
- Batched local plane fits over a sliding window
- Planarity thresholding with cross-shaped erosion
- Connected-component labeling with 4- or 8-connectivity
- Global plane fitting with distance and normal-angle acceptance tests
- Seeded RANSAC refinement with deterministic relabeling
"""

from .plane_models import SlidingWindowParameters, TerrainPlane, SegmentedPlanesMap

from .ransac_models import RansacParameters, DetectedPlane, RansacResult

from .geometry_utils import (
    GeometryUtils, orientation_world_to_terrain_from_surface_normal,
    UNDEFINED_FIT_ERROR, EIGENVALUE_EPSILON
)

from .surface_normal_estimator import SlidingWindowNormalEstimator, LocalPlaneFit
from .mask_builder import PlanarityMaskBuilder
from .region_labeler import RegionLabeler
from .ransac_plane_extractor import RansacPlaneExtractor, derive_seed
from .plane_extractor import SlidingWindowPlaneExtractor

__all__ = [
    # Data models
    "SlidingWindowParameters", "TerrainPlane", "SegmentedPlanesMap",
    "RansacParameters", "DetectedPlane", "RansacResult",

    # Geometry
    "GeometryUtils", "orientation_world_to_terrain_from_surface_normal",
    "UNDEFINED_FIT_ERROR", "EIGENVALUE_EPSILON",

    # Pipeline stages
    "SlidingWindowNormalEstimator", "LocalPlaneFit",
    "PlanarityMaskBuilder", "RegionLabeler",
    "RansacPlaneExtractor", "derive_seed",
    "SlidingWindowPlaneExtractor",
]
