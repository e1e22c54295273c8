"""
Data Models and Configuration for Sliding-Window Plane Extraction

This module defines the core data structures and configuration classes for
terrain plane extraction: extraction parameters, the plane description emitted
for every accepted region, and the segmented planes map returned to callers.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import List, Tuple, Optional, Dict, Any


@dataclass
class SlidingWindowParameters:
    """Configuration for sliding-window plane extraction."""

    # Local plane fit
    kernel_size: int = 3  # Side of the square window, odd and >= 3
    plane_patch_error_threshold: float = 0.02  # Max RMS error of a local fit in meters
    plane_inclination_threshold_degrees: float = 30.0  # Max angle from vertical

    # Mask cleanup and labeling
    planarity_erosion: int = 0  # Erosion radius in cells
    connectivity: int = 4  # 4 or 8 neighborhood

    # Region acceptance
    min_number_points_per_label: int = 4
    include_ransac_refinement: bool = True
    global_plane_fit_distance_error_threshold: float = 0.025  # meters
    global_plane_fit_angle_error_threshold_degrees: float = 25.0

    def validate(self) -> bool:
        """Validate configuration parameters."""
        if self.kernel_size < 3 or self.kernel_size % 2 == 0:
            raise ValueError("Kernel size must be an odd integer >= 3")

        if self.planarity_erosion < 0:
            raise ValueError("Planarity erosion must be non-negative")

        if self.connectivity not in (4, 8):
            raise ValueError("Connectivity must be 4 or 8")

        if self.plane_patch_error_threshold <= 0:
            raise ValueError("Plane patch error threshold must be positive")

        if not 0 < self.plane_inclination_threshold_degrees <= 90:
            raise ValueError("Plane inclination threshold must be in (0, 90] degrees")

        if self.min_number_points_per_label < 0:
            raise ValueError("Minimum number of points per label must be non-negative")

        if self.global_plane_fit_distance_error_threshold <= 0:
            raise ValueError("Global plane fit distance threshold must be positive")

        if not 0 <= self.global_plane_fit_angle_error_threshold_degrees <= 180:
            raise ValueError("Global plane fit angle threshold must be in [0, 180] degrees")

        return True


@dataclass
class TerrainPlane:
    """
    Plane parameters of one accepted region.

    The orientation rotates world vectors into the local terrain frame, whose
    z axis is the surface normal.
    """

    position_in_world: np.ndarray  # Support vector (centroid), shape (3,)
    orientation_world_to_terrain: np.ndarray  # Rotation matrix, shape (3, 3)

    def surface_normal_in_world(self) -> np.ndarray:
        """Terrain z axis expressed in world frame."""
        return self.orientation_world_to_terrain[2, :].copy()

    def signed_distance(self, point: np.ndarray) -> float:
        """Signed distance of a world point above the plane."""
        normal = self.surface_normal_in_world()
        return float(np.dot(normal, np.asarray(point) - self.position_in_world))

    def to_dict(self) -> Dict[str, Any]:
        """Convert plane to dictionary representation."""
        return {
            'position_in_world': self.position_in_world.tolist(),
            'orientation_world_to_terrain': self.orientation_world_to_terrain.tolist(),
            'surface_normal_in_world': self.surface_normal_in_world().tolist()
        }


@dataclass
class SegmentedPlanesMap:
    """Result of one extraction: label image plus accepted plane parameters."""

    resolution: float = 0.0
    map_origin: np.ndarray = field(default_factory=lambda: np.zeros(2))
    labeled_image: np.ndarray = field(default_factory=lambda: np.zeros((0, 0), dtype=np.int32))
    highest_label: int = -1

    # Append-only, in order of acceptance
    label_plane_parameters: List[Tuple[int, TerrainPlane]] = field(default_factory=list)

    @property
    def num_planes(self) -> int:
        return len(self.label_plane_parameters)

    def labels(self) -> List[int]:
        """Labels of accepted planes in order of acceptance."""
        return [label for label, _ in self.label_plane_parameters]

    def get_plane(self, label: int) -> Optional[TerrainPlane]:
        for plane_label, plane in self.label_plane_parameters:
            if plane_label == label:
                return plane
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert map summary to dictionary representation."""
        return {
            'resolution': self.resolution,
            'map_origin': np.asarray(self.map_origin).tolist(),
            'size': list(self.labeled_image.shape),
            'highest_label': self.highest_label,
            'planes': [
                {'label': label, **plane.to_dict()}
                for label, plane in self.label_plane_parameters
            ]
        }
