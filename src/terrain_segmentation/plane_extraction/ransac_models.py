"""
Data Models and Configuration for RANSAC Plane Refinement

This module defines the parameters of the seeded RANSAC region detector and
the partition it returns: detected sub-planes plus unassigned points.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import List, Dict, Any


@dataclass
class RansacParameters:
    """Configuration for RANSAC plane detection."""

    # Candidate search
    probability: float = 0.01  # Acceptable probability to miss the largest candidate
    max_iterations: int = 1000  # Cap on candidate draws per detected plane
    seed: int = 0  # Base seed, combined with the region label

    # Shape acceptance
    min_points: int = 4  # Minimum points per detected plane
    epsilon: float = 0.025  # Maximum point to plane distance in meters
    cluster_epsilon: float = 0.08  # Maximum spacing of neighbors inside one plane
    normal_threshold: float = 25.0  # Maximum angle between point normal and plane normal (degrees)

    def validate(self) -> bool:
        """Validate configuration parameters."""
        if not 0 < self.probability < 1:
            raise ValueError("RANSAC probability must be in (0, 1)")

        if self.max_iterations <= 0:
            raise ValueError("RANSAC iterations must be positive")

        if self.min_points <= 0:
            raise ValueError("Minimum points must be positive")

        if self.epsilon <= 0:
            raise ValueError("RANSAC epsilon must be positive")

        if self.cluster_epsilon <= 0:
            raise ValueError("Cluster epsilon must be positive")

        if not 0 < self.normal_threshold <= 90:
            raise ValueError("Normal threshold must be in (0, 90] degrees")

        if self.seed < 0:
            raise ValueError("Seed must be non-negative")

        return True


@dataclass
class DetectedPlane:
    """One sub-plane found by the detector."""

    indices: np.ndarray  # Sorted indices into the input point list
    normal: np.ndarray  # Least-squares normal of the assigned points
    support: np.ndarray  # Centroid of the assigned points

    @property
    def num_points(self) -> int:
        return int(len(self.indices))


@dataclass
class RansacResult:
    """Partition of the input points into detected planes and leftovers."""

    planes: List[DetectedPlane] = field(default_factory=list)
    unassigned_indices: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.int64))

    @property
    def num_planes(self) -> int:
        return len(self.planes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'num_planes': self.num_planes,
            'plane_sizes': [plane.num_points for plane in self.planes],
            'num_unassigned': int(len(self.unassigned_indices))
        }
