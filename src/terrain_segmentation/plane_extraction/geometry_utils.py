"""
Geometry Utilities for Terrain Plane Extraction

This module provides the geometric building blocks shared by the local and
global plane fits: covariance based normal estimation, angle computations and
the construction of a terrain orientation from a surface normal.
"""

import torch
import numpy as np
from typing import Tuple, Union
import logging

logger = logging.getLogger(__name__)

# Error reported for fits whose normal is undefined
UNDEFINED_FIT_ERROR = 1e30

# Worst case bound for a zero eigenvalue of a 3x3 covariance
EIGENVALUE_EPSILON = 1e-8

# Vectors closer than this are treated as parallel
ALIGNMENT_TOLERANCE = 1e-9

ArrayLike = Union[torch.Tensor, np.ndarray]


def _as_tensor(value: ArrayLike) -> torch.Tensor:
    if isinstance(value, torch.Tensor):
        return value.to(torch.float64)
    return torch.as_tensor(np.asarray(value), dtype=torch.float64)


class GeometryUtils:
    """Utility class for plane geometry operations."""

    @staticmethod
    def normalize_vector(vector: torch.Tensor) -> torch.Tensor:
        """Normalize vector to unit length."""
        norm = torch.norm(vector, dim=-1, keepdim=True)
        return vector / (norm + 1e-12)

    @staticmethod
    def angle_between_normalized_vectors_degrees(v1: ArrayLike, v2: ArrayLike) -> torch.Tensor:
        """
        Compute angle between unit vectors in degrees.

        Inputs are assumed to be normalized; the dot product is clamped to
        [-1, 1] before taking the arccosine. Broadcasts over leading dimensions.
        """
        dot_product = torch.sum(_as_tensor(v1) * _as_tensor(v2), dim=-1)
        dot_product = torch.clamp(dot_product, -1.0, 1.0)
        return torch.abs(torch.rad2deg(torch.acos(dot_product)))

    @staticmethod
    def inclination_degrees(normal: ArrayLike) -> torch.Tensor:
        """Angle between a unit normal and the world z axis."""
        unit_z = torch.tensor([0.0, 0.0, 1.0], dtype=torch.float64)
        return GeometryUtils.angle_between_normalized_vectors_degrees(normal, unit_z)

    @staticmethod
    def normal_and_error_from_covariance(num_points: ArrayLike, mean: ArrayLike,
                                         sum_squared: ArrayLike) -> Tuple[torch.Tensor, torch.Tensor]:
        """
        Compute plane normal and RMS error from accumulated point statistics.

        Args:
            num_points: Number of accumulated points, shape (...)
            mean: Mean point, shape (..., 3)
            sum_squared: Sum of outer products p * p^T, shape (..., 3, 3)

        Returns:
            Tuple of (normals (..., 3), rms errors (...))

        The normal is the eigenvector of the smallest covariance eigenvalue,
        flipped to point upwards. Fits with fewer than 3 points or a second
        eigenvalue below EIGENVALUE_EPSILON have no defined normal and return
        the vertical normal with UNDEFINED_FIT_ERROR.
        """
        num_points = _as_tensor(num_points)
        mean = _as_tensor(mean)
        sum_squared = _as_tensor(sum_squared)

        enough_points = num_points >= 3
        safe_count = torch.clamp(num_points, min=1.0)

        covariance = (sum_squared / safe_count[..., None, None]
                      - mean[..., :, None] * mean[..., None, :])
        covariance = torch.where(enough_points[..., None, None], covariance,
                                 torch.zeros_like(covariance))

        # Eigenvalues are ordered small to large
        eigenvalues, eigenvectors = torch.linalg.eigh(covariance)

        normals = eigenvectors[..., :, 0]
        normals = torch.where(normals[..., 2:3] < 0.0, -normals, normals)

        # The first eigenvalue might become slightly negative due to numerics
        errors = torch.sqrt(torch.clamp(eigenvalues[..., 0], min=0.0))

        defined = enough_points & (eigenvalues[..., 1] > EIGENVALUE_EPSILON)
        unit_z = torch.tensor([0.0, 0.0, 1.0], dtype=torch.float64)
        normals = torch.where(defined[..., None], normals, unit_z.expand_as(normals))
        errors = torch.where(defined, errors, torch.full_like(errors, UNDEFINED_FIT_ERROR))

        return normals, errors

    @staticmethod
    def fit_plane_to_points(points: ArrayLike) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        """
        Least-squares plane through a point set.

        Args:
            points: Points tensor (N, 3)

        Returns:
            Tuple of (support vector, normal, rms error)
        """
        points = _as_tensor(points)
        num_points = torch.tensor(float(points.shape[0]), dtype=torch.float64)
        if points.shape[0] == 0:
            support = torch.zeros(3, dtype=torch.float64)
            sum_squared = torch.zeros((3, 3), dtype=torch.float64)
        else:
            support = points.mean(dim=0)
            sum_squared = points.T @ points

        normal, error = GeometryUtils.normal_and_error_from_covariance(num_points, support, sum_squared)
        return support, normal, error

    @staticmethod
    def compute_rotation_matrix_from_vectors(from_vec: ArrayLike,
                                             to_vec: ArrayLike) -> torch.Tensor:
        """
        Compute rotation matrix that rotates from_vec to to_vec.

        Args:
            from_vec: Source vector (3,)
            to_vec: Target vector (3,)

        Returns:
            Rotation matrix (3, 3)
        """
        from_vec = GeometryUtils.normalize_vector(_as_tensor(from_vec))
        to_vec = GeometryUtils.normalize_vector(_as_tensor(to_vec))
        identity = torch.eye(3, dtype=torch.float64)

        # Vectors are only unit up to the normalization epsilon
        dot_product = torch.dot(from_vec, to_vec)
        if torch.abs(dot_product - 1.0) < ALIGNMENT_TOLERANCE:
            return identity

        # Opposite vectors: 180 degree rotation around any perpendicular axis
        if torch.abs(dot_product + 1.0) < ALIGNMENT_TOLERANCE:
            if torch.abs(from_vec[0]) < 0.9:
                perp = torch.tensor([1.0, 0.0, 0.0], dtype=torch.float64)
            else:
                perp = torch.tensor([0.0, 1.0, 0.0], dtype=torch.float64)
            perp = GeometryUtils.normalize_vector(perp - torch.dot(perp, from_vec) * from_vec)
            return 2.0 * torch.outer(perp, perp) - identity

        # Rodrigues' rotation formula
        cross_product = torch.linalg.cross(from_vec, to_vec)
        sin_angle = torch.norm(cross_product)
        if sin_angle < ALIGNMENT_TOLERANCE:
            return identity

        axis = cross_product / sin_angle

        zero = torch.zeros((), dtype=torch.float64)
        K = torch.stack([
            torch.stack([zero, -axis[2], axis[1]]),
            torch.stack([axis[2], zero, -axis[0]]),
            torch.stack([-axis[1], axis[0], zero])
        ])

        return identity + sin_angle * K + (1.0 - dot_product) * (K @ K)


def orientation_world_to_terrain_from_surface_normal(surface_normal_in_world: ArrayLike) -> np.ndarray:
    """
    Terrain orientation for a unit surface normal.

    Returns the minimal rotation R with R @ normal = e_z, i.e. the rotation from
    world frame into a terrain frame whose z axis is the surface normal.
    """
    unit_z = torch.tensor([0.0, 0.0, 1.0], dtype=torch.float64)
    rotation = GeometryUtils.compute_rotation_matrix_from_vectors(surface_normal_in_world, unit_z)
    return rotation.numpy()
