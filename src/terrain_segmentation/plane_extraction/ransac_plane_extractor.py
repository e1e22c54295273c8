"""
Seeded RANSAC Plane Detection for Region Refinement

This module partitions a set of oriented points into planar sub-clusters.
Candidates are drawn from three-point samples, scored by the points that are
both close to the candidate plane and have a compatible normal, refit by least
squares and finally restricted to their largest spatially connected cluster.

Randomness comes exclusively from an explicit torch.Generator seeded per call,
so the partition is a pure function of the inputs and the seed.
"""

import math
import torch
import numpy as np
from scipy.spatial import cKDTree
from scipy.sparse import coo_matrix
from scipy.sparse.csgraph import connected_components
from typing import Optional, Tuple
import logging

from .ransac_models import RansacParameters, DetectedPlane, RansacResult
from .geometry_utils import GeometryUtils, UNDEFINED_FIT_ERROR

logger = logging.getLogger(__name__)


def derive_seed(base_seed: int, label: int) -> int:
    """Seed for one region, a pure function of the base seed and the label."""
    return int(np.random.SeedSequence([int(base_seed), int(label)]).generate_state(1)[0])


class RansacPlaneExtractor:
    """Efficient-RANSAC style detector of multiple planes in oriented points."""

    def __init__(self, parameters: RansacParameters):
        """
        Initialize RANSAC plane extractor.

        Args:
            parameters: RANSAC parameters
        """
        self.parameters = parameters
        self.parameters.validate()

        self._cos_normal_threshold = math.cos(math.radians(parameters.normal_threshold))
        self._min_plane_points = max(parameters.min_points, 3)

    def detect_planes(self, points, normals, seed: Optional[int] = None) -> RansacResult:
        """
        Detect planes in an oriented point set.

        Args:
            points: Points (N, 3)
            normals: Unit normals per point (N, 3)
            seed: Seed for this call, defaults to parameters.seed

        Returns:
            RansacResult; every input index is either in exactly one plane or unassigned
        """
        points = torch.as_tensor(np.asarray(points, dtype=np.float64))
        normals = torch.as_tensor(np.asarray(normals, dtype=np.float64))
        if points.shape != normals.shape:
            raise ValueError(f"Points {tuple(points.shape)} and normals {tuple(normals.shape)} differ in shape")

        generator = torch.Generator()
        generator.manual_seed(self.parameters.seed if seed is None else seed)

        remaining = torch.arange(points.shape[0])
        result = RansacResult()

        while remaining.numel() >= self._min_plane_points:
            remaining_points = points[remaining]
            remaining_normals = normals[remaining]

            candidate = self._find_best_candidate(remaining_points, remaining_normals, generator)
            if candidate is None:
                break

            inliers = self._refine_candidate(remaining_points, remaining_normals, *candidate)
            cluster = self._largest_cluster(remaining_points, inliers)
            if int(cluster.sum()) < self._min_plane_points:
                break

            indices = torch.sort(remaining[cluster]).values
            support, normal, _ = GeometryUtils.fit_plane_to_points(points[indices])
            result.planes.append(DetectedPlane(
                indices=indices.numpy(),
                normal=normal.numpy(),
                support=support.numpy()
            ))
            remaining = remaining[~cluster]

        result.unassigned_indices = torch.sort(remaining).values.numpy()

        logger.debug(f"RANSAC detected {result.num_planes} planes, "
                     f"{len(result.unassigned_indices)} points unassigned")
        return result

    def _inlier_mask(self, points: torch.Tensor, normals: torch.Tensor,
                     plane_normal: torch.Tensor, plane_point: torch.Tensor) -> torch.Tensor:
        """Points within epsilon of the plane whose normal is compatible."""
        distances = torch.abs((points - plane_point.unsqueeze(0)) @ plane_normal)
        alignment = torch.abs(normals @ plane_normal)
        return (distances < self.parameters.epsilon) & (alignment >= self._cos_normal_threshold)

    def _find_best_candidate(self, points: torch.Tensor, normals: torch.Tensor,
                             generator: torch.Generator) -> Optional[Tuple[torch.Tensor, torch.Tensor]]:
        """Adaptive three-point sampling until the best candidate is unlikely to be missed."""
        num_points = points.shape[0]
        best_candidate = None
        best_count = 0

        required_iterations = self.parameters.max_iterations
        iteration = 0
        while iteration < min(required_iterations, self.parameters.max_iterations):
            iteration += 1

            sample = torch.randperm(num_points, generator=generator)[:3]
            p0, p1, p2 = points[sample]
            normal = torch.linalg.cross(p1 - p0, p2 - p0)
            norm = torch.norm(normal)
            if norm < 1e-12:
                continue  # Collinear sample
            normal = normal / norm

            count = int(self._inlier_mask(points, normals, normal, p0).sum())
            if count > best_count:
                best_count = count
                best_candidate = (normal, p0)

                # Probability that a single draw lies entirely on this candidate
                hit_probability = (count / num_points) ** 3
                if hit_probability >= 1.0:
                    required_iterations = iteration
                else:
                    required_iterations = math.ceil(
                        math.log(self.parameters.probability) / math.log(1.0 - hit_probability)
                    )

        if best_count < self._min_plane_points:
            return None
        return best_candidate

    def _refine_candidate(self, points: torch.Tensor, normals: torch.Tensor,
                          plane_normal: torch.Tensor, plane_point: torch.Tensor) -> torch.Tensor:
        """Least-squares refit on the inliers; kept only if it does not lose support."""
        inliers = self._inlier_mask(points, normals, plane_normal, plane_point)

        support, refit_normal, error = GeometryUtils.fit_plane_to_points(points[inliers])
        if float(error) >= UNDEFINED_FIT_ERROR:
            return inliers

        refit_inliers = self._inlier_mask(points, normals, refit_normal, support)
        if int(refit_inliers.sum()) >= int(inliers.sum()):
            return refit_inliers
        return inliers

    def _largest_cluster(self, points: torch.Tensor, inliers: torch.Tensor) -> torch.Tensor:
        """Restrict inliers to their largest cluster_epsilon-connected component."""
        inlier_indices = torch.nonzero(inliers).flatten().numpy()
        cluster = torch.zeros_like(inliers)
        if len(inlier_indices) == 0:
            return cluster

        inlier_points = points[inliers].numpy()
        tree = cKDTree(inlier_points)
        pairs = tree.query_pairs(r=self.parameters.cluster_epsilon, output_type='ndarray')

        num_inliers = len(inlier_indices)
        graph = coo_matrix(
            (np.ones(len(pairs)), (pairs[:, 0], pairs[:, 1])),
            shape=(num_inliers, num_inliers)
        )
        _, component_labels = connected_components(graph, directed=False)

        largest = np.argmax(np.bincount(component_labels))
        cluster[torch.as_tensor(inlier_indices[component_labels == largest])] = True
        return cluster
