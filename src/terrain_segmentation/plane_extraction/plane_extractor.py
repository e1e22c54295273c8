"""
Sliding-Window Plane Extraction for Terrain Segmentation

This module turns an elevation grid into labeled planar regions. Local normals
from a sliding window are thresholded into a planarity mask, the mask is split
into connected regions, and each region is fitted with a global plane. Regions
that are not globally planar are split with seeded RANSAC, which may relabel
cells and allocate new labels.
"""

import time
import numpy as np
from typing import List, Optional, Dict
import logging

from .plane_models import SlidingWindowParameters, SegmentedPlanesMap, TerrainPlane
from .ransac_models import RansacParameters
from .ransac_plane_extractor import RansacPlaneExtractor, derive_seed
from .geometry_utils import GeometryUtils, orientation_world_to_terrain_from_surface_normal
from .surface_normal_estimator import SlidingWindowNormalEstimator
from .mask_builder import PlanarityMaskBuilder
from .region_labeler import RegionLabeler
from ..grid_map import ElevationGrid

logger = logging.getLogger(__name__)


class SlidingWindowPlaneExtractor:
    """
    Extracts planar regions and their plane parameters from an elevation grid.

    The extractor owns its working buffers and reuses them across calls; an
    instance must not be shared between concurrent extractions.
    """

    def __init__(self, parameters: SlidingWindowParameters,
                 ransac_parameters: Optional[RansacParameters] = None):
        """
        Initialize sliding-window plane extractor.

        Args:
            parameters: Sliding-window extraction parameters
            ransac_parameters: Parameters of the RANSAC refinement
        """
        self.parameters = parameters
        self.parameters.validate()
        self.ransac_parameters = ransac_parameters or RansacParameters()
        self.ransac_parameters.validate()

        self.normal_estimator = SlidingWindowNormalEstimator(parameters.kernel_size)
        self.mask_builder = PlanarityMaskBuilder(parameters)
        self.region_labeler = RegionLabeler(parameters.connectivity)
        self.ransac_extractor = RansacPlaneExtractor(self.ransac_parameters)

        # Working buffers, grown on demand and never shrunk
        self._surface_normals = np.zeros((0, 3))
        self._normal_valid = np.zeros(0, dtype=bool)
        self._binary_image = np.zeros((0, 0), dtype=np.uint8)

        self._segmented_planes_map = SegmentedPlanesMap()
        self._grid: Optional[ElevationGrid] = None
        self._heights: Optional[np.ndarray] = None

        # Performance tracking
        self.extraction_times: List[float] = []
        self.planes_extracted: List[int] = []

        logger.info(f"SlidingWindowPlaneExtractor initialized with kernel size {parameters.kernel_size}, "
                    f"ransac refinement {'enabled' if parameters.include_ransac_refinement else 'disabled'}")

    def run_extraction(self, grid: ElevationGrid, layer_height: str) -> SegmentedPlanesMap:
        """
        Extract planar regions from one elevation layer.

        Args:
            grid: Elevation grid
            layer_height: Name of the height layer

        Returns:
            Segmented planes map of this call
        """
        start_time = time.time()

        self._grid = grid
        self._heights = grid.get_layer(layer_height)

        self._segmented_planes_map = SegmentedPlanesMap(
            resolution=grid.resolution,
            map_origin=grid.map_origin,
            highest_label=-1
        )

        rows, cols = grid.size
        self._reset_normal_buffer(rows * cols)

        if grid.resolution > self.ransac_parameters.cluster_epsilon:
            logger.warning(f"Grid resolution {grid.resolution} exceeds RANSAC cluster epsilon "
                           f"{self.ransac_parameters.cluster_epsilon}, refinement cannot connect cells")

        self._run_sliding_window_detector()
        self._run_segmentation()
        self._extract_plane_parameters_from_labeled_image()

        extraction_time = time.time() - start_time
        self.extraction_times.append(extraction_time)
        self.planes_extracted.append(self._segmented_planes_map.num_planes)

        logger.info(f"Extracted {self._segmented_planes_map.num_planes} planes from "
                    f"{rows}x{cols} grid in {extraction_time:.3f}s "
                    f"(highest label {self._segmented_planes_map.highest_label})")

        return self._segmented_planes_map

    def _reset_normal_buffer(self, linear_size: int):
        """Grow the normal buffer if needed and invalidate the region used by this call."""
        if self._surface_normals.shape[0] < linear_size:
            self._surface_normals = np.zeros((linear_size, 3))
            self._normal_valid = np.zeros(linear_size, dtype=bool)
        self._normal_valid[:linear_size] = False

    def _run_sliding_window_detector(self):
        """Local normals, planarity mask and erosion."""
        rows, cols = self._grid.size
        linear_size = rows * cols

        local_fit = self.normal_estimator.estimate(self._heights, self._grid.resolution)

        self._surface_normals[:linear_size] = local_fit.normals.reshape(-1, 3).numpy()
        self._normal_valid[:linear_size] = local_fit.computed.flatten().numpy()

        self._binary_image = self.mask_builder.build(local_fit)

    def _run_segmentation(self):
        """Label cells according to the connected planar region they belong to."""
        labeled_image, highest_label = self.region_labeler.label(self._binary_image)
        self._segmented_planes_map.labeled_image = labeled_image
        self._segmented_planes_map.highest_label = highest_label

        logger.debug(f"Segmentation found {highest_label} planar regions")

    def _extract_plane_parameters_from_labeled_image(self):
        # Local copy, the highest label grows during refinement
        number_of_labels_without_refinement = self._segmented_planes_map.highest_label
        if number_of_labels_without_refinement <= 0:
            return

        cols = self._grid.size[1]
        labels_flat = self._segmented_planes_map.labeled_image.ravel()
        heights_flat = self._heights.ravel()
        linear_size = labels_flat.shape[0]

        labeled = labels_flat > 0
        usable = labeled & np.isfinite(heights_flat) & self._normal_valid[:linear_size]

        skipped = int(np.count_nonzero(labeled & np.isfinite(heights_flat) & ~usable))
        if skipped:
            logger.debug(f"Skipping {skipped} labeled cells without a local normal")

        cells = np.flatnonzero(usable)
        cell_labels = labels_flat[cells]
        order = np.argsort(cell_labels, kind='stable')
        cells = cells[order]
        cell_labels = cell_labels[order]

        # Skip label 0, the background
        labels = np.arange(1, number_of_labels_without_refinement + 1)
        starts = np.searchsorted(cell_labels, labels, side='left')
        stops = np.searchsorted(cell_labels, labels, side='right')

        for label, start, stop in zip(labels, starts, stops):
            self._compute_plane_parameters_for_label(int(label), cells[start:stop], cols)

    def _compute_plane_parameters_for_label(self, label: int, cells: np.ndarray, cols: int):
        """Global plane fit of one region, refined with RANSAC if not globally planar."""
        num_points = len(cells)
        if num_points < self.parameters.min_number_points_per_label or num_points < 3:
            logger.debug(f"Label {label} has too few points ({num_points}), no plane created")
            return

        rows_idx, cols_idx = np.divmod(cells, cols)
        points = self._cell_positions(rows_idx, cols_idx)
        normals = self._surface_normals[cells]

        support_vector, normal_vector, _ = GeometryUtils.fit_plane_to_points(points)

        if (self.parameters.include_ransac_refinement and
                not self._is_globally_planar(normal_vector.numpy(), support_vector.numpy(), points, normals)):
            logger.debug(f"Label {label} is not globally planar, refining with RANSAC")
            self._refine_label_with_ransac(label, points, normals)
        else:
            self._add_plane_if_accepted(label, support_vector.numpy(), normal_vector.numpy())

    def _cell_positions(self, rows_idx: np.ndarray, cols_idx: np.ndarray) -> np.ndarray:
        """World-frame 3-D points of grid cells."""
        origin = self._segmented_planes_map.map_origin
        resolution = self._segmented_planes_map.resolution
        return np.column_stack([
            origin[0] - rows_idx * resolution,
            origin[1] - cols_idx * resolution,
            self._heights[rows_idx, cols_idx]
        ])

    def _is_globally_planar(self, normal_vector: np.ndarray, support_vector: np.ndarray,
                            points: np.ndarray, normals: np.ndarray) -> bool:
        """Every point close to the plane and with a local normal close to the plane normal."""
        distance_errors = np.abs(points @ normal_vector - np.dot(normal_vector, support_vector))
        if np.any(distance_errors > self.parameters.global_plane_fit_distance_error_threshold):
            return False

        angle_errors = GeometryUtils.angle_between_normalized_vectors_degrees(normals, normal_vector)
        return not bool(
            (angle_errors > self.parameters.global_plane_fit_angle_error_threshold_degrees).any()
        )

    def _refine_label_with_ransac(self, label: int, points: np.ndarray, normals: np.ndarray):
        """Split a region into RANSAC sub-planes and relabel the grid accordingly."""
        seed = derive_seed(self.ransac_parameters.seed, label)
        result = self.ransac_extractor.detect_planes(points, normals, seed=seed)

        # Reuse the old label for the first plane
        reuse_label = True
        for plane in result.planes:
            new_label = label if reuse_label else self._allocate_label()
            reuse_label = False

            plane_points = points[plane.indices]
            if new_label != label:
                self._relabel(plane_points, new_label)

            support_vector, normal_vector, _ = GeometryUtils.fit_plane_to_points(plane_points)
            self._add_plane_if_accepted(new_label, support_vector.numpy(), normal_vector.numpy())

        if len(result.unassigned_indices) > 0:
            self._relabel(points[result.unassigned_indices], 0)

        logger.debug(f"Label {label} refined into {result.num_planes} planes, "
                     f"{len(result.unassigned_indices)} cells moved to background")

    def _allocate_label(self) -> int:
        self._segmented_planes_map.highest_label += 1
        return self._segmented_planes_map.highest_label

    def _relabel(self, points: np.ndarray, label: int):
        """Write a label to the cells under the given world points."""
        indices = self._grid.get_indices(points[:, :2])
        inside = indices[:, 0] >= 0
        self._segmented_planes_map.labeled_image[indices[inside, 0], indices[inside, 1]] = label

    def _add_plane_if_accepted(self, label: int, support_vector: np.ndarray, normal_vector: np.ndarray):
        inclination = float(GeometryUtils.inclination_degrees(normal_vector))
        if inclination < self.parameters.plane_inclination_threshold_degrees:
            orientation = orientation_world_to_terrain_from_surface_normal(normal_vector)
            self._segmented_planes_map.label_plane_parameters.append(
                (label, TerrainPlane(position_in_world=support_vector,
                                     orientation_world_to_terrain=orientation))
            )
        else:
            logger.debug(f"Label {label} rejected, inclination {inclination:.1f} deg")

    def get_segmented_planes_map(self) -> SegmentedPlanesMap:
        return self._segmented_planes_map

    def get_binary_labeled_image(self) -> np.ndarray:
        """Eroded planarity mask of the last extraction (uint8, 0 or 1)."""
        return self._binary_image.copy()

    def get_surface_normals(self) -> np.ndarray:
        """Local normals of the last extraction as (H, W, 3), NaN where not computed."""
        if self._grid is None:
            return np.zeros((0, 0, 3))

        rows, cols = self._grid.size
        linear_size = rows * cols
        normals = self._surface_normals[:linear_size].copy()
        normals[~self._normal_valid[:linear_size]] = np.nan
        return normals.reshape(rows, cols, 3)

    def get_performance_stats(self) -> Dict[str, float]:
        """Get performance statistics."""
        if not self.extraction_times:
            return {}

        return {
            'avg_extraction_time': float(np.mean(self.extraction_times)),
            'min_extraction_time': float(np.min(self.extraction_times)),
            'max_extraction_time': float(np.max(self.extraction_times)),
            'avg_planes_extracted': float(np.mean(self.planes_extracted)),
            'total_extractions': len(self.extraction_times)
        }
