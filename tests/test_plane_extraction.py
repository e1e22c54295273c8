"""
Unit Tests for Sliding-Window Plane Extraction

This module tests local normal estimation, planarity masking and labeling,
global plane fitting and the end-to-end extraction on synthetic terrain.
"""

import pytest
import torch
import numpy as np
import cv2
import logging
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from terrain_segmentation.grid_map import ElevationGrid
from terrain_segmentation.plane_extraction import (
    SlidingWindowParameters, RansacParameters, SlidingWindowPlaneExtractor,
    SlidingWindowNormalEstimator, PlanarityMaskBuilder, RegionLabeler,
    GeometryUtils, LocalPlaneFit, UNDEFINED_FIT_ERROR,
    orientation_world_to_terrain_from_surface_normal
)
from terrain_segmentation.pipeline import extract_planes

# Set up logging for tests
logging.basicConfig(level=logging.INFO)


def assert_valid_orientation(plane):
    """Orientation is a finite proper rotation taking the normal onto e_z."""
    rotation = plane.orientation_world_to_terrain
    assert np.all(np.isfinite(rotation))
    assert np.allclose(rotation @ rotation.T, np.eye(3), atol=1e-9)
    assert np.linalg.det(rotation) == pytest.approx(1.0)
    assert np.allclose(rotation @ plane.surface_normal_in_world(), [0.0, 0.0, 1.0], atol=1e-9)


def make_two_patch_grid(rows: int = 20, cols: int = 41, resolution: float = 0.1):
    """Two tilted planar patches separated by a column without data."""
    grid = ElevationGrid(resolution, (rows, cols), position=(0.5, -0.3))
    origin = grid.map_origin

    row_idx, col_idx = np.meshgrid(np.arange(rows), np.arange(cols), indexing='ij')
    x = origin[0] - row_idx * resolution
    y = origin[1] - col_idx * resolution

    gap = cols // 2
    heights = np.where(col_idx < gap, 0.2 * x + 1.0, -0.3 * y + 0.5)
    heights[:, gap] = np.nan
    grid.add_layer("elevation", heights)

    patches = {
        'left': {'slope': (0.2, 0.0), 'cells': (slice(1, rows - 1), slice(1, gap))},
        'right': {'slope': (0.0, -0.3), 'cells': (slice(1, rows - 1), slice(gap + 1, cols - 1))},
    }
    for patch in patches.values():
        cell_rows, cell_cols = patch['cells']
        points = np.stack([
            x[cell_rows, cell_cols].ravel(),
            y[cell_rows, cell_cols].ravel(),
            heights[cell_rows, cell_cols].ravel()
        ], axis=1)
        a, b = patch['slope']
        normal = np.array([-a, -b, 1.0])
        patch['centroid'] = points.mean(axis=0)
        patch['normal'] = normal / np.linalg.norm(normal)

    return grid, patches


def make_roof_grid(size: int = 30, resolution: float = 0.05, slope: float = 0.3):
    """Symmetric roof: two planes meeting at a ridge along the middle column."""
    row_idx, col_idx = np.meshgrid(np.arange(size), np.arange(size), indexing='ij')
    heights = slope * resolution * np.abs(col_idx - size // 2)
    return ElevationGrid.from_array(heights, resolution)


class TestGeometryUtils:
    """Test geometric helper functions."""

    def test_angle_between_normalized_vectors(self):
        """Angles are in degrees and robust to slightly non-unit input."""
        v1 = torch.tensor([1.0, 0.0, 0.0], dtype=torch.float64)
        v2 = torch.tensor([0.0, 1.0, 0.0], dtype=torch.float64)
        angle = GeometryUtils.angle_between_normalized_vectors_degrees(v1, v2)
        assert torch.allclose(angle, torch.tensor(90.0, dtype=torch.float64))

        # Dot product slightly above 1 is clamped
        v3 = torch.tensor([0.0, 0.0, 1.0 + 1e-12], dtype=torch.float64)
        assert float(GeometryUtils.inclination_degrees(v3)) == pytest.approx(0.0)

    def test_normal_from_covariance_flat_points(self):
        """Points on a horizontal plane give the vertical normal and zero error."""
        points = np.array([[x, y, 2.0] for x in range(3) for y in range(3)], dtype=np.float64)
        support, normal, error = GeometryUtils.fit_plane_to_points(points)

        assert torch.allclose(normal, torch.tensor([0.0, 0.0, 1.0], dtype=torch.float64), atol=1e-9)
        assert float(error) == pytest.approx(0.0, abs=1e-6)
        assert torch.allclose(support, torch.tensor([1.0, 1.0, 2.0], dtype=torch.float64))

    def test_normal_from_covariance_faces_up(self):
        """Normals are flipped to have a non-negative vertical component."""
        points = np.array([[x, y, -0.5 * x] for x in range(4) for y in range(4)], dtype=np.float64)
        _, normal, _ = GeometryUtils.fit_plane_to_points(points)

        expected = np.array([0.5, 0.0, 1.0]) / np.linalg.norm([0.5, 0.0, 1.0])
        assert normal[2] >= 0
        assert np.allclose(normal.numpy(), expected, atol=1e-9)

    def test_normal_from_covariance_degenerate(self):
        """Collinear points have no defined normal."""
        points = np.array([[x, 0.0, 0.0] for x in range(5)], dtype=np.float64)
        _, normal, error = GeometryUtils.fit_plane_to_points(points)

        assert np.allclose(normal.numpy(), [0.0, 0.0, 1.0])
        assert float(error) >= UNDEFINED_FIT_ERROR

    def test_orientation_from_surface_normal(self):
        """The terrain orientation maps the surface normal onto the z axis."""
        normal = np.array([0.3, -0.2, 1.0])
        normal /= np.linalg.norm(normal)

        rotation = orientation_world_to_terrain_from_surface_normal(normal)

        assert np.allclose(rotation @ normal, [0.0, 0.0, 1.0], atol=1e-9)
        assert np.allclose(rotation @ rotation.T, np.eye(3), atol=1e-9)
        assert np.linalg.det(rotation) == pytest.approx(1.0)

        # Vertical normal gives the identity
        vertical = orientation_world_to_terrain_from_surface_normal([0.0, 0.0, 1.0])
        assert np.all(np.isfinite(vertical))
        assert np.allclose(vertical, np.eye(3))

    def test_orientation_near_vertical_and_downward(self):
        """Parallel and antiparallel normals give finite proper rotations."""
        nearly_vertical = np.array([1e-7, 0.0, 1.0])
        nearly_vertical /= np.linalg.norm(nearly_vertical)
        rotation = orientation_world_to_terrain_from_surface_normal(nearly_vertical)
        assert np.all(np.isfinite(rotation))
        assert np.allclose(rotation @ nearly_vertical, [0.0, 0.0, 1.0], atol=1e-6)

        rotation = orientation_world_to_terrain_from_surface_normal([0.0, 0.0, -1.0])
        assert np.all(np.isfinite(rotation))
        assert np.allclose(rotation @ [0.0, 0.0, -1.0], [0.0, 0.0, 1.0])
        assert np.linalg.det(rotation) == pytest.approx(1.0)


class TestSurfaceNormalEstimator:
    """Test sliding-window local plane fits."""

    def setup_method(self):
        self.estimator = SlidingWindowNormalEstimator(kernel_size=3)

    def test_insufficient_samples(self):
        """Fewer than 3 finite samples return the vertical sentinel."""
        window = np.full((3, 3), np.nan)
        window[0, 0] = 1.0
        window[2, 2] = 1.5

        normal, error = self.estimator.compute_normal_and_error_for_window(window, 0.1)

        assert np.allclose(normal, [0.0, 0.0, 1.0])
        assert error >= UNDEFINED_FIT_ERROR

    def test_rank_deficient_window(self):
        """A single row of samples is collinear and has no normal."""
        window = np.full((3, 3), np.nan)
        window[1, :] = [0.1, 0.2, 0.3]

        normal, error = self.estimator.compute_normal_and_error_for_window(window, 0.1)

        assert np.allclose(normal, [0.0, 0.0, 1.0])
        assert error >= UNDEFINED_FIT_ERROR

    def test_flat_window(self):
        """A flat window gives the vertical normal with zero error."""
        normal, error = self.estimator.compute_normal_and_error_for_window(np.full((3, 3), 4.2), 0.05)

        assert np.allclose(normal, [0.0, 0.0, 1.0], atol=1e-9)
        assert error == pytest.approx(0.0, abs=1e-6)

    def test_tilted_window(self):
        """A tilted window recovers the analytic normal."""
        resolution = 0.1
        slope = 0.4
        kernel_rows = np.arange(3)[:, None] * np.ones((1, 3))
        window = slope * (-kernel_rows * resolution) + 1.0

        normal, error = self.estimator.compute_normal_and_error_for_window(window, resolution)

        expected = np.array([-slope, 0.0, 1.0]) / np.linalg.norm([-slope, 0.0, 1.0])
        assert np.allclose(normal, expected, atol=1e-9)
        assert error == pytest.approx(0.0, abs=1e-6)

    def test_normals_face_up(self):
        """Every estimated normal has a non-negative vertical component."""
        rng = np.random.default_rng(7)
        heights = rng.normal(scale=0.2, size=(12, 15))
        heights[rng.random(heights.shape) < 0.2] = np.nan

        local_fit = self.estimator.estimate(heights, 0.1)

        assert torch.all(local_fit.normals[..., 2] >= 0)

    def test_only_interior_cells_computed(self):
        """Border cells and cells without a finite center are not computed."""
        heights = np.zeros((6, 7))
        heights[3, 3] = np.nan

        local_fit = SlidingWindowNormalEstimator(kernel_size=5).estimate(heights, 0.1)
        computed = local_fit.computed.numpy()

        expected = np.zeros((6, 7), dtype=bool)
        expected[2:4, 2:5] = True
        expected[3, 3] = False
        assert np.array_equal(computed, expected)

    def test_batched_matches_single_window(self):
        """Batched estimation agrees with the single-window entry point."""
        rng = np.random.default_rng(3)
        heights = rng.normal(scale=0.05, size=(8, 9))
        estimator = SlidingWindowNormalEstimator(kernel_size=3, batch_size=5)

        local_fit = estimator.estimate(heights, 0.1)

        for row, col in [(1, 1), (4, 5), (6, 7)]:
            normal, error = estimator.compute_normal_and_error_for_window(
                heights[row - 1:row + 2, col - 1:col + 2], 0.1
            )
            assert np.allclose(local_fit.normals[row, col].numpy(), normal, atol=1e-9)
            assert float(local_fit.errors[row, col]) == pytest.approx(error, abs=1e-9)


class TestMaskAndLabeling:
    """Test planarity mask and connected-component labeling."""

    def _local_fit(self, planar: np.ndarray) -> LocalPlaneFit:
        shape = planar.shape
        normals = torch.zeros((*shape, 3), dtype=torch.float64)
        normals[..., 2] = 1.0
        errors = torch.where(torch.as_tensor(planar), 0.0, 1.0).to(torch.float64)
        return LocalPlaneFit(normals=normals, errors=errors,
                             computed=torch.ones(shape, dtype=torch.bool))

    def test_mask_thresholds(self):
        """Cells are planar only below both error and inclination thresholds."""
        builder = PlanarityMaskBuilder(SlidingWindowParameters(plane_inclination_threshold_degrees=30.0))

        normals = torch.tensor([
            [0.0, 0.0, 1.0],
            [np.sin(np.radians(40.0)), 0.0, np.cos(np.radians(40.0))],
            [0.0, 0.0, 1.0]
        ], dtype=torch.float64)
        errors = torch.tensor([0.001, 0.001, 0.5], dtype=torch.float64)

        planar = builder.is_locally_planar(normals, errors)
        assert planar.tolist() == [True, False, False]

    def test_uncomputed_cells_are_not_planar(self):
        planar = np.ones((5, 5), dtype=bool)
        local_fit = self._local_fit(planar)
        local_fit.computed[0, :] = False

        mask = PlanarityMaskBuilder(SlidingWindowParameters()).build(local_fit)

        assert mask.dtype == np.uint8
        assert not mask[0].any()
        assert mask[1:].all()

    def test_erosion_only_shrinks(self):
        """Erosion removes isolated cells and never adds planar cells."""
        planar = np.zeros((9, 9), dtype=bool)
        planar[1:8, 1:8] = True
        planar[0, 8] = True

        mask = PlanarityMaskBuilder(SlidingWindowParameters(planarity_erosion=1)).build(self._local_fit(planar))

        assert not np.any(mask.astype(bool) & ~planar)
        assert mask[0, 8] == 0
        assert mask[1, 1] == 0
        assert mask[4, 4] == 1

    def test_connectivity(self):
        """Diagonal neighbors are separate regions under 4- but not 8-connectivity."""
        mask = np.zeros((4, 4), dtype=np.uint8)
        mask[0, 0] = 1
        mask[1, 1] = 1
        mask[3, 3] = 1

        labels_4, highest_4 = RegionLabeler(4).label(mask)
        labels_8, highest_8 = RegionLabeler(8).label(mask)

        assert highest_4 == 3
        assert highest_8 == 2
        assert labels_8[0, 0] == labels_8[1, 1]
        assert labels_4[0, 0] != labels_4[1, 1]

    def test_background_is_zero(self):
        rng = np.random.default_rng(11)
        mask = (rng.random((20, 20)) < 0.5).astype(np.uint8)

        labels, highest = RegionLabeler(4).label(mask)

        assert np.all(labels[mask == 0] == 0)
        assert np.all(labels[mask == 1] > 0)
        assert labels.max() == highest

    def test_invalid_connectivity(self):
        with pytest.raises(ValueError):
            RegionLabeler(6)


class TestElevationGrid:
    """Test grid positioning."""

    def test_index_position_round_trip(self):
        grid = ElevationGrid(0.05, (13, 17), position=(1.234, -5.678))

        for row in range(13):
            for col in range(17):
                assert grid.get_index(grid.get_position((row, col))) == (row, col)

    def test_vectorized_round_trip(self):
        grid = ElevationGrid(0.1, (6, 4), position=(0.3, 0.7))
        rows, cols = np.meshgrid(np.arange(6), np.arange(4), indexing='ij')
        positions = np.stack([grid.get_position((r, c)) for r, c in zip(rows.ravel(), cols.ravel())])

        indices = grid.get_indices(positions)

        assert np.array_equal(indices, np.stack([rows.ravel(), cols.ravel()], axis=1))

    def test_convention(self):
        """Cell (0, 0) is the map origin, rows run along -x and columns along -y."""
        grid = ElevationGrid(0.1, (3, 3), position=(1.0, 2.0))

        assert np.allclose(grid.get_position((1, 1)), [1.0, 2.0])
        assert np.allclose(grid.map_origin, [1.1, 2.1])
        assert np.allclose(grid.get_position((2, 0)), [0.9, 2.1])

    def test_outside_map(self):
        grid = ElevationGrid(0.1, (3, 3))
        assert grid.get_index((5.0, 0.0)) is None
        assert np.all(grid.get_indices(np.array([[5.0, 0.0]])) == -1)

    def test_invalid_grid(self):
        with pytest.raises(ValueError):
            ElevationGrid(0.0, (3, 3))

        grid = ElevationGrid(0.1, (3, 3))
        with pytest.raises(ValueError):
            grid.add_layer("elevation", np.zeros((2, 3)))
        assert not grid.has_layer("elevation")
        with pytest.raises(KeyError):
            grid.get_layer("missing")


class TestSlidingWindowPlaneExtractor:
    """Test end-to-end extraction."""

    def setup_method(self):
        self.parameters = SlidingWindowParameters()
        self.ransac_parameters = RansacParameters()

    def test_two_tilted_patches(self):
        """Two separated patches give exactly two planes matching their analytic values."""
        grid, patches = make_two_patch_grid()
        extractor = SlidingWindowPlaneExtractor(self.parameters, self.ransac_parameters)

        planes_map = extractor.run_extraction(grid, "elevation")

        assert planes_map.num_planes == 2
        assert planes_map.highest_label == 2
        assert sorted(planes_map.labels()) == [1, 2]
        assert 0 not in planes_map.labels()

        for expected in patches.values():
            matches = [plane for _, plane in planes_map.label_plane_parameters
                       if np.allclose(plane.position_in_world, expected['centroid'], atol=1e-6)]
            assert len(matches) == 1
            assert np.allclose(matches[0].surface_normal_in_world(), expected['normal'], atol=1e-6)

        # Cells without data and border cells are background
        assert np.all(planes_map.labeled_image[:, 20] == 0)
        assert np.all(planes_map.labeled_image[0, :] == 0)

        # Patch cells lie on their plane
        for label, plane in planes_map.label_plane_parameters:
            rows_idx, cols_idx = np.nonzero(planes_map.labeled_image == label)
            heights = grid.get_layer("elevation")[rows_idx, cols_idx]
            for row, col, height in zip(rows_idx[:5], cols_idx[:5], heights[:5]):
                point = np.append(grid.get_position((row, col)), height)
                assert plane.signed_distance(point) == pytest.approx(0.0, abs=1e-9)
            assert plane.signed_distance(plane.position_in_world + plane.surface_normal_in_world()) \
                == pytest.approx(1.0)

    def test_labels_are_connected_components(self):
        """Every label covers exactly one connected set of planar cells."""
        grid, _ = make_two_patch_grid()
        extractor = SlidingWindowPlaneExtractor(self.parameters, self.ransac_parameters)
        planes_map = extractor.run_extraction(grid, "elevation")

        binary = extractor.get_binary_labeled_image()
        labeled_image = planes_map.labeled_image
        assert np.all(labeled_image[binary == 0] == 0)
        assert np.all(labeled_image[binary == 1] > 0)

        for label in np.unique(labeled_image[labeled_image > 0]):
            cells = (labeled_image == label).astype(np.uint8)
            num_components, _ = cv2.connectedComponents(cells, connectivity=self.parameters.connectivity)
            assert num_components == 2

    @pytest.mark.parametrize("connectivity,expected_regions", [(4, 2), (8, 1)])
    def test_connectivity_through_extraction(self, connectivity, expected_regions):
        """Planar blocks touching only at a corner merge under 8- but not 4-connectivity."""
        heights = np.zeros((12, 12))
        heights[1:6, 6:11] = np.nan
        heights[6:11, 1:6] = np.nan
        grid = ElevationGrid.from_array(heights, 0.05)
        parameters = SlidingWindowParameters(connectivity=connectivity)

        planes_map = SlidingWindowPlaneExtractor(parameters, self.ransac_parameters).run_extraction(
            grid, "elevation"
        )

        assert planes_map.highest_label == expected_regions
        assert planes_map.num_planes == expected_regions
        assert planes_map.labeled_image[5, 5] > 0
        assert planes_map.labeled_image[6, 6] > 0
        assert (planes_map.labeled_image[5, 5] == planes_map.labeled_image[6, 6]) == (connectivity == 8)
        for label in planes_map.labels():
            cells = (planes_map.labeled_image == label).astype(np.uint8)
            num_components, _ = cv2.connectedComponents(cells, connectivity=connectivity)
            assert num_components == 2
        for _, plane in planes_map.label_plane_parameters:
            assert_valid_orientation(plane)

    def test_flat_grid_at_zero_height(self):
        """A horizontal plane through the origin gets the identity orientation."""
        for size in (5, 10, 31):
            for position in ((0.0, 0.0), (1.3, -2.7)):
                grid = ElevationGrid.from_array(np.zeros((size, size)), 0.05, position=position)
                extractor = SlidingWindowPlaneExtractor(self.parameters, self.ransac_parameters)

                planes_map = extractor.run_extraction(grid, "elevation")

                assert planes_map.labels() == [1]
                plane = planes_map.get_plane(1)
                assert_valid_orientation(plane)
                assert np.allclose(plane.orientation_world_to_terrain, np.eye(3))
                assert np.allclose(plane.surface_normal_in_world(), [0.0, 0.0, 1.0])

    def test_collinear_region_uses_vertical_fallback(self):
        """A one-cell-wide region has no defined global normal and falls back to vertical."""
        heights = np.full((3, 12), 0.4)
        grid = ElevationGrid.from_array(heights, 0.05)
        extractor = SlidingWindowPlaneExtractor(self.parameters, self.ransac_parameters)

        planes_map = extractor.run_extraction(grid, "elevation")

        # Only the middle row is interior, so the region is a straight line of cells
        assert np.count_nonzero(planes_map.labeled_image) == 10
        assert np.all(planes_map.labeled_image[1, 1:11] == 1)
        assert planes_map.labels() == [1]
        plane = planes_map.get_plane(1)
        assert_valid_orientation(plane)
        assert np.allclose(plane.surface_normal_in_world(), [0.0, 0.0, 1.0])
        assert np.allclose(plane.position_in_world[2], 0.4)

    def test_steep_patch_rejected(self):
        """Regions steeper than the inclination threshold produce no plane."""
        row_idx = np.arange(15)[:, None] * np.ones((1, 15))
        heights = 1.0 * 0.1 * row_idx  # 45 degrees
        grid = ElevationGrid.from_array(heights, 0.1)

        parameters = SlidingWindowParameters(plane_inclination_threshold_degrees=30.0)
        planes_map = SlidingWindowPlaneExtractor(parameters, self.ransac_parameters).run_extraction(grid, "elevation")

        assert planes_map.num_planes == 0

    def test_small_region_dropped(self):
        """Regions below the minimum number of points are silently dropped."""
        grid, _ = make_two_patch_grid(rows=5, cols=41)
        parameters = SlidingWindowParameters(min_number_points_per_label=100)

        planes_map = SlidingWindowPlaneExtractor(parameters, self.ransac_parameters).run_extraction(grid, "elevation")

        assert planes_map.num_planes == 0
        assert planes_map.highest_label == 2

    def test_deterministic(self):
        """Repeated extraction gives identical label images and planes."""
        grid = make_roof_grid()
        extractor = SlidingWindowPlaneExtractor(self.parameters, self.ransac_parameters)

        first = extractor.run_extraction(grid, "elevation")
        first_labels = first.labeled_image.copy()
        first_planes = [(label, plane.position_in_world.copy(), plane.orientation_world_to_terrain.copy())
                        for label, plane in first.label_plane_parameters]

        second = SlidingWindowPlaneExtractor(self.parameters, self.ransac_parameters).run_extraction(grid, "elevation")

        assert np.array_equal(first_labels, second.labeled_image)
        assert first_labels.tobytes() == second.labeled_image.tobytes()
        assert len(first_planes) == second.num_planes
        for (label, position, orientation), (label2, plane2) in zip(first_planes, second.label_plane_parameters):
            assert label == label2
            assert np.array_equal(position, plane2.position_in_world)
            assert np.array_equal(orientation, plane2.orientation_world_to_terrain)

    def test_buffer_reuse_across_grid_sizes(self):
        """Results never depend on buffers left over from a previous, larger grid."""
        extractor = SlidingWindowPlaneExtractor(self.parameters, self.ransac_parameters)
        extractor.run_extraction(make_roof_grid(size=40), "elevation")

        small_grid, _ = make_two_patch_grid(rows=10, cols=21)
        reused = extractor.run_extraction(small_grid, "elevation")
        fresh = SlidingWindowPlaneExtractor(self.parameters, self.ransac_parameters).run_extraction(
            small_grid, "elevation"
        )

        assert np.array_equal(reused.labeled_image, fresh.labeled_image)
        assert reused.labels() == fresh.labels()
        assert extractor.get_surface_normals().shape == (10, 21, 3)
        assert np.all(np.isnan(extractor.get_surface_normals()[0]))

    def test_performance_stats(self):
        grid, _ = make_two_patch_grid()
        extractor = SlidingWindowPlaneExtractor(self.parameters, self.ransac_parameters)
        assert extractor.get_performance_stats() == {}

        extractor.run_extraction(grid, "elevation")
        stats = extractor.get_performance_stats()

        assert stats['total_extractions'] == 1
        assert stats['avg_planes_extracted'] == 2.0

    def test_extract_planes_entry_point(self):
        grid, _ = make_two_patch_grid()
        planes_map = extract_planes(grid)

        assert planes_map.num_planes == 2
        summary = planes_map.to_dict()
        assert summary['size'] == [20, 41]
        assert len(summary['planes']) == 2

    def test_unknown_layer(self):
        grid, _ = make_two_patch_grid()
        extractor = SlidingWindowPlaneExtractor(self.parameters, self.ransac_parameters)
        with pytest.raises(KeyError):
            extractor.run_extraction(grid, "height")

    def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            SlidingWindowPlaneExtractor(SlidingWindowParameters(kernel_size=4))
        with pytest.raises(ValueError):
            SlidingWindowPlaneExtractor(SlidingWindowParameters(connectivity=6))
        with pytest.raises(ValueError):
            SlidingWindowPlaneExtractor(SlidingWindowParameters(), RansacParameters(probability=0.0))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
