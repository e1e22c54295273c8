"""
Sliding-Window Surface Normal Estimation

This module estimates a local plane for every interior cell of an elevation
grid. Each square window is reduced to the sum and outer-product sum of its
finite samples, and the covariance of those samples yields the local normal
and RMS fit error. Windows are gathered with an unfold and solved as a batch.
"""

import torch
import torch.nn.functional as F
import numpy as np
from dataclasses import dataclass
from typing import Tuple
import logging

from .geometry_utils import GeometryUtils

logger = logging.getLogger(__name__)


@dataclass
class LocalPlaneFit:
    """Per-cell local fit over the whole grid."""

    normals: torch.Tensor  # (H, W, 3), vertical where not computed
    errors: torch.Tensor  # (H, W), UNDEFINED_FIT_ERROR where undefined
    computed: torch.Tensor  # (H, W) bool, interior cells with a finite center height


class SlidingWindowNormalEstimator:
    """Covariance based local normal estimation over a sliding window."""

    def __init__(self, kernel_size: int = 3, batch_size: int = 65536):
        """
        Initialize sliding-window normal estimator.

        Args:
            kernel_size: Side of the square window (odd)
            batch_size: Number of windows solved per eigendecomposition batch
        """
        if kernel_size < 3 or kernel_size % 2 == 0:
            raise ValueError("Kernel size must be an odd integer >= 3")

        self.kernel_size = kernel_size
        self.batch_size = batch_size

    def _window_offsets(self, resolution: float) -> torch.Tensor:
        """Window-local (dx, dy) of every kernel cell, kernel-row major."""
        kernel_rows, kernel_cols = torch.meshgrid(
            torch.arange(self.kernel_size, dtype=torch.float64),
            torch.arange(self.kernel_size, dtype=torch.float64),
            indexing='ij'
        )
        # No need to account for the map offset, the mean is subtracted anyway
        return torch.stack([-kernel_rows.flatten() * resolution,
                            -kernel_cols.flatten() * resolution], dim=1)

    def _solve_windows(self, window_heights: torch.Tensor, window_valid: torch.Tensor,
                       offsets: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor]:
        """Fit planes to a batch of flattened windows (B, K*K)."""
        weights = window_valid.to(torch.float64)
        num_windows = window_heights.shape[0]

        points = torch.cat([
            offsets.unsqueeze(0).expand(num_windows, -1, -1),
            window_heights.unsqueeze(-1)
        ], dim=2)
        points = points * weights.unsqueeze(-1)

        num_points = weights.sum(dim=1)
        point_sum = points.sum(dim=1)
        sum_squared = torch.einsum('bki,bkj->bij', points, points)
        mean = point_sum / torch.clamp(num_points, min=1.0).unsqueeze(-1)

        return GeometryUtils.normal_and_error_from_covariance(num_points, mean, sum_squared)

    def compute_normal_and_error_for_window(self, window_data, resolution: float) -> Tuple[np.ndarray, float]:
        """
        Fit a plane to a single window of heights.

        Args:
            window_data: Heights (kernel_size, kernel_size), non-finite for missing
            resolution: Cell size in meters

        Returns:
            Tuple of (unit normal (3,), rms error)
        """
        window = torch.as_tensor(np.asarray(window_data, dtype=np.float64))
        if window.shape != (self.kernel_size, self.kernel_size):
            raise ValueError(f"Window must be {self.kernel_size}x{self.kernel_size}, got {tuple(window.shape)}")

        valid = torch.isfinite(window).flatten().unsqueeze(0)
        heights = torch.where(valid, window.flatten().unsqueeze(0), torch.zeros(1, dtype=torch.float64))

        normals, errors = self._solve_windows(heights, valid, self._window_offsets(resolution))
        return normals[0].numpy(), float(errors[0])

    def estimate(self, heights: np.ndarray, resolution: float) -> LocalPlaneFit:
        """
        Estimate local normals for every interior cell.

        Only cells whose full window lies inside the grid are processed, and
        only those with a finite center height are marked as computed.

        Args:
            heights: Height array (H, W), non-finite where there is no data
            resolution: Cell size in meters

        Returns:
            LocalPlaneFit over the whole grid
        """
        height_map = torch.as_tensor(np.asarray(heights, dtype=np.float64))
        rows, cols = height_map.shape
        half = self.kernel_size // 2

        normals = torch.zeros((rows, cols, 3), dtype=torch.float64)
        normals[..., 2] = 1.0
        errors = torch.full((rows, cols), float('inf'), dtype=torch.float64)
        computed = torch.zeros((rows, cols), dtype=torch.bool)

        if rows < self.kernel_size or cols < self.kernel_size:
            logger.debug(f"Grid {rows}x{cols} smaller than kernel, no local fits")
            return LocalPlaneFit(normals=normals, errors=errors, computed=computed)

        finite = torch.isfinite(height_map)
        filled = torch.where(finite, height_map, torch.zeros_like(height_map))

        # (num_windows, K*K) in row-major window order
        window_heights = F.unfold(filled[None, None], self.kernel_size)[0].T
        window_valid = F.unfold(finite.to(torch.float64)[None, None], self.kernel_size)[0].T > 0.5

        offsets = self._window_offsets(resolution)
        window_normals = []
        window_errors = []
        for start in range(0, window_heights.shape[0], self.batch_size):
            stop = start + self.batch_size
            batch_normals, batch_errors = self._solve_windows(
                window_heights[start:stop], window_valid[start:stop], offsets
            )
            window_normals.append(batch_normals)
            window_errors.append(batch_errors)

        inner_rows = rows - 2 * half
        inner_cols = cols - 2 * half
        inner = (slice(half, rows - half), slice(half, cols - half))

        normals[inner] = torch.cat(window_normals).reshape(inner_rows, inner_cols, 3)
        errors[inner] = torch.cat(window_errors).reshape(inner_rows, inner_cols)
        computed[inner] = finite[inner]

        # Cells without a finite center keep the undefined fit
        normals[~computed] = torch.tensor([0.0, 0.0, 1.0], dtype=torch.float64)
        errors[~computed] = float('inf')

        return LocalPlaneFit(normals=normals, errors=errors, computed=computed)
