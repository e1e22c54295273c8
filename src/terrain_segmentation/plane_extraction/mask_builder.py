"""
Planarity Mask Construction

Thresholds the local plane fits into a binary planar/non-planar image and
cleans it with a cross-shaped morphological erosion.
"""

import torch
import numpy as np
import cv2
import logging

from .geometry_utils import GeometryUtils
from .plane_models import SlidingWindowParameters
from .surface_normal_estimator import LocalPlaneFit

logger = logging.getLogger(__name__)


class PlanarityMaskBuilder:
    """Builds the eroded binary image of locally planar cells."""

    def __init__(self, parameters: SlidingWindowParameters):
        self.parameters = parameters

    def is_locally_planar(self, normals: torch.Tensor, errors: torch.Tensor) -> torch.Tensor:
        """Local fit below the error threshold and normal within the inclination threshold."""
        inclination = GeometryUtils.inclination_degrees(normals)
        return ((errors < self.parameters.plane_patch_error_threshold) &
                (inclination < self.parameters.plane_inclination_threshold_degrees))

    def build(self, local_fit: LocalPlaneFit) -> np.ndarray:
        """
        Build the planarity mask for one grid.

        Args:
            local_fit: Per-cell local fits of the current grid

        Returns:
            Binary image (H, W) of dtype uint8 with 1 for planar cells
        """
        planar = self.is_locally_planar(local_fit.normals, local_fit.errors) & local_fit.computed
        mask = planar.numpy().astype(np.uint8)

        return self.erode(mask)

    def erode(self, mask: np.ndarray) -> np.ndarray:
        """Erode with a cross of size 2 * planarity_erosion + 1; no-op for radius 0."""
        radius = self.parameters.planarity_erosion
        if radius <= 0:
            return mask

        erosion_size = 2 * radius + 1
        kernel = cv2.getStructuringElement(cv2.MORPH_CROSS, (erosion_size, erosion_size))
        eroded = cv2.erode(mask, kernel)

        logger.debug(f"Erosion removed {int(mask.sum()) - int(eroded.sum())} planar cells")
        return eroded
