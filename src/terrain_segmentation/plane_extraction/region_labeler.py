"""
Connected-component labeling of the planarity mask.
"""

import numpy as np
import cv2
from typing import Tuple
import logging

logger = logging.getLogger(__name__)


class RegionLabeler:
    """Labels connected planar regions; background is label 0."""

    def __init__(self, connectivity: int = 4):
        if connectivity not in (4, 8):
            raise ValueError("Connectivity must be 4 or 8")
        self.connectivity = connectivity

    def label(self, mask: np.ndarray) -> Tuple[np.ndarray, int]:
        """
        Label connected components of a binary mask.

        Args:
            mask: Binary image (H, W), nonzero for planar cells

        Returns:
            Tuple of (int32 label image, highest label)
        """
        binary = (np.asarray(mask) > 0).astype(np.uint8)
        num_labels, labeled_image = cv2.connectedComponents(
            binary, connectivity=self.connectivity, ltype=cv2.CV_32S
        )

        # Labels are [0, N-1]
        return labeled_image, num_labels - 1
