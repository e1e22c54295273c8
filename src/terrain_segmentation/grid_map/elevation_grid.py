"""
Elevation Grid Data Structure

This module defines the regular 2-D elevation raster consumed by the plane
extraction pipeline. Layers are stored as numpy arrays indexed (row, col) and
positioned in the world frame following the grid-map convention: the cell
(0, 0) sits at the map origin, rows run along -x and columns along -y.
"""

import numpy as np
from typing import Dict, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class ElevationGrid:
    """Regular grid of named float layers with world-frame positioning."""

    def __init__(self, resolution: float, size: Tuple[int, int],
                 position: Tuple[float, float] = (0.0, 0.0)):
        """
        Initialize an empty elevation grid.

        Args:
            resolution: Cell size in meters
            size: Number of cells as (rows, cols)
            position: World position (x, y) of the grid center
        """
        if resolution <= 0:
            raise ValueError("Grid resolution must be positive")

        rows, cols = int(size[0]), int(size[1])
        if rows <= 0 or cols <= 0:
            raise ValueError(f"Grid size must be positive, got {size}")

        self.resolution = float(resolution)
        self.size = (rows, cols)
        self.position = (float(position[0]), float(position[1]))
        self._layers: Dict[str, np.ndarray] = {}

    @classmethod
    def from_array(cls, heights: np.ndarray, resolution: float,
                   position: Tuple[float, float] = (0.0, 0.0),
                   layer: str = "elevation") -> "ElevationGrid":
        """Create a grid holding a single height layer."""
        heights = np.asarray(heights)
        if heights.ndim != 2:
            raise ValueError(f"Height data must be 2-D, got shape {heights.shape}")

        grid = cls(resolution, heights.shape, position)
        grid.add_layer(layer, heights)
        return grid

    def add_layer(self, name: str, data: np.ndarray):
        """Add or replace a layer."""
        data = np.asarray(data, dtype=np.float64)
        if data.shape != self.size:
            raise ValueError(f"Layer '{name}' has shape {data.shape}, grid size is {self.size}")
        self._layers[name] = data

    def has_layer(self, name: str) -> bool:
        return name in self._layers

    def get_layer(self, name: str) -> np.ndarray:
        """Get layer data; raises KeyError for unknown layers."""
        if name not in self._layers:
            raise KeyError(f"Layer '{name}' does not exist, available: {sorted(self._layers)}")
        return self._layers[name]

    def __getitem__(self, name: str) -> np.ndarray:
        return self.get_layer(name)

    @property
    def layers(self):
        return list(self._layers)

    @property
    def map_origin(self) -> np.ndarray:
        """World position of cell (0, 0)."""
        return self.get_position((0, 0))

    def get_position(self, index: Tuple[int, int]) -> np.ndarray:
        """
        Get world position of a cell center.

        Args:
            index: Cell index (row, col)

        Returns:
            Position (x, y)
        """
        rows, cols = self.size
        origin_x = self.position[0] + 0.5 * (rows - 1) * self.resolution
        origin_y = self.position[1] + 0.5 * (cols - 1) * self.resolution
        return np.array([
            origin_x - index[0] * self.resolution,
            origin_y - index[1] * self.resolution
        ])

    def get_index(self, position: Tuple[float, float]) -> Optional[Tuple[int, int]]:
        """
        Get the index of the cell containing a world position.

        Inverse of get_position: positions are rounded to the nearest cell
        center. Returns None when the position lies outside the grid.
        """
        origin = self.map_origin
        row = int(np.floor((origin[0] - position[0]) / self.resolution + 0.5))
        col = int(np.floor((origin[1] - position[1]) / self.resolution + 0.5))

        if not (0 <= row < self.size[0] and 0 <= col < self.size[1]):
            return None
        return row, col

    def get_indices(self, positions: np.ndarray) -> np.ndarray:
        """Vectorized get_index for an (N, 2+) array; out-of-map rows are -1."""
        positions = np.asarray(positions, dtype=np.float64)
        origin = self.map_origin
        rows = np.floor((origin[0] - positions[:, 0]) / self.resolution + 0.5).astype(np.int64)
        cols = np.floor((origin[1] - positions[:, 1]) / self.resolution + 0.5).astype(np.int64)

        outside = (rows < 0) | (rows >= self.size[0]) | (cols < 0) | (cols >= self.size[1])
        indices = np.stack([rows, cols], axis=1)
        indices[outside] = -1
        return indices

    def __repr__(self) -> str:
        return (f"ElevationGrid(size={self.size}, resolution={self.resolution}, "
                f"position={self.position}, layers={self.layers})")
