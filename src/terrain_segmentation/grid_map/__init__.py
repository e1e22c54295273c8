"""
Grid Map Module

Regular elevation grid with world-frame positioning, the input data structure
of the sliding-window plane extraction pipeline.
"""

from .elevation_grid import ElevationGrid

__all__ = ["ElevationGrid"]
