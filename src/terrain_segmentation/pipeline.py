"""
Convenience entry points for running plane extraction from a configuration.
"""

import logging
from typing import Optional

from .config import ExtractionConfig
from .grid_map import ElevationGrid
from .plane_extraction import SlidingWindowPlaneExtractor, SegmentedPlanesMap

logger = logging.getLogger(__name__)


def build_extractor(config: Optional[ExtractionConfig] = None) -> SlidingWindowPlaneExtractor:
    """Create an extractor from an extraction configuration."""
    config = config or ExtractionConfig()
    return SlidingWindowPlaneExtractor(config.sliding_window, config.ransac)


def extract_planes(grid: ElevationGrid, layer_name: Optional[str] = None,
                   config: Optional[ExtractionConfig] = None) -> SegmentedPlanesMap:
    """
    Run a single extraction with a fresh extractor.

    Args:
        grid: Elevation grid
        layer_name: Height layer, defaults to config.layer_name
        config: Extraction configuration, defaults to ExtractionConfig()

    Returns:
        Segmented planes map
    """
    config = config or ExtractionConfig()
    layer_name = layer_name or config.layer_name
    logger.debug(f"Running single extraction on layer '{layer_name}'")

    extractor = build_extractor(config)
    return extractor.run_extraction(grid, layer_name)
