"""
Grid divider detection.

Finds uniform rows and columns in a sprite sheet and derives slices,
cells and grid line segments from them.
"""

from .base import (
    Cell,
    DetectionConfig,
    DividerGroup,
    GridConfig,
    GridLineSegment,
    OuterBorders,
    SegmentType,
)
from .scanner import UniformityScanner, consolidate_dividers
from .detector import (
    GridDetector,
    compute_cells,
    compute_grid_line_segments,
    detect_grid,
    enforce_minimum_gap,
)

__all__ = [
    "Cell",
    "DetectionConfig",
    "DividerGroup",
    "GridConfig",
    "GridLineSegment",
    "OuterBorders",
    "SegmentType",
    "UniformityScanner",
    "consolidate_dividers",
    "GridDetector",
    "compute_cells",
    "compute_grid_line_segments",
    "detect_grid",
    "enforce_minimum_gap",
]
