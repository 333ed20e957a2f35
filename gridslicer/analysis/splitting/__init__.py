"""
Region extraction for detected grids.
"""

from .base import CELL_KIND, ImageRegion, SplitResult
from .splitter import ImageSplitter, extract_region

__all__ = [
    "CELL_KIND",
    "ImageRegion",
    "SplitResult",
    "ImageSplitter",
    "extract_region",
]
