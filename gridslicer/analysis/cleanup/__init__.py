"""
Background and shadow cleanup for extracted regions.

Provides a step pipeline that clears border-connected background and
drop-shadow residue while keeping antialiased content.
"""

from .base import CleanupStep, CleanupConfig, StepResult
from .background import (
    create_background_mask,
    find_most_common_color,
    flood_fill_from_edges,
    sample_background_points,
)
from .pipeline import (
    BackgroundRemover,
    CleanupResult,
    TrimResult,
    remove_background,
    remove_shadows_along_slices,
    trim_transparent_padding,
)

__all__ = [
    "CleanupStep",
    "CleanupConfig",
    "StepResult",
    "create_background_mask",
    "find_most_common_color",
    "flood_fill_from_edges",
    "sample_background_points",
    "BackgroundRemover",
    "CleanupResult",
    "TrimResult",
    "remove_background",
    "remove_shadows_along_slices",
    "trim_transparent_padding",
]
