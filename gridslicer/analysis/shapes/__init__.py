"""
Shape decomposition of cleaned regions.
"""

from .base import CornerRadii, Shape, ShapeAnalysis, ShapeConfig, ShapeType
from .decomposer import ShapeDecomposer, decompose_into_shapes, find_content_bounds

__all__ = [
    "CornerRadii",
    "Shape",
    "ShapeAnalysis",
    "ShapeConfig",
    "ShapeType",
    "ShapeDecomposer",
    "decompose_into_shapes",
    "find_content_bounds",
]
