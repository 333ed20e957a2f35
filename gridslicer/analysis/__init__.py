"""
Sprite sheet analysis.

Turns a grid of pixel-art UI tiles into cleaned component images with
shape descriptions and nine-slice borders.
"""

from .base import Color, Observer, PixelBuffer, Rect
from .detection import GridConfig, GridDetector, detect_grid
from .splitting import ImageRegion, ImageSplitter, SplitResult
from .cleanup import BackgroundRemover, remove_background, remove_shadows_along_slices
from .shapes import Shape, ShapeAnalysis, ShapeDecomposer, ShapeType, decompose_into_shapes
from .nine_slice import NineSlice, infer_nine_slice
from .processor import (
    AnalysisCancelled,
    AnalysisResult,
    GridAnalyzer,
    ProcessedComponent,
    create_analyzer,
)

__all__ = [
    "Color",
    "Observer",
    "PixelBuffer",
    "Rect",
    "GridConfig",
    "GridDetector",
    "detect_grid",
    "ImageRegion",
    "ImageSplitter",
    "SplitResult",
    "BackgroundRemover",
    "remove_background",
    "remove_shadows_along_slices",
    "Shape",
    "ShapeAnalysis",
    "ShapeDecomposer",
    "ShapeType",
    "decompose_into_shapes",
    "NineSlice",
    "infer_nine_slice",
    "AnalysisCancelled",
    "AnalysisResult",
    "GridAnalyzer",
    "ProcessedComponent",
    "create_analyzer",
]
