"""
Data types for shape decomposition.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..base import Color, Rect


class ShapeType(str, Enum):
    """Geometric primitive recognized in a region."""

    HORIZONTAL_LINE = "horizontal-line"
    VERTICAL_LINE = "vertical-line"
    RECTANGLE = "rectangle"
    ROUNDED_RECTANGLE = "rounded-rectangle"


@dataclass(frozen=True)
class CornerRadii:
    """Per-corner radius estimates of a rounded rectangle."""

    top_left: int = 0
    top_right: int = 0
    bottom_left: int = 0
    bottom_right: int = 0

    def nonzero(self) -> list[int]:
        return [r for r in (self.top_left, self.top_right, self.bottom_left, self.bottom_right) if r > 0]

    def to_dict(self) -> dict:
        return {
            "topLeft": self.top_left,
            "topRight": self.top_right,
            "bottomLeft": self.bottom_left,
            "bottomRight": self.bottom_right,
        }


@dataclass(frozen=True)
class Shape:
    """A primitive found in a region, in region coordinates."""

    type: ShapeType
    """Kind of primitive."""

    x: int
    y: int
    width: int
    height: int

    color: Optional[Color] = None
    """Color sampled from the primitive."""

    corner_radius: int = 0
    """Averaged corner radius (0 unless rounded)."""

    length: int = 0
    """Run length along the line direction (lines only)."""

    thickness: int = 0
    """Number of adjacent rows/columns forming the line (lines only)."""

    corners: Optional[CornerRadii] = None
    """Individual corner radii (rounded rectangles only)."""

    @property
    def bounds(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    @property
    def is_line(self) -> bool:
        return self.type in (ShapeType.HORIZONTAL_LINE, ShapeType.VERTICAL_LINE)

    def to_dict(self) -> dict:
        data = {
            "type": self.type.value,
            "bounds": self.bounds.to_dict(),
            "color": self.color.to_css() if self.color else None,
            "cornerRadius": self.corner_radius,
        }
        if self.is_line:
            data["length"] = self.length
            data["thickness"] = self.thickness
        if self.corners is not None:
            data["corners"] = self.corners.to_dict()
        return data


@dataclass
class ShapeAnalysis:
    """All primitives found in one region."""

    shapes: list[Shape] = field(default_factory=list)
    """Shapes in detection order: fill shape first, then lines."""

    bounds: Optional[Rect] = None
    """Bounding box of the visible pixels, None when empty."""

    is_empty: bool = True
    """True when the region has no visible pixel."""

    def of_type(self, shape_type: ShapeType) -> list[Shape]:
        return [s for s in self.shapes if s.type == shape_type]

    def to_dict(self) -> dict:
        return {
            "shapes": [s.to_dict() for s in self.shapes],
            "bounds": self.bounds.to_dict() if self.bounds else None,
            "isEmpty": self.is_empty,
        }


@dataclass
class ShapeConfig:
    """Thresholds for shape decomposition."""

    fill_ratio: float = 0.95
    """Filled fraction of the bounds required for a rectangle."""

    fill_alpha: int = 200
    """Alpha above which a pixel counts as filled."""

    line_ratio: float = 0.8
    """Fraction of the bounds a run must exceed to count as a line."""

    corner_alpha: int = 128
    """Alpha above which a corner walk stops."""

    max_corner_sample: int = 20
    """Maximum diagonal steps walked per corner."""

    min_line_aspect: float = 2.0
    """Minimum length to thickness ratio of a line band."""
