"""
Nine-slice border inference.
"""

from dataclasses import dataclass
from typing import Optional

from .shapes import ShapeAnalysis, ShapeType


@dataclass(frozen=True)
class NineSlice:
    """Border widths that stay fixed when a component is stretched."""

    top: int
    right: int
    bottom: int
    left: int

    def to_dict(self) -> dict:
        return {"top": self.top, "right": self.right, "bottom": self.bottom, "left": self.left}

    def to_css_slice(self) -> str:
        """Values in CSS top/right/bottom/left order."""
        return f"{self.top} {self.right} {self.bottom} {self.left}"


def infer_nine_slice(
    analysis: ShapeAnalysis,
    max_border: int = 16,
    padding: int = 2,
) -> Optional[NineSlice]:
    """
    Infer nine-slice borders from a region's shapes.

    Every border starts at a quarter of the smaller content dimension
    (capped at `max_border`) and is widened to cover the corner radius of
    any rounded rectangle plus `padding`.

    Args:
        analysis: Shape analysis of the cleaned region.
        max_border: Upper bound of the default border.
        padding: Pixels added to a corner radius.

    Returns:
        NineSlice, or None when the region is empty.
    """
    if analysis.is_empty or analysis.bounds is None:
        return None

    bounds = analysis.bounds
    border = min(bounds.width // 4, bounds.height // 4, max_border)
    top = right = bottom = left = border

    for shape in analysis.shapes:
        if shape.type == ShapeType.ROUNDED_RECTANGLE and shape.corner_radius > 0:
            radius = shape.corner_radius + padding
            top = max(top, radius)
            right = max(right, radius)
            bottom = max(bottom, radius)
            left = max(left, radius)

    return NineSlice(top=top, right=right, bottom=bottom, left=left)
