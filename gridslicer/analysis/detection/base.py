"""
Data types for grid detection.
"""

from dataclasses import dataclass, field
from enum import Enum

from ..base import Rect


class SegmentType(str, Enum):
    """Kind of grid line segment."""

    HORIZONTAL_LINE = "horizontal-line"
    VERTICAL_LINE = "vertical-line"
    INTERSECTION = "intersection"


@dataclass(frozen=True)
class DividerGroup:
    """A contiguous run of uniform rows or columns."""

    start: int
    """First row/column of the run."""

    end: int
    """Last row/column of the run (inclusive)."""

    center: int
    """Rounded midpoint, used as the slice coordinate."""

    width: int
    """Thickness of the run in pixels (end - start + 1)."""

    exact_center: float
    """Unrounded midpoint."""

    def to_dict(self) -> dict:
        return {
            "start": self.start,
            "end": self.end,
            "center": self.center,
            "width": self.width,
            "exactCenter": self.exact_center,
        }


@dataclass(frozen=True)
class OuterBorders:
    """Uniform frame widths measured from each image edge."""

    top: int = 0
    right: int = 0
    bottom: int = 0
    left: int = 0

    def to_dict(self) -> dict:
        return {"top": self.top, "right": self.right, "bottom": self.bottom, "left": self.left}


@dataclass(frozen=True)
class Cell:
    """A grid cell between two consecutive slices on each axis."""

    row: int
    col: int
    x: int
    y: int
    width: int
    height: int

    @property
    def id(self) -> str:
        return f"cell-{self.row}-{self.col}"

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    def to_dict(self) -> dict:
        return {
            "type": "cell",
            "row": self.row,
            "col": self.col,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


@dataclass(frozen=True)
class GridLineSegment:
    """Rectangle covering a divider band or the crossing of two bands."""

    id: str
    type: SegmentType
    x: int
    y: int
    width: int
    height: int

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


@dataclass
class DetectionConfig:
    """Configuration for grid detection."""

    tolerance: int = 5
    """Maximum per-channel difference inside a uniform row/column."""

    min_gap_x: int = 50
    """Minimum distance between kept vertical slices."""

    min_gap_y: int = 50
    """Minimum distance between kept horizontal slices."""


@dataclass
class GridConfig:
    """Result of grid detection."""

    rows: int
    """Number of cell rows (at least 1)."""

    columns: int
    """Number of cell columns (at least 1)."""

    horizontal_slices: list[int]
    """Y centers of the kept horizontal divider groups."""

    vertical_slices: list[int]
    """X centers of the kept vertical divider groups."""

    horizontal_line_groups: list[DividerGroup]
    """Kept horizontal divider groups."""

    vertical_line_groups: list[DividerGroup]
    """Kept vertical divider groups."""

    cells: list[Cell]
    """Cells strictly between consecutive slices."""

    grid_line_segments: list[GridLineSegment]
    """Divider bands and their intersections."""

    outer_borders: OuterBorders
    """Uniform frame around the image. Informational only."""

    image_size: tuple[int, int] = (0, 0)
    """Source image size (width, height)."""

    metadata: dict = field(default_factory=dict)
    """Raw vs filtered divider counts and the parameters used."""

    def to_dict(self) -> dict:
        return {
            "rows": self.rows,
            "columns": self.columns,
            "horizontalSlices": list(self.horizontal_slices),
            "verticalSlices": list(self.vertical_slices),
            "horizontalLineGroups": [g.to_dict() for g in self.horizontal_line_groups],
            "verticalLineGroups": [g.to_dict() for g in self.vertical_line_groups],
            "cells": [c.to_dict() for c in self.cells],
            "gridLineSegments": [s.to_dict() for s in self.grid_line_segments],
            "outerBorders": self.outer_borders.to_dict(),
        }
