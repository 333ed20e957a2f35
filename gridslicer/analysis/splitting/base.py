"""
Base classes for image splitting.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..base import PixelBuffer, Rect


CELL_KIND = "cell"


@dataclass
class ImageRegion:
    """A rectangular piece of the source image with its own pixels."""

    id: str
    """Identifier (cell-{row}-{col}, h-line-{n}, v-line-{n} or intersection-{n})."""

    kind: str
    """'cell' or one of the grid line segment types."""

    x: int
    """X offset in the source image."""

    y: int
    """Y offset in the source image."""

    width: int
    """Requested width of the region."""

    height: int
    """Requested height of the region."""

    buffer: PixelBuffer
    """Owned copy of the region's pixels."""

    row: Optional[int] = None
    """Row position for cells."""

    col: Optional[int] = None
    """Column position for cells."""

    @property
    def is_cell(self) -> bool:
        return self.kind == CELL_KIND

    @property
    def rect(self) -> Rect:
        """Return (x, y, width, height) bounds in the source image."""
        return Rect(self.x, self.y, self.width, self.height)


@dataclass
class SplitResult:
    """Regions extracted from an image."""

    grid_lines: list[ImageRegion] = field(default_factory=list)
    """Divider band and intersection regions, in segment order."""

    cells: list[ImageRegion] = field(default_factory=list)
    """Cell regions, in row-major order."""

    @property
    def all_regions(self) -> list[ImageRegion]:
        """Grid lines followed by cells."""
        return [*self.grid_lines, *self.cells]

    @property
    def num_regions(self) -> int:
        return len(self.grid_lines) + len(self.cells)
