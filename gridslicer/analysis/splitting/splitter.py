"""
Region extraction from a detected grid.
"""

import logging

from ..base import PixelBuffer, Rect
from ..detection import GridConfig
from .base import CELL_KIND, ImageRegion, SplitResult


logger = logging.getLogger(__name__)


class ImageSplitter:
    """
    Cuts grid line segments and cells out of a source image.

    Every region receives its own copy of the pixels, so later stages can
    clean them in place without touching the source or each other.
    """

    def split(self, buffer: PixelBuffer, grid: GridConfig) -> SplitResult:
        """
        Extract all segment and cell regions.

        Args:
            buffer: Source image.
            grid: Grid detected on that image.

        Returns:
            SplitResult with grid line and cell regions.
        """
        result = SplitResult()

        for segment in grid.grid_line_segments:
            result.grid_lines.append(ImageRegion(
                id=segment.id,
                kind=segment.type.value,
                x=segment.x,
                y=segment.y,
                width=segment.width,
                height=segment.height,
                buffer=extract_region(buffer, segment.rect),
            ))

        for cell in grid.cells:
            result.cells.append(ImageRegion(
                id=cell.id,
                kind=CELL_KIND,
                x=cell.x,
                y=cell.y,
                width=cell.width,
                height=cell.height,
                buffer=extract_region(buffer, cell.rect),
                row=cell.row,
                col=cell.col,
            ))

        logger.debug(
            f"Split {buffer.width}x{buffer.height} image into "
            f"{len(result.grid_lines)} line regions and {len(result.cells)} cells"
        )
        return result


def extract_region(buffer: PixelBuffer, rect: Rect) -> PixelBuffer:
    """
    Copy a rectangle out of an image.

    Parts of the rectangle outside the image come back transparent, so the
    returned buffer always has the requested size.

    Args:
        buffer: Source image.
        rect: Region to copy.

    Returns:
        New buffer of size rect.width x rect.height.
    """
    width = max(rect.width, 0)
    height = max(rect.height, 0)
    region = PixelBuffer.blank(width, height)

    x0 = max(rect.x, 0)
    y0 = max(rect.y, 0)
    x1 = min(rect.x + width, buffer.width)
    y1 = min(rect.y + height, buffer.height)
    if x1 > x0 and y1 > y0:
        region.pixels[y0 - rect.y:y1 - rect.y, x0 - rect.x:x1 - rect.x] = buffer.pixels[y0:y1, x0:x1]

    return region
