"""
Grid detector.

Locates divider lines in a sprite sheet of UI tiles and turns them into
slice coordinates, cell rectangles and line segment rectangles.
"""

import logging
from typing import Optional

from ..base import Observer, PixelBuffer, notify
from .base import (
    Cell,
    DetectionConfig,
    DividerGroup,
    GridConfig,
    GridLineSegment,
    SegmentType,
)
from .scanner import UniformityScanner, consolidate_dividers


logger = logging.getLogger(__name__)


class GridDetector:
    """
    Detects grid dividers from row/column uniformity.

    Detection steps:
    1. Measure the uniform outer frame (reported, not used for cells)
    2. Flag uniform rows and columns
    3. Consolidate contiguous runs into divider groups
    4. Drop groups closer than the minimum gap, keeping the thicker one
    5. Build cells between consecutive slices and segments for each band
    """

    def __init__(
        self,
        config: Optional[DetectionConfig] = None,
        observer: Optional[Observer] = None,
    ):
        """
        Initialize the detector.

        Args:
            config: Detection configuration.
            observer: Optional hook notified with detection details.
        """
        self.config = config or DetectionConfig()
        self.observer = observer
        self.scanner = UniformityScanner(self.config.tolerance)

    def detect(self, buffer: PixelBuffer) -> GridConfig:
        """
        Detect the grid in an image.

        Args:
            buffer: Decoded source image.

        Returns:
            GridConfig describing slices, cells and segments.
        """
        width, height = buffer.width, buffer.height

        outer_borders = self.scanner.outer_borders(buffer)

        raw_horizontal = consolidate_dividers(self.scanner.uniform_rows(buffer))
        raw_vertical = consolidate_dividers(self.scanner.uniform_columns(buffer))

        horizontal_groups = enforce_minimum_gap(raw_horizontal, self.config.min_gap_y)
        vertical_groups = enforce_minimum_gap(raw_vertical, self.config.min_gap_x)

        horizontal_slices = [g.center for g in horizontal_groups]
        vertical_slices = [g.center for g in vertical_groups]

        cells = compute_cells(horizontal_slices, vertical_slices, width, height)
        segments = compute_grid_line_segments(horizontal_groups, vertical_groups, width, height)

        metadata = {
            "image_size": f"{width}x{height}",
            "horizontal_dividers_raw": len(raw_horizontal),
            "horizontal_dividers_filtered": len(horizontal_groups),
            "vertical_dividers_raw": len(raw_vertical),
            "vertical_dividers_filtered": len(vertical_groups),
            "tolerance": self.config.tolerance,
            "min_gap_x": self.config.min_gap_x,
            "min_gap_y": self.config.min_gap_y,
        }

        logger.debug(
            f"Grid detection on {width}x{height}: "
            f"{len(raw_horizontal)}->{len(horizontal_groups)} horizontal, "
            f"{len(raw_vertical)}->{len(vertical_groups)} vertical dividers, "
            f"{len(cells)} cells"
        )
        notify(self.observer, "grid-detected", {
            **metadata,
            "outer_borders": outer_borders.to_dict(),
            "horizontal_slices": horizontal_slices,
            "vertical_slices": vertical_slices,
        })

        return GridConfig(
            rows=max(len(horizontal_slices) - 1, 1),
            columns=max(len(vertical_slices) - 1, 1),
            horizontal_slices=horizontal_slices,
            vertical_slices=vertical_slices,
            horizontal_line_groups=horizontal_groups,
            vertical_line_groups=vertical_groups,
            cells=cells,
            grid_line_segments=segments,
            outer_borders=outer_borders,
            image_size=(width, height),
            metadata=metadata,
        )


def enforce_minimum_gap(groups: list[DividerGroup], min_gap: int) -> list[DividerGroup]:
    """
    Drop divider groups that sit too close to the previously kept one.

    The first group is always kept. A later group closer than `min_gap` to
    the last kept group replaces it only if it is strictly thicker.

    Args:
        groups: Divider groups in ascending order.
        min_gap: Minimum center-to-center distance in pixels.

    Returns:
        Filtered divider groups.
    """
    filtered: list[DividerGroup] = []

    for group in groups:
        if not filtered:
            filtered.append(group)
            continue

        last_kept = filtered[-1]
        if group.center - last_kept.center >= min_gap:
            filtered.append(group)
        elif group.width > last_kept.width:
            filtered[-1] = group

    if len(filtered) != len(groups):
        logger.debug(f"Filtered out {len(groups) - len(filtered)} close dividers (min gap {min_gap}px)")

    return filtered


def compute_cells(
    horizontal_slices: list[int],
    vertical_slices: list[int],
    width: int,
    height: int,
) -> list[Cell]:
    """
    Build cell rectangles between consecutive slices.

    Regions before the first slice and after the last one are border and
    produce no cells. Without any slice the whole image is one cell.

    Args:
        horizontal_slices: Y coordinates of horizontal slices.
        vertical_slices: X coordinates of vertical slices.
        width: Image width.
        height: Image height.

    Returns:
        Cells in row-major order.
    """
    if not horizontal_slices and not vertical_slices:
        return [Cell(row=0, col=0, x=0, y=0, width=width, height=height)]

    cells = []
    for row, (y, next_y) in enumerate(zip(horizontal_slices[:-1], horizontal_slices[1:])):
        for col, (x, next_x) in enumerate(zip(vertical_slices[:-1], vertical_slices[1:])):
            cells.append(Cell(
                row=row,
                col=col,
                x=x,
                y=y,
                width=next_x - x,
                height=next_y - y,
            ))

    return cells


def compute_grid_line_segments(
    horizontal_groups: list[DividerGroup],
    vertical_groups: list[DividerGroup],
    width: int,
    height: int,
) -> list[GridLineSegment]:
    """
    Build segment rectangles for divider bands and their crossings.

    Args:
        horizontal_groups: Kept horizontal divider groups.
        vertical_groups: Kept vertical divider groups.
        width: Image width.
        height: Image height.

    Returns:
        Horizontal, then vertical, then intersection segments.
    """
    segments = []
    segment_id = 0

    for group in horizontal_groups:
        segments.append(GridLineSegment(
            id=f"h-line-{segment_id}",
            type=SegmentType.HORIZONTAL_LINE,
            x=0,
            y=group.start,
            width=width,
            height=group.width,
        ))
        segment_id += 1

    for group in vertical_groups:
        segments.append(GridLineSegment(
            id=f"v-line-{segment_id}",
            type=SegmentType.VERTICAL_LINE,
            x=group.start,
            y=0,
            width=group.width,
            height=height,
        ))
        segment_id += 1

    for h_group in horizontal_groups:
        for v_group in vertical_groups:
            segments.append(GridLineSegment(
                id=f"intersection-{segment_id}",
                type=SegmentType.INTERSECTION,
                x=v_group.start,
                y=h_group.start,
                width=v_group.width,
                height=h_group.width,
            ))
            segment_id += 1

    return segments


def detect_grid(
    buffer: PixelBuffer,
    tolerance: int = 5,
    min_gap_x: int = 50,
    min_gap_y: int = 50,
    observer: Optional[Observer] = None,
) -> GridConfig:
    """
    Detect the grid in an image with explicit parameters.

    Args:
        buffer: Decoded source image.
        tolerance: Per-channel uniformity tolerance.
        min_gap_x: Minimum gap between vertical slices.
        min_gap_y: Minimum gap between horizontal slices.
        observer: Optional detection hook.

    Returns:
        GridConfig for the image.
    """
    config = DetectionConfig(tolerance=tolerance, min_gap_x=min_gap_x, min_gap_y=min_gap_y)
    return GridDetector(config, observer=observer).detect(buffer)
