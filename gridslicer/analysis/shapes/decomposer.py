"""
Shape decomposition.

Describes a cleaned region as a fill primitive (rectangle or rounded
rectangle) plus any axis-aligned line bands. Shapes are independent
observations; overlapping shapes are not resolved against each other.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional
import numpy as np

from ..base import Color, Observer, PixelBuffer, Rect, js_round, notify
from .base import CornerRadii, Shape, ShapeAnalysis, ShapeConfig, ShapeType


logger = logging.getLogger(__name__)

# Fraction of a circular corner's radius that its arc sits inside the
# bounding-box corner along the diagonal.
DIAGONAL_INSET = 1 - 1 / math.sqrt(2)


@dataclass
class LineRun:
    """A qualifying run of visible pixels in one row or column."""

    index: int
    """Row (horizontal) or column (vertical) of the run."""

    start: int
    """First pixel of the run along the scan direction."""

    length: int
    """Run length in pixels."""

    @property
    def end(self) -> int:
        return self.start + self.length


def find_content_bounds(buffer: PixelBuffer) -> Optional[Rect]:
    """Bounding box of pixels with alpha > 0, or None if there are none."""
    visible = buffer.alpha > 0
    rows = np.flatnonzero(visible.any(axis=1))
    if rows.size == 0:
        return None
    cols = np.flatnonzero(visible.any(axis=0))
    return Rect(
        x=int(cols[0]),
        y=int(rows[0]),
        width=int(cols[-1] - cols[0] + 1),
        height=int(rows[-1] - rows[0] + 1),
    )


def sample_center_color(buffer: PixelBuffer, bounds: Rect) -> Color:
    """Color of the pixel at the center of the bounds."""
    cx = math.floor(bounds.x + bounds.width / 2)
    cy = math.floor(bounds.y + bounds.height / 2)
    return buffer.pixel(cx, cy)


def step_to_radius(step: int) -> int:
    """Convert a diagonal inset into a circular corner radius."""
    if step <= 0:
        return 0
    return js_round(step / DIAGONAL_INSET)


def find_runs(mask: np.ndarray) -> list[tuple[int, int]]:
    """
    Find runs of True values in a 1-D mask.

    Returns:
        List of (start, length) tuples.
    """
    if mask.size == 0:
        return []
    padded = np.concatenate(([False], mask, [False])).astype(np.int8)
    edges = np.diff(padded)
    starts = np.flatnonzero(edges == 1)
    ends = np.flatnonzero(edges == -1)
    return [(int(s), int(e - s)) for s, e in zip(starts, ends)]


class ShapeDecomposer:
    """
    Decomposes a region into geometric primitives.

    Order of tests:
    1. Content bounds (empty regions stop here)
    2. Rounded rectangle from the corner walks, else a filled rectangle
    3. Horizontal then vertical line bands
    """

    def __init__(self, config: Optional[ShapeConfig] = None, observer: Optional[Observer] = None):
        self.config = config or ShapeConfig()
        self.observer = observer

    def decompose(self, buffer: PixelBuffer) -> ShapeAnalysis:
        """
        Decompose a region into shapes.

        Args:
            buffer: Cleaned region pixels. Not modified.

        Returns:
            ShapeAnalysis with shapes in region coordinates.
        """
        bounds = find_content_bounds(buffer)
        if bounds is None:
            notify(self.observer, "shapes-decomposed", {"is_empty": True, "shapes": 0})
            return ShapeAnalysis(shapes=[], bounds=None, is_empty=True)

        shapes: list[Shape] = []

        rounded = self.detect_rounded_rectangle(buffer, bounds)
        if rounded is not None:
            shapes.append(rounded)
        else:
            rectangle = self.detect_rectangle(buffer, bounds)
            if rectangle is not None:
                shapes.append(rectangle)

        shapes.extend(self.detect_horizontal_lines(buffer, bounds))
        shapes.extend(self.detect_vertical_lines(buffer, bounds))

        logger.debug(
            f"Decomposed {buffer.width}x{buffer.height} region: "
            f"{len(shapes)} shapes ({', '.join(s.type.value for s in shapes) or 'none'})"
        )
        notify(self.observer, "shapes-decomposed", {
            "is_empty": False,
            "bounds": bounds.to_dict(),
            "shapes": len(shapes),
            "types": [s.type.value for s in shapes],
        })

        return ShapeAnalysis(shapes=shapes, bounds=bounds, is_empty=False)

    def detect_rectangle(self, buffer: PixelBuffer, bounds: Rect) -> Optional[Shape]:
        """Filled rectangle when enough of the bounds is opaque."""
        region = buffer.alpha[bounds.y:bounds.bottom, bounds.x:bounds.right]
        filled = int(np.count_nonzero(region > self.config.fill_alpha))

        if filled / bounds.area <= self.config.fill_ratio:
            return None

        return Shape(
            type=ShapeType.RECTANGLE,
            x=bounds.x,
            y=bounds.y,
            width=bounds.width,
            height=bounds.height,
            color=sample_center_color(buffer, bounds),
            corner_radius=0,
        )

    def detect_rounded_rectangle(self, buffer: PixelBuffer, bounds: Rect) -> Optional[Shape]:
        """Rounded rectangle when at least one corner is inset."""
        corners = self.measure_corners(buffer, bounds)
        radii = corners.nonzero()
        if not radii:
            return None

        return Shape(
            type=ShapeType.ROUNDED_RECTANGLE,
            x=bounds.x,
            y=bounds.y,
            width=bounds.width,
            height=bounds.height,
            color=sample_center_color(buffer, bounds),
            corner_radius=js_round(sum(radii) / len(radii)),
            corners=corners,
        )

    def measure_corners(self, buffer: PixelBuffer, bounds: Rect) -> CornerRadii:
        """
        Estimate the radius of each corner of the bounds.

        Walks diagonally inward from each corner for up to
        min(max_corner_sample, min(width, height) // 4) steps and converts
        the step of the first solid pixel into a radius.
        """
        sample = min(self.config.max_corner_sample, min(bounds.width, bounds.height) // 4)
        last_x = bounds.right - 1
        last_y = bounds.bottom - 1

        return CornerRadii(
            top_left=self._walk_corner(buffer, bounds.x, bounds.y, 1, 1, sample),
            top_right=self._walk_corner(buffer, last_x, bounds.y, -1, 1, sample),
            bottom_left=self._walk_corner(buffer, bounds.x, last_y, 1, -1, sample),
            bottom_right=self._walk_corner(buffer, last_x, last_y, -1, -1, sample),
        )

    def _walk_corner(self, buffer: PixelBuffer, x: int, y: int, dx: int, dy: int, sample: int) -> int:
        alpha = buffer.alpha
        for step in range(sample):
            if alpha[y + dy * step, x + dx * step] > self.config.corner_alpha:
                return step_to_radius(step)
        return 0

    def detect_horizontal_lines(self, buffer: PixelBuffer, bounds: Rect) -> list[Shape]:
        """Bands of rows whose visible run spans most of the bounds width."""
        visible = buffer.alpha[bounds.y:bounds.bottom, bounds.x:bounds.right] > 0
        runs = self._qualifying_runs(visible, bounds.width)

        shapes = []
        for band in self._group_bands(runs):
            longest = max(band, key=lambda run: run.length)
            thickness = len(band)
            if longest.length < thickness * self.config.min_line_aspect:
                continue

            x = bounds.x + longest.start
            y = bounds.y + band[0].index
            shapes.append(Shape(
                type=ShapeType.HORIZONTAL_LINE,
                x=x,
                y=y,
                width=longest.length,
                height=thickness,
                color=buffer.pixel(x, bounds.y + longest.index),
                length=longest.length,
                thickness=thickness,
            ))
        return shapes

    def detect_vertical_lines(self, buffer: PixelBuffer, bounds: Rect) -> list[Shape]:
        """Bands of columns whose visible run spans most of the bounds height."""
        visible = buffer.alpha[bounds.y:bounds.bottom, bounds.x:bounds.right] > 0
        runs = self._qualifying_runs(visible.T, bounds.height)

        shapes = []
        for band in self._group_bands(runs):
            longest = max(band, key=lambda run: run.length)
            thickness = len(band)
            if longest.length < thickness * self.config.min_line_aspect:
                continue

            x = bounds.x + band[0].index
            y = bounds.y + longest.start
            shapes.append(Shape(
                type=ShapeType.VERTICAL_LINE,
                x=x,
                y=y,
                width=thickness,
                height=longest.length,
                color=buffer.pixel(bounds.x + longest.index, y),
                length=longest.length,
                thickness=thickness,
            ))
        return shapes

    def _qualifying_runs(self, visible: np.ndarray, span: int) -> list[LineRun]:
        """Runs longer than line_ratio of the span, one list entry per run."""
        min_length = span * self.config.line_ratio
        runs = []
        for index, line in enumerate(visible):
            for start, length in find_runs(line):
                if length > min_length:
                    runs.append(LineRun(index=index, start=start, length=length))
        return runs

    @staticmethod
    def _group_bands(runs: list[LineRun]) -> list[list[LineRun]]:
        """Group runs of adjacent rows/columns whose extents overlap."""
        bands: list[list[LineRun]] = []
        for run in runs:
            if bands:
                previous = bands[-1][-1]
                if (
                    run.index == previous.index + 1
                    and run.start < previous.end
                    and previous.start < run.end
                ):
                    bands[-1].append(run)
                    continue
            bands.append([run])
        return bands


def decompose_into_shapes(
    buffer: PixelBuffer,
    config: Optional[ShapeConfig] = None,
    observer: Optional[Observer] = None,
) -> ShapeAnalysis:
    """
    Decompose a region into geometric primitives.

    Args:
        buffer: Cleaned region pixels.
        config: Optional thresholds.
        observer: Optional hook.

    Returns:
        ShapeAnalysis for the region.
    """
    return ShapeDecomposer(config, observer).decompose(buffer)
