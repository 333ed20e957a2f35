"""
Row and column uniformity scanning.
"""

import numpy as np

from ..base import PixelBuffer, js_round
from .base import DividerGroup, OuterBorders


class UniformityScanner:
    """
    Finds rows and columns whose pixels all match the first pixel.

    A row (column) is uniform when every pixel differs from the row's first
    pixel by at most `tolerance` on each of R, G, B and A. The tolerance
    absorbs compression noise in exported sprite sheets.
    """

    def __init__(self, tolerance: int = 5):
        """
        Initialize the scanner.

        Args:
            tolerance: Maximum per-channel absolute difference.
        """
        self.tolerance = tolerance

    def uniform_rows(self, buffer: PixelBuffer) -> np.ndarray:
        """
        Flag uniform rows.

        Args:
            buffer: Source pixels.

        Returns:
            Boolean array of length height.
        """
        if buffer.width == 0:
            return np.zeros(buffer.height, dtype=bool)
        pixels = buffer.pixels.astype(np.int16)
        diff = np.abs(pixels - pixels[:, :1, :])
        return np.all(diff <= self.tolerance, axis=(1, 2))

    def uniform_columns(self, buffer: PixelBuffer) -> np.ndarray:
        """
        Flag uniform columns.

        Args:
            buffer: Source pixels.

        Returns:
            Boolean array of length width.
        """
        if buffer.height == 0:
            return np.zeros(buffer.width, dtype=bool)
        pixels = buffer.pixels.astype(np.int16)
        diff = np.abs(pixels - pixels[:1, :, :])
        return np.all(diff <= self.tolerance, axis=(0, 2))

    def outer_borders(self, buffer: PixelBuffer) -> OuterBorders:
        """
        Measure the uniform frame on each side of the image.

        Args:
            buffer: Source pixels.

        Returns:
            OuterBorders with the count of uniform rows/columns at each edge.
        """
        rows = self.uniform_rows(buffer)
        columns = self.uniform_columns(buffer)

        return OuterBorders(
            top=self._leading_run(rows),
            right=self._leading_run(columns[::-1]),
            bottom=self._leading_run(rows[::-1]),
            left=self._leading_run(columns),
        )

    @staticmethod
    def _leading_run(flags: np.ndarray) -> int:
        """Count consecutive True values from the start."""
        misses = np.flatnonzero(~flags)
        return int(misses[0]) if misses.size else int(flags.size)


def consolidate_dividers(flags: np.ndarray) -> list[DividerGroup]:
    """
    Collapse contiguous uniform indices into divider groups.

    Thick or antialiased dividers produce several adjacent uniform rows;
    each run becomes a single group centered on its midpoint.

    Args:
        flags: Boolean uniformity flags along one axis.

    Returns:
        Divider groups in ascending order.
    """
    indices = np.flatnonzero(flags)
    if indices.size == 0:
        return []

    groups = []
    # Split wherever consecutive indices jump by more than one
    breaks = np.flatnonzero(np.diff(indices) != 1) + 1
    for run in np.split(indices, breaks):
        start = int(run[0])
        end = int(run[-1])
        exact_center = (start + end) / 2
        groups.append(DividerGroup(
            start=start,
            end=end,
            center=js_round(exact_center),
            width=end - start + 1,
            exact_center=exact_center,
        ))

    return groups
