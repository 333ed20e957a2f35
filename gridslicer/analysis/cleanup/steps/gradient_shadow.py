"""
Gradient shadow removal step.
"""

import math
from typing import Optional
import numpy as np

from ...base import PixelBuffer
from ..base import CleanupStep, CleanupConfig
from ..background import saturation_brightness


class GradientShadowStep(CleanupStep):
    """
    Removes drop-shadow residue along the region edges.

    Scans inward from each edge. Semi-transparent pixels there are treated
    as shadow outright. Opaque pixels that are grey and not bright are
    erased unless an adjacent opaque pixel looks like real content (high
    saturation or high brightness).
    """

    def __init__(self, config: Optional[CleanupConfig] = None):
        """Initialize with configuration."""
        super().__init__(config)
        self.aggressiveness = max(self.config.aggressiveness, self.config.gradient_floor)

    @property
    def name(self) -> str:
        return "gradient_shadow"

    @property
    def scan_depth(self) -> int:
        """How many pixels inward each edge is scanned."""
        return max(3, min(15, math.floor(self.aggressiveness / 6)))

    @property
    def saturation_threshold(self) -> float:
        return 0.3 - self.aggressiveness / 500

    def should_apply(self, buffer: PixelBuffer) -> bool:
        """Apply when anything is left to inspect."""
        return bool(np.any(buffer.alpha > 0))

    def apply(self, buffer: PixelBuffer) -> dict:
        """Erase shadow pixels in the edge band, in scan order."""
        alpha = buffer.alpha
        saturation, brightness = saturation_brightness(buffer)

        strong = (alpha == 255) & ((saturation > 0.3) | (brightness > 150))
        shadow_like = (saturation < self.saturation_threshold) & (brightness < 200)
        candidates = (alpha > 0) & ((alpha < 250) | shadow_like)

        height, width = alpha.shape
        removed = 0

        for x, y in self._scan_order(width, height):
            if not candidates[y, x] or alpha[y, x] == 0:
                continue

            if alpha[y, x] < 250:
                alpha[y, x] = 0
                strong[y, x] = False
                removed += 1
                continue

            # Shadow-like opaque pixel: keep it if real content backs it
            window = strong[max(y - 1, 0):y + 2, max(x - 1, 0):x + 2]
            if int(window.sum()) - int(strong[y, x]) == 0:
                alpha[y, x] = 0
                strong[y, x] = False
                removed += 1

        return {
            "aggressiveness": self.aggressiveness,
            "scan_depth": self.scan_depth,
            "removed_pixels": removed,
        }

    def _scan_order(self, width: int, height: int) -> list[tuple[int, int]]:
        """
        Edge coordinates in visiting order.

        For each depth: top and bottom rows pixel by pixel (interleaved),
        then left and right columns (interleaved).
        """
        order = []
        for depth in range(self.scan_depth):
            for x in range(width):
                if depth < height:
                    order.append((x, depth))
                if 0 <= height - 1 - depth < height:
                    order.append((x, height - 1 - depth))
            for y in range(height):
                if depth < width:
                    order.append((depth, y))
                if 0 <= width - 1 - depth < width:
                    order.append((width - 1 - depth, y))
        return order
