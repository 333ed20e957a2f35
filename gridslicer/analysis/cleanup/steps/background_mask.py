"""
Border-connected background removal step.
"""

import logging
from typing import Optional

from ...base import PixelBuffer
from ..base import CleanupStep, CleanupConfig
from ..background import (
    create_background_mask,
    find_most_common_color,
    sample_background_points,
)


logger = logging.getLogger(__name__)


class BackgroundMaskStep(CleanupStep):
    """
    Makes the background transparent.

    Estimates the background from corner samples, marks every pixel close
    enough to it, and clears only the marked pixels reachable from the
    border. Same-colored shapes enclosed by content stay untouched.
    """

    def __init__(self, config: Optional[CleanupConfig] = None):
        """Initialize with configuration."""
        super().__init__(config)
        self.tolerance = self.config.effective_tolerance

    @property
    def name(self) -> str:
        return "background_mask"

    def should_apply(self, buffer: PixelBuffer) -> bool:
        """Apply to any non-empty region."""
        return buffer.width > 0 and buffer.height > 0

    def apply(self, buffer: PixelBuffer) -> dict:
        """Clear the border-connected background."""
        total = buffer.width * buffer.height
        if total == 0:
            return {"background_pixels": 0, "background_percent": 0.0}

        samples = sample_background_points(buffer)
        background = find_most_common_color(samples, self.config.cluster_tolerance)

        mask = create_background_mask(buffer, background, self.tolerance)
        buffer.alpha[mask] = 0

        removed = int(mask.sum())
        logger.debug(
            f"Background {background.to_css()} (tolerance {self.tolerance}): "
            f"cleared {removed}/{total} pixels"
        )

        return {
            "background": background.to_dict(),
            "samples": len(samples),
            "tolerance": self.tolerance,
            "background_pixels": removed,
            "background_percent": round(removed / total * 100, 1),
        }
