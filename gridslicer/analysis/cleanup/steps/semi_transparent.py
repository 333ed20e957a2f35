"""
Residual semi-transparent pixel removal step.
"""

from typing import Optional
import numpy as np

from ...base import PixelBuffer
from ..base import CleanupStep, CleanupConfig
from ..background import clear_shadow_pixels


class SemiTransparentStep(CleanupStep):
    """
    Removes isolated semi-transparent fringes anywhere in the region.

    Only pixels below the alpha threshold that also look isolated
    (two or more transparent 4-neighbors, own alpha below 128) are erased,
    which leaves antialiased content edges alone.
    """

    def __init__(self, config: Optional[CleanupConfig] = None):
        """Initialize with configuration."""
        super().__init__(config)
        self.aggressiveness = max(self.config.aggressiveness, self.config.semi_transparent_floor)

    @property
    def name(self) -> str:
        return "semi_transparent"

    @property
    def alpha_threshold(self) -> float:
        # 30 -> 210, never below 200
        return max(200, 255 - self.aggressiveness * 1.5)

    def _candidates(self, buffer: PixelBuffer) -> np.ndarray:
        alpha = buffer.alpha
        return (alpha > 0) & (alpha < self.alpha_threshold)

    def should_apply(self, buffer: PixelBuffer) -> bool:
        """Apply if any pixel is partially transparent below the threshold."""
        return bool(np.any(self._candidates(buffer)))

    def apply(self, buffer: PixelBuffer) -> dict:
        """Erase isolated semi-transparent pixels."""
        removed = clear_shadow_pixels(buffer.alpha, self._candidates(buffer))
        return {
            "alpha_threshold": self.alpha_threshold,
            "removed_pixels": removed,
        }
