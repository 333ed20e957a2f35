"""
Individual cleanup steps.
"""

from .background_mask import BackgroundMaskStep
from .gradient_shadow import GradientShadowStep
from .semi_transparent import SemiTransparentStep

__all__ = [
    "BackgroundMaskStep",
    "GradientShadowStep",
    "SemiTransparentStep",
]
