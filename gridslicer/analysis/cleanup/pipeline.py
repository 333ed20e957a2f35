"""
Cleanup pipeline orchestrator.

Chains the background and shadow steps over an owned copy of a region.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional
import numpy as np

from ..base import Observer, PixelBuffer, Rect, notify
from ..shapes.decomposer import find_content_bounds
from .base import CleanupConfig, CleanupStep, StepResult
from .background import clear_shadow_pixels
from .steps import BackgroundMaskStep, GradientShadowStep, SemiTransparentStep


logger = logging.getLogger(__name__)


@dataclass
class CleanupResult:
    """Result of running the cleanup pipeline."""

    buffer: PixelBuffer
    """Cleaned copy of the input."""

    steps_applied: list[str]
    """Names of steps that were applied."""

    steps_skipped: list[str]
    """Names of steps that were skipped."""

    step_results: list[StepResult] = field(default_factory=list)
    """Detailed results for each step."""

    @property
    def background(self) -> Optional[dict]:
        """Background color found by the mask step, if it ran."""
        for result in self.step_results:
            if result.applied and "background" in result.metadata:
                return result.metadata["background"]
        return None


@dataclass
class TrimResult:
    """Region cropped to its visible content."""

    buffer: PixelBuffer
    """Cropped pixels (1x1 transparent when empty)."""

    bounds: Rect
    """Crop rectangle in the input's coordinates."""

    is_empty: bool
    """True when nothing (or only noise) is visible."""


class BackgroundRemover:
    """
    Removes backgrounds and drop shadows exposed by slicing.

    Default step order:
    1. Border-connected background mask
    2. Gradient shadows along the edges
    3. Residual semi-transparent fringes
    """

    def __init__(
        self,
        config: Optional[CleanupConfig] = None,
        steps: Optional[list[CleanupStep]] = None,
        observer: Optional[Observer] = None,
    ):
        """
        Initialize the remover.

        Args:
            config: Cleanup configuration.
            steps: Custom list of steps. If None, uses default steps.
            observer: Optional hook notified after each region.
        """
        self.config = config or CleanupConfig()
        self.observer = observer

        if steps is not None:
            self._steps = steps
        else:
            self._steps = self._create_default_steps()

    def _create_default_steps(self) -> list[CleanupStep]:
        """Create the default cleanup steps."""
        return [
            BackgroundMaskStep(self.config),
            GradientShadowStep(self.config),
            SemiTransparentStep(self.config),
        ]

    @property
    def steps(self) -> list[CleanupStep]:
        """Get the list of cleanup steps."""
        return self._steps

    def process(self, buffer: PixelBuffer, force_all: bool = False) -> CleanupResult:
        """
        Clean a copy of the region.

        Args:
            buffer: Region pixels. Not modified.
            force_all: Force all steps to apply.

        Returns:
            CleanupResult holding the cleaned copy.
        """
        working = buffer.copy()
        steps_applied = []
        steps_skipped = []
        step_results = []

        for step in self._steps:
            result = step.process(working, force=force_all)
            step_results.append(result)

            if result.applied:
                steps_applied.append(step.name)
            else:
                steps_skipped.append(step.name)

        notify(self.observer, "background-removed", {
            "size": f"{buffer.width}x{buffer.height}",
            "steps_applied": steps_applied,
            "steps": {r.step_name: r.metadata for r in step_results if r.applied},
        })

        return CleanupResult(
            buffer=working,
            steps_applied=steps_applied,
            steps_skipped=steps_skipped,
            step_results=step_results,
        )

    def remove(self, buffer: PixelBuffer) -> PixelBuffer:
        """Return a cleaned copy of the region."""
        return self.process(buffer).buffer

    def remove_step(self, name: str) -> bool:
        """
        Remove a step by name.

        Args:
            name: Name of step to remove.

        Returns:
            True if step was found and removed.
        """
        for i, step in enumerate(self._steps):
            if step.name == name:
                self._steps.pop(i)
                return True
        return False


def remove_background(
    buffer: PixelBuffer,
    tolerance: int = 10,
    aggressiveness: int = 30,
    observer: Optional[Observer] = None,
) -> PixelBuffer:
    """
    Remove background and shadows from a region.

    Args:
        buffer: Region pixels. Not modified.
        tolerance: Minimum RGB distance for background matching.
        aggressiveness: Removal aggressiveness (0-100).
        observer: Optional hook.

    Returns:
        Cleaned copy of the region.
    """
    config = CleanupConfig(tolerance=tolerance, aggressiveness=aggressiveness)
    return BackgroundRemover(config, observer=observer).remove(buffer)


def remove_shadows_along_slices(
    buffer: PixelBuffer,
    edges: Iterable[int],
    shadow_width: int = 3,
) -> PixelBuffer:
    """
    Erase shadow fringes in horizontal bands around cut edges.

    For each edge row `e`, rows `e - shadow_width` up to (not including)
    `e + shadow_width` are scanned; pixels with 0 < alpha < 200 that have
    two or more transparent 4-neighbors (and alpha below 128) are cleared.

    Args:
        buffer: Region pixels. Not modified.
        edges: Row coordinates of the cuts.
        shadow_width: Half-height of each band.

    Returns:
        Cleaned copy of the region.
    """
    result = buffer.copy()
    alpha = result.alpha
    height = result.height

    for edge in edges:
        start = max(0, edge - shadow_width)
        end = min(height, edge + shadow_width)
        if end <= start:
            continue

        band = np.zeros(alpha.shape, dtype=bool)
        band[start:end, :] = True
        candidates = band & (alpha > 0) & (alpha < 200)
        clear_shadow_pixels(alpha, candidates)

    return result


def trim_transparent_padding(buffer: PixelBuffer, min_size: int = 3) -> TrimResult:
    """
    Crop a region to the bounding box of its visible pixels.

    Args:
        buffer: Region pixels. Not modified.
        min_size: Content narrower or shorter than this counts as noise.

    Returns:
        TrimResult with the cropped copy and its bounds.
    """
    bounds = find_content_bounds(buffer)

    if bounds is None or bounds.width < min_size or bounds.height < min_size:
        return TrimResult(PixelBuffer.blank(1, 1), Rect(0, 0, 0, 0), is_empty=True)

    return TrimResult(buffer.crop(bounds), bounds, is_empty=False)
