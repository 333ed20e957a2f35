"""
Base classes for background and shadow cleanup.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from ..base import PixelBuffer


@dataclass
class CleanupConfig:
    """Configuration for the cleanup pipeline."""

    tolerance: int = 10
    """Requested RGB distance for background matching."""

    aggressiveness: int = 30
    """How readily ambiguous pixels are erased (0-100, not clamped)."""

    shadow_width: int = 3
    """Half-height of the band cleaned around each cell edge."""

    cluster_tolerance: float = 20.0
    """RGB distance under which background samples share a cluster."""

    gradient_floor: int = 25
    """Lowest aggressiveness used by the gradient shadow pass."""

    semi_transparent_floor: int = 30
    """Lowest aggressiveness used by the semi-transparent pass."""

    @property
    def effective_tolerance(self) -> float:
        """Background distance actually used for the mask."""
        return max(self.tolerance, self.aggressiveness * 2)


@dataclass
class StepResult:
    """Result of applying a cleanup step."""

    buffer: PixelBuffer
    """Buffer after the step."""

    applied: bool
    """Whether the step was actually applied."""

    step_name: str
    """Name of the step."""

    metadata: dict = field(default_factory=dict)
    """Additional information about the processing."""


class CleanupStep(ABC):
    """
    Abstract base class for cleanup steps.

    Steps receive the pipeline's working buffer and modify it in place.
    The pipeline owns that buffer; callers never see it mutated.
    """

    def __init__(self, config: Optional[CleanupConfig] = None):
        """Initialize the step with configuration."""
        self.config = config or CleanupConfig()

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of this cleanup step."""
        pass

    @abstractmethod
    def should_apply(self, buffer: PixelBuffer) -> bool:
        """
        Determine if this step has anything to do.

        Args:
            buffer: Current working buffer.

        Returns:
            True if this step should be applied.
        """
        pass

    @abstractmethod
    def apply(self, buffer: PixelBuffer) -> dict:
        """
        Apply the step to the working buffer in place.

        Args:
            buffer: Working buffer owned by the pipeline.

        Returns:
            Metadata describing what the step did.
        """
        pass

    def process(self, buffer: PixelBuffer, force: bool = False) -> StepResult:
        """
        Process the buffer, applying the step if needed.

        Args:
            buffer: Working buffer.
            force: Force application regardless of should_apply.

        Returns:
            StepResult with the buffer and metadata.
        """
        if force or self.should_apply(buffer):
            metadata = self.apply(buffer)
            metadata["forced"] = force
            return StepResult(
                buffer=buffer,
                applied=True,
                step_name=self.name,
                metadata=metadata,
            )

        return StepResult(
            buffer=buffer,
            applied=False,
            step_name=self.name,
            metadata={"reason": "not_needed"},
        )
