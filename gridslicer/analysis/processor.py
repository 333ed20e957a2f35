"""
Grid analysis pipeline.

Runs detection, splitting, cleanup, shape decomposition and nine-slice
inference over a sprite sheet and returns the component records consumed
by the exporters.
"""

import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union
from PIL import Image

from gridslicer.config import settings

from .base import Observer, PixelBuffer, Rect, notify
from .cleanup import BackgroundRemover, CleanupConfig, remove_shadows_along_slices, trim_transparent_padding
from .detection import DetectionConfig, GridConfig, GridDetector
from .nine_slice import NineSlice, infer_nine_slice
from .shapes import Shape, ShapeAnalysis, ShapeConfig, ShapeDecomposer
from .splitting import ImageRegion, ImageSplitter


logger = logging.getLogger(__name__)


class AnalysisCancelled(Exception):
    """Raised when an analysis is cancelled between cells."""
    pass


@dataclass(frozen=True)
class ProcessedComponent:
    """A cleaned and described region, ready for export."""

    id: str
    """Region identifier (cell-{row}-{col} or the segment id)."""

    name: str
    """Export name (widget-{row}-{col} for cells, the id for segments)."""

    kind: str
    """'cell' or one of the grid line segment types."""

    source: Rect
    """Rectangle in the source image."""

    buffer: PixelBuffer
    """Cleaned pixels."""

    analysis: ShapeAnalysis
    """Shape decomposition of the cleaned pixels."""

    nine_slice: Optional[NineSlice] = None
    """Nine-slice borders (cells only)."""

    row: Optional[int] = None
    col: Optional[int] = None

    content_bounds: Optional[Rect] = None
    """Bounds of the visible content after trimming, None when empty."""

    @property
    def shapes(self) -> list[Shape]:
        return self.analysis.shapes

    @property
    def is_empty(self) -> bool:
        return self.analysis.is_empty

    @property
    def is_cell(self) -> bool:
        return self.row is not None

    def to_summary(self) -> dict:
        """Short description used in logs and job results."""
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind,
            "width": self.source.width,
            "height": self.source.height,
            "shapes": [s.type.value for s in self.shapes],
            "nineSlice": self.nine_slice.to_dict() if self.nine_slice else None,
            "isEmpty": self.is_empty,
        }


@dataclass
class AnalysisResult:
    """Everything produced by one analysis run."""

    grid: GridConfig
    """Detected grid."""

    components: list[ProcessedComponent] = field(default_factory=list)
    """Cell components in row-major order."""

    line_components: list[ProcessedComponent] = field(default_factory=list)
    """Grid line segment components in segment order."""

    timings: dict[str, float] = field(default_factory=dict)
    """Seconds spent per stage."""

    @property
    def all_components(self) -> list[ProcessedComponent]:
        """Grid line components followed by cells (export order)."""
        return [*self.line_components, *self.components]

    @property
    def total_shapes(self) -> int:
        return sum(len(c.shapes) for c in self.all_components)

    def to_summary(self) -> dict:
        return {
            "grid": {
                "rows": self.grid.rows,
                "columns": self.grid.columns,
                "horizontalSlices": self.grid.horizontal_slices,
                "verticalSlices": self.grid.vertical_slices,
            },
            "components": [c.to_summary() for c in self.components],
            "lineComponents": [c.to_summary() for c in self.line_components],
            "totalShapes": self.total_shapes,
            "timings": {k: round(v, 4) for k, v in self.timings.items()},
        }


class GridAnalyzer:
    """
    Full sprite sheet analysis.

    Combines:
    1. Grid detection
    2. Region splitting
    3. Grid line decomposition (no cleanup)
    4. Per-cell cleanup, edge shadow removal, decomposition and nine-slice

    Cells are independent, so they run in a thread pool and are collected
    back in row-major order. The observer may be called from pool threads.
    """

    def __init__(
        self,
        detection_config: Optional[DetectionConfig] = None,
        cleanup_config: Optional[CleanupConfig] = None,
        shape_config: Optional[ShapeConfig] = None,
        max_border: int = 16,
        border_padding: int = 2,
        max_workers: Optional[int] = None,
        observer: Optional[Observer] = None,
    ):
        """
        Initialize the analyzer.

        Args:
            detection_config: Grid detection configuration.
            cleanup_config: Background removal configuration.
            shape_config: Shape decomposition thresholds.
            max_border: Upper bound of the default nine-slice border.
            border_padding: Pixels added to corner radii for nine-slice.
            max_workers: Cell worker threads (None uses the CPU count).
            observer: Optional hook receiving stage events.
        """
        self.cleanup_config = cleanup_config or CleanupConfig()
        self.max_border = max_border
        self.border_padding = border_padding
        self.max_workers = max_workers or os.cpu_count() or 1
        self.observer = observer

        self._detector = GridDetector(detection_config, observer=observer)
        self._splitter = ImageSplitter()
        self._remover = BackgroundRemover(self.cleanup_config, observer=observer)
        self._decomposer = ShapeDecomposer(shape_config, observer=observer)

    def analyze(
        self,
        image: Union[PixelBuffer, Image.Image, Path, str],
        cancel_event: Optional[threading.Event] = None,
    ) -> AnalysisResult:
        """
        Analyze a sprite sheet.

        Args:
            image: Source image or buffer. Not modified.
            cancel_event: Checked before each cell; once set, remaining cells
                are skipped.

        Returns:
            AnalysisResult with grid, components and timings.

        Raises:
            AnalysisCancelled: If cancel_event was set during the run.
        """
        buffer = self._to_buffer(image)
        timings = {}
        started = time.perf_counter()

        stage = time.perf_counter()
        grid = self._detector.detect(buffer)
        timings["grid_detection"] = time.perf_counter() - stage

        stage = time.perf_counter()
        split = self._splitter.split(buffer, grid)
        timings["splitting"] = time.perf_counter() - stage

        self._check_cancelled(cancel_event)

        stage = time.perf_counter()
        line_components = [self.process_line(region) for region in split.grid_lines]
        timings["line_processing"] = time.perf_counter() - stage

        stage = time.perf_counter()
        components = self._process_cells(split.cells, cancel_event)
        timings["cell_processing"] = time.perf_counter() - stage

        timings["total"] = time.perf_counter() - started

        result = AnalysisResult(
            grid=grid,
            components=components,
            line_components=line_components,
            timings=timings,
        )

        logger.info(
            f"Analyzed {buffer.width}x{buffer.height} image: {grid.rows}x{grid.columns} grid, "
            f"{len(components)} cells, {len(line_components)} line segments, "
            f"{result.total_shapes} shapes in {timings['total']:.3f}s"
        )
        notify(self.observer, "analysis-complete", result.to_summary())

        return result

    def process_line(self, region: ImageRegion) -> ProcessedComponent:
        """Describe a grid line segment. Divider pixels are kept as-is."""
        analysis = self._decomposer.decompose(region.buffer)
        trimmed = trim_transparent_padding(region.buffer)

        return ProcessedComponent(
            id=region.id,
            name=region.id,
            kind=region.kind,
            source=region.rect,
            buffer=region.buffer,
            analysis=analysis,
            nine_slice=None,
            content_bounds=None if trimmed.is_empty else trimmed.bounds,
        )

    def process_cell(self, region: ImageRegion) -> ProcessedComponent:
        """Clean a cell and describe what is left."""
        cleaned = self._remover.remove(region.buffer)
        cleaned = remove_shadows_along_slices(
            cleaned,
            [0, region.height - 1],
            self.cleanup_config.shadow_width,
        )

        analysis = self._decomposer.decompose(cleaned)
        nine_slice = infer_nine_slice(analysis, self.max_border, self.border_padding)
        trimmed = trim_transparent_padding(cleaned)

        return ProcessedComponent(
            id=region.id,
            name=f"widget-{region.row}-{region.col}",
            kind=region.kind,
            source=region.rect,
            buffer=cleaned,
            analysis=analysis,
            nine_slice=nine_slice,
            row=region.row,
            col=region.col,
            content_bounds=None if trimmed.is_empty else trimmed.bounds,
        )

    def _process_cells(
        self,
        cells: list[ImageRegion],
        cancel_event: Optional[threading.Event],
    ) -> list[ProcessedComponent]:
        if not cells:
            return []

        def run(region: ImageRegion) -> ProcessedComponent:
            self._check_cancelled(cancel_event)
            return self.process_cell(region)

        workers = min(self.max_workers, len(cells))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(run, region) for region in cells]
            try:
                return [future.result() for future in futures]
            except AnalysisCancelled:
                for future in futures:
                    future.cancel()
                raise

    def _check_cancelled(self, cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            logger.info("Analysis cancelled")
            raise AnalysisCancelled("Analysis cancelled")

    def _to_buffer(self, image: Union[PixelBuffer, Image.Image, Path, str]) -> PixelBuffer:
        """Convert supported image inputs to a pixel buffer."""
        if isinstance(image, PixelBuffer):
            return image

        if isinstance(image, (str, Path, Image.Image)):
            return PixelBuffer.from_image(image)

        raise TypeError(f"Unsupported image type: {type(image)}")


def create_analyzer(observer: Optional[Observer] = None, **overrides) -> GridAnalyzer:
    """
    Factory function to create an analyzer from application settings.

    Args:
        observer: Optional hook receiving stage events.
        **overrides: Per-run values (tolerance, min_gap_x, min_gap_y,
            aggressiveness). None values fall back to settings.

    Returns:
        Configured GridAnalyzer.
    """
    values = {k: v for k, v in overrides.items() if v is not None}

    detection = DetectionConfig(
        tolerance=values.get("tolerance", settings.detection.tolerance),
        min_gap_x=values.get("min_gap_x", settings.detection.min_gap_x),
        min_gap_y=values.get("min_gap_y", settings.detection.min_gap_y),
    )
    cleanup = CleanupConfig(
        tolerance=values.get("cleanup_tolerance", settings.cleanup.tolerance),
        aggressiveness=values.get("aggressiveness", settings.cleanup.aggressiveness),
        shadow_width=settings.cleanup.shadow_width,
    )
    shapes = ShapeConfig(**settings.shapes.model_dump())

    return GridAnalyzer(
        detection_config=detection,
        cleanup_config=cleanup,
        shape_config=shapes,
        max_border=settings.nine_slice.max_border,
        border_padding=settings.nine_slice.padding,
        max_workers=values.get("max_workers", settings.max_workers),
        observer=observer,
    )
