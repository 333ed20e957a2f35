"""
Grid divider detection tests.
"""

import numpy as np
import pytest

from gridslicer.analysis import PixelBuffer
from gridslicer.analysis.base import js_round
from gridslicer.analysis.detection import (
    DividerGroup,
    GridDetector,
    DetectionConfig,
    SegmentType,
    consolidate_dividers,
    detect_grid,
    enforce_minimum_gap,
)

from conftest import BLACK, gradient_sheet, solid


def group(start, end):
    exact = (start + end) / 2
    return DividerGroup(start=start, end=end, center=js_round(exact), width=end - start + 1, exact_center=exact)


def quadrant_image():
    """300x300 image: four colored quadrants split by a 2px black cross at 99-100."""
    pixels = np.zeros((300, 300, 4), dtype=np.uint8)
    pixels[:150, :150] = (255, 0, 0, 255)
    pixels[:150, 150:] = (0, 255, 0, 255)
    pixels[150:, :150] = (0, 0, 255, 255)
    pixels[150:, 150:] = (255, 255, 0, 255)
    pixels[99:101, :] = BLACK
    pixels[:, 99:101] = BLACK
    return PixelBuffer(pixels)


class TestConsolidation:
    """Collapsing uniform rows into divider groups"""

    def test_contiguous_runs_become_groups(self):
        flags = np.zeros(20, dtype=bool)
        flags[[2, 3, 4, 10, 15, 16]] = True

        groups = consolidate_dividers(flags)

        assert [(g.start, g.end, g.width) for g in groups] == [(2, 4, 3), (10, 10, 1), (15, 16, 2)]
        assert [g.center for g in groups] == [3, 10, 16]

    def test_even_width_center_rounds_half_up(self):
        flags = np.zeros(10, dtype=bool)
        flags[[4, 5]] = True

        (divider,) = consolidate_dividers(flags)

        assert divider.exact_center == 4.5
        assert divider.center == 5

    def test_no_flags(self):
        assert consolidate_dividers(np.zeros(5, dtype=bool)) == []


class TestMinimumGap:
    """Minimum-gap filtering of divider groups"""

    def test_first_group_always_kept(self):
        groups = [group(0, 0), group(10, 10)]
        assert enforce_minimum_gap(groups, 50) == [groups[0]]

    def test_thicker_group_replaces_close_neighbour(self):
        thin = group(10, 10)
        thick = group(30, 33)

        assert enforce_minimum_gap([thin, thick], 50) == [thick]

    def test_equal_width_keeps_first(self):
        first = group(10, 11)
        second = group(30, 31)

        assert enforce_minimum_gap([first, second], 50) == [first]

    def test_gap_exactly_min_is_kept(self):
        groups = [group(0, 0), group(50, 50)]
        assert enforce_minimum_gap(groups, 50) == groups

    def test_larger_gap_never_keeps_more(self):
        image = gradient_sheet(201, 60, xs=[0, 20, 45, 100, 130, 200])
        counts = [
            len(detect_grid(image, min_gap_x=gap).vertical_slices)
            for gap in (0, 10, 30, 50, 80, 120, 250)
        ]

        assert counts == sorted(counts, reverse=True)
        assert counts[0] == 6
        assert counts[-1] == 1


class TestGridDetector:
    """End-to-end grid detection"""

    def test_single_cross_yields_one_slice_per_axis(self):
        grid = detect_grid(quadrant_image())

        assert grid.horizontal_slices == [100]
        assert grid.vertical_slices == [100]
        assert grid.horizontal_line_groups[0].width == 2
        assert grid.rows == 1
        assert grid.columns == 1
        # One slice per axis bounds no cell
        assert grid.cells == []

    def test_single_cross_segments(self):
        grid = detect_grid(quadrant_image())

        assert [s.id for s in grid.grid_line_segments] == ["h-line-0", "v-line-1", "intersection-2"]
        horizontal, vertical, intersection = grid.grid_line_segments
        assert (horizontal.x, horizontal.y, horizontal.width, horizontal.height) == (0, 99, 300, 2)
        assert (vertical.x, vertical.y, vertical.width, vertical.height) == (99, 0, 2, 300)
        assert (intersection.x, intersection.y, intersection.width, intersection.height) == (99, 99, 2, 2)
        assert intersection.type == SegmentType.INTERSECTION

    def test_three_by_three_grid(self):
        image = gradient_sheet(211, 211, xs=[0, 70, 140, 210], ys=[0, 70, 140, 210])

        grid = detect_grid(image)

        assert grid.rows == 3
        assert grid.columns == 3
        assert grid.horizontal_slices == [0, 70, 140, 210]
        assert len(grid.cells) == 9
        first = grid.cells[0]
        assert (first.row, first.col, first.x, first.y, first.width, first.height) == (0, 0, 0, 0, 70, 70)
        assert grid.cells[5].id == "cell-1-2"
        # 4 horizontal + 4 vertical + 16 crossings
        assert len(grid.grid_line_segments) == 24

    def test_cells_tile_area_between_outer_slices(self):
        xs = [10, 60, 120, 190]
        ys = [5, 80, 150]
        grid = detect_grid(gradient_sheet(200, 160, xs=xs, ys=ys))

        coverage = np.zeros((160, 200), dtype=int)
        for cell in grid.cells:
            coverage[cell.y:cell.y + cell.height, cell.x:cell.x + cell.width] += 1

        assert grid.rows == 2
        assert grid.columns == 3
        assert np.all(coverage[5:150, 10:190] == 1)
        assert coverage.sum() == (150 - 5) * (190 - 10)

    def test_cells_reproduce_divider_centers(self):
        image = gradient_sheet(211, 211, xs=[0, 70, 140, 210], ys=[0, 70, 140, 210])
        grid = detect_grid(image)

        xs = sorted({c.x for c in grid.cells} | {c.x + c.width for c in grid.cells})
        ys = sorted({c.y for c in grid.cells} | {c.y + c.height for c in grid.cells})

        assert xs == grid.vertical_slices
        assert ys == grid.horizontal_slices

    def test_only_horizontal_dividers(self):
        grid = detect_grid(gradient_sheet(120, 200, ys=[0, 100, 199]))

        assert grid.rows == 2
        assert grid.columns == 1
        assert grid.vertical_slices == []
        assert grid.cells == []

    def test_no_dividers_is_one_cell(self):
        grid = detect_grid(gradient_sheet(80, 60))

        assert grid.rows == 1
        assert grid.columns == 1
        assert len(grid.cells) == 1
        cell = grid.cells[0]
        assert (cell.x, cell.y, cell.width, cell.height) == (0, 0, 80, 60)
        assert grid.grid_line_segments == []

    def test_single_pixel_image(self):
        grid = detect_grid(solid(1, 1))

        assert grid.rows == 1
        assert grid.columns == 1
        assert grid.image_size == (1, 1)

    def test_deterministic(self):
        image = gradient_sheet(211, 211, xs=[0, 70, 140, 210], ys=[0, 70, 140, 210])

        assert detect_grid(image).to_dict() == detect_grid(image).to_dict()

    def test_tolerance_absorbs_noise(self):
        image = gradient_sheet(100, 100, ys=[50])
        image.pixels[50, ::2, 0] = 3

        assert detect_grid(image, tolerance=5).horizontal_slices == [50]
        assert detect_grid(image, tolerance=0).horizontal_slices == []

    def test_outer_borders_reported(self):
        image = gradient_sheet(100, 100, xs=[0, 1, 2], ys=[0, 99])

        grid = detect_grid(image)

        assert grid.outer_borders.top == 1
        assert grid.outer_borders.bottom == 1
        assert grid.outer_borders.left == 3
        assert grid.outer_borders.right == 0

    def test_observer_receives_detection(self):
        events = []
        detector = GridDetector(DetectionConfig(), observer=lambda e, p: events.append((e, p)))

        detector.detect(quadrant_image())

        assert [e for e, _ in events] == ["grid-detected"]
        assert events[0][1]["horizontal_slices"] == [100]

    def test_input_not_modified(self):
        image = quadrant_image()
        before = image.copy()

        detect_grid(image)

        assert image == before


class TestPixelBuffer:
    """Pixel buffer construction"""

    def test_from_bytes_checks_length(self):
        with pytest.raises(ValueError):
            PixelBuffer.from_bytes(b"\x00" * 15, 2, 2)

    def test_from_bytes_round_trip_layout(self):
        data = bytes(range(16))
        buffer = PixelBuffer.from_bytes(data, 2, 2)

        assert buffer.pixel(1, 0).to_dict() == {"r": 4, "g": 5, "b": 6, "a": 7}
        assert buffer.to_bytes() == data

    def test_rejects_non_rgba_array(self):
        with pytest.raises(ValueError):
            PixelBuffer(np.zeros((4, 4, 3), dtype=np.uint8))
