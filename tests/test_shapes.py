"""
Shape decomposition and nine-slice inference tests.
"""

from gridslicer.analysis import PixelBuffer, ShapeType, decompose_into_shapes, infer_nine_slice
from gridslicer.analysis.shapes import ShapeAnalysis, ShapeConfig, ShapeDecomposer
from gridslicer.analysis.shapes.decomposer import find_runs, step_to_radius

from conftest import RED, rounded_square, solid


def strip(canvas=(60, 10), at=(5, 3), size=(50, 4)):
    buffer = PixelBuffer.blank(*canvas)
    x, y = at
    width, height = size
    buffer.pixels[y:y + height, x:x + width] = RED
    return buffer


class TestContentBounds:
    """Empty and non-empty regions"""

    def test_transparent_region_is_empty(self):
        analysis = decompose_into_shapes(PixelBuffer.blank(16, 16))

        assert analysis.is_empty
        assert analysis.shapes == []
        assert analysis.bounds is None

    def test_zero_sized_region_is_empty(self):
        assert decompose_into_shapes(PixelBuffer.blank(0, 0)).is_empty

    def test_bounds_cover_visible_pixels(self):
        analysis = decompose_into_shapes(strip())

        assert not analysis.is_empty
        assert analysis.bounds.to_dict() == {"x": 5, "y": 3, "width": 50, "height": 4}


class TestRectangles:
    """Rectangle and rounded-rectangle tests"""

    def test_rounded_square(self):
        analysis = decompose_into_shapes(rounded_square(64, 8))

        assert len(analysis.shapes) == 1
        (shape,) = analysis.shapes
        assert shape.type == ShapeType.ROUNDED_RECTANGLE
        assert abs(shape.corner_radius - 8) <= 2
        assert analysis.of_type(ShapeType.RECTANGLE) == []
        assert shape.color.to_css() == "rgba(255, 0, 255, 1)"

    def test_rounded_square_corner_radii(self):
        (shape,) = decompose_into_shapes(rounded_square(64, 8)).shapes

        radii = shape.corners
        assert radii.top_left == radii.top_right == radii.bottom_left == radii.bottom_right
        assert radii.top_left == shape.corner_radius

    def test_filled_square_is_rectangle(self):
        buffer = PixelBuffer.blank(30, 30)
        buffer.pixels[5:25, 5:25] = RED

        analysis = decompose_into_shapes(buffer)

        assert [s.type for s in analysis.shapes] == [ShapeType.RECTANGLE]
        rect = analysis.shapes[0]
        assert (rect.x, rect.y, rect.width, rect.height) == (5, 5, 20, 20)
        assert rect.corner_radius == 0

    def test_sparse_region_is_not_rectangle(self):
        buffer = PixelBuffer.blank(40, 40)
        buffer.pixels[0:2, :] = RED
        buffer.pixels[38:40, :] = RED
        buffer.pixels[:, 0:2] = RED
        buffer.pixels[:, 38:40] = RED

        analysis = decompose_into_shapes(buffer)

        assert analysis.of_type(ShapeType.RECTANGLE) == []
        assert analysis.of_type(ShapeType.ROUNDED_RECTANGLE) == []

    def test_step_to_radius(self):
        assert step_to_radius(0) == 0
        assert step_to_radius(2) == 7
        assert step_to_radius(6) == 20


class TestLines:
    """Horizontal and vertical line bands"""

    def test_horizontal_strip(self):
        analysis = decompose_into_shapes(strip())

        horizontal = analysis.of_type(ShapeType.HORIZONTAL_LINE)
        assert len(horizontal) == 1
        assert 40 <= horizontal[0].length <= 50
        assert horizontal[0].thickness == 4
        assert analysis.of_type(ShapeType.VERTICAL_LINE) == []

    def test_strip_filling_whole_region(self):
        analysis = decompose_into_shapes(solid(50, 4, RED))

        assert len(analysis.of_type(ShapeType.HORIZONTAL_LINE)) == 1
        assert analysis.of_type(ShapeType.VERTICAL_LINE) == []

    def test_vertical_strip(self):
        buffer = PixelBuffer.blank(10, 60)
        buffer.pixels[5:55, 4:6] = RED

        analysis = decompose_into_shapes(buffer)

        (line,) = analysis.of_type(ShapeType.VERTICAL_LINE)
        assert (line.x, line.y, line.length, line.thickness) == (4, 5, 50, 2)
        assert analysis.of_type(ShapeType.HORIZONTAL_LINE) == []

    def test_frame_yields_four_edges(self):
        buffer = PixelBuffer.blank(40, 40)
        buffer.pixels[0:2, :] = RED
        buffer.pixels[38:40, :] = RED
        buffer.pixels[:, 0:2] = RED
        buffer.pixels[:, 38:40] = RED

        analysis = decompose_into_shapes(buffer)

        horizontal = analysis.of_type(ShapeType.HORIZONTAL_LINE)
        vertical = analysis.of_type(ShapeType.VERTICAL_LINE)
        assert [(s.y, s.thickness) for s in horizontal] == [(0, 2), (38, 2)]
        assert [(s.x, s.thickness) for s in vertical] == [(0, 2), (38, 2)]

    def test_short_runs_are_not_lines(self):
        buffer = PixelBuffer.blank(40, 40)
        buffer.pixels[10, 0:20] = RED
        buffer.pixels[30, 0:40] = RED

        analysis = decompose_into_shapes(buffer)

        (line,) = analysis.of_type(ShapeType.HORIZONTAL_LINE)
        assert line.y == 30

    def test_find_runs(self):
        import numpy as np

        mask = np.array([1, 1, 0, 1, 0, 0, 1, 1, 1], dtype=bool)

        assert find_runs(mask) == [(0, 2), (3, 1), (6, 3)]

    def test_custom_line_ratio(self):
        buffer = PixelBuffer.blank(40, 40)
        buffer.pixels[10, 0:30] = RED
        buffer.pixels[30, 0:40] = RED

        analysis = ShapeDecomposer(ShapeConfig(line_ratio=0.5)).decompose(buffer)

        assert len(analysis.of_type(ShapeType.HORIZONTAL_LINE)) == 2


class TestNineSlice:
    """Nine-slice border inference"""

    def test_empty_analysis_has_none(self):
        assert infer_nine_slice(ShapeAnalysis()) is None

    def test_default_border_is_quarter_of_content(self):
        buffer = PixelBuffer.blank(50, 50)
        buffer.pixels[5:45, 5:45] = RED

        nine = infer_nine_slice(decompose_into_shapes(buffer))

        assert nine.to_dict() == {"top": 10, "right": 10, "bottom": 10, "left": 10}

    def test_default_border_capped(self):
        nine = infer_nine_slice(decompose_into_shapes(solid(200, 120, RED)))

        assert nine.top == 16

    def test_rounded_corner_widens_border(self):
        analysis = decompose_into_shapes(rounded_square(64, 8))
        radius = analysis.shapes[0].corner_radius

        nine = infer_nine_slice(analysis)

        assert nine.left == max(16, radius + 2)

    def test_large_radius_exceeds_default(self):
        analysis = decompose_into_shapes(rounded_square(120, 40))
        radius = analysis.shapes[0].corner_radius

        nine = infer_nine_slice(analysis)

        assert radius > 16
        assert nine.to_dict() == {"top": radius + 2, "right": radius + 2, "bottom": radius + 2, "left": radius + 2}
