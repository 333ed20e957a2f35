"""
Background and shadow cleanup tests.
"""

import numpy as np

from gridslicer.analysis import Color, PixelBuffer
from gridslicer.analysis.cleanup import (
    BackgroundRemover,
    CleanupConfig,
    find_most_common_color,
    flood_fill_from_edges,
    remove_background,
    remove_shadows_along_slices,
    sample_background_points,
    trim_transparent_padding,
)
from gridslicer.analysis.cleanup.steps import GradientShadowStep, SemiTransparentStep

from conftest import BLACK, RED, solid


WHITE = Color(255, 255, 255)


def enclosed_square():
    """White image with a black ring enclosing a white interior."""
    buffer = solid(40, 40)
    buffer.pixels[10:30, 10:30] = BLACK
    buffer.pixels[14:26, 14:26] = (255, 255, 255, 255)
    return buffer


class TestBackgroundSampling:
    """Background color estimation"""

    def test_samples_corners_and_insets(self):
        assert len(sample_background_points(solid(20, 20))) == 8

    def test_empty_buffer_has_no_samples(self):
        assert sample_background_points(PixelBuffer.blank(0, 0)) == []

    def test_largest_cluster_wins(self):
        colors = [WHITE, Color(250, 250, 250), WHITE, Color(0, 0, 0), Color(5, 5, 5)]

        assert find_most_common_color(colors) == Color(253, 253, 253)

    def test_no_samples_defaults_to_white(self):
        assert find_most_common_color([]) == WHITE

    def test_config_effective_tolerance(self):
        assert CleanupConfig(tolerance=10, aggressiveness=30).effective_tolerance == 60
        assert CleanupConfig(tolerance=10, aggressiveness=2).effective_tolerance == 10


class TestFloodFill:
    """Border-connected background masking"""

    def test_keeps_only_border_connected_candidates(self):
        candidates = np.zeros((7, 7), dtype=bool)
        candidates[0, :] = True
        candidates[3, 3] = True

        mask = flood_fill_from_edges(candidates)

        assert mask[0].all()
        assert not mask[3, 3]

    def test_enclosed_background_color_survives(self):
        cleaned = remove_background(enclosed_square())

        assert cleaned.alpha[0:10, :].max() == 0
        assert cleaned.alpha[14:26, 14:26].min() == 255
        assert cleaned.alpha[10, 10:30].min() == 255

    def test_input_not_modified(self):
        image = enclosed_square()
        before = image.copy()

        remove_background(image)

        assert image == before


class TestBackgroundRemover:
    """Step pipeline"""

    def test_reports_applied_steps(self):
        result = BackgroundRemover().process(enclosed_square())

        assert result.steps_applied[:2] == ["background_mask", "gradient_shadow"]
        assert "semi_transparent" in result.steps_skipped
        assert result.background == {"r": 255, "g": 255, "b": 255, "a": 255}

    def test_observer_notified(self):
        events = []
        BackgroundRemover(observer=lambda e, p: events.append(e)).process(enclosed_square())

        assert events == ["background-removed"]

    def test_remove_step(self):
        remover = BackgroundRemover()

        assert remover.remove_step("gradient_shadow")
        assert not remover.remove_step("gradient_shadow")
        assert [s.name for s in remover.steps] == ["background_mask", "semi_transparent"]

    def test_forced_steps_on_zero_sized_region(self):
        result = BackgroundRemover().process(PixelBuffer.blank(0, 0), force_all=True)

        assert result.steps_applied == ["background_mask", "gradient_shadow", "semi_transparent"]
        assert result.step_results[0].metadata["background_percent"] == 0.0
        assert result.background is None
        assert (result.buffer.width, result.buffer.height) == (0, 0)


class TestGradientShadow:
    """Edge band shadow removal"""

    def test_isolated_grey_pixel_near_edge_removed(self):
        buffer = PixelBuffer.blank(20, 20)
        buffer.pixels[1, 10] = (60, 60, 60, 255)

        GradientShadowStep().apply(buffer)

        assert buffer.alpha[1, 10] == 0

    def test_grey_pixel_backed_by_content_kept(self):
        buffer = PixelBuffer.blank(20, 20)
        buffer.pixels[1, 5] = (60, 60, 60, 255)
        buffer.pixels[2, 5] = RED

        GradientShadowStep().apply(buffer)

        assert buffer.alpha[1, 5] == 255
        assert buffer.alpha[2, 5] == 255

    def test_semi_transparent_edge_pixel_removed(self):
        buffer = PixelBuffer.blank(20, 20)
        buffer.pixels[2, 15] = (255, 0, 0, 100)
        buffer.pixels[10, 10] = (255, 0, 0, 100)

        GradientShadowStep().apply(buffer)

        assert buffer.alpha[2, 15] == 0
        # Beyond the scan depth
        assert buffer.alpha[10, 10] == 100

    def test_scan_depth_follows_aggressiveness(self):
        assert GradientShadowStep(CleanupConfig(aggressiveness=0)).scan_depth == 4
        assert GradientShadowStep(CleanupConfig(aggressiveness=60)).scan_depth == 10
        assert GradientShadowStep(CleanupConfig(aggressiveness=200)).scan_depth == 15

    def test_grey_edge_pixel_erased_at_default_aggressiveness(self):
        buffer = PixelBuffer.blank(20, 20)
        buffer.pixels[1, 10] = (60, 60, 60, 255)

        GradientShadowStep(CleanupConfig(aggressiveness=30)).apply(buffer)

        assert buffer.alpha[1, 10] == 0

    def test_negative_saturation_threshold_keeps_opaque_pixels(self):
        step = GradientShadowStep(CleanupConfig(aggressiveness=200))
        buffer = PixelBuffer.blank(20, 20)
        buffer.pixels[1, 10] = (60, 60, 60, 255)

        step.apply(buffer)

        assert step.saturation_threshold < 0
        assert buffer.alpha[1, 10] == 255


class TestSemiTransparent:
    """Residual fringe removal"""

    def test_isolated_fringe_removed(self):
        buffer = PixelBuffer.blank(10, 10)
        buffer.pixels[5, 5] = (0, 0, 0, 100)

        SemiTransparentStep().apply(buffer)

        assert buffer.alpha[5, 5] == 0

    def test_surrounded_pixel_kept(self):
        buffer = solid(10, 10, RED)
        buffer.pixels[5, 5] = (255, 0, 0, 100)

        SemiTransparentStep().apply(buffer)

        assert buffer.alpha[5, 5] == 100

    def test_threshold_never_below_200(self):
        assert SemiTransparentStep(CleanupConfig(aggressiveness=30)).alpha_threshold == 210
        assert SemiTransparentStep(CleanupConfig(aggressiveness=100)).alpha_threshold == 200


class TestSliceShadows:
    """Shadow cleanup around cut edges"""

    def test_band_around_edges(self):
        buffer = PixelBuffer.blank(10, 10)
        buffer.pixels[1, 4] = (0, 0, 0, 100)
        buffer.pixels[5, 4] = (0, 0, 0, 100)
        buffer.pixels[8, 4] = (0, 0, 0, 100)
        before = buffer.copy()

        cleaned = remove_shadows_along_slices(buffer, [0, 9], shadow_width=3)

        assert cleaned.alpha[1, 4] == 0
        assert cleaned.alpha[8, 4] == 0
        assert cleaned.alpha[5, 4] == 100
        assert buffer == before

    def test_opaque_pixels_untouched(self):
        buffer = solid(10, 10, RED)

        assert remove_shadows_along_slices(buffer, [0, 9]) == buffer


class TestTrimPadding:
    """Cropping to visible content"""

    def test_crops_to_content(self):
        buffer = PixelBuffer.blank(20, 20)
        buffer.pixels[2:6, 3:8] = RED

        trimmed = trim_transparent_padding(buffer)

        assert not trimmed.is_empty
        assert trimmed.bounds.to_dict() == {"x": 3, "y": 2, "width": 5, "height": 4}
        assert (trimmed.buffer.width, trimmed.buffer.height) == (5, 4)

    def test_tiny_content_is_noise(self):
        buffer = PixelBuffer.blank(20, 20)
        buffer.pixels[2:4, 3:5] = RED

        assert trim_transparent_padding(buffer).is_empty

    def test_fully_transparent(self):
        assert trim_transparent_padding(PixelBuffer.blank(5, 5)).is_empty
