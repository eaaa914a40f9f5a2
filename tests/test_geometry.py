"""Tests for the resize/crop geometry planner."""

import pytest

from image_variants.core.exceptions import GeometryError
from image_variants.core.geometry import (
    Axis,
    plan_centered_crop_offsets,
    plan_contain_no_upscale,
    plan_cover,
    plan_height_max,
    plan_single_axis_max,
    plan_width_max,
)
from image_variants.core.models import CropOffsets, Dimensions


class TestPlanCover:
    """Tests for plan_cover."""

    def test_wider_image_fixes_height(self):
        """800x600 into 100x100: image is wider, so height is fixed."""
        assert plan_cover(800, 600, 100, 100) == Dimensions(width=133, height=100)

    def test_taller_image_fixes_width(self):
        assert plan_cover(600, 800, 100, 100) == Dimensions(width=100, height=133)

    def test_equal_ratio_uses_width_branch(self):
        assert plan_cover(200, 100, 100, 50) == Dimensions(width=100, height=50)

    def test_upscales_small_images(self):
        assert plan_cover(50, 50, 100, 200) == Dimensions(width=200, height=200)

    @pytest.mark.parametrize(
        "img_w,img_h,target_w,target_h",
        [
            (800, 600, 100, 100),
            (600, 800, 100, 100),
            (1920, 1080, 300, 400),
            (1080, 1920, 400, 300),
            (333, 777, 123, 45),
            (4000, 3000, 4000, 3000),
            (10, 10, 999, 1),
        ],
    )
    def test_result_covers_target_and_keeps_ratio(self, img_w, img_h, target_w, target_h):
        result = plan_cover(img_w, img_h, target_w, target_h)

        assert result.width >= target_w
        assert result.height >= target_h
        # Rounding moves the derived side by at most half a pixel
        assert abs(result.width * img_h - result.height * img_w) <= 0.5 * max(img_w, img_h)

    @pytest.mark.parametrize(
        "dims", [(0, 600, 100, 100), (800, 0, 100, 100), (800, 600, 0, 100), (800, 600, 100, -1)]
    )
    def test_zero_or_negative_dimension_raises(self, dims):
        with pytest.raises(GeometryError):
            plan_cover(*dims)


class TestPlanContainNoUpscale:
    """Tests for plan_contain_no_upscale."""

    def test_width_bound_downscale(self):
        assert plan_contain_no_upscale(800, 600, 400, 400) == Dimensions(width=400, height=300)

    def test_height_bound_downscale(self):
        assert plan_contain_no_upscale(600, 800, 400, 400) == Dimensions(width=300, height=400)

    def test_smaller_image_keeps_natural_size(self):
        assert plan_contain_no_upscale(100, 50, 400, 400) == Dimensions(width=100, height=50)

    def test_smaller_image_height_bound_keeps_natural_size(self):
        assert plan_contain_no_upscale(50, 100, 400, 400) == Dimensions(width=50, height=100)

    def test_equal_width_keeps_natural_size(self):
        assert plan_contain_no_upscale(400, 300, 400, 400) == Dimensions(width=400, height=300)

    def test_equal_height_keeps_natural_size(self):
        """Height binds and matches exactly: the natural size is returned."""
        assert plan_contain_no_upscale(300, 400, 500, 400) == Dimensions(width=300, height=400)

    @pytest.mark.parametrize(
        "img_w,img_h,target_w,target_h",
        [
            (800, 600, 100, 100),
            (800, 600, 1000, 1000),
            (600, 800, 10, 2000),
            (600, 800, 2000, 10),
            (1, 1, 5, 5),
            (1920, 1080, 1920, 1),
            (333, 777, 334, 778),
        ],
    )
    def test_never_upscales(self, img_w, img_h, target_w, target_h):
        result = plan_contain_no_upscale(img_w, img_h, target_w, target_h)

        assert result.width <= img_w
        assert result.height <= img_h

    def test_zero_dimension_raises(self):
        with pytest.raises(GeometryError):
            plan_contain_no_upscale(800, 600, 400, 0)


class TestPlanSingleAxisMax:
    """Tests for plan_single_axis_max and its wrappers."""

    def test_width_axis(self):
        assert plan_single_axis_max(800, 600, 400, Axis.WIDTH) == Dimensions(width=400, height=300)

    def test_height_axis(self):
        assert plan_single_axis_max(800, 600, 300, Axis.HEIGHT) == Dimensions(width=400, height=300)

    def test_axis_accepts_string(self):
        assert plan_single_axis_max(800, 600, 300, "height") == Dimensions(width=400, height=300)

    def test_width_larger_than_natural_clamps(self):
        assert plan_width_max(800, 600, 1600) == Dimensions(width=800, height=600)

    def test_height_larger_than_natural_clamps(self):
        assert plan_height_max(800, 600, 1200) == Dimensions(width=800, height=600)

    def test_rounds_half_up(self):
        """101 * 100 / 200 = 50.5 rounds to 51, not to the even 50."""
        assert plan_width_max(200, 101, 100) == Dimensions(width=100, height=51)

    def test_tiny_result_is_at_least_one_pixel(self):
        assert plan_width_max(3000, 1, 1) == Dimensions(width=1, height=1)

    @pytest.mark.parametrize("max_dimension", [1, 50, 399, 800, 801, 5000])
    @pytest.mark.parametrize("axis", [Axis.WIDTH, Axis.HEIGHT])
    def test_never_exceeds_natural_size(self, max_dimension, axis):
        result = plan_single_axis_max(800, 600, max_dimension, axis)

        assert result.width <= 800
        assert result.height <= 600

    def test_zero_max_dimension_raises(self):
        with pytest.raises(GeometryError):
            plan_width_max(800, 600, 0)


class TestPlanCenteredCropOffsets:
    """Tests for plan_centered_crop_offsets."""

    def test_default_crops_top_left_not_center(self):
        """Without explicit offsets the crop is anchored at the origin."""
        assert plan_centered_crop_offsets(200, 200, 100, 100, 0, 0) == CropOffsets(top=0, left=0)

    def test_explicit_offsets_used_verbatim(self):
        assert plan_centered_crop_offsets(200, 200, 100, 100, 10, 20) == CropOffsets(top=10, left=20)

    def test_single_explicit_offset_keeps_other_at_zero(self):
        assert plan_centered_crop_offsets(133, 100, 100, 100, 0, 33) == CropOffsets(top=0, left=33)

    def test_crop_fills_canvas_exactly(self):
        assert plan_centered_crop_offsets(100, 100, 100, 100) == CropOffsets(top=0, left=0)

    def test_offsets_outside_canvas_raise(self):
        with pytest.raises(GeometryError, match="exceeds canvas"):
            plan_centered_crop_offsets(200, 200, 100, 100, 150, 0)

    def test_crop_larger_than_canvas_raises(self):
        with pytest.raises(GeometryError):
            plan_centered_crop_offsets(80, 80, 100, 100)

    def test_negative_offset_raises(self):
        with pytest.raises(GeometryError, match="must not be negative"):
            plan_centered_crop_offsets(200, 200, 100, 100, -1, 0)
