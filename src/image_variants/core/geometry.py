"""Resize and crop geometry for image variants.

Every function here is pure: it takes the natural size of an image plus a
target policy and returns the pixel dimensions (or crop offsets) to hand to
the codec. Results are rounded to the nearest integer, halves rounding up.
"""

import math
from enum import Enum

from .exceptions import GeometryError
from .models import CropOffsets, Dimensions


class Axis(str, Enum):
    """The dimension constrained by :func:`plan_single_axis_max`."""

    WIDTH = "width"
    HEIGHT = "height"


def _round(value: float) -> int:
    # Never return 0 px for extreme aspect ratios
    return max(1, math.floor(value + 0.5))


def _check_positive(**dimensions: float) -> None:
    for label, value in dimensions.items():
        if value is None or value <= 0:
            raise GeometryError(f"{label} must be a positive number, got {value!r}")


def _dimensions(width: float, height: float) -> Dimensions:
    return Dimensions(width=_round(width), height=_round(height))


def plan_cover(img_w: int, img_h: int, target_w: int, target_h: int) -> Dimensions:
    """
    Smallest aspect-preserving size covering a target box.

    The result is at least ``target_w`` x ``target_h``, so the image can be
    cropped to exactly the box afterwards. When the image is relatively
    wider than the target the height is fixed, otherwise the width is.

    Args:
        img_w: Natural image width
        img_h: Natural image height
        target_w: Width of the box to cover
        target_h: Height of the box to cover

    Returns:
        Planned dimensions

    Raises:
        GeometryError: If any dimension is zero or negative
    """
    _check_positive(img_w=img_w, img_h=img_h, target_w=target_w, target_h=target_h)

    ratio_img = img_w / img_h
    ratio_target = target_w / target_h

    if ratio_img > ratio_target:
        height = target_h
        width = height * ratio_img
    else:
        width = target_w
        height = width / ratio_img

    return _dimensions(width, height)


def plan_contain_no_upscale(img_w: int, img_h: int, target_w: int, target_h: int) -> Dimensions:
    """
    Fit an image inside a target box without ever enlarging it.

    The binding axis is the one whose ratio limits the fit: when the box is
    relatively wider than the image the height binds, otherwise the width.
    An image already no larger than the box along that axis keeps its
    natural size.

    Raises:
        GeometryError: If any dimension is zero or negative
    """
    _check_positive(img_w=img_w, img_h=img_h, target_w=target_w, target_h=target_h)

    container_ratio = target_w / target_h
    img_ratio = img_w / img_h

    if container_ratio > img_ratio:
        if img_h <= target_h:
            return _dimensions(img_w, img_h)
        return _dimensions(img_w * target_h / img_h, target_h)

    if img_w <= target_w:
        return _dimensions(img_w, img_h)
    return _dimensions(target_w, img_h * target_w / img_w)


def plan_single_axis_max(img_w: int, img_h: int, max_dimension: int, axis: Axis) -> Dimensions:
    """
    Scale so that ``axis`` equals ``max_dimension``, keeping the aspect ratio.

    If the derived opposite axis would exceed the natural size, the natural
    size is returned instead.

    Raises:
        GeometryError: If any dimension is zero or negative
    """
    _check_positive(img_w=img_w, img_h=img_h, max_dimension=max_dimension)
    axis = Axis(axis)

    if axis is Axis.WIDTH:
        width, height = max_dimension, img_h * max_dimension / img_w
        if height > img_h:
            return _dimensions(img_w, img_h)
    else:
        width, height = img_w * max_dimension / img_h, max_dimension
        if width > img_w:
            return _dimensions(img_w, img_h)

    return _dimensions(width, height)


def plan_width_max(img_w: int, img_h: int, width: int) -> Dimensions:
    return plan_single_axis_max(img_w, img_h, width, Axis.WIDTH)


def plan_height_max(img_w: int, img_h: int, height: int) -> Dimensions:
    return plan_single_axis_max(img_w, img_h, height, Axis.HEIGHT)


def plan_centered_crop_offsets(
    canvas_w: int,
    canvas_h: int,
    crop_w: int,
    crop_h: int,
    requested_top: int = 0,
    requested_left: int = 0,
) -> CropOffsets:
    """
    Offsets of a ``crop_w`` x ``crop_h`` box inside a canvas.

    Requested offsets are used verbatim when either is positive. Otherwise
    the box is anchored at the canvas origin, cropping the top-left region:
    despite the name there is no centering in the default branch.

    Raises:
        GeometryError: If a dimension is not positive, an offset is negative,
            or the box does not fit inside the canvas at the chosen offsets
    """
    _check_positive(canvas_w=canvas_w, canvas_h=canvas_h, crop_w=crop_w, crop_h=crop_h)
    if requested_top < 0 or requested_left < 0:
        raise GeometryError(
            f"Crop offsets must not be negative (top={requested_top}, left={requested_left})"
        )

    if requested_top > 0 or requested_left > 0:
        offsets = CropOffsets(top=requested_top, left=requested_left)
    else:
        offsets = CropOffsets(top=0, left=0)

    if offsets.left + crop_w > canvas_w or offsets.top + crop_h > canvas_h:
        raise GeometryError(
            f"Crop box {crop_w}x{crop_h} at ({offsets.left}, {offsets.top}) "
            f"exceeds canvas {canvas_w}x{canvas_h}"
        )
    return offsets
