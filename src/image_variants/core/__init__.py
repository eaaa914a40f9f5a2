"""Core models, geometry and collaborators for image-variants."""

from .logging_config import get_logger, setup_logger
from .exceptions import (
    PipelineError,
    UnknownTypeError,
    ConfigurationError,
    ImageProcessingError,
    GeometryError,
    DecodeError,
    EncodeError,
    StorageError,
)
from .models import (
    AdaptKind,
    AdaptPolicy,
    BatchResult,
    BatchSpec,
    CropOffsets,
    Dimensions,
    SourceImage,
    UploaderConfig,
    VariantResult,
    VariantSpec,
)
from .geometry import (
    Axis,
    plan_centered_crop_offsets,
    plan_contain_no_upscale,
    plan_cover,
    plan_height_max,
    plan_single_axis_max,
    plan_width_max,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "PipelineError",
    "UnknownTypeError",
    "ConfigurationError",
    "ImageProcessingError",
    "GeometryError",
    "DecodeError",
    "EncodeError",
    "StorageError",
    "AdaptKind",
    "AdaptPolicy",
    "BatchResult",
    "BatchSpec",
    "CropOffsets",
    "Dimensions",
    "SourceImage",
    "UploaderConfig",
    "VariantResult",
    "VariantSpec",
    "Axis",
    "plan_centered_crop_offsets",
    "plan_contain_no_upscale",
    "plan_cover",
    "plan_height_max",
    "plan_single_axis_max",
    "plan_width_max",
]
