"""Exception hierarchy for image-variants."""

from __future__ import annotations

from typing import Optional


class PipelineError(Exception):
    """Base exception for all image-variants errors.

    ``key`` names the variant whose task failed, when the error was raised
    inside a variant task.
    """

    def __init__(self, message: str = "", key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key


class UnknownTypeError(PipelineError):
    """Raised when the source image has no derivable type (jpg, png, etc.)."""


class ConfigurationError(PipelineError):
    """Raised for a missing, empty or malformed batch configuration."""


class ImageProcessingError(PipelineError):
    """Raised when transforming a single variant fails."""


class GeometryError(ImageProcessingError):
    """Raised for zero, negative or impossible dimensions."""


class DecodeError(ImageProcessingError):
    """Raised when the codec cannot open the source image."""


class EncodeError(ImageProcessingError):
    """Raised when the codec cannot encode a transformed variant."""


class StorageError(PipelineError):
    """Raised when uploading a variant to object storage fails."""
