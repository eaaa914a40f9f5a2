"""Protocol definitions for dependency injection and testability."""

from typing import Any, Dict, Protocol

from PIL import Image

from .models import Color


class S3ClientProtocol(Protocol):
    """Protocol for the boto3 S3 client operations used here."""

    def put_object(
        self, Bucket: str, Key: str, Body: bytes, ContentType: str
    ) -> Dict[str, Any]:
        """Put object to S3."""
        ...


class StorageClientProtocol(Protocol):
    """Protocol for the object storage a variant is uploaded to."""

    def upload_buffer(self, data: bytes, filename: str) -> str:
        """Persist ``data`` under ``filename`` and return its storage path."""
        ...


class AsyncStorageClientProtocol(Protocol):
    """Asynchronous flavour of :class:`StorageClientProtocol`."""

    async def upload_buffer(self, data: bytes, filename: str) -> str:
        """Persist ``data`` under ``filename`` and return its storage path."""
        ...


class TransformBatchProtocol(Protocol):
    """Protocol for queued image transformations."""

    def resize(self, width: int, height: int) -> Any: ...

    def crop(self, left: int, top: int, right: int, bottom: int) -> Any: ...

    def contain(self, width: int, height: int, color: Color) -> Any: ...

    def apply(self) -> Image.Image: ...


class ImageHandleProtocol(Protocol):
    """Protocol for a decoded image."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def batch(self) -> TransformBatchProtocol: ...


class CodecProtocol(Protocol):
    """Protocol for image decoding and encoding."""

    def decode(self, data: bytes, image_type: str) -> ImageHandleProtocol:
        """Decode image bytes."""
        ...

    def encode(self, image: Image.Image, image_type: str) -> bytes:
        """Encode a transformed image back to bytes."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        ...
