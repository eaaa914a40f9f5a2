"""Testing utilities and fakes for image-variants."""

from .fakes import (
    FakeAsyncStorageClient,
    FakeLogger,
    FakeS3Client,
    FakeStorageClient,
    S3Bucket,
    S3Object,
    create_test_image,
    open_image,
)

__all__ = [
    "FakeAsyncStorageClient",
    "FakeLogger",
    "FakeS3Client",
    "FakeStorageClient",
    "S3Bucket",
    "S3Object",
    "create_test_image",
    "open_image",
]
