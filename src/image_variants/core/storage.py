"""Object storage clients variants are uploaded to."""

from mimetypes import guess_type
from typing import Any, Optional

import aioboto3

from .error_handling import with_async_error_handling, with_error_handling
from .exceptions import StorageError
from .logging_config import get_logger
from .protocols import S3ClientProtocol


def object_key(prefix: str, filename: str) -> str:
    """Storage key for ``filename`` under ``prefix``."""
    if prefix:
        return f"{prefix.rstrip('/')}/{filename}"
    return filename


def content_type_for(filename: str) -> str:
    return guess_type(filename)[0] or "application/octet-stream"


class S3StorageClient:
    """Uploads buffers to an S3 bucket through a boto3 client."""

    def __init__(self, s3_client: S3ClientProtocol, bucket: str, prefix: str = ""):
        self._s3_client = s3_client
        self.bucket = bucket
        self.prefix = prefix

    @with_error_handling(StorageError, "upload to object storage")
    def upload_buffer(self, data: bytes, filename: str) -> str:
        """Upload ``data`` and return the object key."""
        logger = get_logger("storage")
        key = object_key(self.prefix, filename)
        logger.debug(f"Uploading {len(data)} bytes to s3://{self.bucket}/{key}")
        self._s3_client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType=content_type_for(filename),
        )
        return key


class AsyncS3StorageClient:
    """aioboto3 counterpart of :class:`S3StorageClient`."""

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        session: Optional[Any] = None,
        **client_kwargs: Any,
    ):
        self.bucket = bucket
        self.prefix = prefix
        self._session = session or aioboto3.Session()
        self._client_kwargs = {k: v for k, v in client_kwargs.items() if v is not None}

    @with_async_error_handling(StorageError, "upload to object storage")
    async def upload_buffer(self, data: bytes, filename: str) -> str:
        """Upload ``data`` and return the object key."""
        logger = get_logger("storage")
        key = object_key(self.prefix, filename)
        logger.debug(f"Uploading {len(data)} bytes to s3://{self.bucket}/{key}")
        async with self._session.client("s3", **self._client_kwargs) as s3_client:  # type: ignore[reportUnknownMemberType]
            await s3_client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type_for(filename),
            )
        return key
