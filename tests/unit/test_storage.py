"""Unit tests for the S3 storage clients."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
from botocore.exceptions import ClientError

from image_variants.core.exceptions import StorageError
from image_variants.core.storage import (
    AsyncS3StorageClient,
    S3StorageClient,
    content_type_for,
    object_key,
)
from image_variants.testing import FakeS3Client


@pytest.mark.parametrize(
    "prefix,filename,expected",
    [
        ("", "thumb.jpg", "thumb.jpg"),
        ("variants", "thumb.jpg", "variants/thumb.jpg"),
        ("variants/", "thumb.jpg", "variants/thumb.jpg"),
    ],
)
def test_object_key(prefix, filename, expected):
    assert object_key(prefix, filename) == expected


@pytest.mark.parametrize(
    "filename,expected",
    [("thumb.jpg", "image/jpeg"), ("thumb.png", "image/png"), ("thumb", "application/octet-stream")],
)
def test_content_type_for(filename, expected):
    assert content_type_for(filename) == expected


class TestS3StorageClient:
    """Tests for S3StorageClient."""

    def test_upload_buffer_puts_object(self):
        s3_client = FakeS3Client()
        bucket = s3_client.create_bucket("images")
        storage = S3StorageClient(s3_client, "images", prefix="variants")

        key = storage.upload_buffer(b"jpeg-bytes", "thumb.jpg")

        assert key == "variants/thumb.jpg"
        stored = bucket.get_object("variants/thumb.jpg")
        assert stored is not None
        assert stored.body == b"jpeg-bytes"
        assert stored.content_type == "image/jpeg"
        assert s3_client.operation_count == 1

    def test_upload_failure_raises_storage_error(self):
        s3_client = FakeS3Client()
        s3_client.create_bucket("images")
        s3_client.set_failure_mode(True, "Simulated S3 outage")
        storage = S3StorageClient(s3_client, "images")

        with pytest.raises(StorageError, match="Simulated S3 outage"):
            storage.upload_buffer(b"data", "thumb.png")

    def test_missing_bucket_raises_storage_error(self):
        storage = S3StorageClient(FakeS3Client(), "missing")

        with pytest.raises(StorageError, match="Bucket missing not found"):
            storage.upload_buffer(b"data", "thumb.png")

    def test_client_error_is_chained(self):
        s3_client = Mock()
        s3_client.put_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "PutObject"
        )
        storage = S3StorageClient(s3_client, "images")

        with pytest.raises(StorageError) as exc_info:
            storage.upload_buffer(b"data", "thumb.jpg")

        assert isinstance(exc_info.value.__cause__, ClientError)


def make_session(s3_client):
    client_context = MagicMock()
    client_context.__aenter__.return_value = s3_client
    client_context.__aexit__.return_value = False
    session = Mock()
    session.client.return_value = client_context
    return session


class TestAsyncS3StorageClient:
    """Tests for AsyncS3StorageClient."""

    def test_upload_buffer_puts_object(self):
        s3_client = AsyncMock()
        session = make_session(s3_client)
        storage = AsyncS3StorageClient(
            "images", prefix="variants", session=session, endpoint_url=None, region_name="eu-west-1"
        )

        key = asyncio.run(storage.upload_buffer(b"png-bytes", "thumb.png"))

        assert key == "variants/thumb.png"
        session.client.assert_called_once_with("s3", region_name="eu-west-1")
        s3_client.put_object.assert_awaited_once_with(
            Bucket="images", Key="variants/thumb.png", Body=b"png-bytes", ContentType="image/png"
        )

    def test_upload_failure_raises_storage_error(self):
        s3_client = AsyncMock()
        s3_client.put_object.side_effect = RuntimeError("connection reset")
        storage = AsyncS3StorageClient("images", session=make_session(s3_client))

        with pytest.raises(StorageError, match="connection reset"):
            asyncio.run(storage.upload_buffer(b"data", "thumb.jpg"))
