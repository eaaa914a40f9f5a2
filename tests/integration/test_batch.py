"""Integration tests for complete variant batches."""

import asyncio
from unittest.mock import Mock, patch

import pytest

from image_variants.core.exceptions import ConfigurationError, UnknownTypeError
from image_variants.core.factories import (
    LoggerFactory,
    S3ClientFactory,
    StorageClientFactory,
    UploaderFactory,
)
from image_variants.core.models import SourceImage, UploaderConfig
from image_variants.core.observability import StructuredLogger
from image_variants.core.storage import AsyncS3StorageClient, S3StorageClient
from image_variants.processors import PROCESSORS
from image_variants.testing import FakeLogger, FakeS3Client, create_test_image, open_image

STATIC_URL = "https://cdn.example.com/"

BATCH_CONFIG = {
    "format": "${name}",
    "files": [
        {"name": "thumb", "width": 100, "height": 100, "crop": True},
        {"name": "medium", "width": 400, "height": 400},
        {"name": "wide", "width": 300},
        {"name": "square", "width": 200, "height": 120, "crop": True, "adapt": True, "colorPad": "black"},
        {"name": "raw", "key": "original", "omitExtension": True},
    ],
}


def setup_orchestrator(processor="multithread", resize_limit=8):
    s3_client = FakeS3Client()
    bucket = s3_client.create_bucket("images")
    config = UploaderConfig(
        static_url=STATIC_URL,
        bucket="images",
        prefix="variants",
        processor=processor,
        resize_limit=resize_limit,
    )
    storage = StorageClientFactory.create_storage(config, s3_client=s3_client)
    orchestrator = UploaderFactory.create_orchestrator(config, storage=storage, logger=FakeLogger())
    return orchestrator, bucket


@pytest.fixture
def jpeg_source():
    return SourceImage.from_bytes(create_test_image(800, 600), filename="photo.jpg")


class TestBatchIntegration:
    """End-to-end batches through the factory-built orchestrator."""

    def test_thumbnail_is_cover_cropped(self, jpeg_source):
        orchestrator, bucket = setup_orchestrator()

        results = orchestrator.run_batch(
            jpeg_source, {"files": [{"name": "thumb", "width": 100, "height": 100, "crop": True}]}
        )

        assert results["thumb"].filename == "thumb.jpg"
        assert results["thumb"].url == f"{STATIC_URL}variants/thumb.jpg"
        stored = bucket.get_object("variants/thumb.jpg")
        assert stored.content_type == "image/jpeg"
        assert open_image(stored.body).size == (100, 100)

    @pytest.mark.parametrize("processor", ["serial", "multithread", "asyncio"])
    def test_full_batch(self, processor, jpeg_source):
        orchestrator, bucket = setup_orchestrator(processor=processor, resize_limit=2)

        results = orchestrator.run_batch(jpeg_source, BATCH_CONFIG)

        assert sorted(results) == ["medium", "original", "square", "thumb", "wide"]
        assert results["original"].filename == "raw"
        assert results["original"].url == f"{STATIC_URL}variants/raw"

        sizes = {key: open_image(obj.body).size for key, obj in bucket.objects.items()}
        assert sizes == {
            "variants/thumb.jpg": (100, 100),
            "variants/medium.jpg": (400, 300),
            "variants/wide.jpg": (300, 225),
            "variants/square.jpg": (200, 120),
            "variants/raw": (800, 600),
        }

    def test_missing_files_fails_before_any_upload(self, jpeg_source):
        orchestrator, bucket = setup_orchestrator()

        with pytest.raises(ConfigurationError):
            orchestrator.run_batch(jpeg_source, {"format": "${name}"})

        assert bucket.objects == {}

    def test_adapt_without_dimensions_passes_through(self):
        orchestrator, bucket = setup_orchestrator()
        source = SourceImage.from_bytes(create_test_image(60, 40, format="PNG"), mimetype="image/png")

        results = orchestrator.run_batch(source, {"files": [{"name": "orig", "adapt": True}]})

        assert results["orig"].filename == "orig.png"
        assert open_image(bucket.get_object("variants/orig.png").body).size == (60, 40)

    def test_undetectable_type_fails(self):
        orchestrator, bucket = setup_orchestrator()
        source = SourceImage.from_bytes(create_test_image())

        with pytest.raises(UnknownTypeError):
            orchestrator.run_batch(source, BATCH_CONFIG)

        assert bucket.objects == {}

    def test_filenames_are_deterministic(self, jpeg_source):
        orchestrator, _ = setup_orchestrator()

        first = orchestrator.run_batch(jpeg_source, BATCH_CONFIG)
        second = orchestrator.run_batch(jpeg_source, BATCH_CONFIG)

        assert first == second

    def test_run_batch_async(self, jpeg_source):
        orchestrator, bucket = setup_orchestrator(processor="asyncio")

        results = asyncio.run(orchestrator.run_batch_async(jpeg_source, BATCH_CONFIG))

        assert len(results) == 5
        assert len(bucket.objects) == 5


class TestFactories:
    """Tests for the factory wiring."""

    def test_create_orchestrator_selects_processor(self):
        config = UploaderConfig(processor="serial", resize_limit=3)

        orchestrator = UploaderFactory.create_orchestrator(config, storage=Mock())

        assert orchestrator._process_batch_fn is PROCESSORS["serial"]
        assert orchestrator.resize_limit == 3

    def test_create_orchestrator_builds_storage(self):
        config = UploaderConfig(bucket="images")

        with patch.object(StorageClientFactory, "create_storage") as mock_create:
            orchestrator = UploaderFactory.create_orchestrator(config)

        mock_create.assert_called_once_with(config)
        assert orchestrator.pipeline.storage is mock_create.return_value

    def test_storage_requires_bucket(self):
        with pytest.raises(ConfigurationError, match="bucket"):
            StorageClientFactory.create_storage(UploaderConfig())

    def test_sync_storage_for_thread_processors(self):
        config = UploaderConfig(bucket="images", prefix="variants")

        storage = StorageClientFactory.create_storage(config, s3_client=FakeS3Client())

        assert isinstance(storage, S3StorageClient)
        assert storage.prefix == "variants"

    def test_async_storage_for_asyncio_processor(self):
        config = UploaderConfig(bucket="images", processor="asyncio", region="eu-west-1")

        storage = StorageClientFactory.create_storage(config)

        assert isinstance(storage, AsyncS3StorageClient)
        assert storage.bucket == "images"

    def test_s3_client_factory_passes_endpoint_and_region(self):
        config = UploaderConfig(endpoint_url="http://localhost:9000", region="eu-west-1")

        with patch("image_variants.core.factories.boto3.Session") as mock_session:
            S3ClientFactory.create_s3_client(config)

        mock_session.return_value.client.assert_called_once_with(
            "s3", endpoint_url="http://localhost:9000", region_name="eu-west-1"
        )

    def test_logger_factory(self):
        logger = LoggerFactory.create_logger("test-factory-logger", level="WARNING")

        assert isinstance(logger, StructuredLogger)
        assert logger.logger.level == 30
