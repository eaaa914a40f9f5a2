"""Factory classes for creating configured uploader instances."""

from typing import TYPE_CHECKING, Any, Optional, Union

import boto3

from ..processors import PROCESSORS
from .codec import PillowCodec
from .exceptions import ConfigurationError
from .models import UploaderConfig
from .observability import StructuredLogger
from .orchestrator import BatchOrchestrator
from .pipeline import VariantPipeline
from .protocols import (
    AsyncStorageClientProtocol,
    CodecProtocol,
    LoggerProtocol,
    S3ClientProtocol,
    StorageClientProtocol,
)
from .storage import AsyncS3StorageClient, S3StorageClient

if TYPE_CHECKING:
    from mypy_boto3_s3.client import S3Client


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str, level: Optional[str] = None) -> LoggerProtocol:
        """Create a configured structured logger."""
        return StructuredLogger(name, level=level)


class S3ClientFactory:
    """Factory for creating boto3 S3 client instances."""

    @staticmethod
    def create_s3_client(config: UploaderConfig, **kwargs: Any) -> "S3Client":
        """Create S3 client with optional endpoint and region."""
        if config.endpoint_url:
            kwargs.setdefault("endpoint_url", config.endpoint_url)
        if config.region:
            kwargs.setdefault("region_name", config.region)
        session = boto3.Session()
        return session.client("s3", **kwargs)


class StorageClientFactory:
    """Factory for the storage client matching a processor."""

    @staticmethod
    def create_storage(
        config: UploaderConfig, s3_client: Optional[S3ClientProtocol] = None
    ) -> Union[StorageClientProtocol, AsyncStorageClientProtocol]:
        if not config.bucket:
            raise ConfigurationError("An S3 bucket is required to upload variants")

        if config.processor == "asyncio" and s3_client is None:
            return AsyncS3StorageClient(
                config.bucket,
                prefix=config.prefix,
                endpoint_url=config.endpoint_url,
                region_name=config.region,
            )

        if s3_client is None:
            s3_client = S3ClientFactory.create_s3_client(config)
        return S3StorageClient(s3_client, config.bucket, prefix=config.prefix)


class UploaderFactory:
    """Factory for creating the complete variant uploader."""

    @staticmethod
    def create_orchestrator(
        config: UploaderConfig,
        storage: Optional[Union[StorageClientProtocol, AsyncStorageClientProtocol]] = None,
        codec: Optional[CodecProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
    ) -> BatchOrchestrator:
        """Create a fully configured batch orchestrator."""

        if storage is None:
            storage = StorageClientFactory.create_storage(config)

        if logger is None:
            logger = LoggerFactory.create_logger(
                "image-variants.pipeline", level="DEBUG" if config.debug else None
            )

        pipeline = VariantPipeline(
            codec=codec or PillowCodec(),
            storage=storage,  # type: ignore[arg-type]
            static_url=config.static_url,
            logger=logger,
        )

        return BatchOrchestrator(
            pipeline=pipeline,
            resize_limit=config.resize_limit,
            process_batch_fn=PROCESSORS[config.processor],
            processor_name=config.processor,
        )
