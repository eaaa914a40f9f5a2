"""Batch orchestration: validate a batch and fan it out to variant tasks."""

from typing import Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from ..processors import asyncio_process_batch_async, multithread_process_batch
from .error_handling import BatchOperationContextManager
from .exceptions import ConfigurationError, UnknownTypeError
from .logging_config import get_logger
from .models import DEFAULT_RESIZE_LIMIT, BatchResult, BatchSpec, SourceImage
from .pipeline import VariantPipeline

ProcessBatchFunction = Callable[[SourceImage, BatchSpec, VariantPipeline, int], BatchResult]

SourceLike = Union[SourceImage, str]
BatchLike = Union[BatchSpec, Mapping[str, Any]]


def coerce_source(source: SourceLike) -> SourceImage:
    """Accept a file path in place of a SourceImage."""
    if isinstance(source, str):
        return SourceImage.from_path(source)
    return source


def validate_batch(source: SourceImage, batch: Optional[BatchLike]) -> BatchSpec:
    """
    Check a batch before any variant task is scheduled.

    Raises:
        UnknownTypeError: If the source has no derivable image type
        ConfigurationError: If the configuration is malformed or has no variants
    """
    if not source.image_type:
        raise UnknownTypeError("Image doesn't have any type (jpg, png, etc.)!")

    if batch is None:
        raise ConfigurationError("Image upload configuration must contain a 'files' array.")
    if not isinstance(batch, BatchSpec):
        try:
            batch = BatchSpec.model_validate(batch)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid image upload configuration: {exc}") from exc

    if not batch.variants:
        raise ConfigurationError("Image upload configuration must contain a 'files' array.")

    seen = set()
    for spec in batch.variants:
        if spec.key in seen:
            raise ConfigurationError(f"Duplicate variant key: {spec.key!r}")
        seen.add(spec.key)

    return batch


class BatchOrchestrator:
    """Runs one pipeline task per variant under a concurrency limit."""

    def __init__(
        self,
        pipeline: VariantPipeline,
        resize_limit: int = DEFAULT_RESIZE_LIMIT,
        process_batch_fn: ProcessBatchFunction = multithread_process_batch,
        processor_name: str = "multithread",
    ):
        if resize_limit < 1:
            raise ConfigurationError(f"resize_limit must be at least 1, got {resize_limit}")
        self._pipeline = pipeline
        self._resize_limit = resize_limit
        self._process_batch_fn = process_batch_fn
        self._processor_name = processor_name

    @property
    def pipeline(self) -> VariantPipeline:
        return self._pipeline

    @property
    def resize_limit(self) -> int:
        return self._resize_limit

    def run_batch(self, source: SourceLike, batch: Optional[BatchLike]) -> BatchResult:
        """
        Render and upload every variant of ``batch``.

        Args:
            source: Source image, or a path to one
            batch: Batch configuration, as a BatchSpec or its JSON mapping

        Returns:
            Mapping of variant key to ``{url, filename}``

        Raises:
            UnknownTypeError: If the source type cannot be derived
            ConfigurationError: If the configuration is invalid
            PipelineError: The first variant failure of the batch
        """
        source = coerce_source(source)
        spec = validate_batch(source, batch)
        logger = get_logger("processor")
        logger.info(
            f"Processing {len(spec.variants)} variant(s) of {source.image_type} image "
            f"using {self._processor_name} (limit {self._resize_limit})"
        )

        with BatchOperationContextManager(
            operation_name=f"Variant batch via {self._processor_name}", logger=logger
        ) as batch_manager:
            results = self._process_batch_fn(source, spec, self._pipeline, self._resize_limit)
            for key in results:
                batch_manager.add_completed(key)

        return results

    async def run_batch_async(self, source: SourceLike, batch: Optional[BatchLike]) -> BatchResult:
        """Coroutine flavour of :meth:`run_batch`, always using the asyncio strategy."""
        source = coerce_source(source)
        spec = validate_batch(source, batch)
        logger = get_logger("asyncio-processor")

        with BatchOperationContextManager(
            operation_name="Variant batch via asyncio", logger=logger
        ) as batch_manager:
            results = await asyncio_process_batch_async(
                source, spec, self._pipeline, self._resize_limit
            )
            for key in results:
                batch_manager.add_completed(key)

        return results
