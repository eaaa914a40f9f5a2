"""Serial processor implementation - renders and uploads variants one by one."""

from typing import TYPE_CHECKING

from ..core import BatchResult, BatchSpec, SourceImage, get_logger

if TYPE_CHECKING:
    from ..core.pipeline import VariantPipeline


def process_batch(
    source: SourceImage, batch: BatchSpec, pipeline: "VariantPipeline", limit: int = 1
) -> BatchResult:
    """
    Processes the variants of a batch serially, in the current thread.

    The first failing variant aborts the batch: later variants are never
    started and the error propagates to the caller.

    Args:
        source: The source image shared by every variant.
        batch: Validated batch configuration.
        pipeline: Pipeline running a single variant.
        limit: Ignored; a serial batch always has one task in flight.

    Returns:
        Mapping of variant key to its upload result.
    """
    logger = get_logger("processor")
    results: BatchResult = {}

    for spec in batch.variants:
        key, result = pipeline.run_variant(source, batch, spec)
        results[key] = result
        logger.debug(f"[{key}] Variant completed ({len(results)}/{len(batch.variants)})")

    return results
