"""AsyncIO processor implementation - semaphore-bounded tasks with cooperative cancellation."""

import asyncio
from typing import TYPE_CHECKING, List, Tuple

from ..core import BatchResult, BatchSpec, SourceImage, VariantResult, VariantSpec, get_logger

if TYPE_CHECKING:
    from ..core.pipeline import VariantPipeline


async def process_batch_async(
    source: SourceImage, batch: BatchSpec, pipeline: "VariantPipeline", limit: int = 8
) -> BatchResult:
    """
    Process the variants of a batch as asyncio tasks, at most ``limit`` at a time.

    On the first failure every other task is cancelled: tasks still waiting
    for a slot never start, running ones stop at their next await. The
    cancelled tasks are awaited before the error is re-raised. Work already
    handed to a worker thread (rendering, or a synchronous storage upload)
    cannot be interrupted; it runs to completion and its result is dropped.
    """
    logger = get_logger("asyncio-processor")
    semaphore = asyncio.Semaphore(limit)

    async def run_one(spec: VariantSpec) -> Tuple[str, VariantResult]:
        async with semaphore:
            logger.debug(f"[{spec.key}] Variant started")
            return await pipeline.run_variant_async(source, batch, spec)

    tasks: List["asyncio.Task[Tuple[str, VariantResult]]"] = [
        asyncio.create_task(run_one(spec), name=f"variant-{spec.key}")
        for spec in batch.variants
    ]
    results: BatchResult = {}

    try:
        for next_done in asyncio.as_completed(tasks):
            key, result = await next_done
            results[key] = result
    except BaseException:
        unfinished = [task for task in tasks if not task.done()]
        if unfinished:
            logger.warning(f"Cancelling {len(unfinished)} variant task(s) after first error")
        for task in unfinished:
            task.cancel()
        # Retrieve every outcome so no task exception goes unobserved
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    return results


def process_batch(
    source: SourceImage, batch: BatchSpec, pipeline: "VariantPipeline", limit: int = 8
) -> BatchResult:
    """
    Process the variants of a batch using asyncio.

    This is the synchronous wrapper that runs the async function; callers
    already inside an event loop should await :func:`process_batch_async`.
    """
    return asyncio.run(process_batch_async(source, batch, pipeline, limit))
