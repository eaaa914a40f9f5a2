"""Multithreaded processor implementation - bounded thread pool with first-error abort."""

from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import TYPE_CHECKING, Iterator, Set, Tuple

from ..core import BatchResult, BatchSpec, SourceImage, VariantResult, VariantSpec, get_logger

if TYPE_CHECKING:
    from ..core.pipeline import VariantPipeline


def process_batch(
    source: SourceImage, batch: BatchSpec, pipeline: "VariantPipeline", limit: int = 8
) -> BatchResult:
    """
    Process the variants of a batch on a bounded thread pool.

    At most ``limit`` variants are in flight at any time. Variants are
    dispatched by hand as slots free up, so nothing waits in the executor
    queue. When a variant fails, no further variant is dispatched and the
    error is raised at once: variants already running finish in the
    background and their results are discarded.

    Args:
        source: The source image shared by every variant (read-only).
        batch: Validated batch configuration.
        pipeline: Pipeline running a single variant.
        limit: Maximum number of concurrently running variants.

    Returns:
        Mapping of variant key to its upload result.
    """
    logger = get_logger("processor")
    results: BatchResult = {}
    max_workers = max(1, min(limit, len(batch.variants)))
    pending_specs: Iterator[VariantSpec] = iter(batch.variants)
    in_flight: Set["Future[Tuple[str, VariantResult]]"] = set()

    executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="variant")

    def dispatch_next() -> None:
        spec = next(pending_specs, None)
        if spec is not None:
            in_flight.add(executor.submit(pipeline.run_variant, source, batch, spec))

    try:
        for _ in range(max_workers):
            dispatch_next()

        while in_flight:
            done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
            in_flight.difference_update(done)
            # Every finished future is checked before anything new is dispatched
            for future in done:
                key, result = future.result()
                results[key] = result
            for _ in done:
                dispatch_next()
    except BaseException:
        if in_flight:
            logger.warning(
                f"Abandoning {len(in_flight)} in-flight variant(s) after first error"
            )
        raise
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    return results
