"""Bounded-concurrency driver running a processor over image references."""

import asyncio
import logging
from collections.abc import Sequence

from .processor import ItemError, Processor

logger = logging.getLogger(__name__)


async def process_references(
    references: Sequence[str], processor: Processor, concurrency: int
) -> list[ItemError]:
    """Run a processor over references with at most ``concurrency`` in flight.

    A fixed pool of workers pulls references from a queue in input order, so
    the next reference starts as soon as any running one finishes. A failing
    item is recorded and reported through ``processor.error``; it never
    affects other items. ``processor.complete`` is called once at the end.

    Args:
        references: Image references, admitted in this order
        processor: Work to apply to each reference
        concurrency: Maximum number of references processed at once

    Returns:
        Failures ordered by input index
    """
    if concurrency < 1:
        raise ValueError(f"Concurrency must be at least 1, got {concurrency}")

    total = len(references)
    queue: asyncio.Queue[tuple[int, str]] = asyncio.Queue()
    for item in enumerate(references):
        queue.put_nowait(item)

    errors: list[ItemError] = []
    outstanding = total

    async def worker() -> None:
        nonlocal outstanding
        while True:
            try:
                index, slug = queue.get_nowait()
            except asyncio.QueueEmpty:
                return

            try:
                result = await processor.process(slug, index, total)
                processor.fulfilled(result, index, total)
            except Exception as e:
                failure = ItemError(index=index, slug=slug, error=e)
                errors.append(failure)
                try:
                    processor.error(failure, total)
                except Exception:
                    logger.exception(f"Failed to report the error of {slug}")
            finally:
                outstanding -= 1
                if 0 < outstanding <= concurrency:
                    logger.info(f"There are still {outstanding} refreshes outstanding.")

    workers = [asyncio.ensure_future(worker()) for _ in range(min(concurrency, total))]
    await asyncio.gather(*workers)

    logger.info("Refreshing complete.")
    errors.sort(key=lambda failure: failure.index)
    processor.complete(errors)
    return errors
