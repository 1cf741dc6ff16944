"""Batch-parallel fetching with a fixed concurrency ceiling.

Items are split into sequential batches of ``concurrency``. Every item of a
batch is fetched on its own worker thread and the batch is joined before the
next one starts, so results are only aggregated by the calling thread.
A failing or overdue item is recorded and dropped; it never cancels its
siblings or aborts the run.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Generic, Sequence, TypeVar

from sf_reference.config import CHUNK_SIZE, DEFAULT_ITEM_TIMEOUT
from sf_reference.domain.models import FailedItem, StageSummary

logger = logging.getLogger(__name__)

I = TypeVar('I')
R = TypeVar('R')


def chunk_list(items: Sequence[I], size: int) -> list[list[I]]:
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


class BoundedFetcher(Generic[I, R]):
    """Runs ``fetch`` over items, at most ``concurrency`` at a time.

    Args:
        fetch: Callable producing a result for one item; may raise.
        concurrency: Batch size and worker count.
        item_timeout: Seconds an item may run, measured from its batch start.
        describe: Maps an item to the reference used in failure reports.
    """

    def __init__(
        self,
        fetch: Callable[[I], R],
        concurrency: int = CHUNK_SIZE,
        item_timeout: float | None = DEFAULT_ITEM_TIMEOUT,
        describe: Callable[[I], str] = str,
    ):
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self._fetch = fetch
        self._concurrency = concurrency
        self._item_timeout = item_timeout
        self._describe = describe

    def run(self, items: Sequence[I]) -> StageSummary[R]:
        summary: StageSummary[R] = StageSummary()
        batches = chunk_list(items, self._concurrency)
        logger.info("Processing %d items in %d batches...", len(items), len(batches))

        processed = 0
        for number, batch in enumerate(batches, start=1):
            succeeded, failed = self._run_batch(batch)
            summary.succeeded.extend(succeeded)
            summary.failed.extend(failed)
            processed += len(batch)
            logger.info(
                "%d processed of %d total (%d ok, %d failed) - batch %d/%d",
                processed, len(items), len(summary.succeeded), len(summary.failed),
                number, len(batches),
            )
        return summary

    def _run_batch(self, batch: list[I]) -> tuple[list[R], list[FailedItem]]:
        executor = ThreadPoolExecutor(max_workers=len(batch), thread_name_prefix='fetch')
        started = time.monotonic()
        try:
            futures = [executor.submit(self._fetch, item) for item in batch]
            wait(futures, timeout=self._item_timeout)
        finally:
            # Overdue workers are abandoned, not joined.
            executor.shutdown(wait=False, cancel_futures=True)

        succeeded: list[R] = []
        failed: list[FailedItem] = []
        for item, future in zip(batch, futures):
            ref = self._describe(item)
            if not future.done() or future.cancelled():
                elapsed = time.monotonic() - started
                logger.warning("Timed out fetching %s after %.1fs", ref, elapsed)
                failed.append(FailedItem(ref=ref, reason='timeout'))
                continue
            error = future.exception()
            if error is not None:
                logger.warning("Error fetching %s: %s", ref, error)
                failed.append(FailedItem(ref=ref, reason=str(error) or type(error).__name__))
                continue
            succeeded.append(future.result())
        return succeeded, failed
