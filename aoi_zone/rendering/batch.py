"""
Batch Render Scheduler
======================

Cooperative, non-blocking driver for large transform-and-emit passes.

Design:
- Items processed in fixed-size slices, each slice synchronously
- Control yielded to the asyncio event loop between slices
- Per-item failures isolated: the item yields None, the pass continues
- Output length always equals input length, in input order
"""

import asyncio
from typing import Callable, List, Optional, Sequence, TypeVar

from aoi_zone.logging import LogEvent, StructuredLogger, create_logger

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_BATCH_SIZE = 50
BATCH_THRESHOLD = 100

_default_logger = create_logger("render")


def _apply(
    step: Callable[[T], R],
    item: T,
    index: int,
    logger: StructuredLogger,
) -> Optional[R]:
    try:
        return step(item)
    except Exception as e:
        logger.error(
            event=LogEvent.RENDER_ITEM_FAILED,
            message="Skipping item that failed to render",
            metadata={'index': index},
            exc_info=e,
        )
        return None


def process_all(
    items: Sequence[T],
    step: Callable[[T], R],
    logger: Optional[StructuredLogger] = None,
) -> List[Optional[R]]:
    """Synchronous single-pass path for small collections."""
    logger = logger or _default_logger
    return [_apply(step, item, index, logger) for index, item in enumerate(items)]


async def run_batched(
    items: Sequence[T],
    step: Callable[[T], R],
    batch_size: int = DEFAULT_BATCH_SIZE,
    on_batch_done: Optional[Callable[[List[Optional[R]]], None]] = None,
    logger: Optional[StructuredLogger] = None,
) -> List[Optional[R]]:
    """
    Apply `step` to every item in slices of `batch_size`.

    Args:
        items: Input snapshot (not re-read between slices)
        step: Transform for a single item
        batch_size: Slice length, >= 1
        on_batch_done: Called with each slice's results
        logger: Structured logger for per-item failures

    Returns:
        Results for all items in input order; None where `step` raised

    Raises:
        ValueError: If batch_size < 1
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    logger = logger or _default_logger
    results: List[Optional[R]] = []

    for start in range(0, len(items), batch_size):
        if start > 0:
            # Slice boundary: let pending input events run
            await asyncio.sleep(0)

        batch = items[start:start + batch_size]
        batch_results = [
            _apply(step, item, start + offset, logger)
            for offset, item in enumerate(batch)
        ]
        results.extend(batch_results)

        if on_batch_done is not None:
            on_batch_done(batch_results)

    return results
