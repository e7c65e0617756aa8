"""Batch-by-batch processing helpers with progress reporting."""
from __future__ import annotations

import logging
from typing import Callable, Iterator, List, Optional, Sequence, TypeVar

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

ProgressCallback = Callable[[int, int], None]

DEFAULT_CHUNK_SIZE = 1000


def iter_chunks(items: Sequence[T], size: int = DEFAULT_CHUNK_SIZE) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of ``items`` holding at most ``size`` elements."""

    if size <= 0:
        raise ValueError(f"Chunk size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield items[start : start + size]


def process_in_chunks(
    items: Sequence[T],
    handler: Callable[[T], Optional[R]],
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress_callback: Optional[ProgressCallback] = None,
) -> List[R]:
    """Run ``handler`` over ``items`` one chunk at a time.

    Results are collected in input order; a handler returning ``None`` drops
    the item. ``progress_callback(processed, total)`` fires after every chunk,
    and once with ``(0, 0)`` when there is nothing to process.
    """

    total = len(items)
    results: List[R] = []

    if total == 0:
        if progress_callback:
            progress_callback(0, 0)
        return results

    processed = 0
    for chunk in iter_chunks(items, chunk_size):
        for item in chunk:
            outcome = handler(item)
            if outcome is not None:
                results.append(outcome)
        processed += len(chunk)
        LOGGER.debug("Processed %s/%s rows", processed, total)
        if progress_callback:
            progress_callback(processed, total)

    return results


def filter_in_chunks(
    items: Sequence[T],
    predicate: Callable[[T], bool],
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress_callback: Optional[ProgressCallback] = None,
) -> List[T]:
    """Keep the items for which ``predicate`` holds, chunk by chunk."""

    return process_in_chunks(
        items,
        lambda item: item if predicate(item) else None,
        chunk_size=chunk_size,
        progress_callback=progress_callback,
    )


__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "ProgressCallback",
    "iter_chunks",
    "process_in_chunks",
    "filter_in_chunks",
]
