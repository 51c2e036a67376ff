"""
Worker Pool Partitioning
=========================

Static chunking shared by the frequency and similarity analyzers.

The pool size is ``max(1, min(n // chunk_floor, available_parallelism))``
and the corpus is cut into that many contiguous slices of size
``ceil(n / workers)``. There is no work stealing: each worker owns one
slice for the lifetime of the batch.
"""

from __future__ import annotations

import math
import os
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from typing import Sequence, TypeVar

T = TypeVar("T")

EXECUTOR_KINDS = ("thread", "process")


def available_parallelism(max_workers: int = 0) -> int:
    """CPU count, capped by *max_workers* when it is positive."""
    cpus = os.cpu_count() or 1
    if max_workers > 0:
        return min(cpus, max_workers)
    return cpus


def worker_count(corpus_size: int, parallelism: int, chunk_floor: int = 1000) -> int:
    """Number of workers for a corpus of *corpus_size* entries.

    >>> worker_count(500, 8)
    1
    >>> worker_count(5_000, 8)
    5
    >>> worker_count(1_000_000, 8)
    8
    """
    return max(1, min(corpus_size // max(chunk_floor, 1), parallelism))


def partition(items: Sequence[T], workers: int) -> list[Sequence[T]]:
    """Split *items* into at most *workers* contiguous, non-empty slices."""
    if not items:
        return []
    size = math.ceil(len(items) / max(workers, 1))
    return [items[i : i + size] for i in range(0, len(items), size)]


def make_executor(kind: str, workers: int) -> Executor:
    """Create the pool used for one batch computation."""
    if kind == "process":
        return ProcessPoolExecutor(max_workers=workers)
    if kind == "thread":
        return ThreadPoolExecutor(max_workers=workers, thread_name_prefix="phantomhash")
    raise ValueError(f"Unknown executor kind {kind!r}; expected one of {EXECUTOR_KINDS}")
