"""Pool sizing and contiguous chunking."""

from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor

import pytest

from phantomhash.analyzers.partition import (
    available_parallelism,
    make_executor,
    partition,
    worker_count,
)


@pytest.mark.parametrize(
    "size, cpus, expected",
    [(0, 8, 1), (500, 8, 1), (999, 8, 1), (1000, 8, 1), (5000, 8, 5), (1_000_000, 8, 8)],
)
def test_worker_count(size, cpus, expected):
    assert worker_count(size, cpus) == expected


def test_worker_count_uses_chunk_floor():
    assert worker_count(40, 16, chunk_floor=10) == 4


def test_available_parallelism_is_capped_by_max_workers():
    assert available_parallelism(1) == 1
    assert available_parallelism(0) >= 1


def test_partition_is_contiguous_and_complete():
    items = list(range(10))
    chunks = partition(items, 3)
    assert [list(c) for c in chunks] == [[0, 1, 2, 3], [4, 5, 6, 7], [8, 9]]


def test_partition_of_empty_sequence():
    assert partition([], 4) == []


def test_make_executor_kinds():
    with make_executor("thread", 2) as pool:
        assert isinstance(pool, ThreadPoolExecutor)
    with make_executor("process", 1) as pool:
        assert isinstance(pool, ProcessPoolExecutor)
    with pytest.raises(ValueError):
        make_executor("fiber", 2)
