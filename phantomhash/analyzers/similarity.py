"""
Similarity Scanner
===================

Exhaustive all-pairs Jaccard similarity over a breached-password corpus,
used as an offline batch diagnostic to surface near-duplicate passwords
(``password1`` / ``password12``, ``dragon99`` / ``dragon98``).

Each password is represented by the set of its contiguous substrings of
length >= 2; two passwords are similar when

    J(a, b) = |S(a) ∩ S(b)| / |S(a) ∪ S(b)|

exceeds the threshold (0.7). J is 0 when both sets are empty.

The scan is quadratic in corpus size. It is partitioned the same way as
the frequency analysis: each worker compares every password of its chunk
against the whole corpus and returns its qualifying pairs, which are
merged into one result set under a lock. A pair may be found from both
sides; storing it as a sorted 2-tuple makes the second discovery a no-op.

Flagged pairs can be grouped into clusters (connected components of the
similarity graph) with :meth:`SimilarityScanner.cluster`.

References:
    - Jaccard, P. (1912). The Distribution of the Flora in the Alpine Zone.
    - Broder, A. Z. (1997). On the Resemblance and Containment of
      Documents. Compression and Complexity of Sequences.
"""

from __future__ import annotations

import threading
from concurrent.futures import as_completed
from typing import Iterable, Mapping, Optional, Sequence

import networkx as nx

from shared.logger import PhantomLogger
from shared.math_utils import jaccard_similarity, substring_set
from phantomhash.analyzers.partition import (
    available_parallelism,
    make_executor,
    partition,
    worker_count,
)
from phantomhash.core.models import SimilarityPair
from phantomhash.corpus.store import CorpusStore

PairKey = tuple[str, str]


class ResourceLimitError(RuntimeError):
    """The quadratic scan cannot run to completion within resource limits."""


def similarity(a: str, b: str, min_length: int = 2) -> float:
    """Jaccard similarity of the substring sets of *a* and *b*."""
    return jaccard_similarity(substring_set(a, min_length), substring_set(b, min_length))


def compare_chunk(
    chunk: Sequence[str],
    corpus: Sequence[str],
    sets: Mapping[str, frozenset[str]],
    threshold: float,
) -> dict[PairKey, float]:
    """Compare each password of *chunk* with every corpus password.

    Module level so it can be shipped to a process pool.

    Returns:
        Canonical pair key -> score for pairs scoring above *threshold*.
    """
    found: dict[PairKey, float] = {}
    for first in chunk:
        if not first:
            continue
        first_set = sets[first]
        for second in corpus:
            if not second or first == second:
                continue
            key = (first, second) if first < second else (second, first)
            if key in found:
                continue
            score = jaccard_similarity(first_set, sets[second])
            if score > threshold:
                found[key] = score
    return found


class SimilarityScanner:
    """All-pairs Jaccard similarity scan.

    Usage::

        scanner = SimilarityScanner(threshold=0.7)
        pairs = scanner.scan(corpus)
        clusters = scanner.cluster(pairs)

    Attributes:
        threshold: Pairs must score strictly above this.
        min_length: Shortest substring in a password's substring set.
        max_corpus: Largest corpus the scan accepts.
        max_workers: Upper bound on the pool size (0 = CPU count).
        chunk_floor: Corpus entries per worker before another is added.
        executor: ``"thread"`` or ``"process"``.
    """

    DEFAULT_THRESHOLD: float = 0.7

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD,
        *,
        min_length: int = 2,
        max_corpus: int = 20_000,
        max_workers: int = 0,
        chunk_floor: int = 1000,
        executor: str = "thread",
        logger: Optional[PhantomLogger] = None,
    ) -> None:
        self.threshold = threshold
        self.min_length = min_length
        self.max_corpus = max_corpus
        self.max_workers = max_workers
        self.chunk_floor = chunk_floor
        self.executor = executor
        self.logger = logger or PhantomLogger("phantomhash.similarity", console_output=False)

        self._merge_lock = threading.Lock()
        self.last_workers = 0

    def similarity(self, a: str, b: str) -> float:
        return similarity(a, b, self.min_length)

    def scan(
        self,
        corpus: Sequence[str] | CorpusStore,
        threshold: Optional[float] = None,
    ) -> set[SimilarityPair]:
        """Report every distinct pair whose similarity exceeds *threshold*.

        Raises:
            ResourceLimitError: The corpus is larger than ``max_corpus`` or
                memory ran out mid-scan. The scan never returns a
                truncated result.
        """
        limit = self.threshold if threshold is None else threshold
        if isinstance(corpus, CorpusStore):
            passwords: Sequence[str] = corpus.passwords()
        else:
            passwords = tuple(sorted(set(p for p in corpus if p)))

        n = len(passwords)
        if n > self.max_corpus:
            raise ResourceLimitError(
                f"Similarity scan over {n:,} passwords needs {n * (n - 1) // 2:,} "
                f"comparisons; the configured limit is {self.max_corpus:,} passwords"
            )

        try:
            with self.logger.timed(f"similarity scan of {n} passwords"):
                merged = self._scan(passwords, limit)
        except MemoryError as exc:
            raise ResourceLimitError(
                f"Out of memory during similarity scan of {n:,} passwords"
            ) from exc

        self.logger.info("Found %d highly similar password pairs", len(merged))
        return {
            SimilarityPair(first=first, second=second, score=score)
            for (first, second), score in merged.items()
        }

    @staticmethod
    def cluster(pairs: Iterable[SimilarityPair]) -> list[list[str]]:
        """Group flagged pairs into connected components.

        Returns:
            Each cluster as a sorted list, largest cluster first.
        """
        graph = nx.Graph()
        for pair in pairs:
            graph.add_edge(pair.first, pair.second, weight=pair.score)
        clusters = [sorted(component) for component in nx.connected_components(graph)]
        clusters.sort(key=lambda members: (-len(members), members[0]))
        return clusters

    # ------------------------------------------------------------------ #
    #  Internal helpers
    # ------------------------------------------------------------------ #

    def _scan(self, passwords: Sequence[str], threshold: float) -> dict[PairKey, float]:
        merged: dict[PairKey, float] = {}
        if len(passwords) < 2:
            return merged

        sets = {password: substring_set(password, self.min_length) for password in passwords}

        workers = worker_count(
            len(passwords),
            available_parallelism(self.max_workers),
            self.chunk_floor,
        )
        self.last_workers = workers
        chunks = partition(passwords, workers)

        if len(chunks) == 1:
            self._merge(merged, compare_chunk(chunks[0], passwords, sets, threshold))
            return merged

        with make_executor(self.executor, workers) as pool:
            futures = [
                pool.submit(compare_chunk, chunk, passwords, sets, threshold)
                for chunk in chunks
            ]
            for future in as_completed(futures):
                self._merge(merged, future.result())
        return merged

    def _merge(self, merged: dict[PairKey, float], found: dict[PairKey, float]) -> None:
        with self._merge_lock:
            for key, score in found.items():
                merged.setdefault(key, score)
