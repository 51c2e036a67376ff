"""
Frequency Analyzer
===================

Map-reduce construction of the substring and whole-word frequency tables
over a breached-password corpus.

Pipeline:
1. Partition the corpus into ``max(1, min(n // 1000, cpus))`` contiguous
   chunks.
2. Each worker counts, for every password in its chunk, every contiguous
   substring of length >= ``min_substring_length`` (once per occurrence)
   and the whole password as a word, into its own local counters.
3. The orchestrator waits on all workers and merges the partial counters
   into the shared tables, one lock acquisition per merge.
4. Entries with count <= threshold (100) are dropped.

Integer addition commutes, so the merged tables do not depend on chunk
count or completion order.

The tables are expensive for multi-million-entry corpora; when the
:class:`EntropyCache` already holds them under its reserved keys they are
returned verbatim instead.

References:
    - Dean, J. & Ghemawat, S. (2004). MapReduce: Simplified Data
      Processing on Large Clusters. OSDI.
    - Weir, M. et al. (2009). Password Cracking Using Probabilistic
      Context-Free Grammars. IEEE S&P.
"""

from __future__ import annotations

import threading
from collections import Counter
from concurrent.futures import as_completed
from typing import Optional, Sequence

from shared.logger import PhantomLogger
from shared.math_utils import iter_substrings
from phantomhash.analyzers.entropy_cache import EntropyCache
from phantomhash.analyzers.partition import (
    available_parallelism,
    make_executor,
    partition,
    worker_count,
)
from phantomhash.core.models import FrequencyTables
from phantomhash.corpus.store import CorpusStore


def count_chunk(chunk: Sequence[str], min_length: int) -> tuple[Counter, Counter]:
    """Count substrings and whole words of one chunk.

    Module level so it can be shipped to a process pool.
    """
    substrings: Counter = Counter()
    words: Counter = Counter()
    for password in chunk:
        if not password:
            continue
        substrings.update(iter_substrings(password, min_length))
        words[password] += 1
    return substrings, words


class FrequencyAnalyzer:
    """Builds thresholded substring / word frequency tables.

    Usage::

        analyzer = FrequencyAnalyzer(min_substring_length=3)
        tables = analyzer.analyze(passwords, cache=cache)
        tables.substrings["ass"]     # occurrence count > 100

    Attributes:
        min_substring_length: Shortest substring that is counted.
        threshold: Entries must occur strictly more often than this.
        max_workers: Upper bound on the pool size (0 = CPU count).
        chunk_floor: Corpus entries per worker before another is added.
        executor: ``"thread"`` or ``"process"``.
    """

    DEFAULT_THRESHOLD: int = 100

    def __init__(
        self,
        min_substring_length: int = 3,
        threshold: int = DEFAULT_THRESHOLD,
        *,
        max_workers: int = 0,
        chunk_floor: int = 1000,
        executor: str = "thread",
        logger: Optional[PhantomLogger] = None,
    ) -> None:
        if min_substring_length < 1:
            raise ValueError("min_substring_length must be at least 1")
        self.min_substring_length = min_substring_length
        self.threshold = threshold
        self.max_workers = max_workers
        self.chunk_floor = chunk_floor
        self.executor = executor
        self.logger = logger or PhantomLogger("phantomhash.frequency", console_output=False)

        self._merge_lock = threading.Lock()
        self.last_from_cache = False
        self.last_workers = 0

    def analyze(
        self,
        corpus: Sequence[str] | CorpusStore,
        min_substring_length: Optional[int] = None,
        *,
        cache: Optional[EntropyCache] = None,
    ) -> FrequencyTables:
        """Produce the substring and word tables for *corpus*.

        Args:
            corpus: Passwords to count. A plain sequence keeps duplicate
                entries (each counts); a :class:`CorpusStore` counts each
                distinct password once.
            min_substring_length: Overrides the configured minimum.
            cache: When given, tables stored under its reserved keys are
                reused, and freshly computed tables are stored back.

        Returns:
            :class:`FrequencyTables` with counts strictly above the threshold.

        Raises:
            ValueError: *min_substring_length* is given and below 1.
        """
        if min_substring_length is None:
            min_length = self.min_substring_length
        elif min_substring_length < 1:
            raise ValueError("min_substring_length must be at least 1")
        else:
            min_length = min_substring_length

        if cache is not None:
            cached = cache.get_tables(min_length, self.threshold)
            if cached is not None:
                self.logger.info("Loading common substrings and whole words from cache")
                self.last_from_cache = True
                return cached

        self.last_from_cache = False
        passwords = corpus.passwords() if isinstance(corpus, CorpusStore) else corpus

        with self.logger.timed("frequency analysis"):
            substring_freq, word_freq = self._count(passwords, min_length)

        tables = FrequencyTables(
            substrings=self._filter(substring_freq),
            words=self._filter(word_freq),
            min_substring_length=min_length,
            threshold=self.threshold,
        )
        self.logger.info(
            "Frequency tables: %d common substrings, %d common words",
            len(tables.substrings),
            len(tables.words),
        )

        if cache is not None:
            cache.store_tables(tables)
        return tables

    # ------------------------------------------------------------------ #
    #  Internal helpers
    # ------------------------------------------------------------------ #

    def _count(self, passwords: Sequence[str], min_length: int) -> tuple[Counter, Counter]:
        substring_freq: Counter = Counter()
        word_freq: Counter = Counter()

        workers = worker_count(
            len(passwords),
            available_parallelism(self.max_workers),
            self.chunk_floor,
        )
        self.last_workers = workers
        chunks = partition(passwords, workers)
        self.logger.debug(
            "Counting %d passwords in %d chunks", len(passwords), len(chunks)
        )
        if not chunks:
            return substring_freq, word_freq

        if len(chunks) == 1:
            partial_substrings, partial_words = count_chunk(chunks[0], min_length)
            self._merge(substring_freq, word_freq, partial_substrings, partial_words)
            return substring_freq, word_freq

        with make_executor(self.executor, workers) as pool:
            futures = {
                pool.submit(count_chunk, chunk, min_length): idx
                for idx, chunk in enumerate(chunks)
            }
            for future in as_completed(futures):
                partial_substrings, partial_words = future.result()
                self.logger.debug("Merging chunk %d", futures[future])
                self._merge(substring_freq, word_freq, partial_substrings, partial_words)

        return substring_freq, word_freq

    def _merge(
        self,
        substring_freq: Counter,
        word_freq: Counter,
        partial_substrings: Counter,
        partial_words: Counter,
    ) -> None:
        with self._merge_lock:
            substring_freq.update(partial_substrings)
            word_freq.update(partial_words)

    def _filter(self, freq: Counter) -> dict[str, int]:
        return {key: count for key, count in freq.items() if count > self.threshold}
