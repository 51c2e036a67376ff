"""Substring / word frequency tables."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from phantomhash.analyzers.frequency import FrequencyAnalyzer, count_chunk
from phantomhash.core.models import FrequencyTables
from phantomhash.corpus.store import CorpusStore


def _analyzer(quiet_logger, **kwargs) -> FrequencyAnalyzer:
    return FrequencyAnalyzer(logger=quiet_logger, **kwargs)


def test_breach_scenario_tables(quiet_logger, breach_lines):
    tables = _analyzer(quiet_logger).analyze(breach_lines)

    assert tables.words == {"password": 101, "password1": 101, "letmein": 101}
    # Shared by "password" and "password1".
    assert tables.substrings["ass"] == 202
    assert tables.substrings["assw"] == 202
    assert tables.substrings["password"] == 202
    assert tables.substrings["rd1"] == 101
    assert tables.substrings["letmein"] == 101
    assert all(len(key) >= 3 for key in tables.substrings)
    assert "pa" not in tables.substrings


def test_counts_at_threshold_are_dropped(quiet_logger):
    tables = _analyzer(quiet_logger).analyze(["abcd"] * 100)
    assert tables.words == {}
    assert tables.substrings == {}


def test_substrings_count_once_per_occurrence():
    substrings, words = count_chunk(["aaaa"], 2)
    assert substrings["aa"] == 3
    assert substrings["aaa"] == 2
    assert substrings["aaaa"] == 1
    assert words["aaaa"] == 1


def test_min_substring_length_override(quiet_logger, breach_lines):
    tables = _analyzer(quiet_logger).analyze(breach_lines, 2)
    assert tables.min_substring_length == 2
    assert tables.substrings["pa"] == 202


def test_store_input_counts_each_password_once(quiet_logger):
    store = CorpusStore.build(["password"] * 500)
    assert _analyzer(quiet_logger).analyze(store).words == {}


def test_empty_corpus_gives_empty_tables(quiet_logger):
    tables = _analyzer(quiet_logger).analyze([])
    assert tables.substrings == {}
    assert tables.words == {}


def test_result_is_independent_of_worker_count(quiet_logger, breach_lines):
    serial = _analyzer(quiet_logger).analyze(breach_lines)
    parallel_analyzer = _analyzer(quiet_logger, chunk_floor=10, max_workers=4)
    parallel = parallel_analyzer.analyze(breach_lines)
    assert parallel == serial


def test_process_pool_matches_thread_pool(quiet_logger, breach_lines):
    threads = _analyzer(quiet_logger, chunk_floor=50, max_workers=2).analyze(breach_lines)
    processes = _analyzer(
        quiet_logger, chunk_floor=50, max_workers=2, executor="process"
    ).analyze(breach_lines)
    assert processes == threads


def test_tables_are_reused_from_cache(quiet_logger, cache, breach_lines):
    analyzer = _analyzer(quiet_logger)
    first = analyzer.analyze(breach_lines, cache=cache)
    assert analyzer.last_from_cache is False
    assert cache.get_tables(3, 100) == first

    # A different corpus still gets the stored tables verbatim.
    second = analyzer.analyze(["unrelated"], cache=cache)
    assert analyzer.last_from_cache is True
    assert second == first


def test_cached_tables_with_other_parameters_are_recomputed(quiet_logger, cache, breach_lines):
    _analyzer(quiet_logger).analyze(breach_lines, cache=cache)
    analyzer = _analyzer(quiet_logger, min_substring_length=4)
    tables = analyzer.analyze(breach_lines, cache=cache)
    assert analyzer.last_from_cache is False
    assert tables.min_substring_length == 4


def test_invalid_min_length_is_rejected():
    with pytest.raises(ValueError):
        FrequencyAnalyzer(min_substring_length=0)


def test_tables_reject_counts_at_or_below_threshold():
    with pytest.raises(ValidationError):
        FrequencyTables(words={"password": 100}, threshold=100)


def test_explicit_zero_minimum_is_rejected(quiet_logger):
    with pytest.raises(ValueError):
        _analyzer(quiet_logger).analyze(["password"], 0)
