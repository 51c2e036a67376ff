"""Entropy memoisation and the persisted cache document."""

from __future__ import annotations

import json

import pytest

from shared.math_utils import shannon_entropy
from phantomhash.analyzers.entropy_cache import CACHE_VERSION, EntropyCache
from phantomhash.core.models import FrequencyTables


def test_entropy_is_computed_once_and_cached(cache):
    first = cache.entropy("hunter2")
    assert "hunter2" in cache
    assert cache.entropy("hunter2") == first == shannon_entropy("hunter2")
    assert len(cache) == 1


def test_empty_password_has_zero_entropy(cache):
    assert cache.entropy("") == 0.0


def test_preload_counts_only_new_entries(cache):
    cache.entropy("abc")
    assert cache.preload(["abc", "def", "ghi"]) == 2
    assert cache.preload(["abc", "def"]) == 0
    assert len(cache) == 3


def test_round_trip_preserves_values(cache, cache_path, quiet_logger):
    cache.preload(["password", "letmein", "Tr0ub4dor&3"])
    cache.save(cache_path)
    assert not cache.dirty

    restored = EntropyCache(logger=quiet_logger)
    assert restored.load(cache_path) is True
    for password in ("password", "letmein", "Tr0ub4dor&3"):
        assert restored.get(password) == cache.get(password)
    assert not restored.dirty


def test_save_creates_parent_directories_and_leaves_no_temp_files(cache, tmp_path):
    target = tmp_path / "deep" / "nested" / "cache.json"
    cache.entropy("abc")
    cache.save(target)
    assert target.exists()
    assert list(target.parent.glob(".cache-*")) == []


def test_missing_document_is_a_miss(cache, tmp_path):
    assert cache.load(tmp_path / "nope.json") is False
    assert len(cache) == 0


@pytest.mark.parametrize(
    "payload",
    [
        "not json at all {",
        json.dumps([1, 2, 3]),
        json.dumps({"version": 99, "entropy": {}}),
        json.dumps({"version": CACHE_VERSION, "entropy": "oops"}),
        json.dumps({"version": CACHE_VERSION, "entropy": {"abc": -1.0}}),
    ],
)
def test_malformed_document_is_a_miss(cache, tmp_path, payload):
    path = tmp_path / "cache.json"
    path.write_text(payload, encoding="utf-8")
    assert cache.load(path) is False
    assert len(cache) == 0


def test_load_never_overwrites_in_memory_entries(cache, tmp_path):
    cache.entropy("abc")
    path = tmp_path / "cache.json"
    path.write_text(
        json.dumps({"version": CACHE_VERSION, "entropy": {"abc": 99.0, "xyz": 1.5}}),
        encoding="utf-8",
    )
    assert cache.load(path) is True
    assert cache.get("abc") == shannon_entropy("abc")
    assert cache.get("xyz") == 1.5


def test_tables_persist_under_reserved_keys(cache, cache_path, quiet_logger):
    tables = FrequencyTables(
        substrings={"ass": 202}, words={"password": 101},
        min_substring_length=3, threshold=100,
    )
    cache.store_tables(tables)
    cache.save(cache_path)

    document = json.loads(cache_path.read_text(encoding="utf-8"))
    assert document["common_substrings"] == {"ass": 202}
    assert document["common_words"] == {"password": 101}

    restored = EntropyCache(logger=quiet_logger)
    restored.load(cache_path)
    assert restored.get_tables(3, 100) == tables
    assert restored.get_tables(4, 100) is None
    assert restored.get_tables(3, 50) is None


def test_tables_need_both_reserved_keys(cache, tmp_path):
    path = tmp_path / "cache.json"
    path.write_text(
        json.dumps({
            "version": CACHE_VERSION,
            "entropy": {},
            "common_substrings": {"ass": 202},
        }),
        encoding="utf-8",
    )
    assert cache.load(path) is True
    assert cache.get_tables() is None


def test_save_can_exclude_keys(cache, cache_path):
    cache.preload(["password"])
    cache.entropy("my-secret")
    cache.save(cache_path, exclude={"my-secret"})

    document = json.loads(cache_path.read_text(encoding="utf-8"))
    assert "password" in document["entropy"]
    assert "my-secret" not in document["entropy"]
    assert "my-secret" in cache


def test_clear_drops_entries_and_tables(cache):
    cache.preload(["a", "b"])
    cache.store_tables(FrequencyTables())
    cache.clear()
    assert len(cache) == 0
    assert cache.get_tables() is None
