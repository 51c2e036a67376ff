"""TOML configuration loading."""

from __future__ import annotations

import pytest

from shared.config import PhantomConfig


def test_defaults():
    config = PhantomConfig()
    assert config.phantomhash.min_substring_length == 3
    assert config.phantomhash.frequency_threshold == 100
    assert config.phantomhash.similarity_threshold == 0.7
    assert config.phantomhash.executor == "thread"
    assert config.global_settings.max_workers == 0


def test_load_merges_file_over_defaults(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        "[global]\n"
        "max_workers = 2\n"
        "unknown_key = true\n"
        "[phantomhash]\n"
        'sources = ["a.txt"]\n'
        "frequency_threshold = 5\n",
        encoding="utf-8",
    )
    config = PhantomConfig.load(path)
    assert config.global_settings.max_workers == 2
    assert config.phantomhash.sources == ["a.txt"]
    assert config.phantomhash.frequency_threshold == 5
    assert config.phantomhash.min_substring_length == 3


def test_explicit_missing_path_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        PhantomConfig.load(tmp_path / "absent.toml")


def test_to_dict_round_trips_sections():
    data = PhantomConfig().to_dict()
    assert set(data) == {"global_settings", "phantomhash"}
    assert data["phantomhash"]["cache_file"] == "cache.json"
