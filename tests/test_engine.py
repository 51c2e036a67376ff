"""Engine lifecycle: prepare, audit, persist, restore."""

from __future__ import annotations

import asyncio
import json

import pytest

from shared.models import Severity
from phantomhash.core.engine import PhantomHashEngine, mask_password
from phantomhash.core.models import StrengthBand


@pytest.fixture
def engine(config) -> PhantomHashEngine:
    eng = PhantomHashEngine(config)
    asyncio.run(eng.prepare())
    return eng


def test_prepare_builds_corpus_and_tables(engine):
    stats = engine.corpus_stats()
    assert stats.raw_lines == 303
    assert stats.corpus_size == 3
    assert stats.common_words == 3
    assert stats.tables_from_cache is False
    assert stats.cached_entropies == 3
    assert sum(stats.band_counts.values()) == 3
    assert stats.band_counts[StrengthBand.VERY_WEAK.value] == 3


def test_audit_requires_prepare(config):
    with pytest.raises(RuntimeError):
        PhantomHashEngine(config).audit("password")


def test_audit_known_password(engine):
    verdict = engine.audit("password")
    assert verdict.is_known_password
    assert verdict.matched_as_word
    assert "ass" in verdict.matched_substrings


def test_audit_unknown_password(engine):
    verdict = engine.audit("Tr0ub4dor&3")
    assert not verdict.is_known_password
    assert not verdict.matches_dictionary_pattern
    assert verdict.weaknesses == []


def test_close_persists_and_next_run_restores_tables(config, cache_path, engine):
    assert engine.close() == cache_path
    assert engine.close() is None

    again = PhantomHashEngine(config)
    stats = asyncio.run(again.prepare())
    assert stats.tables_from_cache is True
    assert again.tables == engine.tables
    assert again.close() is None


def test_audited_candidates_are_not_persisted(engine, cache_path):
    engine.audit("Zq9!unseen-candidate")
    engine.audit("password")
    engine.close()

    document = json.loads(cache_path.read_text(encoding="utf-8"))
    assert "password" in document["entropy"]
    assert "Zq9!unseen-candidate" not in document["entropy"]


def test_loaded_entries_survive_an_audit(config, cache_path, engine):
    engine.close()
    document = json.loads(cache_path.read_text(encoding="utf-8"))
    document["entropy"]["oldleak99"] = 2.5
    cache_path.write_text(json.dumps(document), encoding="utf-8")

    again = PhantomHashEngine(config)
    asyncio.run(again.prepare())
    assert again.audit("oldleak99").entropy == 2.5
    again.audit("Zq9!unseen-candidate")
    assert again.close() == cache_path

    saved = json.loads(cache_path.read_text(encoding="utf-8"))["entropy"]
    assert saved["oldleak99"] == 2.5
    assert "Zq9!unseen-candidate" not in saved
    assert {"password", "password1", "letmein"} <= set(saved)


def test_refresh_ignores_persisted_document(config, engine):
    engine.close()
    again = PhantomHashEngine(config)
    stats = asyncio.run(again.prepare(refresh=True))
    assert stats.tables_from_cache is False


def test_missing_sources_are_reported(config, tmp_path, breach_file):
    eng = PhantomHashEngine(config, sources=[tmp_path / "gone.txt", breach_file])
    stats = asyncio.run(eng.prepare())
    assert stats.sources_missing == [str(tmp_path / "gone.txt")]
    assert stats.corpus_size == 3


def test_corrupt_cache_triggers_regeneration(config, cache_path):
    cache_path.parent.mkdir(parents=True, exist_ok=True)
    cache_path.write_text("{broken", encoding="utf-8")
    eng = PhantomHashEngine(config)
    stats = asyncio.run(eng.prepare())
    assert stats.tables_from_cache is False
    assert stats.common_words == 3


def test_scan_similarity_report(config, near_duplicates_file):
    eng = PhantomHashEngine(config, sources=[near_duplicates_file])
    asyncio.run(eng.prepare())
    report = asyncio.run(eng.scan_similarity())
    assert report.corpus_size == 4
    assert report.pair_count == 2
    assert report.pairs[0].score >= report.pairs[1].score
    assert report.clusters == [["password1", "password12", "password123"]]

    result = eng.similarity_scan_result(report)
    assert len(result.findings) == 1
    assert result.end_time is not None


def test_audit_scan_findings_do_not_leak_password(engine):
    result = engine.audit_scan("letmein")
    assert result.target == "l*****n"
    assert result.highest_severity is Severity.CRITICAL
    dumped = json.dumps([f.model_dump(mode="json") for f in result.findings])
    assert "letmein" not in dumped


def test_stats_scan_result(engine):
    result = engine.stats_scan_result()
    assert result.metadata["corpus_size"] == 3
    assert result.findings == []


@pytest.mark.parametrize(
    "password, masked",
    [("", "[empty]"), ("a", "*"), ("ab", "**"), ("abc", "a*c"), ("secret", "s****t")],
)
def test_mask_password(password, masked):
    assert mask_password(password) == masked
