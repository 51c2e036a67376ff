"""
PhantomHash Analysis Engine
============================

Central orchestrator for the PhantomHash corpus auditor. The engine owns
the explicit process-wide state -- corpus, entropy cache and frequency
tables -- and drives its lifecycle:

1. ``prepare()``  load the cache document, read the word lists, build the
   corpus, preload entropies, build (or restore) the frequency tables.
2. ``audit()``    score candidate passwords against the frozen state.
3. ``scan_similarity()``  optional offline all-pairs similarity report.
4. ``close()``    persist the cache if anything changed.

Architecture follows the Facade pattern (Gamma et al., 1994), providing a
simplified interface over the individual analyzers.

References:
    - Gamma, E., Helm, R., Johnson, R., & Vlissides, J. (1994).
      Design Patterns: Elements of Reusable Object-Oriented Software.
    - NIST SP 800-63B (2017). Digital Identity Guidelines.
"""

from __future__ import annotations

import asyncio
import functools
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from shared.config import PhantomConfig
from shared.logger import PhantomLogger
from shared.math_utils import distribution_summary, histogram
from shared.models import Finding, ScanResult, Severity

from phantomhash.analyzers.entropy_cache import EntropyCache
from phantomhash.analyzers.frequency import FrequencyAnalyzer
from phantomhash.analyzers.scorer import PasswordScorer
from phantomhash.analyzers.similarity import SimilarityScanner
from phantomhash.core.models import (
    ENTROPY_THRESHOLDS,
    CorpusStats,
    FrequencyTables,
    SimilarityReport,
    StrengthBand,
    Verdict,
)
from phantomhash.corpus.store import CorpusStore, load_sources, normalise_lines


class PhantomHashEngine:
    """Orchestrates corpus preparation, password audits and batch scans.

    Usage::

        engine = PhantomHashEngine(config)
        stats = await engine.prepare()
        verdict = engine.audit("Tr0ub4dor&3")
        report = await engine.scan_similarity()
        engine.close()

    Attributes:
        config: PhantomHash configuration instance.
        cache: The explicit entropy cache (no module-level singleton).
        corpus: Deduplicated corpus, empty until :meth:`prepare`.
        tables: Frequency tables, ``None`` until :meth:`prepare`.
    """

    def __init__(
        self,
        config: Optional[PhantomConfig] = None,
        *,
        sources: Optional[Iterable[str | Path]] = None,
        cache_path: Optional[str | Path] = None,
    ) -> None:
        self.config = config or PhantomConfig()
        settings = self.config.phantomhash
        max_workers = self.config.global_settings.max_workers

        self.logger = PhantomLogger.from_config("phantomhash.engine", self.config)
        self.cache = EntropyCache(
            logger=PhantomLogger.from_config("phantomhash.cache", self.config)
        )
        self.frequency_analyzer = FrequencyAnalyzer(
            min_substring_length=settings.min_substring_length,
            threshold=settings.frequency_threshold,
            max_workers=max_workers,
            chunk_floor=settings.chunk_floor,
            executor=settings.executor,
            logger=PhantomLogger.from_config("phantomhash.frequency", self.config),
        )
        self.similarity_scanner = SimilarityScanner(
            threshold=settings.similarity_threshold,
            min_length=settings.similarity_min_length,
            max_corpus=settings.max_similarity_corpus,
            max_workers=max_workers,
            chunk_floor=settings.chunk_floor,
            executor=settings.executor,
            logger=PhantomLogger.from_config("phantomhash.similarity", self.config),
        )
        self.scorer = PasswordScorer(min_length=settings.min_password_length)

        self.sources: list[str] = [
            str(s) for s in (sources if sources is not None else settings.sources)
        ]
        self.cache_path = Path(cache_path or settings.cache_file)

        self.corpus = CorpusStore()
        self.tables: Optional[FrequencyTables] = None
        self._stats = CorpusStats()
        self._audited: set[str] = set()

    # ------------------------------------------------------------------ #
    #  Lifecycle
    # ------------------------------------------------------------------ #

    async def prepare(self, *, refresh: bool = False) -> CorpusStats:
        """Build the frozen corpus state.

        Args:
            refresh: Ignore any persisted cache document and regenerate
                everything from the word lists.

        Returns:
            :class:`CorpusStats` describing what was loaded.
        """
        cache_hit = False
        if refresh:
            self.cache.clear()
            self.logger.info("Generating cache... This may take a while.")
        else:
            cache_hit = self.cache.load(self.cache_path)

        with self.logger.operation("load"):
            self.logger.info("Loading dictionary passwords from %d sources", len(self.sources))
            loaded = load_sources(self.sources, self.logger)
        occurrences = normalise_lines(loaded.lines)
        self.corpus = CorpusStore(occurrences)
        self.logger.info(
            "Corpus: %d lines, %d distinct passwords", len(occurrences), len(self.corpus)
        )

        loop = asyncio.get_running_loop()
        with self.logger.timed("entropy preload"):
            added = await loop.run_in_executor(None, self.cache.preload, self.corpus)
        self.logger.debug("Cached entropy for %d new passwords", added)

        self.tables = await loop.run_in_executor(
            None,
            functools.partial(
                self.frequency_analyzer.analyze, occurrences, cache=self.cache
            ),
        )

        self._stats = self._build_stats(
            loaded.loaded, loaded.missing, len(loaded.lines),
            self.frequency_analyzer.last_from_cache,
        )
        if not cache_hit:
            self.logger.debug("Cache will be written to %s on close", self.cache_path)
        return self._stats

    def close(self) -> Optional[Path]:
        """Persist the cache if it changed. Returns the path written, if any."""
        if not self.cache.dirty:
            return None
        return self.cache.save(self.cache_path, exclude=self._audited)

    def __enter__(self) -> PhantomHashEngine:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    #  Queries
    # ------------------------------------------------------------------ #

    def audit(self, password: Optional[str]) -> Verdict:
        """Score one candidate password against the prepared state.

        Candidates that are neither corpus entries nor already cached are
        held in memory only; :meth:`close` leaves them out of the persisted
        document. Entries loaded from the document stay in it.
        """
        tables = self._require_tables()
        candidate = password or ""
        newly_seen = candidate not in self.cache
        verdict = self.scorer.score(
            password, self.cache, tables.substrings, tables.words, self.corpus
        )
        if newly_seen and not verdict.is_known_password:
            self._audited.add(candidate)
        return verdict

    def audit_scan(self, password: Optional[str]) -> ScanResult:
        """Score *password* and express the verdict as findings."""
        verdict = self.audit(password)
        result = ScanResult(
            tool_name="phantomhash",
            target=mask_password(password or ""),
            start_time=datetime.now(timezone.utc),
            metadata=verdict.model_dump(mode="json"),
        )
        for finding in verdict_findings(verdict):
            result.add_finding(finding)
        return result.finalize(
            f"Password analysis: {verdict.strength_band.value}, "
            f"entropy={verdict.entropy:.2f} bits, "
            f"{len(verdict.weaknesses)} weaknesses"
        )

    async def scan_similarity(self, threshold: Optional[float] = None) -> SimilarityReport:
        """Run the all-pairs similarity scan over the prepared corpus.

        Raises:
            ResourceLimitError: Corpus too large or memory exhausted.
        """
        limit = self.similarity_scanner.threshold if threshold is None else threshold
        self.logger.info("Analyzing password similarity using %s workers", self.config.phantomhash.executor)
        loop = asyncio.get_running_loop()
        pairs = await loop.run_in_executor(
            None, self.similarity_scanner.scan, self.corpus, limit
        )
        ordered = sorted(pairs, key=lambda p: (-p.score, p.first, p.second))
        return SimilarityReport(
            corpus_size=len(self.corpus),
            threshold=limit,
            pairs=ordered,
            clusters=self.similarity_scanner.cluster(ordered),
            workers=self.similarity_scanner.last_workers,
        )

    def similarity_scan_result(self, report: SimilarityReport) -> ScanResult:
        """Express a similarity report as findings for JSON / HTML output."""
        result = ScanResult(
            tool_name="phantomhash",
            target=f"corpus ({report.corpus_size} passwords)",
            start_time=datetime.now(timezone.utc),
            metadata=report.model_dump(mode="json"),
        )
        for cluster in report.clusters:
            result.add_finding(Finding(
                severity=Severity.MEDIUM,
                title=f"Cluster of {len(cluster)} similar passwords",
                description=(
                    f"{len(cluster)} passwords share most of their substrings "
                    f"(Jaccard > {report.threshold})."
                ),
                evidence=cluster,
            ))
        if not report.pairs:
            return result.finalize("No highly similar password pairs were found.")
        return result.finalize(
            f"{report.pair_count} highly similar pairs in {len(report.clusters)} clusters"
        )

    def corpus_stats(self) -> CorpusStats:
        return self._stats

    def stats_scan_result(self) -> ScanResult:
        stats = self._stats
        result = ScanResult(
            tool_name="phantomhash",
            target=f"corpus ({stats.corpus_size} passwords)",
            metadata=stats.model_dump(mode="json"),
        )
        for missing in stats.sources_missing:
            result.add_finding(Finding(
                severity=Severity.LOW,
                title="Source unavailable",
                description=f"Could not open file '{missing}'",
            ))
        return result.finalize(
            f"{stats.corpus_size} distinct passwords, "
            f"{stats.common_substrings} common substrings, "
            f"{stats.common_words} common words"
        )

    # ------------------------------------------------------------------ #
    #  Internal helpers
    # ------------------------------------------------------------------ #

    def _require_tables(self) -> FrequencyTables:
        if self.tables is None:
            raise RuntimeError("PhantomHashEngine.prepare() must run before audits")
        return self.tables

    def _build_stats(
        self,
        loaded: list[str],
        missing: list[str],
        raw_lines: int,
        tables_from_cache: bool,
    ) -> CorpusStats:
        entropies = [self.cache.entropy(password) for password in self.corpus]
        edges = [lower for lower, _ in ENTROPY_THRESHOLDS]
        counts = histogram(entropies, edges)
        tables = self._require_tables()
        return CorpusStats(
            sources_loaded=loaded,
            sources_missing=missing,
            raw_lines=raw_lines,
            corpus_size=len(self.corpus),
            cached_entropies=len(self.cache),
            common_substrings=len(tables.substrings),
            common_words=len(tables.words),
            tables_from_cache=tables_from_cache,
            entropy_summary=distribution_summary(entropies),
            band_counts={
                band.value: count
                for (_, band), count in zip(ENTROPY_THRESHOLDS, counts)
            },
        )


# ===================================================================== #
#  Verdict -> findings
# ===================================================================== #


def mask_password(password: str) -> str:
    """Show first and last character with asterisks in between."""
    if len(password) <= 2:
        return "*" * len(password) or "[empty]"
    return password[0] + "*" * (len(password) - 2) + password[-1]


_BAND_SEVERITY: dict[StrengthBand, Severity] = {
    StrengthBand.VERY_WEAK: Severity.HIGH,
    StrengthBand.WEAK: Severity.MEDIUM,
    StrengthBand.MODERATE: Severity.LOW,
    StrengthBand.STRONG: Severity.INFO,
    StrengthBand.VERY_STRONG: Severity.INFO,
}


def verdict_findings(verdict: Verdict) -> list[Finding]:
    """Translate a :class:`Verdict` into report findings."""
    findings = [
        Finding(
            severity=_BAND_SEVERITY[verdict.strength_band],
            title=f"Strength (Threshold-Based): {verdict.strength_band.value}",
            description=f"Entropy: {verdict.entropy:.2f} bits over {verdict.length} characters.",
            evidence={"entropy_bits": verdict.entropy, "length": verdict.length},
        )
    ]

    if verdict.is_known_password:
        findings.append(Finding(
            severity=Severity.CRITICAL,
            title="Password Found in Breached Dictionary",
            description=(
                "Your password is found in the dictionary. "
                "It is highly vulnerable to attacks."
            ),
            recommendation="Change it immediately and never reuse it.",
        ))

    if verdict.matched_as_word:
        findings.append(Finding(
            severity=Severity.HIGH,
            title="Common Dictionary Word",
            description="The whole password is a common word in the dictionary.",
        ))

    if verdict.matched_substrings:
        findings.append(Finding(
            severity=Severity.MEDIUM,
            title="Frequent Dictionary Substrings",
            description=(
                f"{len(verdict.matched_substrings)} substrings appear frequently in "
                f"dictionary passwords; the password may be vulnerable to "
                f"pattern-based attacks."
            ),
            evidence={"substring_count": len(verdict.matched_substrings)},
        ))

    for weakness in verdict.weaknesses:
        findings.append(Finding(
            severity=Severity.LOW,
            title="Weakness",
            description=weakness.label,
        ))

    return findings
