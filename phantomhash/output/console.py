"""
PhantomHash Console Output
===========================

Rich-based renderers for the audit verdict, the similarity report and
the corpus statistics. Uses the shared :class:`PhantomConsole` for
consistent styling.

References:
    - Rich Library Documentation. https://rich.readthedocs.io/
"""

from __future__ import annotations

from typing import Optional

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from shared.console import PhantomConsole
from phantomhash.core.models import CorpusStats, SimilarityReport, StrengthBand, Verdict

RECOMMENDATIONS: tuple[str, ...] = (
    "Use a password with at least 12 characters.",
    "Include a mix of uppercase, lowercase, digits, and special characters.",
    "Avoid reusing passwords across multiple accounts.",
    "Consider using a password manager to generate and store strong passwords.",
)

_BAND_COLOURS: dict[StrengthBand, str] = {
    StrengthBand.VERY_WEAK: "bold white on red",
    StrengthBand.WEAK: "bold red",
    StrengthBand.MODERATE: "bold yellow",
    StrengthBand.STRONG: "bold green",
    StrengthBand.VERY_STRONG: "bold bright_green",
}

# Entropy at which the meter is full.
_METER_MAX_BITS = 256.0


class PhantomHashConsoleOutput:
    """Console renderers for PhantomHash results.

    Usage::

        output = PhantomHashConsoleOutput(PhantomConsole())
        output.display_verdict(verdict)
        output.display_similarity(report)
    """

    def __init__(self, console: Optional[PhantomConsole] = None) -> None:
        self.console = console or PhantomConsole()
        self._rich = self.console.rich

    # ------------------------------------------------------------------ #
    #  Verdict
    # ------------------------------------------------------------------ #

    def display_verdict(self, verdict: Verdict, *, recommendations: bool = True) -> None:
        """Render the dictionary comparison, analysis and recommendations."""
        self.display_dictionary_matches(verdict)

        self.console.section("Your Password Analysis")
        self._rich.print(Panel(self._meter(verdict), title="Strength Meter", border_style="cyan"))

        tbl = Table(
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=True,
        )
        tbl.add_column("Property", style="bold")
        tbl.add_column("Value")
        tbl.add_row("Entropy", f"{verdict.entropy:.2f} bits")
        tbl.add_row("Strength (Threshold-Based)", verdict.strength_band.value)
        tbl.add_row("Length", str(verdict.length))
        self._rich.print(tbl)

        if verdict.weaknesses:
            self._rich.print("[bold]Weaknesses:[/bold]")
            for weakness in verdict.weaknesses:
                self._rich.print(f"  [yellow]-[/yellow] {weakness.label}")
        else:
            self._rich.print("No significant weaknesses detected.")
        self.console.blank()

        if verdict.is_known_password:
            self.console.warning(
                "Your password is found in the dictionary. "
                "It is highly vulnerable to attacks."
            )
        else:
            self.console.success(
                "Your password is not found in the dictionary. "
                "It is less likely to be guessed."
            )

        if recommendations:
            self.display_recommendations()

    def display_dictionary_matches(self, verdict: Verdict) -> None:
        self.console.section("Substring and Word Analysis Compared to Dictionary")
        for substring in verdict.matched_substrings:
            self.console.warning(
                f"The substring '{substring}' appears frequently in dictionary passwords."
            )
        if verdict.matched_as_word:
            self.console.warning("Your password is a common word in the dictionary.")

        if verdict.matches_dictionary_pattern:
            self.console.warning(
                "Your password contains substrings or words similar to dictionary "
                "entries. It may be vulnerable to pattern-based attacks."
            )
        else:
            self.console.success(
                "Your password does not contain substrings or words similar to "
                "dictionary entries."
            )
        self.console.blank()

    def display_recommendations(self) -> None:
        self.console.section("Password Improvement Recommendations")
        for line in RECOMMENDATIONS:
            self._rich.print(f"  [bright_cyan]•[/bright_cyan] {line}")

    @staticmethod
    def _meter(verdict: Verdict, width: int = 40) -> Text:
        colour = _BAND_COLOURS[verdict.strength_band]
        filled = int(min(verdict.entropy, _METER_MAX_BITS) / _METER_MAX_BITS * width)

        meter = Text()
        meter.append(f"{verdict.entropy:6.2f} bits  ", style="bold")
        meter.append("[", style="dim")
        meter.append("█" * filled, style=colour)
        meter.append("░" * (width - filled), style="dim")
        meter.append("]  ", style="dim")
        meter.append(verdict.strength_band.value.upper(), style=colour)
        return meter

    # ------------------------------------------------------------------ #
    #  Similarity report
    # ------------------------------------------------------------------ #

    def display_similarity(self, report: SimilarityReport, limit: int = 50) -> None:
        self.console.section("Password Similarity Analysis")
        if not report.pairs:
            self.console.success("No highly similar password pairs were found.")
            return

        self.console.warning(
            f"{report.pair_count} password pairs are highly similar "
            f"(Jaccard > {report.threshold})."
        )
        shown = report.pairs[:limit]
        self.console.table(
            "Similar Pairs",
            ["#", "Password A", "Password B", "Similarity"],
            [
                (idx, pair.first, pair.second, f"{pair.score:.3f}")
                for idx, pair in enumerate(shown, start=1)
            ],
            caption=(
                f"Showing {len(shown)} of {report.pair_count}"
                if report.pair_count > len(shown)
                else None
            ),
        )

        if report.clusters:
            self.console.table(
                "Similarity Clusters",
                ["Size", "Members"],
                [
                    (len(cluster), ", ".join(cluster[:10]) + (" ..." if len(cluster) > 10 else ""))
                    for cluster in report.clusters[:limit]
                ],
            )

    # ------------------------------------------------------------------ #
    #  Corpus statistics
    # ------------------------------------------------------------------ #

    def display_stats(self, stats: CorpusStats) -> None:
        self.console.section("Corpus Statistics")
        rows = [
            ("Sources loaded", len(stats.sources_loaded)),
            ("Sources missing", len(stats.sources_missing)),
            ("Raw lines", f"{stats.raw_lines:,}"),
            ("Distinct passwords", f"{stats.corpus_size:,}"),
            ("Cached entropies", f"{stats.cached_entropies:,}"),
            ("Common substrings", f"{stats.common_substrings:,}"),
            ("Common words", f"{stats.common_words:,}"),
            ("Tables restored from cache", "Yes" if stats.tables_from_cache else "No"),
        ]
        self.console.table("Corpus", ["Property", "Value"], rows)

        summary = stats.entropy_summary
        if summary.get("count"):
            self.console.table(
                "Entropy Distribution (bits)",
                ["Mean", "Std", "Min", "Median", "P95", "Max"],
                [(
                    f"{summary['mean']:.2f}",
                    f"{summary['std']:.2f}",
                    f"{summary['min']:.2f}",
                    f"{summary['median']:.2f}",
                    f"{summary['p95']:.2f}",
                    f"{summary['max']:.2f}",
                )],
            )
        if stats.band_counts:
            self.console.table(
                "Strength Bands",
                ["Band", "Passwords"],
                list(stats.band_counts.items()),
            )
