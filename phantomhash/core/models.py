"""
PhantomHash Core Data Models
=============================

Pydantic models for the PhantomHash corpus auditor: the per-query
:class:`Verdict`, the thresholded :class:`FrequencyTables`, the
:class:`SimilarityPair` / :class:`SimilarityReport` batch output and the
:class:`CorpusStats` summary.

All models are serialisable to JSON and designed for consumption by both
the CLI output layer and the report generators.

References:
    - Shannon, C. E. (1948). A Mathematical Theory of Communication.
    - NIST SP 800-63B (2017). Digital Identity Guidelines --
      Authentication and Lifecycle Management.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


# ===================================================================== #
#  Enumerations
# ===================================================================== #


class StrengthBand(str, enum.Enum):
    """Entropy-threshold strength band.

    Half-open entropy intervals in bits::

        [0, 40)     Very Weak
        [40, 72)    Weak
        [72, 128)   Moderate
        [128, 256)  Strong
        [256, inf)  Very Strong
    """

    VERY_WEAK = "Very Weak"
    WEAK = "Weak"
    MODERATE = "Moderate"
    STRONG = "Strong"
    VERY_STRONG = "Very Strong"

    @classmethod
    def from_entropy(cls, entropy: float) -> StrengthBand:
        """Classify *entropy* (bits) into its band."""
        band = cls.VERY_WEAK
        for lower, candidate in ENTROPY_THRESHOLDS:
            if entropy >= lower:
                band = candidate
        return band


# Lower bound of each band, ascending.
ENTROPY_THRESHOLDS: tuple[tuple[float, StrengthBand], ...] = (
    (0.0, StrengthBand.VERY_WEAK),
    (40.0, StrengthBand.WEAK),
    (72.0, StrengthBand.MODERATE),
    (128.0, StrengthBand.STRONG),
    (256.0, StrengthBand.VERY_STRONG),
)


class WeaknessKind(str, enum.Enum):
    """Structural weakness detected in a candidate password."""

    TOO_SHORT = "too_short"
    NO_DIGITS = "no_digits"
    NO_UPPERCASE = "no_uppercase"
    NO_SPECIAL = "no_special"
    REPEATED_CHARACTERS = "repeated_characters"

    @property
    def label(self) -> str:
        return _WEAKNESS_LABELS[self]


_WEAKNESS_LABELS: dict[WeaknessKind, str] = {
    WeaknessKind.TOO_SHORT: "Too short (less than 8 characters)",
    WeaknessKind.NO_DIGITS: "No digits",
    WeaknessKind.NO_UPPERCASE: "No uppercase letters",
    WeaknessKind.NO_SPECIAL: "No special characters",
    WeaknessKind.REPEATED_CHARACTERS: "Repeated characters (e.g., 'aaa')",
}


# ===================================================================== #
#  Scoring
# ===================================================================== #


class Verdict(BaseModel):
    """Audit result for one candidate password.

    Attributes:
        entropy: Shannon entropy of the password in bits.
        strength_band: Band derived from *entropy*.
        weaknesses: Every structural weakness that applies, in detection order.
        is_known_password: Exact match against the breached corpus.
        matched_substrings: Candidate substrings that are frequent in the corpus.
        matched_as_word: Whole password is a frequent corpus word.
        length: Character length of the candidate.
    """

    entropy: float = 0.0
    strength_band: StrengthBand = StrengthBand.VERY_WEAK
    weaknesses: list[WeaknessKind] = Field(default_factory=list)
    is_known_password: bool = False
    matched_substrings: list[str] = Field(default_factory=list)
    matched_as_word: bool = False
    length: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def matches_dictionary_pattern(self) -> bool:
        """True when any substring or the whole word matched the tables."""
        return bool(self.matched_substrings) or self.matched_as_word


# ===================================================================== #
#  Frequency Tables
# ===================================================================== #


class FrequencyTables(BaseModel):
    """Thresholded substring and whole-word frequency tables.

    Attributes:
        substrings: Substring -> occurrence count, counts > *threshold* only.
        words: Whole password -> occurrence count, counts > *threshold* only.
        min_substring_length: Shortest substring length that was counted.
        threshold: Entries with count <= threshold were discarded.
    """

    model_config = ConfigDict(frozen=True)

    substrings: dict[str, int] = Field(default_factory=dict)
    words: dict[str, int] = Field(default_factory=dict)
    min_substring_length: int = 3
    threshold: int = 100

    @model_validator(mode="after")
    def _check_threshold(self) -> FrequencyTables:
        for table in (self.substrings, self.words):
            for key, count in table.items():
                if count <= self.threshold:
                    raise ValueError(
                        f"count {count} for {key!r} does not exceed "
                        f"threshold {self.threshold}"
                    )
        return self


# ===================================================================== #
#  Similarity
# ===================================================================== #


class SimilarityPair(BaseModel):
    """Unordered pair of distinct passwords with their Jaccard score.

    The pair is stored canonically (``first < second``) so that equal
    pairs discovered from either side compare and hash equal.
    """

    model_config = ConfigDict(frozen=True)

    first: str
    second: str
    score: float = Field(ge=0.0, le=1.0)

    @model_validator(mode="before")
    @classmethod
    def _canonical_order(cls, data: dict) -> dict:
        if isinstance(data, dict):
            first, second = data.get("first"), data.get("second")
            if first is not None and second is not None and second < first:
                data = {**data, "first": second, "second": first}
        return data

    @model_validator(mode="after")
    def _distinct(self) -> SimilarityPair:
        if self.first == self.second:
            raise ValueError("a similarity pair needs two distinct passwords")
        return self

    @property
    def key(self) -> tuple[str, str]:
        return (self.first, self.second)


class SimilarityReport(BaseModel):
    """Batch diagnostic output of the all-pairs similarity scan.

    Attributes:
        corpus_size: Number of passwords compared.
        threshold: Pairs scoring strictly above this were reported.
        pairs: Flagged pairs, sorted by descending score then by key.
        clusters: Connected groups of mutually similar passwords, largest first.
        workers: Worker pool size used for the scan.
    """

    corpus_size: int = 0
    threshold: float = 0.7
    pairs: list[SimilarityPair] = Field(default_factory=list)
    clusters: list[list[str]] = Field(default_factory=list)
    workers: int = 1

    @property
    def pair_count(self) -> int:
        return len(self.pairs)


# ===================================================================== #
#  Corpus Statistics
# ===================================================================== #


class CorpusStats(BaseModel):
    """Summary of the prepared corpus and derived state.

    Attributes:
        sources_loaded: Sources that contributed at least one line.
        sources_missing: Sources that could not be read.
        raw_lines: Lines read before normalisation.
        corpus_size: Distinct non-empty passwords.
        cached_entropies: Entries in the entropy cache.
        common_substrings: Size of the thresholded substring table.
        common_words: Size of the thresholded word table.
        tables_from_cache: Whether the tables were restored rather than computed.
        entropy_summary: Distribution summary of corpus entropies.
        band_counts: Corpus passwords per strength band.
    """

    sources_loaded: list[str] = Field(default_factory=list)
    sources_missing: list[str] = Field(default_factory=list)
    raw_lines: int = 0
    corpus_size: int = 0
    cached_entropies: int = 0
    common_substrings: int = 0
    common_words: int = 0
    tables_from_cache: bool = False
    entropy_summary: dict[str, float] = Field(default_factory=dict)
    band_counts: dict[str, int] = Field(default_factory=dict)
