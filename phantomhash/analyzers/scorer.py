"""
Password Scorer
================

Produces a :class:`Verdict` for one candidate password from the frozen
corpus state: cached entropy, the thresholded frequency tables and the
corpus itself.

Checks:
    - Shannon entropy (bits) and its strength band
    - Structural weaknesses: short, no digit, no uppercase, no special
      character, a character repeated three or more times in a row
    - Exact membership in the breached corpus
    - Substrings (length >= 2) that are frequent in the corpus, and a
      whole-password match against the frequent-word table

References:
    - NIST SP 800-63B (2017). Digital Identity Guidelines, Section 5.1.1.2.
    - Bonneau, J. (2012). The Science of Guessing. IEEE S&P.
"""

from __future__ import annotations

import re
from typing import Container, Mapping, Optional

from shared.math_utils import substring_set
from phantomhash.analyzers.entropy_cache import EntropyCache
from phantomhash.core.models import StrengthBand, Verdict, WeaknessKind

_DIGIT = re.compile(r"\d", re.ASCII)
_UPPER = re.compile(r"[A-Z]")
_SPECIAL = re.compile(r"[^a-zA-Z0-9]")
_REPEATED = re.compile(r"(.)\1{2,}", re.DOTALL)


class PasswordScorer:
    """Stateless scorer; the only side effect is the entropy cache insert.

    Usage::

        scorer = PasswordScorer()
        verdict = scorer.score("Tr0ub4dor&3", cache, tables.substrings, tables.words, corpus)
    """

    def __init__(self, min_length: int = 8, pattern_min_length: int = 2) -> None:
        self.min_length = min_length
        self.pattern_min_length = pattern_min_length

    def score(
        self,
        password: Optional[str],
        cache: EntropyCache,
        substring_table: Mapping[str, int],
        word_table: Mapping[str, int],
        corpus: Optional[Container[str]] = None,
    ) -> Verdict:
        """Audit *password* against the corpus state.

        An empty or ``None`` candidate is scored like any other: entropy 0,
        Very Weak, and reported as too short.
        """
        candidate = password or ""

        entropy = cache.entropy(candidate)
        matched_substrings = sorted(
            sub
            for sub in substring_set(candidate, self.pattern_min_length)
            if sub in substring_table
        )

        return Verdict(
            entropy=entropy,
            strength_band=StrengthBand.from_entropy(entropy),
            weaknesses=self.weaknesses(candidate),
            is_known_password=corpus is not None and candidate in corpus,
            matched_substrings=matched_substrings,
            matched_as_word=candidate in word_table,
            length=len(candidate),
        )

    def weaknesses(self, password: str) -> list[WeaknessKind]:
        """Every structural weakness of *password*, in a fixed order."""
        found: list[WeaknessKind] = []
        if len(password) < self.min_length:
            found.append(WeaknessKind.TOO_SHORT)
        if not _DIGIT.search(password):
            found.append(WeaknessKind.NO_DIGITS)
        if not _UPPER.search(password):
            found.append(WeaknessKind.NO_UPPERCASE)
        if not _SPECIAL.search(password):
            found.append(WeaknessKind.NO_SPECIAL)
        if _REPEATED.search(password):
            found.append(WeaknessKind.REPEATED_CHARACTERS)
        return found

    @staticmethod
    def classify(entropy: float) -> StrengthBand:
        return StrengthBand.from_entropy(entropy)
