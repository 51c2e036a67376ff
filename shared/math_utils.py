"""
PhantomHash Mathematical Utilities
===================================

Entropy estimators, substring enumeration, set-similarity measures and
distribution summaries used by the PhantomHash analyzers.

References:
    [1] Shannon, C. E. (1948). A Mathematical Theory of Communication.
        Bell System Technical Journal, 27(3), 379-423.
    [2] Jaccard, P. (1912). The Distribution of the Flora in the Alpine
        Zone. New Phytologist, 11(2), 37-50.
    [3] Hyndman, R. J. & Fan, Y. (1996). Sample Quantiles in Statistical
        Packages. The American Statistician, 50(4), 361-365.
"""

from __future__ import annotations

import math
from collections import Counter
from typing import Hashable, Iterator, Sequence

import numpy as np
from numpy.typing import NDArray

FloatArray = NDArray[np.floating]


# ========================== Entropy Measures ===============================


def shannon_entropy(data: Sequence[Hashable]) -> float:
    """Compute the Shannon entropy of a symbol sequence.

    .. math::

        H = -\\sum_{c} p(c) \\, \\log_2 p(c)

    where :math:`p(c)` is the relative frequency of symbol *c*. For a
    password the symbols are its characters and the result is in bits.

    The per-symbol terms are summed in ascending count order so the
    result depends only on the multiset of counts: any permutation of
    the input yields a bit-identical value.

    Reference:
        Shannon, C. E. (1948). A Mathematical Theory of Communication.

    Args:
        data: A ``str`` or any sequence of hashable symbols.

    Returns:
        Shannon entropy in bits. Returns 0.0 for empty input.
    """
    if not data:
        return 0.0

    length = len(data)
    entropy = 0.0
    for count in sorted(Counter(data).values()):
        p = count / length
        if p > 0.0:
            entropy -= p * math.log2(p)
    return entropy


# ========================== Substrings =====================================


def iter_substrings(text: str, min_length: int) -> Iterator[str]:
    """Yield every contiguous substring of *text* with length >= *min_length*.

    Substrings are yielded once per occurrence, so ``"aaaa"`` with
    ``min_length=2`` yields ``"aa"`` three times. The full string is
    included when its length qualifies.
    """
    n = len(text)
    for length in range(max(min_length, 1), n + 1):
        for start in range(n - length + 1):
            yield text[start : start + length]


def substring_set(text: str, min_length: int = 2) -> frozenset[str]:
    """Distinct contiguous substrings of *text* with length >= *min_length*."""
    return frozenset(iter_substrings(text, min_length))


# ========================== Similarity =====================================


def jaccard_similarity(a: frozenset[str] | set[str], b: frozenset[str] | set[str]) -> float:
    """Jaccard index ``|A ∩ B| / |A ∪ B|`` of two sets.

    Defined as 0.0 when both sets are empty.

    Reference:
        Jaccard, P. (1912). The Distribution of the Flora in the Alpine Zone.
    """
    if not a and not b:
        return 0.0
    if len(a) > len(b):
        a, b = b, a
    intersection = sum(1 for item in a if item in b)
    union = len(a) + len(b) - intersection
    return intersection / union


# ========================== Distribution Summary ===========================


def distribution_summary(values: Sequence[float] | FloatArray) -> dict[str, float]:
    """Summarise a sample with count, mean, std and quantiles.

    Uses linear interpolation between order statistics (Hyndman & Fan
    definition 7, NumPy's default).

    Args:
        values: Numeric sample.

    Returns:
        Dict with ``count``, ``mean``, ``std``, ``min``, ``p25``,
        ``median``, ``p75``, ``p95`` and ``max``. All zeros for an empty
        sample.
    """
    arr = np.asarray(values, dtype=np.float64)
    keys = ("mean", "std", "min", "p25", "median", "p75", "p95", "max")
    if arr.size == 0:
        summary = {key: 0.0 for key in keys}
        summary["count"] = 0
        return summary

    p25, median, p75, p95 = np.percentile(arr, [25, 50, 75, 95])
    return {
        "count": int(arr.size),
        "mean": float(np.mean(arr)),
        "std": float(np.std(arr)),
        "min": float(np.min(arr)),
        "p25": float(p25),
        "median": float(median),
        "p75": float(p75),
        "p95": float(p95),
        "max": float(np.max(arr)),
    }


def histogram(values: Sequence[float] | FloatArray, edges: Sequence[float]) -> list[int]:
    """Count *values* falling into half-open bins ``[edges[i], edges[i+1])``.

    The last bin is open-ended: values >= ``edges[-1]`` land in it.
    """
    arr = np.asarray(values, dtype=np.float64)
    bounds = np.asarray(edges, dtype=np.float64)
    idx = np.searchsorted(bounds, arr, side="right") - 1
    idx = idx[idx >= 0]
    counts = np.bincount(idx, minlength=len(bounds))
    return [int(c) for c in counts]
