"""Entropy, substring and similarity primitives."""

from __future__ import annotations

import math

import pytest

from shared.math_utils import (
    distribution_summary,
    histogram,
    iter_substrings,
    jaccard_similarity,
    shannon_entropy,
    substring_set,
)


def test_entropy_of_empty_input_is_zero():
    assert shannon_entropy("") == 0.0


def test_entropy_of_single_repeated_symbol_is_zero():
    assert shannon_entropy("aaaa") == 0.0


@pytest.mark.parametrize("text, bits", [("ab", 1.0), ("abcd", 2.0), ("abcdefgh", 3.0)])
def test_entropy_of_uniform_string_is_log2_of_alphabet(text, bits):
    assert shannon_entropy(text) == pytest.approx(bits)
    assert shannon_entropy(text) == pytest.approx(math.log2(len(set(text))))


def test_entropy_is_bit_identical_under_permutation():
    assert shannon_entropy("aabbbc") == shannon_entropy("cbabab")
    assert shannon_entropy("Tr0ub4dor&3") == shannon_entropy("3&rod4bu0rT")


def test_entropy_depends_on_distribution_not_length():
    assert shannon_entropy("ab") == shannon_entropy("aabb")


def test_substrings_are_yielded_per_occurrence():
    assert list(iter_substrings("aaaa", 2)).count("aa") == 3


def test_substrings_include_full_string():
    subs = list(iter_substrings("abc", 2))
    assert sorted(subs) == ["ab", "abc", "bc"]


def test_substrings_shorter_than_minimum_yield_nothing():
    assert list(iter_substrings("ab", 3)) == []


def test_substring_set_is_distinct():
    assert substring_set("aaa") == frozenset({"aa", "aaa"})


def test_jaccard_of_two_empty_sets_is_zero():
    assert jaccard_similarity(frozenset(), frozenset()) == 0.0


def test_jaccard_bounds_and_symmetry():
    a, b = {"ab", "bc", "cd"}, {"bc", "cd", "de", "ef"}
    assert jaccard_similarity(a, b) == jaccard_similarity(b, a) == pytest.approx(2 / 5)
    assert jaccard_similarity(a, a) == 1.0


def test_distribution_summary_of_empty_sample():
    summary = distribution_summary([])
    assert summary["count"] == 0
    assert summary["mean"] == 0.0


def test_distribution_summary_quantiles():
    summary = distribution_summary([1.0, 2.0, 3.0, 4.0, 5.0])
    assert summary["count"] == 5
    assert summary["median"] == pytest.approx(3.0)
    assert summary["min"] == 1.0
    assert summary["max"] == 5.0


def test_histogram_last_bin_is_open_ended():
    assert histogram([0.0, 39.9, 40.0, 300.0], [0.0, 40.0, 72.0]) == [2, 1, 1]
