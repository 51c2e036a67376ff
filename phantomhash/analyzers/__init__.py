"""
PhantomHash Analyzers
======================

Analysis modules run against the breached-password corpus. Each analyzer
focuses on one concern: entropy caching, substring / word frequency,
pairwise similarity and candidate scoring.
"""

from phantomhash.analyzers.entropy_cache import CacheUnreadable, EntropyCache
from phantomhash.analyzers.frequency import FrequencyAnalyzer
from phantomhash.analyzers.scorer import PasswordScorer
from phantomhash.analyzers.similarity import ResourceLimitError, SimilarityScanner

__all__ = [
    "CacheUnreadable",
    "EntropyCache",
    "FrequencyAnalyzer",
    "PasswordScorer",
    "ResourceLimitError",
    "SimilarityScanner",
]
