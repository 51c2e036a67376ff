"""
PhantomHash Core Module
========================

Data models shared by the analyzers and the engine. The engine itself
lives in :mod:`phantomhash.core.engine`; it is not re-exported here
because the analyzers import these models.
"""

from phantomhash.core.models import (
    CorpusStats,
    FrequencyTables,
    SimilarityPair,
    SimilarityReport,
    StrengthBand,
    Verdict,
    WeaknessKind,
)

__all__ = [
    "CorpusStats",
    "FrequencyTables",
    "SimilarityPair",
    "SimilarityReport",
    "StrengthBand",
    "Verdict",
    "WeaknessKind",
]
