"""
PhantomHash Corpus
===================

Word-list ingestion and the deduplicated breached-password store.
"""

from phantomhash.corpus.store import CorpusStore, SourceLoad, load_sources, normalise_lines

__all__ = [
    "CorpusStore",
    "SourceLoad",
    "load_sources",
    "normalise_lines",
]
