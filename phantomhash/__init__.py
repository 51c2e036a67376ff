"""
PhantomHash -- Breached Password Corpus Auditor
================================================

Audits candidate passwords against a corpus of breached passwords:
Shannon entropy and strength band, structural weaknesses, exact corpus
membership, and substrings / whole words that are frequent in the corpus.
An offline all-pairs similarity scan reports clusters of near-duplicate
passwords inside the corpus itself.

Modules:
    - phantomhash.core.engine: Lifecycle orchestrator
    - phantomhash.core.models: Pydantic data models
    - phantomhash.corpus: Word-list ingestion and the corpus store
    - phantomhash.analyzers: Entropy cache, frequency, similarity, scoring
    - phantomhash.output: Console and report output
    - phantomhash.cli: Click-based command-line interface

References:
    - Shannon, C. E. (1948). A Mathematical Theory of Communication.
    - NIST SP 800-63B (2017). Digital Identity Guidelines.
    - Bonneau, J. (2012). The Science of Guessing. IEEE S&P.
"""

__version__ = "1.0.0"
__tool_name__ = "phantomhash"
