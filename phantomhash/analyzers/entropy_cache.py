"""
Entropy Cache
==============

Persistent password -> Shannon entropy mapping, also holding the last
computed frequency tables under two reserved keys.

Entropy is a pure function of a password's character distribution, so
entries may be filled lazily (per query) or in bulk (corpus preload) and
survive across runs. The cache only grows: an entry, once present, is
never replaced.

On-disk document (JSON)::

    {
      "version": 1,
      "entropy": {"password": 2.75, ...},
      "common_substrings": {"ass": 1234, ...},
      "common_words": {"password": 4321, ...},
      "min_substring_length": 3,
      "frequency_threshold": 100
    }

A missing or malformed document is a cache miss for everything, never an
error.

References:
    - Shannon, C. E. (1948). A Mathematical Theory of Communication.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from shared.logger import PhantomLogger
from shared.math_utils import shannon_entropy
from phantomhash.core.models import FrequencyTables

CACHE_VERSION = 1

# Reserved keys of the persisted document.
SUBSTRINGS_KEY = "common_substrings"
WORDS_KEY = "common_words"


class CacheUnreadable(Exception):
    """The persisted cache document is absent or has an unexpected shape."""


class EntropyCache:
    """Memoised Shannon entropy with JSON persistence.

    Usage::

        cache = EntropyCache()
        cache.load(Path("cache.json"))
        cache.preload(corpus)
        bits = cache.entropy("hunter2")
        cache.save(Path("cache.json"))
    """

    def __init__(self, logger: Optional[PhantomLogger] = None) -> None:
        self._values: dict[str, float] = {}
        self._tables: Optional[FrequencyTables] = None
        self._lock = threading.Lock()
        self._dirty = False
        self.logger = logger or PhantomLogger("phantomhash.cache", console_output=False)

    # ------------------------------------------------------------------ #
    #  Lookup
    # ------------------------------------------------------------------ #

    def entropy(self, password: str) -> float:
        """Return the cached entropy of *password*, computing it on a miss."""
        value = self._values.get(password)
        if value is not None:
            return value
        computed = shannon_entropy(password)
        with self._lock:
            # Another caller may have inserted it meanwhile; keep the first.
            existing = self._values.get(password)
            if existing is not None:
                return existing
            self._values[password] = computed
            self._dirty = True
        return computed

    def preload(self, passwords: Iterable[str]) -> int:
        """Compute and insert entropy for every password not yet cached.

        Returns:
            Number of new entries.
        """
        added = 0
        with self._lock:
            values = self._values
            for password in passwords:
                if password not in values:
                    values[password] = shannon_entropy(password)
                    added += 1
            if added:
                self._dirty = True
        return added

    def get(self, password: str) -> Optional[float]:
        return self._values.get(password)

    def values(self) -> list[float]:
        return list(self._values.values())

    def __contains__(self, password: object) -> bool:
        return password in self._values

    def __len__(self) -> int:
        return len(self._values)

    @property
    def dirty(self) -> bool:
        """Whether there are changes not yet written by :meth:`save`."""
        return self._dirty

    # ------------------------------------------------------------------ #
    #  Reserved keys -- frequency tables
    # ------------------------------------------------------------------ #

    def get_tables(
        self,
        min_substring_length: Optional[int] = None,
        threshold: Optional[int] = None,
    ) -> Optional[FrequencyTables]:
        """Return the stored tables if both are present and compatible.

        Tables computed with a different minimum substring length or
        threshold are ignored so a config change triggers recomputation.
        """
        tables = self._tables
        if tables is None:
            return None
        if min_substring_length is not None and tables.min_substring_length != min_substring_length:
            return None
        if threshold is not None and tables.threshold != threshold:
            return None
        return tables

    def store_tables(self, tables: FrequencyTables) -> None:
        with self._lock:
            self._tables = tables
            self._dirty = True

    # ------------------------------------------------------------------ #
    #  Persistence
    # ------------------------------------------------------------------ #

    def load(self, path: str | Path) -> bool:
        """Merge a persisted document into the in-memory cache.

        Values already held in memory are kept; persisted values fill the
        gaps. Tables are restored only when the document holds both.

        Returns:
            ``True`` if a document was read, ``False`` on a cache miss.
        """
        path = Path(path)
        try:
            document = self._read_document(path)
        except CacheUnreadable as exc:
            self.logger.warning("Cache unavailable, regenerating: %s", exc)
            return False

        entropy = document["entropy"]
        with self._lock:
            before = len(self._values)
            for password, value in entropy.items():
                self._values.setdefault(password, float(value))
            merged = len(self._values) - before
            tables = self._decode_tables(document)
            if tables is not None and self._tables is None:
                self._tables = tables

        self.logger.info(
            "Loaded %d cached entropies from %s (%d new)", len(entropy), path, merged
        )
        return True

    def save(self, path: str | Path, *, exclude: Iterable[str] = ()) -> Path:
        """Write the mapping (and tables, if any) to *path* atomically.

        Args:
            path: Destination document.
            exclude: Keys kept in memory but never written, e.g. audited
                candidates that are not corpus entries.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        skipped = frozenset(exclude)

        with self._lock:
            document: dict[str, Any] = {
                "version": CACHE_VERSION,
                "entropy": {
                    password: value
                    for password, value in self._values.items()
                    if password not in skipped
                },
            }
            if self._tables is not None:
                document[SUBSTRINGS_KEY] = dict(self._tables.substrings)
                document[WORDS_KEY] = dict(self._tables.words)
                document["min_substring_length"] = self._tables.min_substring_length
                document["frequency_threshold"] = self._tables.threshold

        fd, tmp_name = tempfile.mkstemp(prefix=".cache-", suffix=".json", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, ensure_ascii=False)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        self._dirty = False
        self.logger.info("Cache saved to '%s' (%d entries)", path, len(document["entropy"]))
        return path

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
            self._tables = None
            self._dirty = False

    # ------------------------------------------------------------------ #
    #  Internal helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _read_document(path: Path) -> dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as fh:
                document = json.load(fh)
        except FileNotFoundError as exc:
            raise CacheUnreadable(f"no cache at {path}") from exc
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise CacheUnreadable(f"cannot read {path}: {exc}") from exc

        if not isinstance(document, dict):
            raise CacheUnreadable(f"{path} does not hold a JSON object")
        if document.get("version") != CACHE_VERSION:
            raise CacheUnreadable(f"unsupported cache version {document.get('version')!r}")

        entropy = document.get("entropy")
        if not isinstance(entropy, dict):
            raise CacheUnreadable(f"{path} has no entropy mapping")
        for value in entropy.values():
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                raise CacheUnreadable(f"invalid entropy value for an entry in {path}")
        return document

    def _decode_tables(self, document: dict[str, Any]) -> Optional[FrequencyTables]:
        if SUBSTRINGS_KEY not in document or WORDS_KEY not in document:
            return None
        try:
            return FrequencyTables(
                substrings=document[SUBSTRINGS_KEY],
                words=document[WORDS_KEY],
                min_substring_length=document.get("min_substring_length", 3),
                threshold=document.get("frequency_threshold", 100),
            )
        except ValidationError as exc:
            self.logger.warning(
                "Cached frequency tables are malformed, recomputing: %d errors",
                exc.error_count(),
            )
            return None
