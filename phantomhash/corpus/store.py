"""
Corpus Store
=============

Deduplicated, normalised set of breached passwords, plus the thin loader
that turns word-list files into raw lines.

Normalisation trims surrounding whitespace and drops empty lines. The
store is built once per process and is read-only afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence

from shared.logger import PhantomLogger


@dataclass
class SourceLoad:
    """Raw lines read from a set of sources, with per-source outcome."""

    lines: list[str] = field(default_factory=list)
    loaded: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)


def load_sources(
    paths: Iterable[str | Path],
    logger: Optional[PhantomLogger] = None,
) -> SourceLoad:
    """Read every source as UTF-8 text and concatenate their lines.

    A source that is missing or unreadable contributes nothing; it is
    logged and recorded in :attr:`SourceLoad.missing` and the run goes on
    with a partial corpus. Undecodable bytes are replaced rather than
    failing the whole file.

    Args:
        paths: Word-list files, one password per line.
        logger: Logger for unavailable-source warnings.

    Returns:
        A :class:`SourceLoad` with the raw (untrimmed) lines.
    """
    result = SourceLoad()
    for raw_path in paths:
        path = Path(raw_path)
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            if logger is not None:
                logger.warning("Could not open file '%s': %s", path, exc.strerror or exc)
            result.missing.append(str(path))
            continue
        lines = text.splitlines()
        result.lines.extend(lines)
        result.loaded.append(str(path))
        if logger is not None:
            logger.debug("Loaded %d lines from %s", len(lines), path)
    return result


def normalise_lines(raw_lines: Iterable[Optional[str]]) -> list[str]:
    """Trimmed, non-empty lines with duplicates kept.

    Frequency counting runs over this list rather than the deduplicated
    store, since a password's corpus frequency is the number of times it
    was leaked.
    """
    out = []
    for line in raw_lines:
        if line is None:
            continue
        stripped = line.strip()
        if stripped:
            out.append(stripped)
    return out


class CorpusStore:
    """Set of distinct, non-empty, whitespace-trimmed passwords.

    Usage::

        store = CorpusStore.build(["password\\n", "  password ", "", "letmein"])
        len(store)            # 2
        "letmein" in store    # True
    """

    __slots__ = ("_passwords", "_ordered")

    def __init__(self, passwords: Iterable[str] = ()) -> None:
        self._passwords: frozenset[str] = frozenset(passwords)
        self._ordered: Optional[tuple[str, ...]] = None

    @classmethod
    def build(cls, raw_lines: Iterable[Optional[str]]) -> CorpusStore:
        """Trim each line, discard empties and deduplicate."""
        return cls(normalise_lines(raw_lines))

    def passwords(self) -> Sequence[str]:
        """Sorted snapshot of the corpus for reproducible partitioning."""
        if self._ordered is None:
            self._ordered = tuple(sorted(self._passwords))
        return self._ordered

    def __contains__(self, password: object) -> bool:
        return password in self._passwords

    def __len__(self) -> int:
        return len(self._passwords)

    def __iter__(self) -> Iterator[str]:
        return iter(self._passwords)

    def __bool__(self) -> bool:
        return bool(self._passwords)

    def __repr__(self) -> str:
        return f"CorpusStore(size={len(self._passwords)})"
