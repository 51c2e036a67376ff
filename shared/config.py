"""
PhantomHash Configuration Management
=====================================

Dataclass settings read from a TOML file with two tables::

    [global]        logging, output directory, worker count
    [phantomhash]   word lists, cache location, analyzer thresholds

Keys missing from the file keep their defaults; keys the dataclasses do
not declare are ignored.

References:
    - Wiggins, A. (2011). The Twelve-Factor App. https://12factor.net/
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, TypeVar

_Section = TypeVar("_Section")

# config.toml next to the package directories.
_PROJECT_CONFIG: Path = Path(__file__).resolve().parent.parent / "config.toml"

_DEFAULT_SOURCES: tuple[str, ...] = (
    "dictionary/Ashley-Madison.txt",
    "dictionary/000webhost.txt",
    "dictionary/NordVPN.txt",
)


@dataclass(slots=True)
class HashConfig:
    """``[phantomhash]`` table: corpus inputs and analyzer tuning.

    Attributes:
        sources:               Word lists, one password per line.
        cache_file:            JSON document holding entropies and tables.
        min_substring_length:  Shortest substring counted by frequency analysis.
        frequency_threshold:   A substring or word is common above this count.
        similarity_threshold:  Jaccard score a pair must exceed to be reported.
        similarity_min_length: Substring length used for similarity sets.
        max_similarity_corpus: Refuse all-pairs scans above this corpus size.
        executor:              ``"thread"`` or ``"process"`` worker pool.
        chunk_floor:           Minimum items per worker chunk.
        min_password_length:   Shorter candidates get the too-short weakness.

    Reference:
        Bonneau, J. (2012). The Science of Guessing: Analyzing an
        Anonymized Corpus of 70 Million Passwords. IEEE S&P.
    """

    sources: list[str] = field(default_factory=lambda: list(_DEFAULT_SOURCES))
    cache_file: str = "cache.json"
    min_substring_length: int = 3
    frequency_threshold: int = 100
    similarity_threshold: float = 0.7
    similarity_min_length: int = 2
    max_similarity_corpus: int = 20_000
    executor: str = "thread"
    chunk_floor: int = 1000
    min_password_length: int = 8


@dataclass(slots=True)
class GlobalConfig:
    """``[global]`` table. ``max_workers = 0`` means one worker per CPU."""

    log_level: str = "INFO"
    log_file: str | None = None
    log_json: bool = False
    output_dir: str = "output"
    max_workers: int = 0
    debug: bool = False
    version: str = "1.0.0"


@dataclass(slots=True)
class PhantomConfig:
    """Complete configuration.

    Usage:
        >>> PhantomConfig.load().phantomhash.min_substring_length
        3
        >>> PhantomConfig.load("site.toml")  # doctest: +SKIP
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    phantomhash: HashConfig = field(default_factory=HashConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> PhantomConfig:
        """Read *path*, or the project ``config.toml`` when *path* is ``None``.

        A missing project file yields the defaults. A missing file that
        was named explicitly is an error.

        Raises:
            FileNotFoundError: *path* was given and does not exist.
            tomllib.TOMLDecodeError: The file is not valid TOML.
        """
        if path is None:
            if not _PROJECT_CONFIG.is_file():
                return cls()
            source = _PROJECT_CONFIG
        else:
            source = Path(path)
            if not source.is_file():
                raise FileNotFoundError(f"Configuration file not found: {source}")

        document: dict[str, Any] = tomllib.loads(source.read_text(encoding="utf-8"))
        return cls(
            global_settings=_section(GlobalConfig, document.get("global")),
            phantomhash=_section(HashConfig, document.get("phantomhash")),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _section(kind: type[_Section], table: dict[str, Any] | None) -> _Section:
    """Build dataclass *kind* from the TOML *table*, keeping declared keys only."""
    known = {f.name for f in fields(kind)}  # type: ignore[arg-type]
    return kind(**{k: v for k, v in (table or {}).items() if k in known})
