"""Shared fixtures: small breached corpora, temp cache paths and quiet configs."""

from __future__ import annotations

from pathlib import Path

import pytest

from shared.config import PhantomConfig
from shared.logger import PhantomLogger
from phantomhash.analyzers.entropy_cache import EntropyCache


@pytest.fixture
def breach_lines() -> list[str]:
    """101 leaks each of three passwords: every one clears the 100 threshold."""
    return ["password"] * 101 + ["password1"] * 101 + ["letmein"] * 101


@pytest.fixture
def breach_file(tmp_path: Path, breach_lines: list[str]) -> Path:
    path = tmp_path / "breach.txt"
    path.write_text("\n".join(breach_lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def near_duplicates_file(tmp_path: Path) -> Path:
    path = tmp_path / "near.txt"
    path.write_text(
        "password1\npassword12\npassword123\nletmein\n  letmein  \n\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def cache_path(tmp_path: Path) -> Path:
    return tmp_path / "state" / "cache.json"


@pytest.fixture
def config(breach_file: Path, cache_path: Path) -> PhantomConfig:
    cfg = PhantomConfig()
    cfg.global_settings.log_level = "WARNING"
    cfg.phantomhash.sources = [str(breach_file)]
    cfg.phantomhash.cache_file = str(cache_path)
    return cfg


@pytest.fixture
def config_file(tmp_path: Path, breach_file: Path, cache_path: Path) -> Path:
    path = tmp_path / "phantomhash.toml"
    path.write_text(
        "[global]\n"
        'log_level = "WARNING"\n'
        f'output_dir = "{(tmp_path / "reports").as_posix()}"\n'
        "\n"
        "[phantomhash]\n"
        f'sources = ["{breach_file.as_posix()}"]\n'
        f'cache_file = "{cache_path.as_posix()}"\n',
        encoding="utf-8",
    )
    return path


@pytest.fixture
def quiet_logger() -> PhantomLogger:
    return PhantomLogger("phantomhash.tests", log_level="WARNING", console_output=False)


@pytest.fixture
def cache(quiet_logger: PhantomLogger) -> EntropyCache:
    return EntropyCache(logger=quiet_logger)
