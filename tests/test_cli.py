"""Command-line interface via click's CliRunner."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from phantomhash.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_audit_console_output(runner, config_file):
    result = runner.invoke(cli, ["-c", str(config_file), "audit", "letmein"], obj={})
    assert result.exit_code == 0, result.output
    assert "PhantomHash Password Analyzer" in result.output
    assert "found in the dictionary" in result.output
    assert "Password Improvement Recommendations" in result.output


def test_audit_json_report(runner, config_file, tmp_path):
    out = tmp_path / "audit.json"
    result = runner.invoke(
        cli,
        ["-c", str(config_file), "-q", "-o", "json", "-f", str(out), "audit", "Tr0ub4dor&3"],
        obj={},
    )
    assert result.exit_code == 0, result.output

    text = out.read_text(encoding="utf-8")
    report = json.loads(text)
    assert report["report_metadata"]["target"] == "T*********3"
    assert report["metadata"]["strength_band"] == "Very Weak"
    assert report["metadata"]["is_known_password"] is False
    assert "Tr0ub4dor&3" not in text


def test_audit_html_report(runner, config_file, tmp_path):
    out = tmp_path / "audit.html"
    result = runner.invoke(
        cli,
        ["-c", str(config_file), "-q", "-o", "html", "-f", str(out), "audit", "<b>pw</b>"],
        obj={},
    )
    assert result.exit_code == 0, result.output
    html_text = out.read_text(encoding="utf-8")
    assert html_text.startswith("<!DOCTYPE html>")
    assert "<b>pw</b>" not in html_text


def test_interactive_check_loops_until_declined(runner, config_file):
    result = runner.invoke(
        cli,
        ["-c", str(config_file), "check"],
        input="letmein\ny\nHello123!\nn\n",
        obj={},
    )
    assert result.exit_code == 0, result.output
    assert result.output.count("Password Improvement Recommendations") == 2
    assert "Thank you for using PhantomHash!" in result.output


def test_similarity_command(runner, config_file, near_duplicates_file):
    result = runner.invoke(
        cli,
        ["-c", str(config_file), "-s", str(near_duplicates_file), "similarity"],
        obj={},
    )
    assert result.exit_code == 0, result.output
    assert "Similar Pairs" in result.output


def test_similarity_resource_limit_exits_with_error(runner, tmp_path, near_duplicates_file):
    config = tmp_path / "tight.toml"
    config.write_text(
        "[global]\n"
        'log_level = "WARNING"\n'
        "[phantomhash]\n"
        f'cache_file = "{(tmp_path / "c.json").as_posix()}"\n'
        "max_similarity_corpus = 2\n",
        encoding="utf-8",
    )
    result = runner.invoke(
        cli,
        ["-c", str(config), "-s", str(near_duplicates_file), "similarity"],
        obj={},
    )
    assert result.exit_code == 1
    assert "ERROR" in result.output


def test_cache_build_and_clear(runner, config_file, cache_path):
    built = runner.invoke(cli, ["-c", str(config_file), "cache", "build"], obj={})
    assert built.exit_code == 0, built.output
    assert cache_path.exists()

    cleared = runner.invoke(cli, ["-c", str(config_file), "cache", "clear"], obj={})
    assert cleared.exit_code == 0, cleared.output
    assert not cache_path.exists()


def test_commands_persist_cache_on_exit(runner, config_file, cache_path):
    result = runner.invoke(cli, ["-c", str(config_file), "-q", "stats"], obj={})
    assert result.exit_code == 0, result.output
    assert cache_path.exists()


def test_stats_command(runner, config_file):
    result = runner.invoke(cli, ["-c", str(config_file), "stats"], obj={})
    assert result.exit_code == 0, result.output
    assert "Corpus Statistics" in result.output
    assert "Strength Bands" in result.output


def test_missing_source_warns_but_succeeds(runner, config_file, tmp_path):
    result = runner.invoke(
        cli,
        ["-c", str(config_file), "-s", str(tmp_path / "gone.txt"), "audit", "abc"],
        obj={},
    )
    assert result.exit_code == 0, result.output
    assert "Could not open file" in result.output
