"""Shared console helpers."""

from __future__ import annotations

import click

from shared.console import PhantomConsole
from shared.models import Finding, Severity
from phantomhash.core.models import SimilarityPair, SimilarityReport
from phantomhash.output.console import PhantomHashConsoleOutput


def test_tagged_lines_keep_literal_brackets():
    con = PhantomConsole()
    with con.rich.capture() as captured:
        con.warning("Could not open file '[lists]/gone.txt'")
        con.success("nothing leaked")
    text = captured.get()
    assert "[⚠] WARNING: Could not open file '[lists]/gone.txt'" in text
    assert "[✔] GOOD NEWS: nothing leaked" in text


def test_findings_table_lists_each_finding():
    con = PhantomConsole()
    findings = [
        Finding(severity=Severity.CRITICAL, title="Breached", description="exact match"),
        Finding(severity=Severity.LOW, title="Missing source", description="gone.txt"),
    ]
    with con.rich.capture() as captured:
        con.findings_table(findings)
    text = captured.get()
    assert "CRITICAL" in text
    assert "Missing source" in text


def test_confirm_accepts_only_y(monkeypatch):
    con = PhantomConsole(quiet=True)
    replies = iter(["Y ", "yes", ""])
    monkeypatch.setattr(click, "prompt", lambda *a, **k: next(replies))
    assert con.confirm("again?") is True
    assert con.confirm("again?") is False
    assert con.confirm("again?") is False


def test_similarity_tables_show_bracketed_passwords_verbatim():
    con = PhantomConsole()
    report = SimilarityReport(
        corpus_size=4,
        threshold=0.7,
        pairs=[
            SimilarityPair(first="[/x]abcdefgh", second="[/x]abcdefgi", score=0.8),
            SimilarityPair(first="[bold]secret98", second="[bold]secret99", score=0.75),
        ],
        clusters=[["[/x]abcdefgh", "[/x]abcdefgi"], ["[bold]secret98", "[bold]secret99"]],
    )
    with con.rich.capture() as captured:
        PhantomHashConsoleOutput(con).display_similarity(report)
    text = captured.get()
    assert "[/x]abcdefgh" in text
    assert "[bold]secret99" in text
    assert "[bold]secret98, [bold]secret99" in text
