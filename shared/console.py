"""
PhantomHash Console Interface
==============================

Thin presentation layer over :class:`rich.console.Console` shared by every
PhantomHash command: the ghost banner, section rules, tagged status lines,
tables, a spinner and the two interactive prompts.

References:
    - Rich library: https://github.com/Textualize/rich
    - Click prompts: https://click.palletsprojects.com/en/stable/prompts/
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Sequence

import click
from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.status import Status
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

_THEME = Theme(
    {
        "ph.banner": "bold bright_cyan",
        "ph.rule": "bold bright_magenta",
        "ph.muted": "dim white",
        "ph.good": "bold green",
        "ph.warn": "bold yellow",
        "ph.bad": "bold red",
        "ph.note": "bold bright_blue",
        # Finding severities, keyed by Severity.value.lower().
        "ph.sev.critical": "bold white on red",
        "ph.sev.high": "bold red",
        "ph.sev.medium": "bold yellow",
        "ph.sev.low": "bold bright_cyan",
        "ph.sev.info": "bold bright_blue",
    }
)

# (style, glyph, label) per message kind.
_TAGS: dict[str, tuple[str, str, str]] = {
    "success": ("ph.good", "✔", "GOOD NEWS:"),
    "warning": ("ph.warn", "⚠", "WARNING:"),
    "error": ("ph.bad", "✘", "ERROR:"),
    "info": ("ph.note", "ℹ", "INFO:"),
}

_GHOST = (
    "⠀⠀⠀⠀⠀⢀⣴⣿⣿⣿⣦⠀\n"
    "⠀⠀⠀⠀⣰⣿⡟⢻⣿⡟⢻⣧\n"
    "⠀⠀⠀⣰⣿⣿⣇⣸⣿⣇⣸⣿\n"
    "⠀⠀⣴⣿⣿⣿⣿⠟⢻⣿⣿⣿\n"
    "⣠⣾⣿⣿⣿⣿⣿⣤⣼⣿⣿⠇\n"
    "⢿⡿⢿⣿⣿⣿⣿⣿⣿⣿⡿⠀\n"
    "⠀⠀⠀⠈⠿⠿⠋⠙⢿⣿⡿⠁⠀"
)


def _styled_table(title: str | None = None, caption: str | None = None) -> Table:
    return Table(
        title=title,
        caption=caption,
        border_style="bright_cyan",
        header_style="bold bright_magenta",
        show_lines=True,
    )


class PhantomConsole:
    """Console used by the CLI and the result renderers.

    Usage::

        con = PhantomConsole(quiet=False)
        con.banner("1.0.0")
        con.section("Your Password Analysis")
        con.warning("Your password is found in the dictionary.")

    Args:
        quiet:  Drop every printed line. Prompts still read input.
    """

    def __init__(self, *, quiet: bool = False) -> None:
        self._out = Console(theme=_THEME, quiet=quiet, highlight=False)

    @property
    def rich(self) -> Console:
        """The wrapped Rich console, for renderables this class has no helper for."""
        return self._out

    def banner(self, version: str = "1.0.0") -> None:
        stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        art = Text(_GHOST + "\n\n", style="bright_cyan")
        art.append("=== PhantomHash Password Analyzer ===\n", style="ph.banner")
        art.append("Breached-corpus password auditing\n", style="ph.muted")
        art.append(f"v{version} · {stamp}", style="ph.muted")
        self._out.print(Panel(Align.center(art), border_style="bright_cyan", padding=(1, 2)))

    def section(self, title: str) -> None:
        self._out.rule(Text(f" {title} ", style="ph.rule"), style="ph.rule")
        self._out.line()

    # ------------------------------------------------------------------ #
    #  Tagged lines
    # ------------------------------------------------------------------ #

    def _tagged(self, kind: str, message: str) -> None:
        style, glyph, label = _TAGS[kind]
        line = Text(f"[{glyph}] {label} ", style=style)
        line.append(message)
        self._out.print(line)

    def success(self, message: str) -> None:
        self._tagged("success", message)

    def warning(self, message: str) -> None:
        self._tagged("warning", message)

    def error(self, message: str) -> None:
        self._tagged("error", message)

    def info(self, message: str) -> None:
        self._tagged("info", message)

    def blank(self, count: int = 1) -> None:
        self._out.line(count)

    # ------------------------------------------------------------------ #
    #  Tables
    # ------------------------------------------------------------------ #

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        caption: str | None = None,
    ) -> None:
        """Print *rows* under *columns*.

        Cells become plain :class:`Text`, so corpus passwords such as
        ``[bold]secret`` are shown verbatim instead of parsed as markup.
        """
        tbl = _styled_table(title, caption)
        for name in columns:
            tbl.add_column(name)
        for row in rows:
            tbl.add_row(*(Text(str(cell)) for cell in row))
        self._out.print(tbl)

    def findings_table(self, findings: Sequence[Any]) -> None:
        """Print :class:`shared.models.Finding` objects, severity coloured."""
        tbl = _styled_table("Findings")
        tbl.add_column("#", style="dim", justify="right")
        tbl.add_column("Severity")
        tbl.add_column("Title")
        tbl.add_column("Description", ratio=2)
        for number, finding in enumerate(findings, start=1):
            severity = finding.severity.value
            tbl.add_row(
                str(number),
                Text(severity, style=f"ph.sev.{severity.lower()}"),
                Text(finding.title),
                Text(finding.description),
            )
        self._out.print(tbl)

    # ------------------------------------------------------------------ #
    #  Interaction
    # ------------------------------------------------------------------ #

    @contextmanager
    def status(self, message: str) -> Iterator[Status]:
        """Spinner shown while the block runs."""
        with self._out.status(Text(message, style="ph.note"), spinner="dots") as spinner:
            yield spinner

    def prompt_secret(self, message: str) -> str:
        """Read one line with echo off. An empty answer returns ``""``."""
        return click.prompt(message, hide_input=True, default="", show_default=False)

    def confirm(self, message: str) -> bool:
        """Anything other than ``y`` (case-insensitive) is a no."""
        reply = click.prompt(message, default="n", show_default=False)
        return reply.strip().lower() == "y"
