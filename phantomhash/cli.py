"""
PhantomHash CLI
================

Click-based command-line interface for the PhantomHash breached-password
corpus auditor. Provides an interactive checker, one-shot audits, the
offline similarity report, cache management and corpus statistics.

Usage::

    python -m phantomhash check
    python -m phantomhash audit "Tr0ub4dor&3"
    python -m phantomhash -o json audit "Tr0ub4dor&3"
    python -m phantomhash similarity --threshold 0.8
    python -m phantomhash cache build
    python -m phantomhash -s rockyou.txt stats

References:
    - Click Documentation. https://click.palletsprojects.com/
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import click

from shared.config import PhantomConfig
from shared.console import PhantomConsole
from shared.models import ScanResult

from phantomhash import __version__
from phantomhash.analyzers.similarity import ResourceLimitError
from phantomhash.core.engine import PhantomHashEngine
from phantomhash.core.models import CorpusStats, SimilarityReport, Verdict
from phantomhash.output.console import PhantomHashConsoleOutput
from phantomhash.output.report import PhantomHashReportGenerator


# ===================================================================== #
#  Async Runner Helper
# ===================================================================== #

def _run_async(coro):
    """Run an async coroutine from synchronous Click handlers."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop and loop.is_running():
        import concurrent.futures
        with concurrent.futures.ThreadPoolExecutor() as pool:
            return pool.submit(asyncio.run, coro).result()
    return asyncio.run(coro)


# ===================================================================== #
#  CLI Group
# ===================================================================== #

@click.group()
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to PhantomHash configuration file (TOML).",
)
@click.option(
    "--output", "-o",
    type=click.Choice(["console", "json", "html"]),
    default="console",
    help="Output format.",
)
@click.option(
    "--output-file", "-f",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output file path (for JSON/HTML output).",
)
@click.option(
    "--quiet", "-q",
    is_flag=True,
    default=False,
    help="Suppress banner and informational output.",
)
@click.option(
    "--source", "-s",
    multiple=True,
    type=click.Path(dir_okay=False),
    help="Password list to load (repeatable). Overrides the configured sources.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[str],
    output: str,
    output_file: Optional[str],
    quiet: bool,
    source: tuple[str, ...],
) -> None:
    """PhantomHash -- Breached Password Corpus Auditor.

    Check passwords against breached-password dictionaries: entropy,
    structural weaknesses, exact breach matches and frequent dictionary
    substrings.
    """
    ctx.ensure_object(dict)

    phantom_config = PhantomConfig.load(config) if config else PhantomConfig()
    ctx.obj["config"] = phantom_config
    ctx.obj["output_format"] = output
    ctx.obj["output_file"] = output_file
    ctx.obj["quiet"] = quiet

    console = PhantomConsole(quiet=quiet)
    engine = PhantomHashEngine(phantom_config, sources=list(source) or None)
    ctx.obj["console"] = console
    ctx.obj["engine"] = engine
    ctx.obj["display"] = PhantomHashConsoleOutput(console)
    ctx.obj["reporter"] = PhantomHashReportGenerator(version=__version__)

    # The cache document is written once, when the command finishes.
    ctx.call_on_close(engine.close)

    if not quiet:
        console.banner(version=__version__)


def _prepare(ctx: click.Context, *, refresh: bool = False) -> CorpusStats:
    """Load the cache and dictionaries before a command needs them."""
    engine: PhantomHashEngine = ctx.obj["engine"]
    console: PhantomConsole = ctx.obj["console"]

    with console.status("Loading dictionary passwords..."):
        stats = _run_async(engine.prepare(refresh=refresh))

    for missing in stats.sources_missing:
        console.warning(f"Could not open file '{missing}'")
    if stats.corpus_size == 0:
        console.warning(
            "No dictionary passwords were loaded; only structural checks apply."
        )
    return stats


def _handle_output(ctx: click.Context, result: ScanResult, default_name: str) -> None:
    """Write *result* as JSON or HTML according to the group options."""
    output_format = ctx.obj["output_format"]
    output_file = ctx.obj["output_file"]
    reporter: PhantomHashReportGenerator = ctx.obj["reporter"]
    console: PhantomConsole = ctx.obj["console"]
    config: PhantomConfig = ctx.obj["config"]

    if output_format == "json":
        if output_file:
            path = reporter.generate_json(result, Path(output_file))
            console.success(f"JSON report saved to: {path}")
        else:
            click.echo(json.dumps(
                reporter.build_json(result),
                indent=2,
                ensure_ascii=False,
                default=str,
            ))
    elif output_format == "html":
        if output_file:
            path = Path(output_file)
        else:
            path = Path(config.global_settings.output_dir) / f"{default_name}.html"
        path = reporter.generate_html(result, path)
        console.success(f"HTML report saved to: {path}")


# ===================================================================== #
#  Subcommands
# ===================================================================== #

@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Interactively test passwords (input is neither echoed nor saved).

    Prompts for a password, prints its analysis and the improvement
    recommendations, and repeats until you answer anything but "y".
    """
    engine: PhantomHashEngine = ctx.obj["engine"]
    display: PhantomHashConsoleOutput = ctx.obj["display"]
    console: PhantomConsole = ctx.obj["console"]

    _prepare(ctx)

    while True:
        console.blank()
        password = console.prompt_secret(
            "Enter your password (your input will not be saved)"
        )
        display.display_verdict(engine.audit(password))
        console.blank()
        if not console.confirm("Would you like to test another password? (y/n)"):
            break

    console.blank()
    console.info("Thank you for using PhantomHash!")


@cli.command()
@click.argument("password")
@click.pass_context
def audit(ctx: click.Context, password: str) -> None:
    """Audit a single PASSWORD against the dictionaries.

    Reports entropy and strength band, structural weaknesses, an exact
    breach match and substrings that are frequent in the corpus.
    """
    engine: PhantomHashEngine = ctx.obj["engine"]
    display: PhantomHashConsoleOutput = ctx.obj["display"]

    _prepare(ctx)
    result = engine.audit_scan(password)

    if ctx.obj["output_format"] == "console":
        display.display_verdict(Verdict.model_validate(result.metadata))
        ctx.obj["console"].findings_table(result.findings)
    else:
        _handle_output(ctx, result, "phantomhash_audit")


@cli.command()
@click.option(
    "--threshold", "-t",
    type=click.FloatRange(0.0, 1.0),
    default=None,
    help="Report pairs whose Jaccard similarity exceeds this (default from config).",
)
@click.option(
    "--limit", "-n",
    type=click.IntRange(min=1),
    default=50,
    show_default=True,
    help="Maximum pairs and clusters shown on the console.",
)
@click.pass_context
def similarity(ctx: click.Context, threshold: Optional[float], limit: int) -> None:
    """Find highly similar password pairs inside the corpus.

    Exhaustive all-pairs comparison: intended as an offline diagnostic
    on corpora up to the configured ``max_similarity_corpus``.
    """
    engine: PhantomHashEngine = ctx.obj["engine"]
    display: PhantomHashConsoleOutput = ctx.obj["display"]
    console: PhantomConsole = ctx.obj["console"]

    _prepare(ctx)
    try:
        with console.status("Analyzing password similarity..."):
            report: SimilarityReport = _run_async(engine.scan_similarity(threshold))
    except ResourceLimitError as exc:
        console.error(str(exc))
        ctx.exit(1)

    if ctx.obj["output_format"] == "console":
        display.display_similarity(report, limit=limit)
    else:
        _handle_output(ctx, engine.similarity_scan_result(report), "phantomhash_similarity")


@cli.group()
def cache() -> None:
    """Manage the persisted entropy and frequency cache."""


@cache.command("build")
@click.pass_context
def cache_build(ctx: click.Context) -> None:
    """Regenerate the cache from the dictionaries and save it."""
    engine: PhantomHashEngine = ctx.obj["engine"]
    console: PhantomConsole = ctx.obj["console"]

    _prepare(ctx, refresh=True)
    path = engine.close()
    if path is not None:
        console.success(f"Cache generated and saved to '{path}'.")
    else:
        console.info("Cache is already up to date.")


@cache.command("clear")
@click.pass_context
def cache_clear(ctx: click.Context) -> None:
    """Delete the cache document; the next run regenerates it."""
    engine: PhantomHashEngine = ctx.obj["engine"]
    console: PhantomConsole = ctx.obj["console"]

    path = engine.cache_path
    if path.exists():
        path.unlink()
        console.success(f"Cache '{path}' removed.")
    else:
        console.info(f"No cache found at '{path}'.")


@cli.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show corpus size, frequency-table sizes and the entropy distribution."""
    engine: PhantomHashEngine = ctx.obj["engine"]
    display: PhantomHashConsoleOutput = ctx.obj["display"]

    corpus_stats = _prepare(ctx)

    if ctx.obj["output_format"] == "console":
        display.display_stats(corpus_stats)
    else:
        _handle_output(ctx, engine.stats_scan_result(), "phantomhash_stats")


# ===================================================================== #
#  Entry Point
# ===================================================================== #

def main() -> None:
    """Main entry point for the PhantomHash CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
