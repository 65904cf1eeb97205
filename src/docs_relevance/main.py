"""Command-line entry point for inspecting documentation search rankings.

This is operator tooling: it runs the same pipeline the chat endpoint uses
and prints results, score breakdowns and query analyses. The serving
interface is ``docs_relevance.search_content``; nothing here is on the
request path.
"""

import asyncio
import json
import sys
import traceback
from typing import Optional

import click

from .__version__ import __version__
from .config.logging import configure_logging
from .config.settings import Settings, get_settings
from .exceptions import ConfigurationError
from .search.context import build_prompt_context
from .search.query_processor import QueryAnalyzer
from .search.search_engine import SearchEngine


class CLIError(Exception):
    """Base CLI error with user-friendly messages."""

    def __init__(self, message: str, suggestion: Optional[str] = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)


def handle_cli_error(error: Exception, ctx: Optional[click.Context] = None):
    """Report an error and exit non-zero."""
    if isinstance(error, CLIError):
        click.echo(f"Error: {error.message}", err=True)
        if error.suggestion:
            click.echo(f"Suggestion: {error.suggestion}", err=True)
    elif isinstance(error, click.ClickException):
        error.show()
    else:
        verbose = bool(ctx and ctx.obj and ctx.obj.get("verbose"))
        click.echo(f"Unexpected error: {error}", err=True)
        if verbose:
            click.echo(traceback.format_exc(), err=True)
        else:
            click.echo("Run with --verbose for detailed error information", err=True)
    sys.exit(1)


def _settings_with_base_url(settings: Settings, base_url: Optional[str]) -> Settings:
    if not base_url:
        return settings
    if not base_url.startswith(("http://", "https://")):
        raise ConfigurationError(
            f"Invalid base url: {base_url}", {"base_url": base_url}
        )
    corpus = settings.corpus.model_copy(update={"base_url": base_url})
    return settings.model_copy(update={"corpus": corpus})


def _get_engine(ctx: click.Context) -> SearchEngine:
    if ctx.obj.get("engine") is None:
        ctx.obj["engine"] = SearchEngine.from_settings(ctx.obj["settings"])
    return ctx.obj["engine"]


@click.group()
@click.version_option(version=__version__, prog_name="docs-relevance")
@click.option(
    "--base-url",
    type=str,
    default=None,
    help="Site serving the documentation export (overrides DOCS_CORPUS_BASE_URL)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output with debug logging",
)
@click.option(
    "--quiet", "-q", is_flag=True, help="Only log errors"
)
@click.pass_context
def cli(ctx: click.Context, base_url: Optional[str], verbose: bool, quiet: bool):
    """Inspect relevance-ranked documentation search.

    \b
    Examples:
      docs-relevance search "what is icm"
      docs-relevance search "l1 deploy tutorial" --format json
      docs-relevance explain "how to create a validator" --limit 3
      docs-relevance analyze "difference between l1 and subnet"
    """
    if verbose and quiet:
        raise click.BadParameter("Cannot use both --verbose and --quiet options")

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    try:
        ctx.obj["settings"] = _settings_with_base_url(
            ctx.obj.get("settings") or get_settings(), base_url
        )
    except ConfigurationError as e:
        handle_cli_error(
            CLIError(e.message, "Pass an absolute http(s) URL to --base-url"), ctx
        )

    settings = ctx.obj["settings"]
    if verbose or settings.debug:
        level = "DEBUG"
    elif quiet:
        level = "ERROR"
    else:
        level = settings.logging.level
    configure_logging(
        level=level,
        log_file=settings.logging.file_path,
        json_logs=settings.logging.json_format,
    )


@cli.command()
@click.argument("query")
@click.option(
    "--limit", "-n", type=click.IntRange(min=1), default=None, help="Show at most N results"
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@click.pass_context
def search(ctx: click.Context, query: str, limit: Optional[int], output_format: str):
    """Run QUERY and print the ranked results."""
    try:
        engine = _get_engine(ctx)
        results = asyncio.run(engine.search_content(query))
        if limit is not None:
            results = results[:limit]

        if output_format == "json":
            click.echo(json.dumps([r.to_dict() for r in results], indent=2))
            return

        if not results:
            click.echo("No matching documentation sections.")
            return
        for position, result in enumerate(results, start=1):
            click.echo(f"{position:>2}. {result.title}  [{result.score:.1f}]")
            click.echo(f"    {result.url}")
    except Exception as error:
        handle_cli_error(error, ctx)


@cli.command()
@click.argument("query")
@click.option(
    "--limit", "-n", type=click.IntRange(min=1), default=5, help="Explain the top N results"
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@click.pass_context
def explain(ctx: click.Context, query: str, limit: int, output_format: str):
    """Print how each top result for QUERY was scored."""
    try:
        engine = _get_engine(ctx)
        breakdowns = asyncio.run(engine.explain(query, limit=limit))
        if output_format == "json":
            click.echo(json.dumps([b.to_dict() for b in breakdowns], indent=2))
            return
        if not breakdowns:
            click.echo("No matching documentation sections.")
            return
        for position, breakdown in enumerate(breakdowns, start=1):
            click.echo(f"{position:>2}. {breakdown.title}  [{breakdown.final_score:.1f}]")
            click.echo(f"    {breakdown.url}")
            for factor in breakdown.factors:
                sign = "x" if factor.kind == "multiply" else "+"
                click.echo(f"      {sign} {factor.value:g}  {factor.name}")
    except Exception as error:
        handle_cli_error(error, ctx)


@cli.command()
@click.argument("query")
def analyze(query: str):
    """Print the term filtering and intent classification of QUERY."""
    analysis = QueryAnalyzer().analyze(query)
    click.echo(json.dumps(analysis.to_dict(), indent=2))


@cli.command()
@click.argument("query")
@click.pass_context
def context(ctx: click.Context, query: str):
    """Print the prompt context block built for QUERY."""
    try:
        engine = _get_engine(ctx)
        config = ctx.obj["settings"].search.context
        results = asyncio.run(engine.search_content(query))
        prompt = build_prompt_context(
            results, primary_limit=config.primary_results, site_url=config.site_url
        )
        click.echo(prompt.text)
    except Exception as error:
        handle_cli_error(error, ctx)


if __name__ == "__main__":
    cli()
