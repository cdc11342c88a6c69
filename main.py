#!/usr/bin/env python3
"""
FeedProxy - Feed Transformation Service
=======================================

Command-line entry point for transforming, merging and enhancing feeds.

Usage:
    python main.py --help                                  # Show all commands
    python main.py check-config                            # Validate configuration
    python main.py inspect URL                             # Show parsed feed items
    python main.py transform URL --keywords python -f json # Filter and convert a feed
    python main.py merge URL1 URL2 --limit 20              # Merge several feeds
    python main.py enhance URL -f atom                     # Add full text and reading times
"""

import sys
import asyncio
import logging
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError as OptionsValidationError
from rich.console import Console
from rich.table import Table

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from feedproxy.config.settings import get_settings
from feedproxy.ingestion.feed_fetcher import FeedFetcher
from feedproxy.ingestion.feed_parser import FeedParser
from feedproxy.models import OutputFormat
from feedproxy.processing.pipeline import FeedPipeline, RenderedFeed
from feedproxy.processing.transform import FilterOptions, SortOptions
from feedproxy.utils.logging import configure_application_logging
from feedproxy.utils.exceptions import FeedProxyError, get_user_friendly_message, handle_exception
from feedproxy.utils.validators import split_csv

# Rendered feeds go to stdout, everything else to stderr
console = Console(stderr=True)
logger = logging.getLogger("feedproxy.cli")

FORMAT_CHOICE = click.Choice([f.value for f in OutputFormat], case_sensitive=False)


@click.group(invoke_without_command=True)
@click.option('--debug', is_flag=True, help='Enable debug mode')
@click.pass_context
def cli(ctx, debug):
    """FeedProxy - parse, transform and convert RSS/Atom feeds."""
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        return

    try:
        settings = get_settings()
    except FeedProxyError as e:
        console.print(f"[bold red]❌ Configuration error: {e}[/bold red]")
        sys.exit(1)

    configure_application_logging(
        log_level="DEBUG" if debug else settings.get_effective_log_level(),
        log_file=settings.logging.file_path,
        enable_console=settings.logging.console_logging,
        structured_logging=settings.logging.structured_logging,
        max_file_size=settings.logging.max_file_size_mb * 1024 * 1024,
        backup_count=settings.logging.backup_count,
    )


@cli.command()
def check_config():
    """Validate configuration and environment variables."""
    console.print("[bold blue]🔧 Checking FeedProxy Configuration[/bold blue]")

    try:
        settings = get_settings()

        table = Table(title="Configuration Status")
        table.add_column("Component", style="cyan")
        table.add_column("Status", style="green")
        table.add_column("Details")

        checks = [
            ("Logging", _check_logging_config),
            ("HTTP", _check_http_config),
            ("Enhancement", _check_enhancement_config),
        ]

        all_ok = True
        for name, check in checks:
            ok, details = check(settings)
            all_ok = all_ok and ok
            table.add_row(name, "✅ OK" if ok else "❌ Error", details)

        console.print(table)
        if not all_ok:
            sys.exit(1)

    except FeedProxyError as e:
        console.print(f"[bold red]❌ Configuration error: {e}[/bold red]")
        sys.exit(1)


@cli.command()
@click.argument('url')
@click.option('--limit', default=10, show_default=True, help='Number of items to show')
def inspect(url, limit):
    """Fetch a feed and show what the parser extracted."""
    console.print(f"[bold blue]📡 Fetching feed: {url}[/bold blue]")

    try:
        result = FeedFetcher().fetch_text_sync(url)
        feed = FeedParser().parse(result.body)
    except FeedProxyError as e:
        console.print(f"[bold red]❌ {get_user_friendly_message(e)}: {e}[/bold red]")
        sys.exit(1)

    info_table = Table(title="Feed Information")
    info_table.add_column("Property", style="cyan")
    info_table.add_column("Value", style="green")
    info_table.add_row("Title", feed.title or "Unknown")
    description = feed.description or "None"
    if len(description) > 100:
        description = description[:97] + "..."
    info_table.add_row("Description", description)
    info_table.add_row("Format", feed.feed_type.value)
    info_table.add_row("Language", feed.language or "Not set")
    info_table.add_row("Items", str(len(feed.items)))
    console.print(info_table)

    items_table = Table(title=f"Items (first {min(limit, len(feed.items))})")
    items_table.add_column("Title", style="bold")
    items_table.add_column("Published")
    items_table.add_column("Author")
    items_table.add_column("Categories")
    for item in feed.items[:limit]:
        items_table.add_row(
            item.title,
            item.pub_date or "No date",
            item.author or "",
            ", ".join(item.categories),
        )
    console.print(items_table)


@cli.command()
@click.argument('url')
@click.option('--keywords', help='Comma-separated keywords to keep')
@click.option('--exclude', help='Comma-separated keywords to drop')
@click.option('--from-date', help='Earliest publication date')
@click.option('--to-date', help='Latest publication date')
@click.option('--categories', help='Comma-separated categories to keep')
@click.option('--limit', type=int, help='Maximum number of items')
@click.option('--sort-by', type=click.Choice(['date', 'title']), help='Sort field')
@click.option('--order', type=click.Choice(['asc', 'desc']), default='desc', show_default=True)
@click.option('--format', '-f', 'output_format', type=FORMAT_CHOICE, default='rss', show_default=True)
def transform(url, keywords, exclude, from_date, to_date, categories, limit, sort_by, order, output_format):
    """Filter, sort and convert a single feed."""
    try:
        filter_options = FilterOptions(
            keywords=split_csv(keywords),
            exclude_keywords=split_csv(exclude),
            from_date=from_date,
            to_date=to_date,
            categories=split_csv(categories),
            limit=limit,
        )
        sort_options = SortOptions(by=sort_by, order=order) if sort_by else None
    except OptionsValidationError as e:
        raise click.BadParameter(str(e))

    pipeline = FeedPipeline()
    _run_and_print(
        pipeline.transform(url, filter_options, sort_options, OutputFormat(output_format.lower())),
        "transform feed",
    )


@cli.command()
@click.argument('urls', nargs=-1, required=True)
@click.option('--limit', type=click.IntRange(min=0), help='Maximum number of items')
@click.option('--format', '-f', 'output_format', type=FORMAT_CHOICE, default='rss', show_default=True)
def merge(urls, limit, output_format):
    """Merge several feeds into one, newest items first."""
    pipeline = FeedPipeline()
    _run_and_print(
        pipeline.merge(list(urls), limit, OutputFormat(output_format.lower())),
        "merge feeds",
    )


@cli.command()
@click.argument('url')
@click.option('--format', '-f', 'output_format', type=FORMAT_CHOICE, default='rss', show_default=True)
def enhance(url, output_format):
    """Add full-text content and reading times to a feed."""
    pipeline = FeedPipeline()
    _run_and_print(
        pipeline.enhance(url, OutputFormat(output_format.lower())),
        "enhance feed",
    )


def _run_and_print(coro, operation: str) -> Optional[RenderedFeed]:
    """Run a pipeline coroutine and write its output to stdout."""
    try:
        rendered = asyncio.run(coro)
    except Exception as e:
        error = handle_exception(e, logger, operation)
        console.print(f"[bold red]❌ Failed to {operation}: {get_user_friendly_message(error)}[/bold red]")
        sys.exit(1)

    click.echo(rendered.body)
    console.print(f"[green]✅ {rendered.item_count} items ({rendered.content_type})[/green]")
    return rendered


# Helper functions for configuration checks
def _check_logging_config(settings) -> tuple[bool, str]:
    """Check logging configuration."""
    try:
        if settings.logging.file_path:
            log_path = Path(settings.logging.file_path)
            log_path.parent.mkdir(parents=True, exist_ok=True)
        return True, f"Level: {settings.logging.level.value}, Console: {settings.logging.console_logging}"
    except OSError as e:
        return False, str(e)


def _check_http_config(settings) -> tuple[bool, str]:
    """Check outbound HTTP configuration."""
    return True, f"Timeout: {settings.http.request_timeout}s, Pool: {settings.http.max_concurrent_fetches}"


def _check_enhancement_config(settings) -> tuple[bool, str]:
    """Check enhancement configuration."""
    enhancement = settings.enhancement
    return True, (
        f"Min length: {enhancement.min_content_length}, "
        f"Selectors: {len(enhancement.content_selectors)}, "
        f"WPM: {enhancement.words_per_minute}"
    )


if __name__ == "__main__":
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]👋 FeedProxy interrupted by user[/yellow]")
        sys.exit(130)
