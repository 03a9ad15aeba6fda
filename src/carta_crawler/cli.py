"""Command-line interface for carta-crawler."""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from carta_crawler import __version__
from carta_crawler.config import (
    CrawlRequest,
    FetcherConfig,
    FilterMode,
    OrchestratorConfig,
    TimeoutPolicy,
)
from carta_crawler.discovery import CrawlResult, CrawlScheduler
from carta_crawler.fetcher import PageFetcher
from carta_crawler.orchestrator import Orchestrator
from carta_crawler.patterns import PatternRegistry

app = typer.Typer(
    name="carta-crawler",
    help="Find the pages of a website most likely to hold a restaurant menu.",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool):
    if value:
        console.print(f"carta-crawler version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=verbose)],
        force=True,
    )


def _fail(e: Exception, verbose: bool) -> None:
    err_console.print(f"[red]Error: {e}[/red]")
    if verbose:
        err_console.print_exception()
    raise typer.Exit(1)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
):
    """Menu page discovery for restaurant websites."""
    pass


@app.command()
def crawl(
    url: str = typer.Argument(..., help="Seed URL of the site to crawl"),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", help="Maximum BFS depth [default: 2]"),
    max_urls: Optional[int] = typer.Option(None, "--max-urls", help="Maximum URLs to discover [default: 50]"),
    external: Optional[bool] = typer.Option(
        None, "--external/--no-external", help="Collect links to other sites"
    ),
    timeout_ms: Optional[int] = typer.Option(
        None, "--timeout-ms", help="Global crawl timeout in milliseconds [default: 25000]"
    ),
    page_timeout_ms: Optional[int] = typer.Option(
        None, "--page-timeout-ms", help="Per-page timeout in milliseconds [default: 10000]"
    ),
    batch_size: Optional[int] = typer.Option(
        None, "--batch-size", "-b", help="Pages fetched concurrently per wave [default: 5]"
    ),
    filter_mode: Optional[FilterMode] = typer.Option(
        None, "--filter-mode", "-m", help="URL filter: none, menu or custom [default: menu]"
    ),
    include: Optional[List[str]] = typer.Option(
        None, "--include", "-i", help="Regex for URLs to include (implies custom mode)"
    ),
    exclude: Optional[List[str]] = typer.Option(
        None, "--exclude", "-e", help="Regex for URLs to exclude (implies custom mode)"
    ),
    adaptive: Optional[bool] = typer.Option(
        None, "--adaptive/--no-adaptive", help="Prune the crawl to menu-like paths"
    ),
    exact: Optional[bool] = typer.Option(
        None, "--exact/--no-exact", help="Only follow URLs under the seed's path"
    ),
    sliding_timeout: bool = typer.Option(
        False, "--sliding-timeout", help="Reset the global timeout after every wave"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="TOML file with crawl options", exists=True, dir_okay=False
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """
    Crawl a site and list the URLs most likely to be menu pages.

    Examples:

        carta-crawler crawl https://restaurant.example

        carta-crawler crawl https://restaurant.example --max-depth 3 --json

        carta-crawler crawl https://example.com/listing.html -m custom -i "/Restaurant_Review-"
    """
    _configure_logging(verbose)

    if (include or exclude) and filter_mode is None:
        filter_mode = FilterMode.CUSTOM

    overrides = {
        "max_depth": max_depth,
        "max_urls": max_urls,
        "include_external_links": external,
        "global_timeout_ms": timeout_ms,
        "per_page_timeout_ms": page_timeout_ms,
        "batch_size": batch_size,
        "filter_mode": filter_mode,
        "include_patterns": include or None,
        "exclude_patterns": exclude or None,
        "adaptive_search": adaptive,
        "exact_url_prefix": exact,
        "timeout_policy": TimeoutPolicy.SLIDING if sliding_timeout else None,
    }

    try:
        if config:
            request = CrawlRequest.from_toml(config, seed_url=url, **overrides)
        else:
            request = CrawlRequest(
                seed_url=url, **{k: v for k, v in overrides.items() if v is not None}
            )
        result = asyncio.run(_crawl(request))
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Crawl cancelled.[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        _fail(e, verbose)

    if as_json:
        typer.echo(result.model_dump_json(indent=2))
    else:
        _print_crawl_result(result)


async def _crawl(request: CrawlRequest) -> CrawlResult:
    async with PageFetcher(FetcherConfig()) as fetcher:
        return await CrawlScheduler(request, fetcher).run()


def _print_crawl_result(result: CrawlResult) -> None:
    table = Table(title=f"Candidate pages on {result.domain}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("URL", style="cyan", overflow="fold")
    for i, url in enumerate(result.filtered_urls, 1):
        table.add_row(str(i), url)
    console.print(table)

    console.print(
        f"  Found: [green]{result.urls_found}[/green]"
        f"  Kept: [green]{len(result.filtered_urls)}[/green]"
        f"  Outcome: {result.outcome.value}"
    )
    if result.priority_paths:
        console.print(f"  Priority paths: {', '.join(result.priority_paths)}")
    if result.external_urls:
        console.print(f"  External links: {len(result.external_urls)}")
    if result.timed_out:
        console.print("  [yellow]Global timeout reached, results are partial[/yellow]")


@app.command()
def scrape(
    urls: List[str] = typer.Argument(..., help="Pages to scrape"),
    text_limit: int = typer.Option(
        0, "--text-limit", help="Truncate page text to this many characters (0 = no limit)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """Scrape pages and print their title, text, metadata and links as JSON."""
    _configure_logging(verbose)

    async def _scrape():
        async with PageFetcher(FetcherConfig()) as fetcher:
            return await fetcher.fetch_many(urls)

    try:
        pages = asyncio.run(_scrape())
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Cancelled.[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        _fail(e, verbose)

    data = []
    for page in pages:
        item = page.model_dump(mode="json")
        if text_limit > 0:
            item["text"] = item["text"][:text_limit]
        data.append(item)
    typer.echo(json.dumps({"pages_scraped": len(data), "pages": data}, indent=2, ensure_ascii=False))


@app.command("crawl-sites")
def crawl_sites(
    sites_file: Path = typer.Argument(
        ..., help="File with one site URL per line", exists=True, dir_okay=False
    ),
    max_concurrency: int = typer.Option(3, "--max-concurrency", help="Sites crawled at once"),
    site_timeout_ms: int = typer.Option(
        60000, "--site-timeout-ms", help="Stop if a group of sites takes longer than this"
    ),
    filter_mode: FilterMode = typer.Option(
        FilterMode.NONE, "--filter-mode", "-m", help="URL filter applied to every site"
    ),
    dedupe_languages: bool = typer.Option(
        False, "--dedupe-languages", help="Collapse /en/... and /es/... variants of a page"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """Crawl every site listed in a file, sharing one browser."""
    _configure_logging(verbose)

    with open(sites_file) as f:
        sites = [line.strip() for line in f if line.strip() and not line.startswith("#")]

    if not sites:
        err_console.print("[yellow]No sites to crawl.[/yellow]")
        raise typer.Exit(0)

    orchestrator = Orchestrator(
        OrchestratorConfig(
            max_concurrency=max_concurrency,
            site_timeout_ms=site_timeout_ms,
            dedupe_languages=dedupe_languages,
        ),
        crawl_options={"filter_mode": filter_mode},
        console=err_console,
    )

    try:
        result = asyncio.run(orchestrator.run(sites, show_progress=not as_json))
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Crawl cancelled.[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        _fail(e, verbose)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        orchestrator.print_summary(result)


@app.command("list-patterns")
def list_patterns():
    """List available URL filter presets."""
    patterns = PatternRegistry.list_patterns()

    table = Table(title="Available Filter Presets")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Exclude", justify="right")
    table.add_column("Include", justify="right")
    table.add_column("Priority", justify="right")

    for pattern in patterns:
        table.add_row(
            pattern.name,
            pattern.description,
            str(len(pattern.exclude_patterns)),
            str(len(pattern.include_patterns)),
            str(len(pattern.priority_patterns)),
        )

    console.print(table)


if __name__ == "__main__":
    app()
