"""CLI for the SERP pipeline."""

import asyncio
import json
import re
import sys
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from serp_pipeline.config import ConfigError, get_settings
from serp_pipeline.errors import ChallengeDetected
from serp_pipeline.extractors.pipeline import extract_businesses, extract_place_details, extract_serp
from serp_pipeline.fetch import (
    FetchResult,
    build_maps_search_url,
    build_place_url,
    build_search_url,
    fetch_document,
)
from serp_pipeline.models import BusinessRecord, BusinessSearchResult, SerpResponse

# Load environment variables (override=True to beat shell env vars)
load_dotenv(override=True)

app = typer.Typer(
    name="serp-pipeline",
    help="Extract business listings and search-result features from raw pages",
    add_completion=False,
)
console = Console()

EXIT_TRANSPORT = 1
EXIT_CHALLENGE = 2
CODE_RE = re.compile(r"^[A-Za-z]{2}$")


def read_source(source: str) -> str:
    """Document text from a file path, or stdin for "-"."""
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.is_file():
        console.print(f"[red]Error: no such file: {source}[/red]")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8", errors="replace")


def check_code(value: str, name: str) -> str:
    if not CODE_RE.match(value):
        raise typer.BadParameter(f"{name} must be a 2-letter code, got {value!r}")
    return value.lower()


def check_limit(limit: int) -> int:
    """Upper bound comes from SERP_PIPELINE_MAX_LIMIT."""
    max_limit = get_settings().max_limit
    if limit > max_limit:
        raise typer.BadParameter(f"limit must be at most {max_limit}, got {limit}")
    return limit


def emit_json(record, output: Optional[Path]) -> None:
    text = json.dumps(record, indent=2, ensure_ascii=False)
    if output:
        output.write_text(text + "\n", encoding="utf-8")
        console.print(f"[dim]Wrote {output}[/dim]")
    else:
        typer.echo(text)


def challenge_exit(error: ChallengeDetected) -> typer.Exit:
    console.print(f"[red]Blocked: {error}[/red]")
    console.print("[dim]Rotate to a different network identity before retrying.[/dim]")
    return typer.Exit(EXIT_CHALLENGE)


def fetch_or_exit(url: str, language: str = "en") -> str:
    settings = get_settings()
    console.print(f"[dim]Fetching: {url}[/dim]")
    result: FetchResult = asyncio.run(
        fetch_document(url, timeout=settings.timeout, retries=settings.retries, language=language)
    )
    if not result.ok:
        console.print(f"[red]Fetch failed: {result.error} (HTTP {result.status or '-'})[/red]")
        raise typer.Exit(EXIT_TRANSPORT)
    console.print(f"[dim]HTML length: {len(result.html)}[/dim]")
    return result.html


def print_businesses(result: BusinessSearchResult) -> None:
    """Print a summary table of business listings."""
    table = Table(title=f"Businesses ({result.total_found})")
    table.add_column("Name", style="cyan", max_width=30)
    table.add_column("Rating", style="yellow", justify="right")
    table.add_column("Reviews", justify="right")
    table.add_column("Category", style="blue", max_width=20)
    table.add_column("Address", style="green", max_width=35)
    table.add_column("Phone", style="magenta")

    for business in result.businesses:
        table.add_row(
            business.name[:30],
            f"{business.rating:.1f}" if business.rating is not None else "-",
            str(business.review_count) if business.review_count is not None else "-",
            business.categories[0] if business.categories else "-",
            business.address or "-",
            business.phone or "-",
        )

    console.print(table)
    if result.next_page_token:
        console.print(f"[dim]Next page token: {result.next_page_token}[/dim]")


def print_details(record: BusinessRecord) -> None:
    table = Table(title=record.name, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in record.to_record().items():
        if key == "name" or value in (None, [], {}, False):
            continue
        if isinstance(value, dict):
            value = ", ".join(f"{k}: {v}" for k, v in value.items())
        elif isinstance(value, list):
            value = ", ".join(str(v) for v in value)
        table.add_row(key, str(value))
    console.print(table)


def print_serp(response: SerpResponse) -> None:
    table = Table(title=f"Organic results for {response.query!r}")
    table.add_column("#", justify="right", style="yellow")
    table.add_column("Title", style="cyan", max_width=50)
    table.add_column("URL", style="green", max_width=50)
    for result in response.organic:
        table.add_row(str(result.position), result.title, result.display_url)
    console.print(table)

    if response.total_results:
        console.print(f"  Total results: {response.total_results}")
    console.print(f"  Ads: {len(response.ads)}")
    console.print(f"  People also ask: {len(response.people_also_ask)}")
    for question in response.people_also_ask[:5]:
        console.print(f"    [dim]- {question.question}[/dim]")
    console.print(f"  Map pack: {len(response.map_pack)}")
    if response.featured_snippet:
        console.print(f"  Featured snippet: [dim]{response.featured_snippet.text[:80]}[/dim]")
    if response.ai_overview:
        console.print(f"  AI overview: [dim]{response.ai_overview.text[:80]}[/dim]")
    if response.knowledge_panel:
        console.print(f"  Knowledge panel: {response.knowledge_panel.title}")
    if response.related_searches:
        console.print(f"  Related: [dim]{', '.join(response.related_searches[:8])}[/dim]")


def run_businesses(html: str, limit: int, start: int, query: str, location: str, as_json: bool, output):
    try:
        result = extract_businesses(html, limit=limit, start=start, query=query, location=location)
    except ChallengeDetected as e:
        raise challenge_exit(e)
    if as_json or output:
        emit_json(result.to_record(), output)
    else:
        print_businesses(result)


def run_details(html: str, place_id: Optional[str], as_json: bool, output):
    try:
        record = extract_place_details(html, place_id)
    except ChallengeDetected as e:
        raise challenge_exit(e)
    if as_json or output:
        emit_json(record.to_record() if record else None, output)
    elif record:
        print_details(record)
    else:
        console.print("[yellow]No place details found[/yellow]")


def run_serp(html: str, query: str, country: str, language: str, location: Optional[str], as_json: bool, output):
    try:
        response = extract_serp(html, query, country=country, language=language, location=location)
    except ChallengeDetected as e:
        raise challenge_exit(e)
    if as_json or output:
        emit_json(response.to_record(), output)
    else:
        print_serp(response)


@app.callback()
def main():
    """Validate settings before any command runs."""
    try:
        get_settings()
    except ConfigError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def businesses(
    source: str = typer.Argument("-", help="Saved HTML file (- for stdin)"),
    limit: int = typer.Option(0, "--limit", "-l", min=0, help="Max listings (0 = default)"),
    start: int = typer.Option(0, "--start", min=0, help="Offset the page was fetched at"),
    query: str = typer.Option("", "--query", "-q", help="Query to echo into the result"),
    location: str = typer.Option("", "--location", help="Location to echo into the result"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to a file"),
):
    """Extract business listings from a saved maps results page."""
    limit = check_limit(limit)
    run_businesses(read_source(source), limit, start, query, location, as_json, output)


@app.command()
def details(
    source: str = typer.Argument("-", help="Saved HTML file (- for stdin)"),
    place_id: Optional[str] = typer.Option(None, "--place-id", "-p", help="Place id to use if the page has none"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to a file"),
):
    """Extract one detailed record from a saved place page."""
    run_details(read_source(source), place_id, as_json, output)


@app.command()
def serp(
    source: str = typer.Argument("-", help="Saved HTML file (- for stdin)"),
    query: str = typer.Option(..., "--query", "-q", help="The query the page was fetched for"),
    country: str = typer.Option("us", "--country", "-c", help="2-letter country code"),
    language: str = typer.Option("en", "--language", help="2-letter language code"),
    location: Optional[str] = typer.Option(None, "--location", help="Location appended to the query"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a summary"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to a file"),
):
    """Extract every search-result feature from a saved results page."""
    country = check_code(country, "country")
    language = check_code(language, "language")
    run_serp(read_source(source), query, country, language, location, as_json, output)


@app.command("fetch-maps")
def fetch_maps(
    query: str = typer.Argument(..., help="What to search for, e.g. 'pizza'"),
    location: str = typer.Option("", "--location", help="Where, e.g. 'Austin, TX'"),
    limit: int = typer.Option(0, "--limit", "-l", min=0, help="Max listings (0 = default)"),
    start: int = typer.Option(0, "--start", min=0, help="Continuation token from a previous page"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to a file"),
):
    """Fetch a maps search page and extract its listings."""
    limit = check_limit(limit)
    html = fetch_or_exit(build_maps_search_url(query, location or None, start))
    run_businesses(html, limit, start, query, location, as_json, output)


@app.command("fetch-place")
def fetch_place(
    place_id: str = typer.Argument(..., help="Place id, e.g. ChIJ..."),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to a file"),
):
    """Fetch a place page by id and extract its details."""
    html = fetch_or_exit(build_place_url(place_id))
    run_details(html, place_id, as_json, output)


@app.command("fetch-serp")
def fetch_serp(
    query: str = typer.Argument(..., help="Search query"),
    country: str = typer.Option("us", "--country", "-c", help="2-letter country code"),
    language: str = typer.Option("en", "--language", help="2-letter language code"),
    location: Optional[str] = typer.Option(None, "--location", help="Location appended to the query"),
    start: int = typer.Option(0, "--start", min=0, help="Result offset (0, 10, 20, ...)"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a summary"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to a file"),
):
    """Fetch a results page and extract every search-result feature."""
    country = check_code(country, "country")
    language = check_code(language, "language")
    html = fetch_or_exit(build_search_url(query, country, language, location, start), language=language)
    run_serp(html, query, country, language, location, as_json, output)


if __name__ == "__main__":
    app()
