"""Woofadaar search CLI - search the pet-care platform from a terminal.

This module provides a command-line interface for the search API, allowing
users to:
- Search community questions, partners and their dogs' health logs
- Inspect the CLI configuration
"""

import asyncio
import json
import os
from typing import Any

import httpx
import typer
from rich.console import Console
from rich.table import Table

from .. import __version__

app = typer.Typer(
    name="woofsearch",
    help="Woofadaar Search CLI - Search questions, partners and health logs",
    no_args_is_help=True,
)
console = Console()

# Default configuration - can be overridden by environment variables
DEFAULT_API_BASE_URL = "http://localhost:8000/api/v1"
API_URL_ENV = "WOOFSEARCH_API_URL"
API_TOKEN_ENV = "WOOFSEARCH_API_TOKEN"

EXCERPT_WIDTH = 80


def get_api_base_url() -> str:
    """Get the API base URL from environment or default."""
    return os.getenv(API_URL_ENV, DEFAULT_API_BASE_URL)


def get_headers(token: str | None) -> dict[str, str]:
    """Get request headers including authorization if a token is available."""
    headers = {"Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def build_search_params(
    query: str,
    search_type: str,
    lang: str,
    sort: str,
    page: int,
    limit: int,
    category: str | None = None,
    urgent: bool = False,
    partner_type: str | None = None,
    location: str | None = None,
) -> dict[str, Any]:
    """Build query-string parameters for GET /search/advanced."""
    params: dict[str, Any] = {
        "q": query,
        "type": search_type,
        "lang": lang,
        "sort": sort,
        "page": page,
        "limit": limit,
    }
    if category:
        params["category"] = category
    if urgent:
        params["urgent"] = "true"
    if partner_type:
        params["partner_type"] = partner_type
    if location:
        params["location"] = location
    return params


def _error_message(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except ValueError:
        return response.text
    if isinstance(detail, dict):
        return f"{detail.get('error')}: {detail.get('message')}"
    return str(detail)


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query"),
    search_type: str = typer.Option(
        "all",
        "--type",
        "-t",
        help="What to search: all, questions, partners, health or content",
    ),
    lang: str = typer.Option("en", "--lang", "-l", help="Query language (en, hi, ...)"),
    sort: str = typer.Option(
        "relevance",
        "--sort",
        "-s",
        help="Ordering: relevance, date, popularity or rating",
    ),
    page: int = typer.Option(1, "--page", "-p", help="Page number"),
    limit: int = typer.Option(20, "--limit", "-n", help="Results per page (max 100)"),
    category: str = typer.Option(None, "--category", help="Question category filter"),
    urgent: bool = typer.Option(False, "--urgent", help="Only urgent questions"),
    partner_type: str = typer.Option(None, "--partner-type", help="Partner type filter (vet, trainer, ...)"),
    location: str = typer.Option(None, "--location", help="Partner location filter"),
    output_json: bool = typer.Option(False, "--json", help="Print the raw JSON response"),
    api_url: str = typer.Option(
        None,
        "--api-url",
        "-u",
        help="API base URL (overrides WOOFSEARCH_API_URL env var)",
        envvar=API_URL_ENV,
    ),
) -> None:
    """Search questions, partners and health logs.

    Examples:
        woofsearch search "vaccination schedule"
        woofsearch search -t partners --location mumbai "emergency vet"
        woofsearch search -l hi "कुत्ता बीमार"
    """
    base_url = api_url or get_api_base_url()
    params = build_search_params(
        query, search_type, lang, sort, page, limit, category, urgent, partner_type, location
    )
    asyncio.run(_search(params, base_url, output_json))


async def _search(params: dict[str, Any], base_url: str, output_json: bool) -> None:
    """Execute a search and render the results."""
    headers = get_headers(os.getenv(API_TOKEN_ENV))

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            response = await client.get(
                f"{base_url}/search/advanced",
                headers=headers,
                params=params,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            console.print(
                f"[red]Search failed ({e.response.status_code}): "
                f"{_error_message(e.response)}[/red]"
            )
            raise typer.Exit(1)
        except httpx.ConnectError:
            console.print(f"[red]Could not connect to API at {base_url}[/red]")
            raise typer.Exit(1)

    if output_json:
        console.print_json(json.dumps(payload))
        return

    render_results(payload.get("data", {}))


def render_results(data: dict[str, Any]) -> None:
    """Render a search payload as a table with pagination and suggestions."""
    results = data.get("results", [])
    pagination = data.get("pagination", {})
    performance = data.get("performance", {})

    console.print()
    console.print(
        f"[bold]Found {pagination.get('total', 0)} results[/bold] "
        f"[dim](page {pagination.get('page', 1)} of {max(pagination.get('pages', 0), 1)}, "
        f"{performance.get('search_time_ms', 0)}ms"
        f"{', cached' if performance.get('cached') else ''})[/dim]"
    )
    console.print()

    if not results:
        console.print("[dim]No results found.[/dim]")
    else:
        table = Table(show_header=True, header_style="bold")
        table.add_column("#", justify="right")
        table.add_column("Type")
        table.add_column("Title")
        table.add_column("Score", justify="right")
        table.add_column("Excerpt")

        offset = (pagination.get("page", 1) - 1) * pagination.get("limit", len(results))
        for i, result in enumerate(results, offset + 1):
            excerpt = result.get("excerpt", "")
            if len(excerpt) > EXCERPT_WIDTH:
                excerpt = excerpt[:EXCERPT_WIDTH] + "..."
            table.add_row(
                str(i),
                result.get("type", "unknown"),
                result.get("title", ""),
                f"{result.get('relevance_score', 0):.2f}",
                excerpt,
            )

        console.print(table)

    suggestions = data.get("suggestions") or []
    if suggestions:
        console.print()
        console.print(f"[bold]Did you mean:[/bold] {', '.join(suggestions)}")


@app.command()
def version() -> None:
    """Show version information."""
    console.print("[bold]Woofadaar Search CLI[/bold]")
    console.print(f"Version: {__version__}")
    console.print()
    console.print(f"API URL: {get_api_base_url()}")


@app.command()
def config() -> None:
    """Show current configuration."""
    console.print("[bold]Current Configuration[/bold]")
    console.print()

    table = Table(show_header=True, header_style="bold")
    table.add_column("Setting")
    table.add_column("Value")
    table.add_column("Source")

    api_url = os.getenv(API_URL_ENV)
    table.add_row(
        "API URL",
        api_url or DEFAULT_API_BASE_URL,
        "env" if api_url else "default",
    )

    token = os.getenv(API_TOKEN_ENV)
    table.add_row(
        "API Token",
        "[green]set[/green]" if token else "[yellow]not set (anonymous)[/yellow]",
        "env" if token else "-",
    )

    console.print(table)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
