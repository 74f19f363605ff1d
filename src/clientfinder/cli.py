"""Command line interface for ClientFinder."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from clientfinder.config import AppConfig
from clientfinder.index.search import Searcher
from clientfinder.index.store import RecordStore, StoreHolder
from clientfinder.models import Record, value_text
from clientfinder.terminal import TerminalBrowser
from clientfinder.utils.pagination import page_index_from_number, paginate
from clientfinder.web.app import create_app


console = Console()
app = typer.Typer(help="ClientFinder - search and browse client records")

DATA_OPTION_HELP = "JSON file with client records"


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _load_holder(data: Optional[Path]) -> StoreHolder:
    config = AppConfig(data_path=data)
    holder = StoreHolder(config.resolve_data_path(Path.cwd()))
    if holder.outcome is not None and not holder.outcome.ok:
        console.print(Text(holder.outcome.detail, style="yellow"))
    return holder


def _print_records(
    records: Sequence[Record], store: RecordStore, page: int, per_page: int, title: str
) -> None:
    if page < 1 or per_page < 1:
        raise typer.BadParameter("--page and --per-page must be at least 1")
    if not records:
        console.print("[yellow]No results found.[/yellow]")
        return

    current = paginate(records, page_index_from_number(page), per_page)
    table = Table(
        title=f"{escape(title)} (page {current.number} of {current.total_pages}, {current.total} total)",
        show_header=True,
        header_style="bold magenta",
    )
    for name in store.field_names:
        table.add_column(escape(name))
    for record in current.items:
        table.add_row(*(Text(value_text(record.get(name))) for name in store.field_names))
    console.print(table)


@app.command()
def keys(
    data: Path = typer.Option(None, "--data", help=DATA_OPTION_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """List the field names available for searching."""
    _setup_logging(verbose)
    store = _load_holder(data).current
    if not store.field_names:
        console.print("[yellow]No fields found.[/yellow]")
        return
    for name in store.field_names:
        console.print(Text(name))


@app.command(name="list")
def list_clients(
    data: Path = typer.Option(None, "--data", help=DATA_OPTION_HELP),
    page: int = typer.Option(1, help="Page number, starting at 1"),
    per_page: int = typer.Option(AppConfig().per_page, help="Clients per page"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """List all clients."""
    _setup_logging(verbose)
    store = _load_holder(data).current
    _print_records(store.records, store, page, per_page, "Clients")


@app.command()
def search(
    field: str = typer.Argument(..., help="Field to search"),
    query: str = typer.Argument(..., help="Text to look for, case-insensitive"),
    data: Path = typer.Option(None, "--data", help=DATA_OPTION_HELP),
    page: int = typer.Option(1, help="Page number, starting at 1"),
    per_page: int = typer.Option(AppConfig().per_page, help="Clients per page"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Search clients whose FIELD contains QUERY."""
    _setup_logging(verbose)
    store = _load_holder(data).current
    results = Searcher(store).search_by_field(field, query)
    _print_records(results, store, page, per_page, f"Clients matching {field}~{query!r}")


@app.command()
def duplicates(
    data: Path = typer.Option(None, "--data", help=DATA_OPTION_HELP),
    page: int = typer.Option(1, help="Page number, starting at 1"),
    per_page: int = typer.Option(AppConfig().per_page, help="Clients per page"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """List clients sharing an email address."""
    _setup_logging(verbose)
    store = _load_holder(data).current
    results = Searcher(store).duplicate_emails()
    _print_records(results, store, page, per_page, "Duplicate emails")


@app.command()
def browse(
    data: Path = typer.Option(None, "--data", help=DATA_OPTION_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Start the interactive terminal browser."""
    _setup_logging(verbose)
    holder = _load_holder(data)
    TerminalBrowser(holder, console=console, page_size=AppConfig().page_size).run()


@app.command()
def web(
    host: str = typer.Option(AppConfig().host, help="Host interface"),
    port: int = typer.Option(AppConfig().port, help="Server port"),
    data: Path = typer.Option(None, "--data", help=DATA_OPTION_HELP),
) -> None:
    """Start the HTTP API."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - defensive
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    config = AppConfig(data_path=data, host=host, port=port)
    holder = _load_holder(data)
    console.print(
        f"Starting API on http://{host}:{port} (data: {escape(str(holder.path))}, {len(holder.current)} clients)"
    )
    uvicorn.run(
        create_app(config, holder),
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )


def main() -> None:
    app()
