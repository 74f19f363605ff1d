"""Interactive terminal browser for client records.

Offers the same queries as the HTTP API: search by field, duplicate emails and
a full listing, each shown a page at a time with ``n``/``p``/``q`` navigation.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, TextIO

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from clientfinder.errors import InvalidFieldSelection
from clientfinder.index.search import Searcher
from clientfinder.index.store import StoreHolder
from clientfinder.models import Record
from clientfinder.utils.pagination import paginate

LOGGER = logging.getLogger(__name__)

MENU = (
    "\n[bold]== ClientFinder ==[/bold]\n"
    "1. Search clients by field\n"
    "2. Find duplicate emails\n"
    "3. List all clients\n"
    "4. Refresh client data\n"
    "5. Exit"
)


class TerminalBrowser:
    """Menu loop over a :class:`StoreHolder`.

    Input is read from ``stream`` when given, otherwise from stdin. Reaching
    the end of input leaves the browser.
    """

    def __init__(
        self,
        holder: StoreHolder,
        *,
        console: Optional[Console] = None,
        stream: Optional[TextIO] = None,
        page_size: int = 5,
    ) -> None:
        self.holder = holder
        self.console = console or Console()
        self.stream = stream
        self.page_size = page_size

    def run(self) -> None:
        try:
            while True:
                self.console.print(MENU)
                choice = self._ask("> ")
                if choice == "1":
                    self.handle_search()
                elif choice == "2":
                    self.handle_duplicates()
                elif choice == "3":
                    self.handle_list_all()
                elif choice == "4":
                    self.refresh()
                elif choice == "5":
                    break
                else:
                    self.console.print("Invalid choice. Try again.")
        except EOFError:
            LOGGER.debug("Input closed, leaving browser")
        self.console.print("Goodbye!")

    def handle_search(self) -> None:
        store = self.holder.current
        if not store.field_names:
            self.console.print("\n[yellow]No fields available to search.[/yellow]")
            return
        try:
            field_name = self._prompt_field(store.field_names)
        except InvalidFieldSelection as exc:
            self.console.print(Text(exc.message, style="red"))
            return
        query = self._ask(f"Enter search query for '{escape(field_name)}': ")
        self.browse(Searcher(store).search_by_field(field_name, query))

    def handle_duplicates(self) -> None:
        self.console.print("\n[bold]Duplicate Emails:[/bold]")
        self.browse(Searcher(self.holder.current).duplicate_emails())

    def handle_list_all(self) -> None:
        self.console.print("\n[bold]All Clients:[/bold]")
        self.browse(self.holder.current.records)

    def refresh(self) -> None:
        self.console.print("\nRefreshing client data from file...")
        outcome = self.holder.refresh()
        if not outcome.ok:
            self.console.print(Text(outcome.detail, style="yellow"))
        self.console.print(f"Done! {len(self.holder.current)} clients loaded.")

    def browse(self, results: Sequence[Record]) -> None:
        """Page through ``results`` until the user quits."""
        if not results:
            self.console.print("\n[yellow]No results found.[/yellow]")
            return

        index = 0
        while True:
            page = paginate(results, index, self.page_size)
            self._print_page(page.items, page.number, page.total_pages)
            action = self._ask("> ").lower()
            if action == "n":
                if page.has_next:
                    index += 1
            elif action == "p":
                if page.has_previous:
                    index -= 1
            elif action == "q":
                return
            else:
                self.console.print("Invalid input.")

    def _prompt_field(self, field_names: Sequence[str]) -> str:
        self.console.print("\nFields available for search:")
        for number, name in enumerate(field_names, start=1):
            self.console.print(Text(f"  {number}. {name}"))
        raw = self._ask("\nSelect a field by number: ")
        try:
            number = int(raw)
        except ValueError:
            raise InvalidFieldSelection(len(field_names)) from None
        if not 1 <= number <= len(field_names):
            raise InvalidFieldSelection(len(field_names))
        return field_names[number - 1]

    def _print_page(self, records: Sequence[Record], number: int, total: int) -> None:
        self.console.print(f"--- Page {number} of {total} ---")
        for record in records:
            self.console.print(Panel(Text(record.render()), expand=False))
        self.console.print("\n(n)ext, (p)revious, (q)uit")

    def _ask(self, prompt: str) -> str:
        line = self.console.input(prompt, stream=self.stream)
        if self.stream is not None and not line:
            raise EOFError
        return line.strip()
