#!/usr/bin/env python3
"""BookVerse CLI - search the catalog and manage your bookshelf."""
import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from tabulate import tabulate

from src.async_client import AsyncCatalogSearchClient
from src.client import CatalogSearchClient
from src.config import Config
from src.controller import AUTH_ROUTE, BookshelfController, NavbarController, SearchController
from src.database import Database
from src.models import Shelf
from src.repository import ShelfRepository
from src.session import FileSession, Identity

logger = logging.getLogger(__name__)

SHELF_CHOICES = [shelf.value for shelf in Shelf]


def setup_logging(verbose: bool = False):
    """Configure logging for the CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def setup_database(config: Config) -> Database:
    """Initialize database."""
    db = Database(config.DATABASE_URL)
    db.init_schema()
    return db


class Navigator:
    """Records where a controller asked to go."""

    def __init__(self):
        self.route: Optional[str] = None

    def __call__(self, route: str):
        self.route = route
        if route == AUTH_ROUTE:
            print("🔒 You are not signed in. Run: bookverse.py login EMAIL")


class AsyncSearchAdapter:
    """Runs the async client behind the blocking ``search`` the controller calls."""

    def __init__(self, config: Config):
        self.config = config

    def search(self, query: str):
        return asyncio.run(self._search(query))

    async def _search(self, query: str):
        async with AsyncCatalogSearchClient(
            api_key=self.config.GOOGLE_BOOKS_API_KEY,
            timeout=self.config.DEFAULT_TIMEOUT,
            page_limit=self.config.SEARCH_PAGE_LIMIT
        ) as client:
            return await client.search(query)


def print_notifications(controller) -> bool:
    """Print pending notifications; return True if any was an error."""
    had_error = False
    for note in controller.drain_notifications():
        icon = "❌" if note.is_error else "✅"
        print(f"{icon} {note.title} {note.description}")
        had_error = had_error or note.is_error
    return had_error


def _truncate(text: str, width: int) -> str:
    return text[:width] + "..." if len(text) > width else text


def display_entries(entries, format_type: str):
    """Display catalog search results in specified format."""
    if format_type == "table":
        headers = ["#", "Title", "Authors", "Published", "ID"]
        rows = [
            [
                i,
                _truncate(entry.title, 50),
                _truncate(entry.authors_str, 30),
                entry.published_date or "Unknown",
                entry.id
            ]
            for i, entry in enumerate(entries, 1)
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        entries_dict = [
            {
                "id": entry.id,
                "title": entry.title,
                "authors": entry.authors,
                "description": entry.description,
                "thumbnail": entry.thumbnail,
                "cover_url": entry.cover_url,
                "published_date": entry.published_date
            }
            for entry in entries
        ]
        print(json.dumps(entries_dict, indent=2))

    elif format_type == "compact":
        for i, entry in enumerate(entries, 1):
            print(f"{i}. {entry.title} - {entry.authors_str}")


def display_shelf(controller: BookshelfController, shelves: List[Shelf], format_type: str):
    """Display the bookshelf, one section per shelf."""
    if format_type == "json":
        data = {
            shelf.value: [book.to_dict() for book in controller.books_on_shelf(shelf)]
            for shelf in shelves
        }
        print(json.dumps(data, indent=2))
        return

    tabs = []
    for shelf in Shelf:
        tab = f"{shelf.label} ({controller.shelf_count(shelf)})"
        tabs.append(f"[{tab}]" if shelf == controller.active_shelf else tab)
    print("\n" + "  ".join(tabs))

    for shelf in shelves:
        books = controller.books_on_shelf(shelf)
        print(f"\n== {shelf.label} ==")
        if not books:
            print(f"Your {shelf.label} shelf is empty")
            print("Search for books and add them to get started!")
            continue

        if format_type == "table":
            headers = ["ID", "Title", "Authors", "Added"]
            rows = [
                [
                    book.id,
                    _truncate(book.title, 50),
                    _truncate(book.authors_str, 30),
                    book.added_at.strftime("%Y-%m-%d") if book.added_at else ""
                ]
                for book in books
            ]
            print(tabulate(rows, headers=headers, tablefmt="grid"))
        else:
            for book in books:
                print(f"- {book.title} - {book.authors_str} [{book.id}]")


def cmd_login(args, config: Config) -> int:
    session = FileSession(config.SESSION_FILE)
    identity = Identity.for_email(args.email)
    session.sign_in(identity)
    print(f"✅ Signed in as {identity.email}")
    return 0


def cmd_logout(args, config: Config) -> int:
    navbar = NavbarController(FileSession(config.SESSION_FILE), Navigator())
    navbar.sign_out()
    return 1 if print_notifications(navbar) else 0


def cmd_whoami(args, config: Config) -> int:
    identity = FileSession(config.SESSION_FILE).current_identity()
    if identity is None:
        print("Not signed in")
        return 1
    print(f"{identity.email} ({identity.user_id})")
    return 0


def cmd_search(args, config: Config) -> int:
    session = FileSession(config.SESSION_FILE)
    navigator = Navigator()
    if session.current_identity() is None:
        navigator(AUTH_ROUTE)
        return 1

    db = setup_database(config) if args.add is not None else None

    try:
        if args.use_async:
            client = AsyncSearchAdapter(config)
        else:
            client = CatalogSearchClient(
                api_key=config.GOOGLE_BOOKS_API_KEY,
                timeout=config.DEFAULT_TIMEOUT,
                page_limit=config.SEARCH_PAGE_LIMIT
            )

        repository = ShelfRepository(db, session) if db is not None else None
        controller = SearchController(session, client, repository, navigator)

        try:
            if not controller.mount():
                return 1

            controller.submit_search(args.query)
            if print_notifications(controller):
                return 1
            display_entries(controller.results, args.format)

            if args.add is not None:
                if not 1 <= args.add <= len(controller.results):
                    logger.error(f"--add must be between 1 and {len(controller.results)}")
                    return 1
                controller.select(controller.results[args.add - 1])
                controller.choose_shelf(args.shelf)
                controller.add_selected()
                if print_notifications(controller):
                    return 1
        finally:
            controller.unmount()
            if isinstance(client, CatalogSearchClient):
                client.close()
    finally:
        if db is not None:
            db.close()

    return 0


def _with_bookshelf(config: Config, action) -> int:
    """Mount the bookshelf page, run ``action`` on it, and print the outcome."""
    session = FileSession(config.SESSION_FILE)
    navigator = Navigator()
    if session.current_identity() is None:
        navigator(AUTH_ROUTE)
        return 1

    db = setup_database(config)
    try:
        controller = BookshelfController(session, ShelfRepository(db, session), navigator)
        if not controller.mount():
            return 1
        try:
            ok = action(controller)
            had_error = print_notifications(controller)
            return 0 if ok and not had_error else 1
        finally:
            controller.unmount()
    finally:
        db.close()


def cmd_shelf(args, config: Config) -> int:
    def show(controller: BookshelfController) -> bool:
        if print_notifications(controller):
            return False
        shelves = [Shelf.parse(args.shelf)] if args.shelf else list(Shelf)
        if args.shelf:
            controller.set_active_shelf(args.shelf)
        display_shelf(controller, shelves, args.format)
        return True

    return _with_bookshelf(config, show)


def cmd_move(args, config: Config) -> int:
    return _with_bookshelf(config, lambda c: c.move_book(args.book_id, args.shelf))


def cmd_remove(args, config: Config) -> int:
    return _with_bookshelf(config, lambda c: c.remove_book(args.book_id))


def cmd_stats(args, config: Config) -> int:
    def show(controller: BookshelfController) -> bool:
        if print_notifications(controller):
            return False

        print("\n" + "=" * 50)
        print("BOOKSHELF STATISTICS")
        print("=" * 50)
        for shelf in Shelf:
            print(f"{shelf.label}: {controller.shelf_count(shelf)}")
        print(f"Total books: {len(controller.books)}")
        print("=" * 50 + "\n")
        return True

    return _with_bookshelf(config, show)


COMMANDS = {
    "login": cmd_login,
    "logout": cmd_logout,
    "whoami": cmd_whoami,
    "search": cmd_search,
    "shelf": cmd_shelf,
    "move": cmd_move,
    "remove": cmd_remove,
    "stats": cmd_stats,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="BookVerse - search books and manage your bookshelf",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Sign in
  %(prog)s login reader@example.com

  # Search and add the first result to "want to read"
  %(prog)s search "dune" --add 1 --shelf want_to_read

  # Show the bookshelf, then move a book
  %(prog)s shelf
  %(prog)s move <book-id> read
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    login_parser = subparsers.add_parser("login", help="Sign in")
    login_parser.add_argument("email", help="Account email")

    subparsers.add_parser("logout", help="Sign out")
    subparsers.add_parser("whoami", help="Show the signed-in user")

    search_parser = subparsers.add_parser("search", help="Search for books")
    search_parser.add_argument("query", help="Search query")
    search_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")
    search_parser.add_argument("--add", type=int, metavar="N", help="Add result number N to a shelf")
    search_parser.add_argument("--shelf", choices=SHELF_CHOICES, default=Shelf.WANT_TO_READ.value,
                               help="Shelf for --add (default: want_to_read)")
    search_parser.add_argument("--async", dest="use_async", action="store_true", help="Use async client")

    shelf_parser = subparsers.add_parser("shelf", help="Show your bookshelf")
    shelf_parser.add_argument("--shelf", choices=SHELF_CHOICES, help="Only show one shelf")
    shelf_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")

    move_parser = subparsers.add_parser("move", help="Move a book to another shelf")
    move_parser.add_argument("book_id", help="Book ID (from 'shelf')")
    move_parser.add_argument("shelf", choices=SHELF_CHOICES, help="Target shelf")

    remove_parser = subparsers.add_parser("remove", help="Remove a book from your shelves")
    remove_parser.add_argument("book_id", help="Book ID (from 'shelf')")

    subparsers.add_parser("stats", help="Show books per shelf")

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.verbose)
    config = Config()

    try:
        sys.exit(COMMANDS[args.command](args, config))

    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
