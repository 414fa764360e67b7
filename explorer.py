#!/usr/bin/env python3
"""Library Explorer CLI - search Gutendex and keep a personal catalog."""
import argparse
import sys
import json
import logging
from tabulate import tabulate
from litcatalog.client import CatalogClient
from litcatalog.config import Config
from litcatalog.database import Database
from litcatalog.errors import LibraryCatalogError
from litcatalog.service import LibraryService, SearchStatus
from litcatalog.store import InMemoryStore

logger = logging.getLogger(__name__)


def configure_logging(config: Config):
    """Configure root logging for the CLI."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def setup_store(args, config: Config):
    """Open the local store: PostgreSQL, or a throwaway in-memory one."""
    if args.in_memory:
        logger.info("Using in-memory store; nothing will be kept after exit")
        return InMemoryStore()

    db = Database(config.DATABASE_URL)
    db.init_schema()
    return db


def make_client(config: Config) -> CatalogClient:
    return CatalogClient(
        timeout=config.DEFAULT_TIMEOUT,
        max_retries=config.DEFAULT_MAX_RETRIES,
        user_agent=config.USER_AGENT
    )


def _truncate(text: str, width: int) -> str:
    return text[:width] + "..." if len(text) > width else text


def book_to_dict(book) -> dict:
    return {
        "id": book.id,
        "title": book.title,
        "author": book.author.name,
        "language": book.language,
        "download_count": book.download_count
    }


def author_to_dict(author) -> dict:
    return {
        "id": author.id,
        "name": author.name,
        "birth_year": author.birth_year,
        "death_year": author.death_year
    }


def candidate_to_dict(candidate) -> dict:
    return {
        "id": candidate.id,
        "title": candidate.title,
        "authors": candidate.authors,
        "languages": candidate.languages,
        "download_count": candidate.download_count
    }


def display_books(books, format_type: str):
    """Display stored books in specified format."""
    if format_type == "table":
        headers = ["ID", "Title", "Author", "Language", "Downloads"]
        rows = [
            [book.id, _truncate(book.title, 50), _truncate(book.author.name, 30),
             book.language, book.download_count]
            for book in books
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        print(json.dumps([book_to_dict(book) for book in books], indent=2))

    elif format_type == "compact":
        for i, book in enumerate(books, 1):
            print(f"{i}. {book.title} - {book.author.name}")


def display_authors(authors, format_type: str):
    """Display stored authors in specified format."""
    if format_type == "table":
        headers = ["ID", "Name", "Born", "Died"]
        rows = [
            [author.id, author.name, author.birth_year or "Unknown", author.death_year or "-"]
            for author in authors
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        print(json.dumps([author_to_dict(author) for author in authors], indent=2))

    elif format_type == "compact":
        for i, author in enumerate(authors, 1):
            print(f"{i}. {author.name}")


def display_candidates(candidates, format_type: str):
    """Display remote search results in specified format."""
    if format_type == "table":
        headers = ["ID", "Title", "Authors", "Languages", "Downloads"]
        rows = [
            [c.id, _truncate(c.title, 50), _truncate(c.authors_str, 30),
             ", ".join(c.languages), c.download_count]
            for c in candidates
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        print(json.dumps([candidate_to_dict(c) for c in candidates], indent=2))

    elif format_type == "compact":
        for i, c in enumerate(candidates, 1):
            print(f"{i}. {c.title} - {c.authors_str}")


def search_and_save(args, config: Config) -> int:
    """Search the catalog for a title and store the best match."""
    store = setup_store(args, config)

    try:
        with make_client(config) as client:
            service = LibraryService(client, store, config.CATALOG_BASE_URL)
            result = service.search_and_save(args.title)

        if result.status is SearchStatus.SAVED:
            print(f"✅ {result.message} ({result.tier} match)")
            display_books([result.book], args.format)
        elif result.status is SearchStatus.DUPLICATE_SKIPPED:
            print(f"ℹ️  {result.message}")
            display_books([result.book], args.format)
        elif result.status is SearchStatus.NO_MATCH:
            print(f"📭 {result.message}")
        else:
            print(f"❌ {result.message}")
            return 1
        return 0

    finally:
        store.close()


def lookup(args, config: Config) -> int:
    """Search the catalog without saving anything."""
    store = InMemoryStore()
    with make_client(config) as client:
        service = LibraryService(client, store, config.CATALOG_BASE_URL)
        if args.language:
            candidates = service.search_books_by_language(args.language, args.limit)
        elif args.author:
            candidates = service.search_books_by_author(args.author, args.limit)
        else:
            candidates = service.search_books(args.query, args.limit)

    logger.info(f"Found {len(candidates)} books")
    display_candidates(candidates, args.format)
    return 0


def list_books(args, config: Config) -> int:
    """List stored books, optionally filtered by language or title."""
    store = setup_store(args, config)

    try:
        if args.language:
            books = store.find_books_by_language(args.language)
        elif args.title:
            books = store.search_books_by_title(args.title)
        else:
            books = store.list_books()

        if not books:
            print("📭 No books found in the library.")
        else:
            display_books(books, args.format)
        return 0

    finally:
        store.close()


def list_authors(args, config: Config) -> int:
    """List stored authors, optionally only those alive in a year."""
    store = setup_store(args, config)

    try:
        if args.alive_in is not None:
            authors = store.find_authors_alive_in_year(args.alive_in)
        else:
            authors = store.list_authors()

        if not authors:
            print("📭 No authors found in the library.")
        else:
            display_authors(authors, args.format)
        return 0

    finally:
        store.close()


def show_stats(args, config: Config) -> int:
    """Show library statistics."""
    store = setup_store(args, config)

    try:
        stats = store.get_stats()

        print("\n" + "=" * 50)
        print("LIBRARY STATISTICS")
        print("=" * 50)
        print(f"Total books stored: {stats['total_books']}")
        print(f"Total authors stored: {stats['total_authors']}")
        for language, count in sorted(stats["books_by_language"].items()):
            print(f"  {language}: {count}")
        print("=" * 50 + "\n")
        return 0

    finally:
        store.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Library Explorer - personal catalog backed by Gutendex",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search Gutendex and save the best match
  %(prog)s search "pride and prejudice"

  # Browse remote results without saving
  %(prog)s lookup "dickens" --limit 5
  %(prog)s lookup --language fr

  # Browse the local catalog
  %(prog)s books --language en
  %(prog)s authors --alive-in 1850
  %(prog)s stats
        """
    )
    parser.add_argument("--in-memory", action="store_true", help="Use a throwaway in-memory store")
    parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    search_parser = subparsers.add_parser("search", help="Search a title and save the best match")
    search_parser.add_argument("title", help="Book title")

    lookup_parser = subparsers.add_parser("lookup", help="Search the catalog without saving")
    lookup_parser.add_argument("query", nargs="?", default="", help="Search query")
    lookup_parser.add_argument("--limit", type=int, default=10, help="Max results (default: 10)")
    lookup_group = lookup_parser.add_mutually_exclusive_group()
    lookup_group.add_argument("--author", help="Only books by this author")
    lookup_group.add_argument("--language", help="List books in this language code")

    books_parser = subparsers.add_parser("books", help="List stored books")
    books_group = books_parser.add_mutually_exclusive_group()
    books_group.add_argument("--language", help="Filter by language code")
    books_group.add_argument("--title", help="Filter by title fragment")

    authors_parser = subparsers.add_parser("authors", help="List stored authors")
    authors_parser.add_argument(
        "--alive-in", type=int,
        help="Only authors alive in this year (needs known birth years; authors added by search have none)"
    )

    subparsers.add_parser("stats", help="Show library statistics")

    return parser


COMMANDS = {
    "search": search_and_save,
    "lookup": lookup,
    "books": list_books,
    "authors": list_authors,
    "stats": show_stats,
}


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = Config()
    configure_logging(config)

    try:
        sys.exit(COMMANDS[args.command](args, config))

    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except LibraryCatalogError as e:
        logger.error(f"❌ Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
