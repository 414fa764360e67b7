"""Local store interface and an in-memory implementation."""
import copy
import itertools
import logging
from collections import Counter
from typing import Any, Dict, List, Optional, Protocol

from litcatalog.models import Author, Book

logger = logging.getLogger(__name__)


class LocalStore(Protocol):
    """Persistence operations the reconciliation pipeline depends on."""

    def find_author_by_name(self, name: str, case_insensitive: bool = True) -> Optional[Author]:
        ...

    def save_author(self, author: Author) -> Author:
        ...

    def find_book_by_title_and_author_id(self, title: str, author_id: int) -> Optional[Book]:
        ...

    def save_book(self, book: Book) -> Book:
        ...


class InMemoryStore:
    """Dict-backed store with generated integer ids. Not thread-safe."""

    def __init__(self):
        self._authors: Dict[int, Author] = {}
        self._books: Dict[int, Book] = {}
        self._author_ids = itertools.count(1)
        self._book_ids = itertools.count(1)

    def find_author_by_name(self, name: str, case_insensitive: bool = True) -> Optional[Author]:
        # Same folding as PostgreSQL LOWER()
        key = name.lower() if case_insensitive else name
        for author in self._authors.values():
            stored = author.name.lower() if case_insensitive else author.name
            if stored == key:
                return copy.copy(author)
        return None

    def save_author(self, author: Author) -> Author:
        saved = copy.copy(author)
        if saved.id is None:
            saved.id = next(self._author_ids)
        self._authors[saved.id] = saved
        logger.info(f"Saved author {saved.id}: {saved.name}")
        return copy.copy(saved)

    def find_book_by_title_and_author_id(self, title: str, author_id: int) -> Optional[Book]:
        for book in self._books.values():
            if book.title == title and book.author.id == author_id:
                return self._attach(book)
        return None

    def save_book(self, book: Book) -> Book:
        if book.author is None or book.author.id not in self._authors:
            raise ValueError(f"Book '{book.title}' references an unsaved author")
        saved = copy.copy(book)
        if saved.id is None:
            saved.id = next(self._book_ids)
        self._books[saved.id] = saved
        logger.info(f"Saved book {saved.id}: {saved.title}")
        return self._attach(saved)

    def _attach(self, book: Book) -> Book:
        result = copy.copy(book)
        result.author = copy.copy(self._authors[book.author.id])
        return result

    def list_books(self) -> List[Book]:
        return [self._attach(book) for book in self._books.values()]

    def list_authors(self) -> List[Author]:
        return sorted((copy.copy(a) for a in self._authors.values()), key=lambda a: a.name.casefold())

    def find_books_by_language(self, code: str) -> List[Book]:
        return [b for b in self.list_books() if b.language.lower() == code.strip().lower()]

    def find_authors_alive_in_year(self, year: int) -> List[Author]:
        return [a for a in self.list_authors() if a.is_alive_in(year)]

    def search_books_by_title(self, fragment: str) -> List[Book]:
        needle = fragment.casefold()
        return [b for b in self.list_books() if needle in b.title.casefold()]

    def get_stats(self) -> Dict[str, Any]:
        return {
            "total_books": len(self._books),
            "total_authors": len(self._authors),
            "books_by_language": dict(Counter(b.language for b in self._books.values())),
        }

    def close(self):
        """Nothing to release."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
