"""Search the remote catalog and save the best match to the local store."""
import enum
import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from litcatalog.errors import DuplicateBookError, InvalidQuery, LibraryCatalogError
from litcatalog.matcher import find_best_match_with_tier
from litcatalog.models import Book, CandidateBook
from litcatalog.parse import deduplicate_candidates, parse_search_response
from litcatalog.query import build_language_url, build_search_url
from litcatalog.reconcile import Reconciler
from litcatalog.store import LocalStore

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    """Anything that turns a URL into raw response text."""

    def fetch(self, url: str) -> str:
        ...


class SearchStatus(enum.Enum):
    """Terminal states of one search-and-save operation."""
    NO_MATCH = "no_match"
    SAVED = "saved"
    DUPLICATE_SKIPPED = "duplicate_skipped"
    FAILED = "failed"


@dataclass
class SearchResult:
    """Outcome of a search-and-save, with the cause attached on failure."""
    status: SearchStatus
    query: str
    book: Optional[Book] = None
    candidate: Optional[CandidateBook] = None
    tier: Optional[str] = None
    error: Optional[LibraryCatalogError] = None

    @property
    def ok(self) -> bool:
        return self.status is not SearchStatus.FAILED

    @property
    def message(self) -> str:
        """One-line summary suitable for showing to the user."""
        if self.status is SearchStatus.SAVED:
            return f"Saved '{self.book.title}' by {self.book.author.name}"
        if self.status is SearchStatus.DUPLICATE_SKIPPED:
            return f"'{self.book.title}' by {self.book.author.name} is already in the library"
        if self.status is SearchStatus.NO_MATCH:
            return f"No book found matching '{self.query}'"
        return f"Search for '{self.query}' failed: {self.error}"


class LibraryService:
    """Runs searches against the remote catalog and reconciles results locally."""

    def __init__(self, client: Fetcher, store: LocalStore, base_url: str):
        """
        Args:
            client: Remote catalog client
            store: Local author/book store
            base_url: Catalog endpoint that accepts a ``search`` parameter
        """
        self.client = client
        self.store = store
        self.base_url = base_url
        self.reconciler = Reconciler(store)

    def _fetch_candidates(self, url: str) -> List[CandidateBook]:
        response = parse_search_response(self.client.fetch(url))
        logger.info(f"Catalog returned {len(response.results)} of {response.count} results")
        return deduplicate_candidates(response.results)

    def search_and_save(self, title: Optional[str]) -> SearchResult:
        """
        Search for a title, pick the best match and store it.

        Nothing is retried. Failures are returned as FAILED results carrying
        the original exception instead of being raised.

        Args:
            title: Title typed by the user

        Returns:
            SearchResult in one of the terminal states
        """
        query = title.strip() if title else ""

        try:
            url = build_search_url(self.base_url, title)
        except InvalidQuery as e:
            logger.warning(f"Rejected search: {e}")
            return SearchResult(SearchStatus.FAILED, query, error=e)

        try:
            candidates = self._fetch_candidates(url)

            tier, candidate = find_best_match_with_tier(query, candidates)
            if candidate is None:
                return SearchResult(SearchStatus.NO_MATCH, query)

            try:
                book = self.reconciler.reconcile(candidate)
            except DuplicateBookError as e:
                return SearchResult(
                    SearchStatus.DUPLICATE_SKIPPED, query,
                    book=e.existing, candidate=candidate, tier=tier
                )

            logger.info(f"Saved book {book.id}: {book.title}")
            return SearchResult(SearchStatus.SAVED, query, book=book, candidate=candidate, tier=tier)

        except LibraryCatalogError as e:
            logger.error(f"Search for '{query}' failed: {e}")
            return SearchResult(SearchStatus.FAILED, query, error=e)

    def search_books(self, query: str, limit: int = 10) -> List[CandidateBook]:
        """Remote results for a query, without saving anything."""
        return self._fetch_candidates(build_search_url(self.base_url, query, limit))[:limit]

    def search_books_by_author(self, author_name: str, limit: int = 10) -> List[CandidateBook]:
        """Remote results whose author list contains `author_name`, ignoring case."""
        url = build_search_url(self.base_url, author_name, limit)
        needle = author_name.strip().casefold()
        candidates = self._fetch_candidates(url)
        return [
            c for c in candidates
            if any(needle in name.casefold() for name in c.authors)
        ][:limit]

    def search_books_by_language(self, code: str, limit: int = 10) -> List[CandidateBook]:
        """Remote listing of books in a language."""
        return self._fetch_candidates(build_language_url(self.base_url, code, limit))[:limit]
