"""Turn a matched remote candidate into a stored author and book."""
import logging

from litcatalog.errors import DuplicateBookError, PersistenceFailure
from litcatalog.models import UNKNOWN_AUTHOR, Author, Book, CandidateBook
from litcatalog.store import LocalStore

logger = logging.getLogger(__name__)


class Reconciler:
    """
    Find-or-create authors and guard book inserts against duplicates.

    The find-then-save sequence is not atomic. Stores shared between
    processes must enforce unique author names and unique (title, author)
    pairs themselves, as the PostgreSQL schema does.
    """

    def __init__(self, store: LocalStore):
        self.store = store

    def _call(self, action: str, operation, *args, **kwargs):
        try:
            return operation(*args, **kwargs)
        except PersistenceFailure:
            raise
        except Exception as e:
            raise PersistenceFailure(f"Failed to {action}: {e}") from e

    def resolve_author(self, candidate: CandidateBook) -> Author:
        """
        Reuse the stored author with the candidate's first author name or create it.

        Candidates without authors share a single "Unknown Author" record.
        Existing authors are returned untouched.
        """
        name = candidate.primary_author or UNKNOWN_AUTHOR

        existing = self._call("find author", self.store.find_author_by_name, name, case_insensitive=True)
        if existing is not None:
            logger.info(f"Reusing author {existing.id}: {existing.name}")
            return existing

        logger.info(f"Creating author: {name}")
        return self._call("save author", self.store.save_author, Author(name=name))

    @staticmethod
    def build_book(candidate: CandidateBook, author: Author) -> Book:
        """Local book for a candidate, attached to `author`."""
        return Book(
            title=candidate.title,
            author=author,
            language=candidate.primary_language,
            download_count=candidate.download_count
        )

    def reconcile(self, candidate: CandidateBook) -> Book:
        """
        Persist a candidate as a local book.

        Args:
            candidate: Matched remote result

        Returns:
            Saved Book with its author populated

        Raises:
            DuplicateBookError: if the author already has a book with this title
            PersistenceFailure: if the store fails while saving
        """
        author = self.resolve_author(candidate)
        book = self.build_book(candidate, author)

        existing = self._call(
            "find book", self.store.find_book_by_title_and_author_id, book.title, author.id
        )
        if existing is not None:
            logger.info(f"Skipping duplicate book {existing.id}: {existing.title}")
            raise DuplicateBookError(existing)

        saved = self._call("save book", self.store.save_book, book)
        if saved.author is None:
            saved.author = author
        return saved
