"""Tests for author find-or-create and duplicate book detection."""
from unittest.mock import MagicMock

import pytest

from litcatalog.errors import DuplicateBookError, PersistenceFailure
from litcatalog.models import Author, CandidateBook
from litcatalog.reconcile import Reconciler


def candidate(title, authors=(), languages=("en",), downloads=10, book_id="1"):
    return CandidateBook(book_id, title, list(authors), list(languages), downloads)


def test_reconcile_creates_author_and_book(store):
    """A new candidate produces one author and one book."""
    book = Reconciler(store).reconcile(
        candidate("Pride and Prejudice", ["Austen, Jane"], ["en", "fr"], 54000)
    )

    assert book.id is not None
    assert book.title == "Pride and Prejudice"
    assert book.language == "en"
    assert book.download_count == 54000
    assert book.author.name == "Austen, Jane"
    assert book.author.id is not None
    assert len(store.list_authors()) == 1


def test_reconcile_uses_only_first_author(store):
    """Co-authors beyond the first are not stored."""
    book = Reconciler(store).reconcile(candidate("Good Omens", ["Pratchett, Terry", "Gaiman, Neil"]))

    assert book.author.name == "Pratchett, Terry"
    assert [a.name for a in store.list_authors()] == ["Pratchett, Terry"]


def test_reconcile_missing_language_is_unknown(store):
    """No language codes falls back to the unknown sentinel."""
    book = Reconciler(store).reconcile(candidate("Untitled Pamphlet", ["Anon"], languages=()))

    assert book.language == "unknown"


def test_existing_author_reused_case_insensitively(store):
    """Author lookup ignores case and leaves stored years untouched."""
    stored = store.save_author(Author("Dickens, Charles", birth_year=1812, death_year=1870))
    reconciler = Reconciler(store)

    first = reconciler.reconcile(candidate("Bleak House", ["DICKENS, CHARLES"], book_id="1"))
    second = reconciler.reconcile(candidate("Hard Times", ["dickens, charles"], book_id="2"))

    assert first.author.id == stored.id == second.author.id
    assert first.author.name == "Dickens, Charles"
    assert first.author.birth_year == 1812
    assert len(store.list_authors()) == 1
    assert len(store.list_books()) == 2


def test_duplicate_book_is_skipped(store):
    """Saving the same candidate twice stores one book and reports the duplicate."""
    reconciler = Reconciler(store)
    saved = reconciler.reconcile(candidate("Emma", ["Austen, Jane"]))

    with pytest.raises(DuplicateBookError) as excinfo:
        reconciler.reconcile(candidate("Emma", ["austen, jane"]))

    assert excinfo.value.existing.id == saved.id
    assert len(store.list_books()) == 1


def test_same_title_different_author_is_not_duplicate(store):
    """Duplicate detection is keyed on title and author together."""
    reconciler = Reconciler(store)
    reconciler.reconcile(candidate("Poems", ["Dickinson, Emily"]))
    reconciler.reconcile(candidate("Poems", ["Keats, John"]))

    assert len(store.list_books()) == 2


def test_unknown_author_is_shared(store):
    """Candidates without authors share one Unknown Author record."""
    reconciler = Reconciler(store)
    first = reconciler.reconcile(candidate("The Federalist Papers", []))
    second = reconciler.reconcile(candidate("Beowulf", []))

    assert first.author.name == "Unknown Author"
    assert first.author.id == second.author.id
    assert len(store.list_authors()) == 1


def test_author_save_failure_is_persistence_failure():
    """Store faults are reported as PersistenceFailure."""
    store = MagicMock()
    store.find_author_by_name.return_value = None
    store.save_author.side_effect = RuntimeError("disk full")

    with pytest.raises(PersistenceFailure) as excinfo:
        Reconciler(store).reconcile(candidate("Emma", ["Austen, Jane"]))

    assert "disk full" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    store.save_book.assert_not_called()


def test_book_save_failure_keeps_created_author(store, monkeypatch):
    """An author created before a failed book save stays in the store."""
    def fail(book):
        raise PersistenceFailure("constraint violated")

    monkeypatch.setattr(store, "save_book", fail)

    with pytest.raises(PersistenceFailure):
        Reconciler(store).reconcile(candidate("Emma", ["Austen, Jane"]))

    assert [a.name for a in store.list_authors()] == ["Austen, Jane"]
    assert store.list_books() == []
