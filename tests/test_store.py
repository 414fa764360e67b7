"""Tests for the in-memory store's browsing operations."""
import pytest

from litcatalog.models import Author, Book


def seed(store):
    austen = store.save_author(Author("Austen, Jane", 1775, 1817))
    twain = store.save_author(Author("Twain, Mark", 1835, 1910))
    store.save_author(Author("Anonymous"))
    store.save_book(Book("Emma", austen, "en", 9000))
    store.save_book(Book("Persuasion", austen, "en", 4000))
    store.save_book(Book("Les Aventures de Tom Sawyer", twain, "fr", 300))
    return austen, twain


def test_author_lookup_case_sensitivity(store):
    """Case-insensitive lookup is the default; exact lookup is available."""
    seed(store)

    assert store.find_author_by_name("AUSTEN, JANE").name == "Austen, Jane"
    assert store.find_author_by_name("AUSTEN, JANE", case_insensitive=False) is None


def test_book_lookup_by_title_and_author(store):
    """Books are found by exact title and author id, with the author attached."""
    austen, twain = seed(store)

    book = store.find_book_by_title_and_author_id("Emma", austen.id)

    assert book.author.name == "Austen, Jane"
    assert store.find_book_by_title_and_author_id("Emma", twain.id) is None
    assert store.find_book_by_title_and_author_id("emma", austen.id) is None


def test_save_book_requires_saved_author(store):
    """Books cannot reference an author the store has never seen."""
    with pytest.raises(ValueError):
        store.save_book(Book("Orphan", Author("Nobody")))


def test_find_books_by_language(store):
    seed(store)

    assert [b.title for b in store.find_books_by_language("EN")] == ["Emma", "Persuasion"]


def test_search_books_by_title(store):
    seed(store)

    assert [b.title for b in store.search_books_by_title("tom")] == ["Les Aventures de Tom Sawyer"]


def test_authors_alive_in_year(store):
    """Authors with unknown birth years are never counted as alive."""
    seed(store)

    assert [a.name for a in store.find_authors_alive_in_year(1815)] == ["Austen, Jane"]
    assert [a.name for a in store.find_authors_alive_in_year(1817)] == ["Austen, Jane"]
    assert [a.name for a in store.find_authors_alive_in_year(1850)] == ["Twain, Mark"]


def test_get_stats(store):
    seed(store)

    assert store.get_stats() == {
        "total_books": 3,
        "total_authors": 3,
        "books_by_language": {"en": 2, "fr": 1},
    }


def test_returned_records_are_copies(store):
    """Mutating a returned record does not change the stored one."""
    austen, _ = seed(store)
    austen.birth_year = 1900

    assert store.find_author_by_name("Austen, Jane").birth_year == 1775


def test_author_lookup_uses_simple_lowercasing(store):
    """Names fold with lower-casing only, the same rule as the database index."""
    store.save_author(Author("Straße, Anna"))

    assert store.find_author_by_name("STRASSE, ANNA") is None
    assert store.find_author_by_name("STRAßE, ANNA").name == "Straße, Anna"
