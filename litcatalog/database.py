"""PostgreSQL storage for authors and books."""
import psycopg2
from psycopg2 import pool
from contextlib import contextmanager
from typing import Optional, List, Dict, Any
import logging

from litcatalog.errors import PersistenceFailure
from litcatalog.models import Author, Book

logger = logging.getLogger(__name__)

_BOOK_COLUMNS = """
    b.id, b.title, b.language, b.download_count,
    a.id, a.name, a.birth_year, a.death_year
"""

_AUTHOR_COLUMNS = "id, name, birth_year, death_year"


def _author_from_row(row) -> Author:
    return Author(id=row[0], name=row[1], birth_year=row[2], death_year=row[3])


def _book_from_row(row) -> Book:
    return Book(
        id=row[0],
        title=row[1],
        language=row[2],
        download_count=row[3],
        author=_author_from_row(row[4:8])
    )


class Database:
    """PostgreSQL database with connection pooling."""

    def __init__(self, connection_string: str, min_conn: int = 1, max_conn: int = 10):
        """
        Initialize database connection pool.

        Args:
            connection_string: PostgreSQL connection string
            min_conn: Minimum connections in pool
            max_conn: Maximum connections in pool
        """
        try:
            self.connection_pool = psycopg2.pool.SimpleConnectionPool(
                min_conn,
                max_conn,
                connection_string
            )
        except psycopg2.Error as e:
            raise PersistenceFailure(f"Failed to create connection pool: {e}") from e

        logger.info("Database connection pool created successfully")

    @contextmanager
    def _cursor(self, action: str):
        """
        Borrow a pooled connection and yield a cursor.

        Commits when the block succeeds; rolls back and raises
        PersistenceFailure when psycopg2 reports an error.
        """
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                yield cur
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise PersistenceFailure(f"Failed to {action}: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            self.connection_pool.putconn(conn)

    def init_schema(self):
        """Create database tables if they don't exist."""
        with self._cursor("initialize schema") as cur:
            cur.execute("""
                CREATE TABLE IF NOT EXISTS authors (
                    id SERIAL PRIMARY KEY,
                    name TEXT NOT NULL,
                    birth_year INTEGER,
                    death_year INTEGER,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cur.execute("""
                CREATE TABLE IF NOT EXISTS books (
                    id SERIAL PRIMARY KEY,
                    title TEXT NOT NULL,
                    author_id INTEGER NOT NULL REFERENCES authors (id),
                    language VARCHAR(16) NOT NULL DEFAULT 'unknown',
                    download_count INTEGER NOT NULL DEFAULT 0,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE (title, author_id)
                )
            """)

            # Author names are unique regardless of case
            cur.execute("""
                CREATE UNIQUE INDEX IF NOT EXISTS idx_authors_name_lower
                ON authors (LOWER(name))
            """)

            cur.execute("""
                CREATE INDEX IF NOT EXISTS idx_books_language
                ON books (language)
            """)

        logger.info("Database schema initialized successfully")

    def find_author_by_name(self, name: str, case_insensitive: bool = True) -> Optional[Author]:
        """Look up an author by exact name, ignoring case unless told otherwise."""
        condition = "LOWER(name) = LOWER(%s)" if case_insensitive else "name = %s"
        with self._cursor("find author") as cur:
            cur.execute(
                f"SELECT {_AUTHOR_COLUMNS} FROM authors WHERE {condition} ORDER BY id LIMIT 1",
                (name,)
            )
            row = cur.fetchone()
        return _author_from_row(row) if row else None

    def save_author(self, author: Author) -> Author:
        """
        Insert an author and return it with its generated id.

        Args:
            author: Author without an id

        Returns:
            Persisted Author
        """
        with self._cursor("save author") as cur:
            cur.execute(f"""
                INSERT INTO authors (name, birth_year, death_year)
                VALUES (%s, %s, %s)
                RETURNING {_AUTHOR_COLUMNS}
            """, (author.name, author.birth_year, author.death_year))
            row = cur.fetchone()

        logger.info(f"Saved author {row[0]}: {row[1]}")
        return _author_from_row(row)

    def find_book_by_title_and_author_id(self, title: str, author_id: int) -> Optional[Book]:
        """Get the book stored under this exact title for an author."""
        with self._cursor("find book") as cur:
            cur.execute(f"""
                SELECT {_BOOK_COLUMNS}
                FROM books b JOIN authors a ON a.id = b.author_id
                WHERE b.title = %s AND b.author_id = %s
            """, (title, author_id))
            row = cur.fetchone()
        return _book_from_row(row) if row else None

    def save_book(self, book: Book) -> Book:
        """
        Insert a book for an already persisted author.

        Args:
            book: Book whose author has an id

        Returns:
            Persisted Book with author populated
        """
        if book.author is None or book.author.id is None:
            raise PersistenceFailure(f"Book '{book.title}' references an unsaved author")

        with self._cursor("save book") as cur:
            cur.execute("""
                INSERT INTO books (title, author_id, language, download_count)
                VALUES (%s, %s, %s, %s)
                RETURNING id
            """, (book.title, book.author.id, book.language, book.download_count))
            book_id = cur.fetchone()[0]

        logger.info(f"Saved book {book_id}: {book.title}")
        return Book(
            id=book_id,
            title=book.title,
            author=book.author,
            language=book.language,
            download_count=book.download_count
        )

    def _select_books(self, where: str = "", params: tuple = ()) -> List[Book]:
        with self._cursor("list books") as cur:
            cur.execute(f"""
                SELECT {_BOOK_COLUMNS}
                FROM books b JOIN authors a ON a.id = b.author_id
                {where}
                ORDER BY b.title
            """, params)
            rows = cur.fetchall()
        return [_book_from_row(row) for row in rows]

    def list_books(self) -> List[Book]:
        """All stored books ordered by title."""
        return self._select_books()

    def find_books_by_language(self, code: str) -> List[Book]:
        return self._select_books("WHERE LOWER(b.language) = LOWER(%s)", (code.strip(),))

    def search_books_by_title(self, fragment: str) -> List[Book]:
        return self._select_books("WHERE b.title ILIKE %s", (f"%{fragment}%",))

    def list_authors(self) -> List[Author]:
        """All stored authors ordered by name."""
        with self._cursor("list authors") as cur:
            cur.execute(f"SELECT {_AUTHOR_COLUMNS} FROM authors ORDER BY LOWER(name)")
            rows = cur.fetchall()
        return [_author_from_row(row) for row in rows]

    def find_authors_alive_in_year(self, year: int) -> List[Author]:
        """Authors born by `year` whose death year is unknown or not before it."""
        with self._cursor("find living authors") as cur:
            cur.execute(f"""
                SELECT {_AUTHOR_COLUMNS} FROM authors
                WHERE birth_year <= %s AND (death_year IS NULL OR death_year >= %s)
                ORDER BY LOWER(name)
            """, (year, year))
            rows = cur.fetchall()
        return [_author_from_row(row) for row in rows]

    def get_stats(self) -> Dict[str, Any]:
        """Get database statistics."""
        with self._cursor("collect statistics") as cur:
            cur.execute("SELECT COUNT(*) FROM books")
            book_count = cur.fetchone()[0]

            cur.execute("SELECT COUNT(*) FROM authors")
            author_count = cur.fetchone()[0]

            cur.execute("SELECT language, COUNT(*) FROM books GROUP BY language ORDER BY language")
            by_language = dict(cur.fetchall())

        return {
            "total_books": book_count,
            "total_authors": author_count,
            "books_by_language": by_language
        }

    def close(self):
        """Close all connections in the pool."""
        if self.connection_pool:
            self.connection_pool.closeall()
            logger.info("Database connection pool closed")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
