"""Exceptions raised by the catalog pipeline."""
from typing import Optional


class LibraryCatalogError(Exception):
    """Base class for every catalog failure."""


class InvalidQuery(LibraryCatalogError):
    """Search text was missing or blank."""


class TransportError(LibraryCatalogError):
    """The remote catalog could not be reached or answered with a non-2xx status."""
    
    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(LibraryCatalogError):
    """The remote catalog returned a body that is not a valid search response."""


class PersistenceFailure(LibraryCatalogError):
    """The local store failed while saving or looking up a record."""


class DuplicateBookError(LibraryCatalogError):
    """
    A book with the same title already exists for the resolved author.
    
    Not a failure: callers treat it as an idempotent skip.
    """
    
    def __init__(self, existing):
        super().__init__(
            f"Book '{existing.title}' already exists for author '{existing.author.name}'"
        )
        self.existing = existing
