"""Data models for remote candidates and locally stored authors and books."""
from dataclasses import dataclass, field
from typing import Optional, List

UNKNOWN_AUTHOR = "Unknown Author"
UNKNOWN_LANGUAGE = "unknown"


@dataclass
class CandidateBook:
    """A book returned by the remote catalog, never persisted as-is."""
    id: str
    title: str
    authors: List[str] = field(default_factory=list)
    languages: List[str] = field(default_factory=list)
    download_count: int = 0
    
    @property
    def primary_author(self) -> Optional[str]:
        """First listed author name, if any."""
        return self.authors[0] if self.authors else None
    
    @property
    def primary_language(self) -> str:
        """First language code, or the unknown sentinel."""
        return self.languages[0] if self.languages else UNKNOWN_LANGUAGE
    
    @property
    def authors_str(self) -> str:
        """Format authors as comma-separated string."""
        return ", ".join(self.authors) if self.authors else UNKNOWN_AUTHOR


@dataclass
class SearchResponse:
    """One page of remote search results."""
    count: int = 0
    next: Optional[str] = None
    previous: Optional[str] = None
    results: List[CandidateBook] = field(default_factory=list)
    
    @property
    def has_results(self) -> bool:
        return bool(self.results)
    
    @property
    def has_next_page(self) -> bool:
        return bool(self.next and self.next.strip())


@dataclass
class Author:
    """Locally stored author."""
    name: str
    birth_year: Optional[int] = None
    death_year: Optional[int] = None
    id: Optional[int] = None
    
    def is_alive_in(self, year: int) -> bool:
        """True when the author was born by `year` and had not died before it."""
        if self.birth_year is None or self.birth_year > year:
            return False
        return self.death_year is None or self.death_year >= year


@dataclass
class Book:
    """Locally stored book, always attached to one author."""
    title: str
    author: Author
    language: str = UNKNOWN_LANGUAGE
    download_count: int = 0
    id: Optional[int] = None
