"""Build search tokens and URLs for the remote catalog."""
import re
from typing import Optional

from litcatalog.errors import InvalidQuery

MAX_SEARCH_RESULTS = 20

_WHITESPACE = re.compile(r"\s+")


def build_query(raw: Optional[str]) -> str:
    """
    Turn free text into the catalog's search token.
    
    Leading and trailing whitespace is dropped and every internal run of
    whitespace becomes a literal ``%20``. Nothing else is escaped.
    
    Args:
        raw: Text typed by the user
        
    Returns:
        Encoded search token
        
    Raises:
        InvalidQuery: if the text is None or blank
    """
    if raw is None:
        raise InvalidQuery("Search query cannot be null")
    
    trimmed = raw.strip()
    if not trimmed:
        raise InvalidQuery("Search query cannot be empty")
    
    return _WHITESPACE.sub("%20", trimmed)


def _with_limit(url: str, limit: Optional[int]) -> str:
    if limit is None:
        return url
    return f"{url}&limit={max(1, min(limit, MAX_SEARCH_RESULTS))}"


def build_search_url(base_url: str, raw: Optional[str], limit: Optional[int] = None) -> str:
    """Build ``<base_url>?search=<token>``, optionally with a capped limit."""
    return _with_limit(f"{base_url}?search={build_query(raw)}", limit)


def build_language_url(base_url: str, code: Optional[str], limit: Optional[int] = None) -> str:
    """Build ``<base_url>?languages=<code>`` for a language listing."""
    if code is None or not code.strip():
        raise InvalidQuery("Language code cannot be empty")
    return _with_limit(f"{base_url}?languages={code.strip().lower()}", limit)
