"""Parse and normalize Gutendex search responses."""
import json
import logging
from typing import Dict, Any, List, Optional

from litcatalog.errors import ParseError
from litcatalog.models import CandidateBook, SearchResponse

logger = logging.getLogger(__name__)


def _author_name(entry: Any) -> Optional[str]:
    """Authors arrive either as plain names or as objects carrying a name."""
    if isinstance(entry, str):
        name = entry
    elif isinstance(entry, dict):
        name = entry.get("name")
    else:
        return None

    if not isinstance(name, str) or not name.strip():
        return None
    return name.strip()


def _list_field(item: Dict[str, Any], key: str) -> List[Any]:
    """A list-valued field; missing, null or mis-typed values count as empty."""
    value = item.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning(f"Ignoring non-list {key} {value!r} (id={item.get('id')})")
        return []
    return value


def parse_candidate(item: Dict[str, Any]) -> Optional[CandidateBook]:
    """
    Parse a single result item.

    Args:
        item: Single entry of the response's ``results`` array

    Returns:
        CandidateBook or None if the item has no usable title
    """
    if not isinstance(item, dict):
        logger.warning(f"Skipping non-object result: {item!r}")
        return None

    title = item.get("title")
    if not isinstance(title, str) or not title.strip():
        logger.warning(f"Skipping result without title (id={item.get('id')})")
        return None

    authors = [
        name for name in (_author_name(a) for a in _list_field(item, "authors"))
        if name
    ]
    languages = [lang for lang in _list_field(item, "languages") if isinstance(lang, str) and lang]

    download_count = item.get("download_count", item.get("downloadCount"))
    try:
        download_count = int(download_count or 0)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring bad download count {download_count!r} for '{title}'")
        download_count = 0

    raw_id = item.get("id")
    return CandidateBook(
        id="" if raw_id is None else str(raw_id),
        title=title,
        authors=authors,
        languages=languages,
        download_count=download_count
    )


def parse_search_response(raw_text: str) -> SearchResponse:
    """
    Parse a full search response body.

    Args:
        raw_text: JSON text returned by the catalog

    Returns:
        SearchResponse (results empty if none were found)

    Raises:
        ParseError: if the body is not a JSON object or results is not a list
    """
    if raw_text is None or not raw_text.strip():
        raise ParseError("Response body is empty")

    try:
        payload = json.loads(raw_text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Failed to parse JSON: {e}") from e

    if not isinstance(payload, dict):
        raise ParseError(f"Expected a JSON object, got {type(payload).__name__}")

    items = payload.get("results")
    if items is None:
        items = []
    elif not isinstance(items, list):
        raise ParseError(f"Expected results to be a list, got {type(items).__name__}")

    results = []
    for item in items:
        candidate = parse_candidate(item)
        if candidate:
            results.append(candidate)

    count = payload.get("count")
    return SearchResponse(
        count=count if isinstance(count, int) else len(results),
        next=payload.get("next"),
        previous=payload.get("previous"),
        results=results
    )


def deduplicate_candidates(candidates: List[CandidateBook]) -> List[CandidateBook]:
    """
    Remove repeated candidates by external ID, keeping source order.

    Args:
        candidates: List of CandidateBook objects

    Returns:
        Deduplicated list of candidates
    """
    seen_ids = set()
    unique = []

    for candidate in candidates:
        if candidate.id and candidate.id in seen_ids:
            continue
        seen_ids.add(candidate.id)
        unique.append(candidate)

    return unique
