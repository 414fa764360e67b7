"""Pick the best remote candidate for a user-supplied title."""
import re
import logging
from typing import Callable, List, Optional, Sequence, Tuple

from litcatalog.models import CandidateBook

logger = logging.getLogger(__name__)

Tier = Callable[[str, Sequence[CandidateBook]], Optional[CandidateBook]]


def _fold(text: str) -> str:
    return text.strip().casefold()


def _first(candidates: Sequence[CandidateBook], predicate) -> Optional[CandidateBook]:
    for candidate in candidates:
        if predicate(candidate.title.casefold()):
            return candidate
    return None


def keywords(query: str) -> List[str]:
    """Case-folded whitespace-separated words of a query."""
    return [word for word in query.casefold().split() if word]


def _whole_word(keyword: str) -> "re.Pattern":
    # Alphanumerics on either side mean the keyword is part of a larger word.
    return re.compile(rf"(?<![^\W_]){re.escape(keyword)}(?![^\W_])")


def match_exact(query: str, candidates: Sequence[CandidateBook]) -> Optional[CandidateBook]:
    """Title equals the trimmed query, ignoring case."""
    folded = _fold(query)
    return _first(candidates, lambda title: title == folded)


def match_containment(query: str, candidates: Sequence[CandidateBook]) -> Optional[CandidateBook]:
    """Trimmed query appears contiguously inside the title, ignoring case."""
    folded = _fold(query)
    if not folded:
        return None
    return _first(candidates, lambda title: folded in title)


def match_keywords(query: str, candidates: Sequence[CandidateBook]) -> Optional[CandidateBook]:
    """Every query keyword appears in the title as a whole word."""
    patterns = [_whole_word(word) for word in keywords(query)]
    if not patterns:
        return None
    return _first(candidates, lambda title: all(p.search(title) for p in patterns))


MATCH_TIERS: List[Tuple[str, Tier]] = [
    ("exact", match_exact),
    ("containment", match_containment),
    ("keywords", match_keywords),
]


def find_best_match_with_tier(
    query: str,
    candidates: Sequence[CandidateBook]
) -> Tuple[Optional[str], Optional[CandidateBook]]:
    """
    Run the tiers in order and stop at the first one with a hit.

    Within a tier the earliest candidate in source order wins; there is no
    scoring across tiers.

    Args:
        query: Title typed by the user
        candidates: Remote results in the order the catalog returned them

    Returns:
        (tier name, candidate), or (None, None) when nothing matched
    """
    for name, tier in MATCH_TIERS:
        candidate = tier(query, candidates)
        if candidate is not None:
            logger.info(f"Matched '{query}' to '{candidate.title}' ({name} tier)")
            return name, candidate

    logger.info(f"No match for '{query}' among {len(candidates)} candidates")
    return None, None


def find_best_match(query: str, candidates: Sequence[CandidateBook]) -> Optional[CandidateBook]:
    """Best candidate for `query`, or None."""
    return find_best_match_with_tier(query, candidates)[1]
