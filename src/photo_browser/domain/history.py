"""Search history domain models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class SearchHistoryRecord:
    """A previously submitted search query."""

    id: int
    search_query: str
    searched_at: datetime


def normalize_query(query: str) -> str:
    """Trim surrounding whitespace and lower-case a query."""
    return query.strip().lower()
