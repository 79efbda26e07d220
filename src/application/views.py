import math
from datetime import datetime, timezone
from typing import Callable, Dict, List, Sequence, Tuple, TypeVar

from src.application.repository_service import top_by_stars
from src.domain.models import LanguageShare, LanguageStats, Repository

T = TypeVar("T")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)

SORT_KEYS: Dict[str, Callable[[Repository], object]] = {
    "stars": lambda repo: repo.stars,
    "forks": lambda repo: repo.forks,
    "updated": lambda repo: repo.updated_at or _EPOCH,
    "name": lambda repo: repo.name.lower(),
}


def sort_repositories(repositories: Sequence[Repository], option: str = "stars", descending: bool = True) -> List[Repository]:
    """
    Sorts repositories for display. Unknown options fall back to stars.
    The default direction for "name" is A to Z.
    """
    key = SORT_KEYS.get(option, SORT_KEYS["stars"])
    reverse = descending if option != "name" else not descending
    return sorted(repositories, key=key, reverse=reverse)


def top_repositories(repositories: Sequence[Repository], limit: int = 5) -> List[Repository]:
    return top_by_stars(list(repositories), limit)


def paginate(items: Sequence[T], page: int, per_page: int = 6) -> Tuple[List[T], int]:
    """Returns the items on a 1-based page and the total page count."""
    if per_page < 1:
        raise ValueError("per_page must be at least 1.")
    total_pages = math.ceil(len(items) / per_page)
    start = (max(page, 1) - 1) * per_page
    return list(items[start:start + per_page]), total_pages


def language_breakdown(stats: LanguageStats, limit: int = 10) -> List[LanguageShare]:
    """
    Top languages by bytes with repository counts. Percentages are relative to
    the languages shown, matching the chart tooltip.
    """
    ranked = sorted(stats.bytes_per_language.items(), key=lambda item: item[1], reverse=True)[:limit]
    total = sum(byte_count for _, byte_count in ranked)

    return [
        LanguageShare(
            name=name,
            bytes=byte_count,
            repo_count=stats.repos_per_language.get(name, 0),
            percentage=round(byte_count / total * 100, 1) if total else 0.0,
        )
        for name, byte_count in ranked
    ]
