from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional
from src.domain.models import ContributionDay, Profile, Repository


def _parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    return datetime.fromisoformat(raw.replace("Z", "+00:00"))


class GitHubTranslator:
    """
    Anti-corruption layer that translates raw GitHub REST and GraphQL JSON into domain models.
    """

    @staticmethod
    def to_profile(raw_user: Dict[str, Any]) -> Profile:
        """
        Transforms a `GET /users/{username}` payload into a Profile.

        Raises:
            ValueError: If the payload has no login.
        """
        login = raw_user.get('login')
        if not login:
            raise ValueError("login is required to build Profile.")

        return Profile(
            login=login,
            name=raw_user.get('name'),
            avatar_url=raw_user.get('avatar_url'),
            html_url=raw_user.get('html_url'),
            bio=raw_user.get('bio'),
            company=raw_user.get('company'),
            location=raw_user.get('location'),
            blog=raw_user.get('blog') or None,
            hireable=raw_user.get('hireable'),
            followers=raw_user.get('followers') or 0,
            following=raw_user.get('following') or 0,
            public_repos=raw_user.get('public_repos') or 0,
            created_at=_parse_timestamp(raw_user.get('created_at')),
        )

    @staticmethod
    def to_repository(raw_repo: Dict[str, Any]) -> Repository:
        """
        Transforms one entry of `GET /users/{username}/repos` into a Repository.
        """
        if raw_repo.get('id') is None:
            raise ValueError("id is required to build Repository.")

        return Repository(
            id=raw_repo['id'],
            name=raw_repo.get('name', ''),
            description=raw_repo.get('description'),
            language=raw_repo.get('language'),
            stars=raw_repo.get('stargazers_count') or 0,
            forks=raw_repo.get('forks_count') or 0,
            updated_at=_parse_timestamp(raw_repo.get('updated_at')),
            html_url=raw_repo.get('html_url'),
            fork=bool(raw_repo.get('fork', False)),
        )

    @staticmethod
    def to_commit_message(raw_commits: List[Dict[str, Any]]) -> str:
        """Extracts the message of the first commit, or '' when there is none."""
        if not raw_commits:
            return ''
        commit = raw_commits[0].get('commit') or {}
        return commit.get('message') or ''

    @staticmethod
    def to_language_bytes(raw_languages: Dict[str, Any]) -> Dict[str, int]:
        return {language: int(count) for language, count in (raw_languages or {}).items()}

    @staticmethod
    def to_contribution_days(raw_calendar: Dict[str, Any]) -> List[ContributionDay]:
        """
        Flattens a GraphQL contributionCalendar (weeks of days) into a day list sorted by date.
        """
        weeks = raw_calendar.get('weeks')
        if weeks is None:
            raise ValueError("contributionCalendar.weeks is required.")

        days = [
            ContributionDay(date=date.fromisoformat(day['date']), count=day.get('contributionCount', 0))
            for week in weeks
            for day in week.get('contributionDays', [])
        ]
        return sorted(days, key=lambda day: day.date)

    @staticmethod
    def to_event_date(raw_event: Dict[str, Any]) -> Optional[date]:
        """Returns the UTC calendar date an event was created on."""
        created_at = raw_event.get('created_at')
        if not created_at:
            return None
        return date.fromisoformat(created_at.split('T')[0])


def normalize_days(days: Iterable[ContributionDay]) -> List[ContributionDay]:
    """
    Returns the days strictly ascending by date with duplicates collapsed
    (last one wins) and every missing date in between filled with a zero count.
    """
    by_date = {day.date: day.count for day in days}
    if not by_date:
        return []

    start, end = min(by_date), max(by_date)
    span = (end - start).days
    return [
        ContributionDay(date=current, count=by_date.get(current, 0))
        for current in (start + timedelta(days=offset) for offset in range(span + 1))
    ]
