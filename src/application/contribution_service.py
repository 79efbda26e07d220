import logging
from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Sequence

from src.domain.exceptions import FetchError, GitHubDataException, RateLimitError
from src.domain.models import ContributionDay, ContributionRecord, ContributionSource
from src.infrastructure.acl import GitHubTranslator, normalize_days
from src.infrastructure.github_client import GitHubClient

logger = logging.getLogger(__name__)

CONTRIBUTION_CALENDAR_QUERY = """
query ($login: String!) {
  user(login: $login) {
    contributionsCollection {
      contributionCalendar {
        weeks {
          contributionDays {
            date
            contributionCount
          }
        }
      }
    }
  }
}
"""

EVENTS_PAGE_SIZE = 100
WINDOW_DAYS = 365

# Public event types that count as a contribution in the events heuristic
CONTRIBUTION_EVENT_TYPES = frozenset({
    "PushEvent",
    "CreateEvent",
    "PullRequestEvent",
    "CommitCommentEvent",
    "IssuesEvent",
    "IssueCommentEvent",
})


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class ContributionStrategy(ABC):
    """One way of producing a year of daily contribution counts."""

    source: ContributionSource

    def __init__(self, github_client: GitHubClient):
        self.github_client = github_client

    @abstractmethod
    async def fetch(self, username: str) -> List[ContributionDay]:
        """Returns days ascending by date, or raises on failure."""


class GraphQLCalendarStrategy(ContributionStrategy):
    """
    Reads the contribution calendar through GraphQL. Yields true counts, including
    private activity when the token permits, but requires an authenticated client.
    """

    source = "graphql_calendar"

    async def fetch(self, username: str) -> List[ContributionDay]:
        data = await self.github_client.graphql(CONTRIBUTION_CALENDAR_QUERY, {"login": username})

        user = data.get("user")
        if user is None:
            raise ValueError(f"GraphQL returned no user for '{username}'.")

        calendar = user["contributionsCollection"]["contributionCalendar"]
        days = GitHubTranslator.to_contribution_days(calendar)
        if not days:
            raise ValueError(f"GraphQL returned an empty contribution calendar for '{username}'.")
        return days


class EventsHeuristicStrategy(ContributionStrategy):
    """
    Approximates the calendar from the last 100 public events over REST.
    Cannot see private contributions or activity older than those events.
    """

    source = "events_heuristic"

    def __init__(self, github_client: GitHubClient, today: Callable[[], date] = utc_today):
        super().__init__(github_client)
        self.today = today

    async def fetch(self, username: str) -> List[ContributionDay]:
        raw_events = await self.github_client.get(
            f"/users/{username}/events", params={"per_page": EVENTS_PAGE_SIZE}
        )

        end = self.today()
        start = end - timedelta(days=WINDOW_DAYS)
        counts: Dict[date, int] = {
            start + timedelta(days=offset): 0 for offset in range((end - start).days + 1)
        }

        for event in raw_events:
            if event.get("type") not in CONTRIBUTION_EVENT_TYPES:
                continue
            event_date = GitHubTranslator.to_event_date(event)
            if event_date in counts:
                counts[event_date] += 1

        return [ContributionDay(date=day, count=count) for day, count in sorted(counts.items())]


class ContributionHistoryResolver:
    """
    Tries contribution strategies in fixed priority order.

    Failure of any strategy but the last triggers the next one; failure of the
    last one is terminal and raised as RateLimitError or FetchError. GraphQLError
    never escapes the resolver.
    """

    def __init__(self, strategies: Sequence[ContributionStrategy]):
        if not strategies:
            raise ValueError("At least one contribution strategy is required.")
        self.strategies = list(strategies)

    @classmethod
    def default(cls, github_client: GitHubClient, today: Optional[Callable[[], date]] = None) -> "ContributionHistoryResolver":
        return cls([
            GraphQLCalendarStrategy(github_client),
            EventsHeuristicStrategy(github_client, today=today or utc_today),
        ])

    async def fetch_contribution_data(self, username: str) -> ContributionRecord:
        *fallible, terminal = self.strategies

        for strategy in fallible:
            try:
                days = await strategy.fetch(username)
                return ContributionRecord(days=normalize_days(days), source=strategy.source)
            except (GitHubDataException, ValueError, KeyError, TypeError, AttributeError) as e:
                logger.warning(f"{strategy.source} contribution fetch failed for {username}, falling back: {e}")

        try:
            days = await terminal.fetch(username)
        except (RateLimitError, FetchError):
            raise
        except (GitHubDataException, ValueError, KeyError, TypeError, AttributeError) as e:
            raise FetchError(f"Failed to fetch contribution data: {e}") from e

        return ContributionRecord(days=normalize_days(days), source=terminal.source)
