import unittest
from datetime import date, timedelta

from src.application.contribution_service import (
    ContributionHistoryResolver,
    EventsHeuristicStrategy,
    GraphQLCalendarStrategy,
    WINDOW_DAYS,
)
from src.domain.exceptions import FetchError, GraphQLError, RateLimitError
from tests.fakes import FakeGitHubClient

TODAY = date(2024, 6, 15)


def _calendar(start: date, days: int):
    weeks = []
    for week_start in range(0, days, 7):
        weeks.append({
            "contributionDays": [
                {"date": (start + timedelta(days=offset)).isoformat(), "contributionCount": offset % 4}
                for offset in range(week_start, min(week_start + 7, days))
            ]
        })
    return {"user": {"contributionsCollection": {"contributionCalendar": {"weeks": weeks}}}}


def _event(event_type: str, day: date):
    return {"type": event_type, "created_at": f"{day.isoformat()}T12:00:00Z"}


def _resolver(client: FakeGitHubClient) -> ContributionHistoryResolver:
    return ContributionHistoryResolver.default(client, today=lambda: TODAY)


class TestContributionHistoryResolver(unittest.IsolatedAsyncioTestCase):
    def assertContiguousAscending(self, days) -> None:
        for previous, current in zip(days, days[1:]):
            self.assertEqual(current.date - previous.date, timedelta(days=1))

    async def test_uses_graphql_calendar_when_available(self) -> None:
        start = TODAY - timedelta(days=370)
        client = FakeGitHubClient(graphql_result=_calendar(start, 371))

        record = await _resolver(client).fetch_contribution_data("octocat")

        self.assertEqual(record.source, "graphql_calendar")
        self.assertEqual(len(record.days), 371)
        self.assertEqual(record.days[0].date, start)
        self.assertContiguousAscending(record.days)
        self.assertEqual(client.calls, ["graphql"])

    async def test_graphql_errors_fall_back_to_events_with_zero_days(self) -> None:
        client = FakeGitHubClient(
            routes={"/users/octocat/events": []},
            graphql_result=GraphQLError("Could not resolve to a User"),
        )

        record = await _resolver(client).fetch_contribution_data("octocat")

        self.assertEqual(record.source, "events_heuristic")
        self.assertEqual(len(record.days), WINDOW_DAYS + 1)
        self.assertEqual(record.days[0].date, TODAY - timedelta(days=WINDOW_DAYS))
        self.assertEqual(record.days[-1].date, TODAY)
        self.assertTrue(all(day.count == 0 for day in record.days))
        self.assertContiguousAscending(record.days)

    async def test_events_heuristic_counts_contribution_types_in_window(self) -> None:
        client = FakeGitHubClient(
            routes={"/users/octocat/events": [
                _event("PushEvent", TODAY),
                _event("PushEvent", TODAY),
                _event("IssueCommentEvent", TODAY - timedelta(days=3)),
                _event("WatchEvent", TODAY - timedelta(days=3)),
                _event("CreateEvent", TODAY - timedelta(days=WINDOW_DAYS + 5)),
            ]},
            graphql_result=FetchError("unauthorized", status=401),
        )

        record = await _resolver(client).fetch_contribution_data("octocat")
        counts = {day.date: day.count for day in record.days}

        self.assertEqual(counts[TODAY], 2)
        self.assertEqual(counts[TODAY - timedelta(days=3)], 1)
        self.assertEqual(record.total, 3)

    async def test_empty_calendar_falls_back_to_full_year_of_events(self) -> None:
        empty_calendar = {"user": {"contributionsCollection": {"contributionCalendar": {"weeks": []}}}}
        client = FakeGitHubClient(routes={"/users/octocat/events": []}, graphql_result=empty_calendar)

        record = await _resolver(client).fetch_contribution_data("octocat")

        self.assertEqual(record.source, "events_heuristic")
        self.assertGreaterEqual(len(record.days), 365)
        self.assertEqual(record.days[-1].date, TODAY)
        self.assertContiguousAscending(record.days)

    async def test_empty_calendar_fails_graphql_strategy(self) -> None:
        empty_calendar = {"user": {"contributionsCollection": {"contributionCalendar": {"weeks": [{"contributionDays": []}]}}}}
        strategy = GraphQLCalendarStrategy(FakeGitHubClient(graphql_result=empty_calendar))

        with self.assertRaises(ValueError):
            await strategy.fetch("octocat")

    async def test_null_user_falls_back(self) -> None:
        client = FakeGitHubClient(routes={"/users/ghost/events": []}, graphql_result={"user": None})

        record = await _resolver(client).fetch_contribution_data("ghost")

        self.assertEqual(record.source, "events_heuristic")

    async def test_both_strategies_failing_raises_rate_limit(self) -> None:
        client = FakeGitHubClient(
            routes={"/users/octocat/events": RateLimitError()},
            graphql_result=RateLimitError(),
        )

        with self.assertRaises(RateLimitError):
            await _resolver(client).fetch_contribution_data("octocat")

    async def test_both_strategies_failing_raises_fetch_error(self) -> None:
        client = FakeGitHubClient(graphql_result=GraphQLError("bad query"))

        with self.assertRaises(FetchError):
            await _resolver(client).fetch_contribution_data("nobody")

    async def test_malformed_events_payload_is_fetch_error(self) -> None:
        client = FakeGitHubClient(routes={"/users/octocat/events": ["not-an-event"]})

        with self.assertRaises(FetchError):
            await _resolver(client).fetch_contribution_data("octocat")

    async def test_single_strategy_failure_is_terminal(self) -> None:
        client = FakeGitHubClient(graphql_result=GraphQLError("nope"))
        resolver = ContributionHistoryResolver([GraphQLCalendarStrategy(client)])

        with self.assertRaises(FetchError):
            await resolver.fetch_contribution_data("octocat")

    def test_requires_a_strategy(self) -> None:
        with self.assertRaises(ValueError):
            ContributionHistoryResolver([])

    async def test_events_strategy_alone_uses_injected_clock(self) -> None:
        client = FakeGitHubClient(routes={"/users/octocat/events": []})
        strategy = EventsHeuristicStrategy(client, today=lambda: date(2024, 3, 1))

        days = await strategy.fetch("octocat")

        self.assertEqual(days[-1].date, date(2024, 3, 1))
        self.assertEqual(days[0].date, date(2023, 3, 2))
