import unittest

from src.application.language_service import LANGUAGE_SAMPLE_SIZE, LanguageService
from src.application.repository_service import RepositoryService
from src.domain.exceptions import FetchError, RateLimitError
from src.domain.models import LanguageStats
from tests.fakes import FakeGitHubClient, raw_repo


def _service(client: FakeGitHubClient) -> LanguageService:
    return LanguageService(client, RepositoryService(client))


class TestCalculateLanguageStats(unittest.IsolatedAsyncioTestCase):
    async def test_sums_bytes_and_counts_distinct_repositories(self) -> None:
        client = FakeGitHubClient({
            "/users/octocat/repos": [
                raw_repo(1, "api", 10),
                raw_repo(2, "web", 20),
                raw_repo(3, "forked", 99, fork=True),
            ],
            "/repos/octocat/api/languages": {"Python": 1000, "Shell": 50},
            "/repos/octocat/web/languages": {"TypeScript": 3000, "Python": 200},
            "/repos/octocat/forked/languages": {"C": 10_000},
        })

        stats = await _service(client).calculate_language_stats("octocat")

        self.assertEqual(stats.bytes_per_language, {"Python": 1200, "Shell": 50, "TypeScript": 3000})
        self.assertEqual(stats.repos_per_language, {"Python": 2, "Shell": 1, "TypeScript": 1})
        self.assertFalse(stats.degraded)
        self.assertNotIn("/repos/octocat/forked/languages", client.calls)

    async def test_samples_top_25_non_forks_five_at_a_time(self) -> None:
        repos = [raw_repo(i, f"repo{i}", i) for i in range(40)]
        routes = {"/users/octocat/repos": repos}
        for i in range(40):
            routes[f"/repos/octocat/repo{i}/languages"] = {"Go": 1}
        client = FakeGitHubClient(routes)

        stats = await _service(client).calculate_language_stats("octocat")

        language_calls = [call for call in client.calls if call.endswith("/languages")]
        self.assertEqual(len(language_calls), LANGUAGE_SAMPLE_SIZE)
        self.assertEqual(set(language_calls), {f"/repos/octocat/repo{i}/languages" for i in range(15, 40)})
        self.assertEqual(stats.repos_per_language, {"Go": LANGUAGE_SAMPLE_SIZE})
        self.assertLessEqual(client.max_in_flight, 5)

    async def test_repository_counted_once_per_language_when_seen_twice(self) -> None:
        # Same repository name twice in the listing, e.g. overlapping pages
        client = FakeGitHubClient({
            "/users/octocat/repos": [raw_repo(1, "dup", 5), raw_repo(2, "dup", 4)],
            "/repos/octocat/dup/languages": {"Rust": 10},
        })

        stats = await _service(client).calculate_language_stats("octocat")

        self.assertEqual(stats.bytes_per_language, {"Rust": 20})
        self.assertEqual(stats.repos_per_language, {"Rust": 1})

    async def test_repository_fetch_failure_returns_degraded_empty_stats(self) -> None:
        client = FakeGitHubClient({"/users/octocat/repos": FetchError("boom", status=500)})

        stats = await _service(client).calculate_language_stats("octocat")

        self.assertEqual(stats.bytes_per_language, {})
        self.assertEqual(stats.repos_per_language, {})
        self.assertTrue(stats.degraded)

    async def test_rate_limited_language_fetch_returns_empty_stats(self) -> None:
        client = FakeGitHubClient({
            "/users/octocat/repos": [raw_repo(1, "api", 10), raw_repo(2, "web", 5)],
            "/repos/octocat/api/languages": {"Python": 1000},
            "/repos/octocat/web/languages": RateLimitError(),
        })

        stats = await _service(client).calculate_language_stats("octocat")

        self.assertEqual(stats, LanguageStats.empty(degraded=True))

    async def test_user_with_only_forks_has_empty_non_degraded_stats(self) -> None:
        client = FakeGitHubClient({"/users/octocat/repos": [raw_repo(1, "f", 1, fork=True)]})

        stats = await _service(client).calculate_language_stats("octocat")

        self.assertEqual(stats, LanguageStats.empty())
