import asyncio
import logging
from datetime import date
from typing import Callable, List, Optional, Tuple

from src.application.contribution_service import ContributionHistoryResolver
from src.application.language_service import LanguageService
from src.application.profile_service import ProfileService
from src.application.repository_service import RepositoryService
from src.domain.models import ContributionRecord, LanguageStats, Profile, Repository, UserBundle
from src.infrastructure.github_client import GitHubClient

logger = logging.getLogger(__name__)


class GitHubDataService:
    """
    Entry points consumed by the presentation layer.

    The four fetches are independent; `fetch_user_bundle` and `compare_users`
    are conveniences for callers that want the profile view for one or two users.
    """

    def __init__(
            self,
            github_client: GitHubClient,
            today: Optional[Callable[[], date]] = None,
    ):
        batch_size = github_client.config.batch_size
        self.github_client = github_client
        self.profile_service = ProfileService(github_client)
        self.repository_service = RepositoryService(github_client, batch_size=batch_size)
        self.language_service = LanguageService(github_client, self.repository_service, batch_size=batch_size)
        self.contribution_resolver = ContributionHistoryResolver.default(github_client, today=today)

    async def fetch_user_data(self, username: str) -> Profile:
        return await self.profile_service.fetch_user_data(username)

    async def fetch_user_repos_with_commits(self, username: str) -> List[Repository]:
        return await self.repository_service.fetch_repos_with_commits(username)

    async def calculate_language_stats(self, username: str) -> LanguageStats:
        return await self.language_service.calculate_language_stats(username)

    async def fetch_contribution_data(self, username: str) -> ContributionRecord:
        return await self.contribution_resolver.fetch_contribution_data(username)

    async def fetch_user_bundle(self, username: str) -> UserBundle:
        """
        Fetches profile, enriched repositories and language stats in parallel.
        Errors from the profile or repository fetch propagate; the remaining
        fetches are cancelled before the error is raised.
        """
        tasks = [
            asyncio.ensure_future(self.fetch_user_data(username)),
            asyncio.ensure_future(self.fetch_user_repos_with_commits(username)),
            asyncio.ensure_future(self.calculate_language_stats(username)),
        ]
        try:
            profile, repositories, language_stats = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        logger.info(f"Loaded {username}: {len(repositories)} repositories, {len(language_stats.bytes_per_language)} languages.")
        return UserBundle(profile=profile, repositories=repositories, language_stats=language_stats)

    async def compare_users(self, first: str, second: str) -> Tuple[UserBundle, UserBundle]:
        """Loads both users one after the other to keep request bursts small."""
        first_bundle = await self.fetch_user_bundle(first)
        second_bundle = await self.fetch_user_bundle(second)
        return first_bundle, second_bundle
