import logging
from collections import defaultdict
from typing import Dict, Set

from src.application.batcher import run_in_batches
from src.application.repository_service import RepositoryService, top_by_stars
from src.domain.models import LanguageStats
from src.infrastructure.acl import GitHubTranslator
from src.infrastructure.config import DEFAULT_BATCH_SIZE
from src.infrastructure.github_client import GitHubClient

logger = logging.getLogger(__name__)

# Non-fork repositories (by stars) sampled for language statistics
LANGUAGE_SAMPLE_SIZE = 25


class LanguageService:
    """
    Aggregates language byte counts over a user's most-starred non-fork repositories.

    Language statistics are supplementary data: `calculate_language_stats` never
    raises and returns a degraded, empty result when anything in the pipeline fails.
    """

    def __init__(
            self,
            github_client: GitHubClient,
            repository_service: RepositoryService,
            batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        self.github_client = github_client
        self.repository_service = repository_service
        self.batch_size = batch_size

    async def fetch_repo_languages(self, username: str, repo_name: str) -> Dict[str, int]:
        raw_languages = await self.github_client.get(f"/repos/{username}/{repo_name}/languages")
        return GitHubTranslator.to_language_bytes(raw_languages)

    async def calculate_language_stats(self, username: str) -> LanguageStats:
        try:
            return await self._aggregate(username)
        except Exception as e:
            logger.error(f"Error calculating language stats for {username}: {e}")
            return LanguageStats.empty(degraded=True)

    async def _aggregate(self, username: str) -> LanguageStats:
        repositories = await self.repository_service.fetch_repositories(username)
        sampled = top_by_stars([repo for repo in repositories if not repo.fork], LANGUAGE_SAMPLE_SIZE)

        bytes_per_language: Dict[str, int] = defaultdict(int)
        repos_by_language: Dict[str, Set[str]] = defaultdict(set)

        results = await run_in_batches(
            sampled,
            lambda repo: self.fetch_repo_languages(username, repo.name),
            batch_size=self.batch_size,
        )

        for repo, languages in zip(sampled, results):
            for language, byte_count in languages.items():
                bytes_per_language[language] += byte_count
                # A set, so a repository is counted once per language however often it is seen
                repos_by_language[language].add(repo.name)

        logger.debug(f"Aggregated {len(bytes_per_language)} languages over {len(sampled)} repositories for {username}.")

        return LanguageStats(
            bytes_per_language=dict(bytes_per_language),
            repos_per_language={language: len(names) for language, names in repos_by_language.items()},
        )
