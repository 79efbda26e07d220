import logging
from typing import Dict, List

from src.application.batcher import run_in_batches
from src.domain.exceptions import FetchError, GitHubDataException
from src.domain.models import Repository
from src.infrastructure.acl import GitHubTranslator
from src.infrastructure.config import DEFAULT_BATCH_SIZE
from src.infrastructure.github_client import GitHubClient

logger = logging.getLogger(__name__)

# GitHub's maximum page size. Users with more repositories are truncated to one page.
REPOS_PAGE_SIZE = 100
# Number of repositories (by stars) that get their latest commit message attached
COMMIT_SAMPLE_SIZE = 5


def top_by_stars(repositories: List[Repository], limit: int) -> List[Repository]:
    """Highest-starred repositories first; ties keep the server's order."""
    return sorted(repositories, key=lambda repo: repo.stars, reverse=True)[:limit]


class RepositoryService:
    """
    Fetches a user's repositories and enriches the most-starred ones with
    their latest commit message.
    """

    def __init__(self, github_client: GitHubClient, batch_size: int = DEFAULT_BATCH_SIZE):
        self.github_client = github_client
        self.batch_size = batch_size

    async def fetch_repositories(self, username: str) -> List[Repository]:
        """
        Fetches a single page of up to 100 repositories sorted by stars.

        Raises:
            RateLimitError, FetchError: Propagated from the client unchanged.
        """
        raw_repos = await self.github_client.get(
            f"/users/{username}/repos",
            params={"sort": "stars", "per_page": REPOS_PAGE_SIZE},
        )
        try:
            repositories = [GitHubTranslator.to_repository(raw) for raw in raw_repos]
        except (ValueError, TypeError, AttributeError) as e:
            raise FetchError(f"Unexpected repository payload for '{username}': {e}") from e

        logger.debug(f"Fetched {len(repositories)} repositories for {username}.")
        return repositories

    async def fetch_latest_commit(self, username: str, repo_name: str) -> str:
        """
        Returns the message of the most recent commit, or '' when it cannot be fetched.
        Failures are logged and never raised.
        """
        try:
            raw_commits = await self.github_client.get(
                f"/repos/{username}/{repo_name}/commits", params={"per_page": 1}
            )
            return GitHubTranslator.to_commit_message(raw_commits)
        except (GitHubDataException, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Error fetching latest commit for {username}/{repo_name}: {e}")
            return ''

    async def fetch_repos_with_commits(self, username: str) -> List[Repository]:
        """
        Fetches all repositories and attaches `latest_commit` to the top 5 by stars.

        The returned list has the same entries in the same order as the fetched
        collection; enriched entries are matched back by id.

        Raises:
            RateLimitError, FetchError: Only when the repository list itself fails.
        """
        repositories = await self.fetch_repositories(username)
        top_repos = top_by_stars(repositories, COMMIT_SAMPLE_SIZE)

        messages = await run_in_batches(
            top_repos,
            lambda repo: self.fetch_latest_commit(username, repo.name),
            batch_size=self.batch_size,
        )
        commits_by_id: Dict[int, str] = {repo.id: message for repo, message in zip(top_repos, messages)}

        return [
            repo.model_copy(update={"latest_commit": commits_by_id[repo.id]})
            if repo.id in commits_by_id else repo
            for repo in repositories
        ]
