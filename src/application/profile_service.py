import logging

from src.domain.exceptions import FetchError
from src.domain.models import Profile
from src.infrastructure.acl import GitHubTranslator
from src.infrastructure.github_client import GitHubClient

logger = logging.getLogger(__name__)


class ProfileService:
    """Fetches the basic user profile record."""

    def __init__(self, github_client: GitHubClient):
        self.github_client = github_client

    async def fetch_user_data(self, username: str) -> Profile:
        """
        Raises:
            RateLimitError, FetchError: Propagated from the client unchanged.
        """
        raw_user = await self.github_client.get(f"/users/{username}")
        try:
            profile = GitHubTranslator.to_profile(raw_user)
        except (ValueError, AttributeError) as e:
            raise FetchError(f"Unexpected profile payload for '{username}': {e}") from e

        logger.debug(f"Fetched profile for {profile.login}.")
        return profile
