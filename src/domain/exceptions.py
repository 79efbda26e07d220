from typing import Optional

RATE_LIMIT_MESSAGE = (
    "GitHub API rate limit exceeded. Please try again later or add an authentication token."
)


class GitHubDataException(Exception):
    """Base exception for all GitHub data aggregation errors."""
    pass

class RateLimitError(GitHubDataException):
    """Raised when GitHub rejects a request with HTTP 403."""
    def __init__(self, reset_at: Optional[str] = None, message: str = RATE_LIMIT_MESSAGE):
        self.reset_at = reset_at
        if reset_at:
            message = f"{message} Resets at: {reset_at}"
        super().__init__(message)

class FetchError(GitHubDataException):
    """Raised for any other upstream or network failure."""
    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)

class GraphQLError(GitHubDataException):
    """Raised when a GraphQL response carries an errors list, even on HTTP 200."""
    pass
