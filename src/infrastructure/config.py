import os
from typing import Dict, Mapping, Optional
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_GRAPHQL_URL = "https://api.github.com/graphql"
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_BATCH_SIZE = 5
API_VERSION = "2022-11-28"
USER_AGENT = "github-profile-visualizer"


class ClientConfig(BaseModel):
    """
    Immutable outbound client configuration, constructed once at process start
    and injected into the GitHub client.
    """
    model_config = ConfigDict(frozen=True)

    token: Optional[str] = Field(None, description="Optional bearer token; unauthenticated when absent")
    api_url: str = DEFAULT_API_URL
    graphql_url: str = DEFAULT_GRAPHQL_URL
    request_timeout: float = Field(DEFAULT_REQUEST_TIMEOUT, gt=0, description="Per-request timeout in seconds")
    batch_size: int = Field(DEFAULT_BATCH_SIZE, ge=1, description="Concurrent requests per batch")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientConfig":
        """
        Builds the configuration from environment variables.

        Args:
            environ: Mapping to read from, defaults to os.environ.
        """
        env = os.environ if environ is None else environ

        token = (env.get("GITHUB_TOKEN") or "").strip() or None

        return cls(
            token=token,
            api_url=env.get("GITHUB_API_URL", DEFAULT_API_URL).rstrip("/"),
            graphql_url=env.get("GITHUB_GRAPHQL_URL", DEFAULT_GRAPHQL_URL),
            request_timeout=float(env.get("GITHUB_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)),
            batch_size=int(env.get("GITHUB_BATCH_SIZE", DEFAULT_BATCH_SIZE)),
        )

    @property
    def authenticated(self) -> bool:
        return self.token is not None

    def headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
            "X-GitHub-Api-Version": API_VERSION,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers
