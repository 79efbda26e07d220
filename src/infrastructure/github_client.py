import aiohttp
import asyncio
import logging
from typing import Any, Dict, Optional

from src.domain.exceptions import FetchError, GraphQLError, RateLimitError
from src.infrastructure.config import ClientConfig

logger = logging.getLogger(__name__)


class GitHubClient:
    """
    Client for the GitHub REST and GraphQL APIs.
    Applies shared headers to every call and classifies failures into
    RateLimitError (HTTP 403) and FetchError (everything else). No retries.
    """

    def __init__(self, config: ClientConfig, session: Optional[aiohttp.ClientSession] = None):
        self.config = config
        self.headers = config.headers()
        self.api_url = config.api_url
        self.graphql_url = config.graphql_url
        self.timeout = aiohttp.ClientTimeout(total=config.request_timeout)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "GitHubClient":
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        await self.close()
        return False

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.api_url}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Sends a single request and returns the decoded JSON body.

        Args:
            method (str): HTTP method.
            path (str): REST path relative to the API root, or an absolute URL.
            params: Optional query string parameters.
            json: Optional JSON body.

        Raises:
            RateLimitError: The server answered with HTTP 403.
            FetchError: Any other non-2xx status, transport failure, timeout or invalid JSON body.
        """
        if self._session is None:
            raise FetchError("GitHubClient session is not open; use 'async with GitHubClient(...)'.")

        url = self._url(path)
        try:
            async with self._session.request(
                method, url, params=params, json=json, headers=self.headers, timeout=self.timeout
            ) as response:
                if response.status == 403:
                    reset_at = response.headers.get("X-RateLimit-Reset")
                    logger.warning(f"Rate limited on {method} {url} (reset at {reset_at}).")
                    raise RateLimitError(reset_at=reset_at)

                if not 200 <= response.status < 300:
                    raise FetchError(
                        f"{method} {url} failed with HTTP {response.status}: {response.reason}",
                        status=response.status,
                    )

                try:
                    return await response.json()
                except ValueError as e:
                    raise FetchError(f"{method} {url} returned invalid JSON: {e}", status=response.status) from e

        except asyncio.TimeoutError as e:
            raise FetchError(f"{method} {url} timed out after {self.config.request_timeout}s") from e
        except aiohttp.ClientError as e:
            raise FetchError(f"{method} {url} failed: {e}") from e

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def graphql(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Executes a GraphQL query and returns its `data` object.
        A non-empty `errors` list raises GraphQLError even on HTTP 200.
        """
        payload = {"query": query, "variables": variables or {}}
        body = await self.request("POST", self.graphql_url, json=payload)

        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            raise GraphQLError(errors[0].get("message", "Unknown GraphQL error"))

        data = body.get("data") if isinstance(body, dict) else None
        if data is None:
            raise GraphQLError("GraphQL response contained no data.")
        return data
