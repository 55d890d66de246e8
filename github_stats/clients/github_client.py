import logging
from collections.abc import AsyncIterator
from collections.abc import Mapping
from contextlib import asynccontextmanager
from typing import Any
from typing import Protocol

import httpx

from github_stats.clients.queries import VIEWER_LOGIN_QUERY
from github_stats.clients.validation import raise_for_graphql_errors
from github_stats.clients.validation import require_object
from github_stats.exceptions import DataShapeError
from github_stats.exceptions import TransportError
from github_stats.settings import Settings


logger = logging.getLogger(__name__)


class GraphQLExecutor(Protocol):
    async def execute(
        self, query: str, variables: Mapping[str, Any] | None = None
    ) -> Any: ...


class GitHubGraphQLClient:
    """Thin async transport for GitHub's GraphQL endpoint.

    Returns parsed JSON envelopes and never retries. Classification of the
    envelope is left to `github_stats.clients.validation`.
    """

    def __init__(
        self,
        token: str,
        graphql_url: str | None = None,
        *,
        timeout: float | None = None,
        user_agent: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not token:
            raise ValueError("GITHUB_TOKEN is required for GraphQL requests")

        settings = Settings()
        self.graphql_url = graphql_url or settings.github_graphql_url
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "User-Agent": user_agent or settings.user_agent,
        }
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.http_timeout_seconds
        )

    async def __aenter__(self) -> "GitHubGraphQLClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    async def execute(
        self, query: str, variables: Mapping[str, Any] | None = None
    ) -> Any:
        """POST one GraphQL document and return the decoded JSON body."""

        try:
            response = await self._http_client.post(
                self.graphql_url,
                json={"query": query, "variables": dict(variables or {})},
                headers=self._headers,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.warning("GitHub GraphQL request failed with HTTP %s", status_code)
            raise TransportError(
                f"GitHub API responded with HTTP {status_code}",
                status_code=status_code,
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("GitHub GraphQL request failed: %s", exc)
            raise TransportError("GitHub API request failed") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise DataShapeError("GitHub GraphQL response is not JSON") from exc


@asynccontextmanager
async def open_client(
    token: str, client: GraphQLExecutor | None = None
) -> AsyncIterator[GraphQLExecutor]:
    """Yield `client` untouched, or a fresh client closed on exit."""

    if client is not None:
        yield client
        return

    async with GitHubGraphQLClient(token) as owned_client:
        yield owned_client


async def fetch_viewer_login(client: GraphQLExecutor) -> str:
    """Return the login of the account the token belongs to."""

    data = raise_for_graphql_errors(await client.execute(VIEWER_LOGIN_QUERY))
    viewer = require_object(data, "viewer")
    login = viewer.get("login")
    if not isinstance(login, str) or not login:
        raise DataShapeError("GitHub viewer response is missing login")
    return login
