"""GitHub REST client used to open pull requests on forks."""

from __future__ import annotations

import dataclasses
import typing as typ
from http import HTTPStatus

import httpx

from .errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
    GitHubTimeoutError,
)


@dataclasses.dataclass(frozen=True, slots=True)
class PullRequestSpec:
    """Everything needed to open one pull request."""

    owner: str
    repo: str
    title: str
    body: str
    head: str
    base: str
    maintainer_can_modify: bool = True


class PullRequestClient(typ.Protocol):
    """Interface the pick workflow needs from the code-review platform."""

    async def authenticated_login(self) -> str:
        """Return the login of the account the client acts as."""
        ...

    async def create_pull_request(self, spec: PullRequestSpec) -> int:
        """Open a pull request and return its number."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubRESTConfig:
    """Configuration for the GitHub REST API client."""

    token: str
    endpoint: str = "https://api.github.com"
    timeout_s: float = 30.0
    user_agent: str = "vendorsync/0.1"


class GitHubRESTClient:
    """GitHub REST implementation of :class:`PullRequestClient`."""

    def __init__(
        self,
        config: GitHubRESTConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            raise GitHubConfigError.empty_token()

        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)
        self._headers = {
            "Authorization": f"Bearer {config.token}",
            "User-Agent": config.user_agent,
            "Accept": "application/vnd.github+json",
        }

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def authenticated_login(self) -> str:
        """Return the login behind the configured token."""
        data = await self._request("GET", "/user", operation="get user")
        login = data.get("login")
        if not isinstance(login, str) or not login:
            raise GitHubResponseShapeError.missing("login")
        return login

    async def create_pull_request(self, spec: PullRequestSpec) -> int:
        """Open a pull request on ``spec.owner/spec.repo``."""
        data = await self._request(
            "POST",
            f"/repos/{spec.owner}/{spec.repo}/pulls",
            operation="create pull request",
            json={
                "title": spec.title,
                "body": spec.body,
                "head": spec.head,
                "base": spec.base,
                "maintainer_can_modify": spec.maintainer_can_modify,
            },
        )
        number = data.get("number")
        if not isinstance(number, int):
            raise GitHubResponseShapeError.missing("number")
        return number

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        json: dict[str, typ.Any] | None = None,
    ) -> dict[str, typ.Any]:
        url = f"{self._config.endpoint.rstrip('/')}{path}"
        try:
            response = await self._client.request(
                method, url, json=json, headers=self._headers
            )
        except httpx.TimeoutException as exc:
            raise GitHubTimeoutError.timed_out(
                operation, self._config.timeout_s
            ) from exc
        except httpx.HTTPError as exc:
            raise GitHubAPIError.transport_error(operation, exc) from exc

        if response.status_code >= HTTPStatus.BAD_REQUEST:
            raise GitHubAPIError.http_error(operation, response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise GitHubResponseShapeError.missing("JSON body") from exc
        if not isinstance(data, dict):
            raise GitHubResponseShapeError.missing("JSON object")
        return data
