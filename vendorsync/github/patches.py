"""Download commit patches from the source repository's web host."""

from __future__ import annotations

import typing as typ

import httpx

from .errors import GitHubAPIError, GitHubTimeoutError, PatchFetchError

_SUCCESS_MIN = 200
_SUCCESS_MAX = 299


class PatchSource(typ.Protocol):
    """Interface for retrieving the mbox patch of a single commit."""

    async def fetch_patch(self, source_repository: str, commit_id: str) -> str:
        """Return the patch text for ``commit_id``."""
        ...


def patch_url(source_repository: str, commit_id: str) -> str:
    """Return ``<source_repository>/commit/<commit_id>.patch``."""
    return f"{source_repository.rstrip('/')}/commit/{commit_id}.patch"


class HTTPPatchSource:
    """Fetch patches with anonymous HTTP GET requests.

    GitHub redirects ``.patch`` URLs to its patch-diff host, so redirects are
    followed. Only a final 2xx status counts as success.
    """

    def __init__(
        self,
        *,
        timeout_s: float = 30.0,
        user_agent: str = "vendorsync/0.1",
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Create the source, optionally reusing an existing HTTP client."""
        self._timeout_s = timeout_s
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout_s,
            follow_redirects=True,
            headers={"User-Agent": user_agent},
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch_patch(self, source_repository: str, commit_id: str) -> str:
        """Return the patch text for ``commit_id`` in ``source_repository``."""
        url = patch_url(source_repository, commit_id)
        try:
            response = await self._client.get(url)
        except httpx.TimeoutException as exc:
            raise GitHubTimeoutError.timed_out(
                f"patch download for {commit_id}", self._timeout_s
            ) from exc
        except httpx.HTTPError as exc:
            raise GitHubAPIError.transport_error(
                f"patch download for {commit_id}", exc
            ) from exc

        if not _SUCCESS_MIN <= response.status_code <= _SUCCESS_MAX:
            raise PatchFetchError.bad_status(commit_id, response.status_code)
        return response.text
