"""Async GitHub REST API client.

Thin wrapper over :class:`~depscout.utils.http.HTTPClient` that adds the
GitHub authentication and media-type headers. Collaborator calls
(authenticating, listing repositories and directory contents) raise
:class:`~depscout.exceptions.GitHubError` on a non-success status; the
latest-release lookup used by the resolvers returns ``None`` instead so
that a repository without releases is reported as ``not_found``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from depscout.exceptions import GitHubError
from depscout.utils.http import HTTPClient
from depscout.utils.logger import get_logger
from depscout.constants import GITHUB_API_URL, GITHUB_API_VERSION, GITHUB_PAGE_SIZE

logger = get_logger("github")


class GitHubClient:
    """GitHub REST client sharing the session's HTTP connection pool.

    Args:
        http_client: Shared HTTP client.
        token: Personal access token; anonymous access when empty.
        api_url: API base URL (GitHub Enterprise installs differ).
    """

    def __init__(
        self,
        http_client: HTTPClient,
        token: str = "",
        api_url: str = GITHUB_API_URL,
    ) -> None:
        self.http_client = http_client
        self.token = token
        self.api_url = api_url.rstrip("/")

    @property
    def headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _get(self, path: str, **kwargs: Any) -> httpx.Response:
        url = path if path.startswith("http") else f"{self.api_url}{path}"
        return await self.http_client.get(url, headers=self.headers, **kwargs)

    @staticmethod
    def _raise_for_status(
        response: httpx.Response,
        message: str,
        repository: Optional[str] = None,
    ) -> None:
        if response.is_success:
            return
        raise GitHubError(
            message,
            repository=repository,
            status_code=response.status_code,
            response_body=response.text,
        )

    async def get_authenticated_user(self) -> Dict[str, Any]:
        """Return the user the token belongs to.

        Raises:
            GitHubError: The token was rejected.
        """
        response = await self._get("/user")
        self._raise_for_status(response, "GitHub authentication failed")
        return response.json()

    async def list_user_repos(self, username: str) -> List[Dict[str, Any]]:
        """List every public repository of ``username``, following pagination.

        Raises:
            GitHubError: The user does not exist or the API refused.
        """
        repos: List[Dict[str, Any]] = []
        next_url: Optional[str] = f"/users/{username}/repos"
        params: Optional[Dict[str, Any]] = {"per_page": GITHUB_PAGE_SIZE}

        while next_url:
            response = await self._get(next_url, params=params)
            self._raise_for_status(response, f"Cannot list repositories of {username}")
            repos.extend(response.json())

            # The next link already carries the query string
            next_url = response.links.get("next", {}).get("url")
            params = None

        logger.debug("Listed %d repositories for %s", len(repos), username)
        return repos

    async def get_contents(self, owner: str, repo: str, path: str = "") -> Any:
        """Return the contents API payload for ``path`` (a list for directories).

        Raises:
            GitHubError: The repository or path does not exist.
        """
        response = await self._get(f"/repos/{owner}/{repo}/contents/{path}")
        self._raise_for_status(
            response,
            f"Cannot read contents of {owner}/{repo}/{path}",
            repository=f"{owner}/{repo}",
        )
        return response.json()

    async def get_latest_release(self, owner: str, repo: str) -> Optional[Dict[str, Any]]:
        """Return the latest published release, or ``None`` if there is none."""
        response = await self._get(f"/repos/{owner}/{repo}/releases/latest")
        if not response.is_success:
            logger.debug(
                "No latest release for %s/%s (HTTP %d)",
                owner,
                repo,
                response.status_code,
            )
            return None
        return response.json()
