from __future__ import annotations

from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from depscout.exceptions import GitHubError
from depscout.utils.github import GitHubClient
from depscout.utils.http import HTTPClient


def make_github(*responses: httpx.Response, token: str = "ghp_test") -> GitHubClient:
    http = MagicMock(spec=HTTPClient)
    http.get = AsyncMock(side_effect=list(responses))
    return GitHubClient(http, token)


def repo(name: str) -> Dict[str, Any]:
    return {"name": name, "owner": {"login": "octocat"}, "archived": False}


@pytest.mark.unit
class TestHeaders:
    def test_authenticated(self) -> None:
        github = GitHubClient(MagicMock(spec=HTTPClient), "ghp_test")

        assert github.headers["Authorization"] == "Bearer ghp_test"
        assert github.headers["Accept"] == "application/vnd.github+json"
        assert github.headers["X-GitHub-Api-Version"] == "2022-11-28"

    def test_anonymous(self) -> None:
        github = GitHubClient(MagicMock(spec=HTTPClient))

        assert "Authorization" not in github.headers

    def test_api_url_trailing_slash(self) -> None:
        github = GitHubClient(MagicMock(spec=HTTPClient), api_url="https://ghe.local/api/v3/")

        assert github.api_url == "https://ghe.local/api/v3"


@pytest.mark.unit
class TestGetAuthenticatedUser:
    @pytest.mark.asyncio
    async def test_returns_user(self) -> None:
        github = make_github(httpx.Response(200, json={"login": "octocat"}))

        assert await github.get_authenticated_user() == {"login": "octocat"}
        url = github.http_client.get.await_args.args[0]
        assert url == "https://api.github.com/user"

    @pytest.mark.asyncio
    async def test_rejected_token(self) -> None:
        github = make_github(httpx.Response(401, json={"message": "Bad credentials"}))

        with pytest.raises(GitHubError) as exc_info:
            await github.get_authenticated_user()

        assert exc_info.value.status_code == 401
        assert "Bad credentials" in exc_info.value.details["response"]


@pytest.mark.unit
class TestListUserRepos:
    @pytest.mark.asyncio
    async def test_single_page(self) -> None:
        github = make_github(httpx.Response(200, json=[repo("web"), repo("api")]))

        repos = await github.list_user_repos("octocat")

        assert [r["name"] for r in repos] == ["web", "api"]
        call = github.http_client.get.await_args
        assert call.args[0] == "https://api.github.com/users/octocat/repos"
        assert call.kwargs["params"] == {"per_page": 100}

    @pytest.mark.asyncio
    async def test_follows_next_links(self) -> None:
        next_url = "https://api.github.com/user/1/repos?per_page=100&page=2"
        github = make_github(
            httpx.Response(
                200,
                json=[repo("web")],
                headers={"link": f'<{next_url}>; rel="next", <{next_url}>; rel="last"'},
            ),
            httpx.Response(200, json=[repo("api")]),
        )

        repos = await github.list_user_repos("octocat")

        assert [r["name"] for r in repos] == ["web", "api"]
        second = github.http_client.get.await_args_list[1]
        assert second.args[0] == next_url
        assert second.kwargs["params"] is None

    @pytest.mark.asyncio
    async def test_unknown_user(self) -> None:
        github = make_github(httpx.Response(404, json={"message": "Not Found"}))

        with pytest.raises(GitHubError, match="Cannot list repositories of ghost"):
            await github.list_user_repos("ghost")


@pytest.mark.unit
class TestGetContents:
    @pytest.mark.asyncio
    async def test_root_listing(self) -> None:
        listing = [{"name": "package.json", "type": "file"}]
        github = make_github(httpx.Response(200, json=listing))

        assert await github.get_contents("octocat", "web") == listing
        url = github.http_client.get.await_args.args[0]
        assert url == "https://api.github.com/repos/octocat/web/contents/"

    @pytest.mark.asyncio
    async def test_missing_repository(self) -> None:
        github = make_github(httpx.Response(404, json={"message": "Not Found"}))

        with pytest.raises(GitHubError) as exc_info:
            await github.get_contents("octocat", "gone")

        assert exc_info.value.repository == "octocat/gone"
        assert exc_info.value.details["repository"] == "octocat/gone"


@pytest.mark.unit
class TestGetLatestRelease:
    @pytest.mark.asyncio
    async def test_release(self) -> None:
        github = make_github(httpx.Response(200, json={"tag_name": "v1.2.0"}))

        assert await github.get_latest_release("denoland", "deno") == {"tag_name": "v1.2.0"}
        url = github.http_client.get.await_args.args[0]
        assert url == "https://api.github.com/repos/denoland/deno/releases/latest"

    @pytest.mark.asyncio
    async def test_no_release_is_none(self) -> None:
        github = make_github(httpx.Response(404, json={"message": "Not Found"}))

        assert await github.get_latest_release("octocat", "web") is None
