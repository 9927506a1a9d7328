"""Unit tests for depscout.core.session.

Downloads are served from an in-memory table of ``httpx.Response``
objects, registry lookups from a second table, so a whole repository
scan runs without network access.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from depscout.core.cache import VersionCache
from depscout.core.session import ScanSession
from depscout.exceptions import NetworkError
from depscout.models import CheckResult, FileRule, FileType, RepoFile
from depscout.utils.github import GitHubClient
from depscout.utils.http import HTTPClient

RAW = "https://raw.githubusercontent.com/octocat"

PACKAGE_JSON = json.dumps(
    {
        "dependencies": {"left-pad": "1.0.0"},
        "devDependencies": {"jest": "^29.0.0"},
    }
)

DEPS_TS = 'export * from "https://deno.land/x/oak@v12.6.1/mod.ts";\n'

RULES: Dict[str, FileRule] = {
    "package.json": FileRule("package.json", FileType.PACKAGE_JSON, "npm"),
    "deps.ts": FileRule("deps.ts", FileType.ES_URL, "deno", exists=("deno.json",)),
}


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def downloads() -> Dict[str, httpx.Response]:
    return {
        f"{RAW}/web/main/package.json": httpx.Response(200, text=PACKAGE_JSON),
        f"{RAW}/api/main/package.json": httpx.Response(200, text=PACKAGE_JSON),
        f"{RAW}/deno/main/deps.ts": httpx.Response(200, text=DEPS_TS),
    }


@pytest.fixture
def mock_http_client(downloads: Dict[str, httpx.Response]) -> MagicMock:
    registry: Dict[str, Any] = {
        "https://registry.npmjs.org/left-pad": {"dist-tags": {"latest": "1.3.0"}},
        "https://registry.npmjs.org/jest": {"dist-tags": {"latest": "29.7.0"}},
        "https://apiland.deno.dev/v2/modules/oak": {"latest_version": "v12.6.1"},
    }

    async def get(url: str, **kwargs: Any) -> httpx.Response:
        return downloads.get(url, httpx.Response(404, text="Not Found"))

    async def get_json(url: str, **kwargs: Any) -> Optional[Any]:
        return registry.get(url)

    client = MagicMock(spec=HTTPClient)
    client.get = AsyncMock(side_effect=get)
    client.get_json = AsyncMock(side_effect=get_json)
    return client


@pytest.fixture
def session(mock_http_client: MagicMock) -> ScanSession:
    github = MagicMock(spec=GitHubClient)
    github.get_latest_release = AsyncMock(return_value=None)
    return ScanSession(mock_http_client, github)


def repo_file(repo: str, name: str, download: bool = True) -> RepoFile:
    return RepoFile(
        name=name,
        path=name,
        download_url=f"{RAW}/{repo}/main/{name}" if download else None,
    )


# ============================================================================
# Construction
# ============================================================================


@pytest.mark.unit
class TestScanSessionInit:
    def test_resolver_registry(self, session: ScanSession) -> None:
        assert session.resolver_for("npm") is session.npm
        assert session.resolver_for("deno") is session.deno_url
        assert session.resolver_for("pip") is None

    def test_dispatcher_reuses_session_resolvers(self, session: ScanSession) -> None:
        assert session.deno_url.npm is session.npm
        assert session.deno_url.deno_land is session.deno_land
        assert session.deno_url.github is session.github_releases

    def test_injected_caches(self, mock_http_client: MagicMock) -> None:
        npm_cache = VersionCache("npm")
        session = ScanSession(
            mock_http_client, MagicMock(spec=GitHubClient), npm_cache=npm_cache
        )

        assert session.npm.cache is npm_cache


# ============================================================================
# scan_file
# ============================================================================


@pytest.mark.unit
class TestScanFile:
    @pytest.mark.asyncio
    async def test_package_json(self, session: ScanSession) -> None:
        summary = await session.scan_file(
            "octocat/web", repo_file("web", "package.json"), RULES["package.json"]
        )

        assert [(i.package_name, i.check_result) for i in summary] == [
            ("left-pad", CheckResult.OUTDATED),
            ("jest", CheckResult.NOT_FIXED),
        ]

    @pytest.mark.asyncio
    async def test_unknown_resolver_is_skipped(
        self, session: ScanSession, mock_http_client: MagicMock
    ) -> None:
        rule = FileRule("package.json", FileType.PACKAGE_JSON, "pip")

        with patch("depscout.core.session.logger") as mock_logger:
            summary = await session.scan_file(
                "octocat/web", repo_file("web", "package.json"), rule
            )

        assert summary == []
        mock_http_client.get.assert_not_awaited()
        mock_logger.warning.assert_called_once_with("%s is not a valid resolve type", "pip")

    @pytest.mark.asyncio
    async def test_missing_download_url_is_skipped(
        self, session: ScanSession, mock_http_client: MagicMock
    ) -> None:
        summary = await session.scan_file(
            "octocat/web",
            repo_file("web", "package.json", download=False),
            RULES["package.json"],
        )

        assert summary == []
        mock_http_client.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_download_is_skipped(self, session: ScanSession) -> None:
        with patch("depscout.core.session.logger") as mock_logger:
            summary = await session.scan_file(
                "octocat/gone", repo_file("gone", "package.json"), RULES["package.json"]
            )

        assert summary == []
        mock_logger.warning.assert_called_once_with(
            "File %s/%s is not found", "octocat/gone", "package.json"
        )

    @pytest.mark.asyncio
    async def test_transport_error_propagates(
        self, session: ScanSession, mock_http_client: MagicMock
    ) -> None:
        mock_http_client.get.side_effect = NetworkError("connection reset", url="x")

        with pytest.raises(NetworkError):
            await session.scan_file(
                "octocat/web", repo_file("web", "package.json"), RULES["package.json"]
            )


# ============================================================================
# scan_repository / scan_index
# ============================================================================


@pytest.mark.unit
class TestScanRepository:
    @pytest.mark.asyncio
    async def test_only_matching_rules_apply(self, session: ScanSession) -> None:
        files = [
            repo_file("deno", "README.md"),
            repo_file("deno", "deps.ts"),
        ]

        summary = await session.scan_repository("octocat/deno", files, RULES)

        # deps.ts requires deno.json, which this repository lacks
        assert summary.repo_name == "octocat/deno"
        assert summary.items == ()
        assert not summary.needs_fix

    @pytest.mark.asyncio
    async def test_exists_prerequisite_met(self, session: ScanSession) -> None:
        files = [
            repo_file("deno", "deno.json"),
            repo_file("deno", "deps.ts"),
        ]
        opened: List[str] = []

        summary = await session.scan_repository(
            "octocat/deno",
            files,
            RULES,
            on_file=lambda repo, name: opened.append(f"{repo}:{name}"),
        )

        assert opened == ["octocat/deno:deps.ts"]
        assert [item.check_result for item in summary.items] == [CheckResult.LATEST]
        assert not summary.needs_fix

    @pytest.mark.asyncio
    async def test_lookups_shared_across_repositories(
        self, session: ScanSession, mock_http_client: MagicMock
    ) -> None:
        index = {
            "octocat/web": [repo_file("web", "package.json")],
            "octocat/api": [repo_file("api", "package.json")],
        }

        summaries = await session.scan_index(index, RULES)

        assert [s.repo_name for s in summaries] == ["octocat/web", "octocat/api"]
        assert all(s.needs_fix for s in summaries)
        # two packages, each fetched once for both repositories
        assert mock_http_client.get_json.await_count == 2

    @pytest.mark.asyncio
    async def test_repository_filter_and_callbacks(self, session: ScanSession) -> None:
        index = {
            "octocat/web": [repo_file("web", "package.json")],
            "octocat/api": [repo_file("api", "package.json")],
        }
        visited: List[str] = []
        results: List[str] = []

        summaries = await session.scan_index(
            index,
            RULES,
            repositories=["octocat/api"],
            on_repository=visited.append,
            on_result=lambda item: results.append(item.package_name),
        )

        assert [s.repo_name for s in summaries] == ["octocat/api"]
        assert visited == ["octocat/api"]
        assert results == ["left-pad", "jest"]
