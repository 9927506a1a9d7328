"""Scan session: resolvers, their caches, and repository scanning.

A :class:`ScanSession` owns one cache per ecosystem for the duration of
a run, so every repository scanned through the same session shares the
lookups already made. Tests build a session around mocked clients and
inspect the caches or the mocked call counts directly.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from depscout.models import (
    FileIndex,
    FileRule,
    RepoFile,
    RepositorySummary,
    VersionCheckSummaryItem,
)
from depscout.core.cache import VersionCache
from depscout.core.scanner import ResultCallback, scan_content
from depscout.core.resolvers import (
    DenoLandResolver,
    DenoURLResolver,
    GitHubReleaseResolver,
    NpmResolver,
    Resolver,
)
from depscout.utils.http import HTTPClient
from depscout.utils.github import GitHubClient
from depscout.utils.logger import get_logger

logger = get_logger("session")

#: Called before a file is scanned with ``(repo_name, file_name)``.
FileCallback = Optional[Callable[[str, str], None]]

__all__ = ["ScanSession"]


class ScanSession:
    """Resolvers and caches shared across one scanning run.

    Args:
        http_client: Shared HTTP client for registry lookups and downloads.
        github: GitHub client for release lookups.
        npm_cache: Cache for npm lookups; fresh if omitted.
        deno_land_cache: Cache for deno.land lookups; fresh if omitted.
        github_cache: Cache for GitHub release lookups; fresh if omitted.

    Attributes:
        resolvers: Resolver name (as used in file rules) → resolver.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        github: GitHubClient,
        *,
        npm_cache: Optional[VersionCache] = None,
        deno_land_cache: Optional[VersionCache] = None,
        github_cache: Optional[VersionCache] = None,
    ) -> None:
        self.http_client = http_client
        self.github = github

        self.npm = NpmResolver(http_client, npm_cache)
        self.deno_land = DenoLandResolver(http_client, deno_land_cache)
        self.github_releases = GitHubReleaseResolver(github, github_cache)
        self.deno_url = DenoURLResolver(self.npm, self.deno_land, self.github_releases)

        self.resolvers: Dict[str, Resolver] = {
            "npm": self.npm,
            "deno": self.deno_url,
        }

    def resolver_for(self, name: str) -> Optional[Resolver]:
        """Return the resolver registered as ``name``, or ``None``."""
        return self.resolvers.get(name)

    async def download(self, url: str) -> Optional[str]:
        """Fetch a file body, or ``None`` if the server refused it."""
        response = await self.http_client.get(url)
        if not response.is_success:
            return None
        return response.text

    async def scan_file(
        self,
        repo_name: str,
        repo_file: RepoFile,
        rule: FileRule,
        on_result: ResultCallback = None,
    ) -> List[VersionCheckSummaryItem]:
        """Download and check one file according to ``rule``.

        Problems specific to this file (unknown resolver, missing download
        URL, failed download) are logged and yield no results.
        """
        resolver = self.resolver_for(rule.resolve)
        if resolver is None:
            logger.warning("%s is not a valid resolve type", rule.resolve)
            return []

        if repo_file.download_url is None:
            logger.warning("Unable to download file %s", repo_file.name)
            return []

        content = await self.download(repo_file.download_url)
        if content is None:
            logger.warning("File %s/%s is not found", repo_name, repo_file.name)
            return []

        return await scan_content(rule.file_type, content, resolver, on_result)

    async def scan_repository(
        self,
        repo_name: str,
        files: Sequence[RepoFile],
        rules: Mapping[str, FileRule],
        *,
        on_file: FileCallback = None,
        on_result: ResultCallback = None,
    ) -> RepositorySummary:
        """Check every file of ``files`` that a rule applies to.

        Files are visited in listing order.

        Args:
            repo_name: ``owner/name`` used in messages and the summary.
            files: Root directory entries of the repository.
            rules: File name → rule.
            on_file: Called before each matching file is scanned.
            on_result: Called with each check result.
        """
        file_names = {repo_file.name for repo_file in files}
        items: List[VersionCheckSummaryItem] = []

        for repo_file in files:
            rule = rules.get(repo_file.name)
            if rule is None or not rule.applies_to(file_names):
                continue

            logger.info("Found %s in %s", repo_file.name, repo_name)
            if on_file is not None:
                on_file(repo_name, repo_file.name)

            items.extend(await self.scan_file(repo_name, repo_file, rule, on_result))

        return RepositorySummary(repo_name=repo_name, items=tuple(items))

    async def scan_index(
        self,
        index: FileIndex,
        rules: Mapping[str, FileRule],
        *,
        repositories: Optional[Iterable[str]] = None,
        on_repository: Optional[Callable[[str], None]] = None,
        on_file: FileCallback = None,
        on_result: ResultCallback = None,
    ) -> List[RepositorySummary]:
        """Scan repositories of ``index`` one after another.

        Args:
            index: File index to scan.
            rules: File name → rule.
            repositories: Restrict the scan to these ``owner/name`` keys.
            on_repository: Called with each repository name before its scan.
            on_file: Forwarded to :meth:`scan_repository`.
            on_result: Forwarded to :meth:`scan_repository`.
        """
        selected = set(repositories) if repositories is not None else None
        summaries: List[RepositorySummary] = []

        for repo_name, files in index.items():
            if selected is not None and repo_name not in selected:
                continue
            if on_repository is not None:
                on_repository(repo_name)
            summaries.append(
                await self.scan_repository(
                    repo_name,
                    files,
                    rules,
                    on_file=on_file,
                    on_result=on_result,
                )
            )

        return summaries
