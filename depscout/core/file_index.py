"""Repository file index: which files sit in the root of each repository.

Building the index lists the user's repositories, drops archived ones,
and fetches every remaining root directory listing concurrently. The
result is persisted as JSON so later scans skip the listing calls.

Typical usage::

    async with HTTPClient() as http:
        github = GitHubClient(http, token)
        index = await create_file_index("octocat", github)
        save_file_index("file_index.json", index)
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from depscout.models import FileIndex, RepoFile, index_from_dict, index_to_dict
from depscout.exceptions import FileOperationError, GitHubError
from depscout.utils.github import GitHubClient
from depscout.utils.logger import get_logger
from depscout.utils.filesystem import PathLike, read_json_file, write_json_file

logger = get_logger("file_index")

__all__ = ["create_file_index", "load_file_index", "save_file_index"]


def _active_repositories(repos: List[Dict[str, Any]]) -> List[Tuple[str, str]]:
    """Return ``(owner, name)`` for every repository that is not archived."""
    return [
        (repo["owner"]["login"], repo["name"])
        for repo in repos
        if not repo.get("archived", False)
    ]


async def _list_root(github: GitHubClient, owner: str, name: str) -> Any:
    """Return the root listing of a repository, or ``None`` if it has none.

    GitHub answers 404 for the root of an empty repository.
    """
    try:
        return await github.get_contents(owner, name)
    except GitHubError as exc:
        if exc.status_code != 404:
            raise
        logger.debug("Skipping %s/%s: %s", owner, name, exc.message)
        return None


async def create_file_index(username: str, github: GitHubClient) -> FileIndex:
    """Build the file index for every non-archived repository of ``username``.

    Root listings are fetched concurrently; repositories whose root is
    missing (empty repositories) or not a directory listing are left out.

    Raises:
        GitHubError: Listing repositories failed, or a root listing failed
            with a status other than 404.
    """
    repos = _active_repositories(await github.list_user_repos(username))
    logger.info("Indexing %d repositories of %s", len(repos), username)

    listings = await asyncio.gather(
        *(_list_root(github, owner, name) for owner, name in repos)
    )

    index: FileIndex = {}
    for (owner, name), listing in zip(repos, listings):
        if isinstance(listing, list):
            index[f"{owner}/{name}"] = [RepoFile.from_api(entry) for entry in listing]
        else:
            logger.debug("Skipping %s/%s: root is not a directory listing", owner, name)

    return index


def load_file_index(path: PathLike) -> Optional[FileIndex]:
    """Load a persisted index, or return ``None`` if it is missing or unusable."""
    try:
        data = read_json_file(path)
    except FileOperationError as exc:
        logger.info("File index unavailable: %s", exc)
        return None

    if not isinstance(data, dict):
        logger.warning("Ignoring file index %s: not a JSON object", path)
        return None

    try:
        return index_from_dict(data)
    except ValueError as exc:
        logger.warning("Ignoring file index %s: %s", path, exc)
        return None


def save_file_index(path: PathLike, index: FileIndex) -> Path:
    """Persist ``index`` as JSON and return the written path."""
    written = write_json_file(path, index_to_dict(index))
    logger.info("Wrote file index with %d repositories to %s", len(index), written)
    return written
