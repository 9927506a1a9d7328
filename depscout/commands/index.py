"""Index command implementation for depscout.

Builds the repository file index: the root directory listing of every
non-archived repository owned by the configured GitHub user. ``scan``
reads this index to decide which files to download, so the listing
calls happen once rather than on every scan.

Typical usage::

    # Build the index if it does not exist yet
    $ depscout index

    # Rebuild it after repositories were added or renamed
    $ depscout index --force
"""

from __future__ import annotations

import sys
import click
import asyncio
from typing import Any, Dict

from depscout.models import FileIndex
from depscout.config import DepScoutConfig
from depscout.exceptions import ConfigError, DepScoutError
from depscout.context import pass_context, DepScoutContext
from depscout.core import create_file_index, save_file_index
from depscout.utils import (
    GitHubClient,
    HTTPClient,
    get_logger,
    print_error,
    print_message,
    print_success,
    print_warning,
)

logger = get_logger("commands.index")


@click.command()
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Rebuild the index even if the index file already exists.",
)
@pass_context
def index(ctx: DepScoutContext, force: bool) -> None:
    """Build the repository file index from GitHub.

    Lists the repositories of the configured ``username`` (falling back
    to the owner of the token), skips archived ones, and records the root
    files of each in the configured ``index_file``.

    Exits:
        0 on success or when the index already exists, 1 on error.
    """
    index_file = ctx.config.index_file
    if index_file.exists() and not force:
        print_warning(f"{index_file} already exists; use --force to rebuild it")
        return

    try:
        repositories = asyncio.run(_index_async(ctx.config))
    except DepScoutError as e:
        print_error(f"{e}")
        sys.exit(1)

    print_success(f"Indexed {repositories} repositories into {index_file}")


async def _index_async(config: DepScoutConfig) -> int:
    """Authenticate, build the index and save it; return the repository count."""
    async with HTTPClient() as http:
        github = GitHubClient(http, config.read_token())
        user = await authenticate(github)
        file_index = await build_file_index(config, github, user)

    save_file_index(config.index_file, file_index)
    return len(file_index)


# ---------------------------------------------------------------------------
# Helpers shared with ``scan``
# ---------------------------------------------------------------------------


async def authenticate(github: GitHubClient, *, quiet: bool = False) -> Dict[str, Any]:
    """Check the token and, unless ``quiet``, greet the user it belongs to.

    Raises:
        GitHubError: The token was rejected.
    """
    user = await github.get_authenticated_user()
    if not quiet:
        print_message(f"Logged in as {user.get('login')}", style="info")
    return user


async def build_file_index(
    config: DepScoutConfig,
    github: GitHubClient,
    user: Dict[str, Any],
    *,
    quiet: bool = False,
) -> FileIndex:
    """Index the repositories of ``config.username`` or, if unset, of ``user``.

    Raises:
        ConfigError: Neither a username nor the token owner's login is known.
        GitHubError: Listing repositories or their contents failed.
    """
    username = config.username or user.get("login")
    if not username:
        raise ConfigError("username is not configured", option="username")

    logger.info("Building file index for %s", username)
    if not quiet:
        print_message(f"Indexing repositories of {username}...", style="dim")
    return await create_file_index(username, github)
