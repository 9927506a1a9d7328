"""Scan command implementation for depscout.

Checks the dependencies of every indexed repository against npm,
deno.land and GitHub releases, then prints a per-repository report of
everything that is not pinned to its latest version.

The command ties together:

1. **File index** — loaded from ``index_file``; when missing, the user
   is offered to build it (``--yes`` accepts without asking).
2. **ScanSession** — one resolver set with shared caches, so a package
   used by many repositories is looked up once.
3. **Report** — per-repository outcome counts and a table of the
   dependencies that need attention.

Typical usage::

    # Scan everything, building the index on first use
    $ depscout scan --yes

    # Only two repositories, machine-readable output
    $ depscout scan --repo octocat/api --repo octocat/web --format json
"""

from __future__ import annotations

import sys
import json
import click
import asyncio
from typing import Any, Dict, List, Optional, Sequence

from rich.markup import escape

from depscout.config import DepScoutConfig
from depscout.exceptions import DepScoutError
from depscout.context import pass_context, DepScoutContext
from depscout.models import (
    REPORT_ORDER,
    CheckResult,
    FileIndex,
    RepositorySummary,
    VersionCheckSummaryItem,
)
from depscout.core import ScanSession, describe, load_file_index, save_file_index
from depscout.commands.index import authenticate, build_file_index
from depscout.utils import (
    GitHubClient,
    HTTPClient,
    colorize_check_result,
    confirm,
    get_logger,
    get_raw_console,
    print_error,
    print_message,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands.scan")

NOT_FIXED_WARNING = "Packages with no fixed version may be locked to an outdated version."


@click.command()
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    help="Create the file index without asking when it is missing.",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.option(
    "--repo",
    "-r",
    "repositories",
    multiple=True,
    metavar="OWNER/NAME",
    help="Only scan this repository (can be repeated).",
)
@pass_context
def scan(
    ctx: DepScoutContext,
    yes: bool,
    format: str,
    repositories: Sequence[str],
) -> None:
    """Check dependencies of the indexed repositories.

    Every root file that matches a configured rule is downloaded and its
    dependencies are compared with the latest upstream versions.

    Args:
        ctx: Depscout context with configuration and verbosity settings.
        yes: Build a missing index without prompting.
        format: Output format (``table`` or ``json``).
        repositories: Restrict the scan to these repositories.

    Exits:
        0 if every dependency is at its latest version, 1 if any
        repository needs a fix or an error occurred.
    """
    try:
        needs_fix = asyncio.run(
            _scan_async(
                ctx.config,
                assume_yes=yes,
                output_format=format.lower(),
                repositories=list(repositories) or None,
            )
        )
        sys.exit(1 if needs_fix else 0)

    except DepScoutError as e:
        print_error(f"{e}")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Async orchestration
# ---------------------------------------------------------------------------


async def _scan_async(
    config: DepScoutConfig,
    *,
    assume_yes: bool,
    output_format: str,
    repositories: Optional[List[str]],
) -> bool:
    """Async implementation of the scan command.

    Returns:
        ``True`` if any scanned repository needs a fix.

    Raises:
        DepScoutError: Index creation was declined, or a GitHub, network
            or configuration failure aborted the run.
    """
    live = output_format == "table"

    async with HTTPClient() as http:
        github = GitHubClient(http, config.read_token())
        user = await authenticate(github, quiet=not live)

        file_index = load_file_index(config.index_file)
        if file_index is None:
            file_index = await _create_missing_index(
                config, github, user, assume_yes=assume_yes, quiet=not live
            )

        session = ScanSession(http, github)
        summaries = await session.scan_index(
            file_index,
            config.files,
            repositories=repositories,
            on_repository=_print_repository if live else None,
            on_file=_print_file if live else None,
            on_result=_print_result if live else None,
        )

    if live:
        _display_report(summaries)
    else:
        _display_json(summaries)

    return any(summary.needs_fix for summary in summaries)


async def _create_missing_index(
    config: DepScoutConfig,
    github: GitHubClient,
    user: Dict[str, Any],
    *,
    assume_yes: bool,
    quiet: bool,
) -> FileIndex:
    if not assume_yes and not confirm(
        "Index file not found. Create it from remote repos?"
    ):
        raise DepScoutError("Index file creation canceled")

    file_index = await build_file_index(config, github, user, quiet=quiet)
    save_file_index(config.index_file, file_index)
    if not quiet:
        print_success(f"Index file created: {config.index_file}")
    return file_index


# ---------------------------------------------------------------------------
# Live progress
# ---------------------------------------------------------------------------


def _print_repository(repo_name: str) -> None:
    get_raw_console().print(f"\n[bold cyan]{escape(repo_name)}[/bold cyan]")


def _print_file(repo_name: str, file_name: str) -> None:
    print_message(f"Found {file_name} in {repo_name}.", style="dim")


def _print_result(item: VersionCheckSummaryItem) -> None:
    print_message(
        "  " + describe(item.package_name, item.current_version, item.latest_version)
    )


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def _display_report(summaries: List[RepositorySummary]) -> None:
    """Render the final report for human readers.

    Example output::

        Summary
        ==================================================
        Number of repos needs fix: 1

        octocat/web  Total 3   Latest 1   Outdated 1   Not Fixed 1 ...
        ┏━━━━━━━━━━━━┳━━━━━━━━━━┳━━━━━━━━━┳━━━━━━━━┓
        ┃ Result     ┃ Package  ┃ Current ┃ Latest ┃
        ┡━━━━━━━━━━━━╇━━━━━━━━━━╇━━━━━━━━━╇━━━━━━━━┩
        │ Outdated   │ left-pad │ 1.0.0   │ 1.3.0  │
        │ Not Fixed  │ react    │ ^18.0.0 │ 18.3.1 │
        └────────────┴──────────┴─────────┴────────┘
    """
    console = get_raw_console()
    needing_fix = [summary for summary in summaries if summary.needs_fix]

    console.print("\n[bold]Summary[/bold]")
    console.print("=" * 50)
    console.print(f"Number of repos needs fix: {len(needing_fix)}")

    for summary in needing_fix:
        _display_repository(summary)

    if any(summary.count(CheckResult.NOT_FIXED) for summary in needing_fix):
        print_warning(NOT_FIXED_WARNING)


def _display_repository(summary: RepositorySummary) -> None:
    groups = summary.grouped()

    counts = "  ".join(
        f"{colorize_check_result(result.value, result.label)} {len(groups[result])}"
        for result in (CheckResult.LATEST,) + REPORT_ORDER[:-1]
    )
    get_raw_console().print(
        f"\n[bold]{escape(summary.repo_name)}[/bold]  Total {len(summary.items)}  {counts}"
    )

    rows = [
        _create_table_row(item)
        for result in REPORT_ORDER
        if result is not CheckResult.LATEST
        for item in groups[result]
    ]
    print_table(
        rows,
        column_styles={
            "Result": {"no_wrap": True},
            "Package": {"style": "bold cyan"},
            "Current": {"justify": "center", "style": "dim"},
            "Latest": {"justify": "center", "style": "bold green"},
        },
    )


def _create_table_row(item: VersionCheckSummaryItem) -> Dict[str, str]:
    """Build a Rich-markup table row for a dependency that needs attention."""
    return {
        "Result": colorize_check_result(item.check_result.value, item.check_result.label),
        "Package": escape(item.package_name),
        "Current": escape(item.current_version or "null"),
        "Latest": escape(item.latest_version or "null"),
    }


def _display_json(summaries: List[RepositorySummary]) -> None:
    """Render summaries as JSON, one object per repository.

    Example::

        [
          {
            "repoName": "octocat/web",
            "summary": [
              {
                "packageName": "left-pad",
                "currentVersion": "1.0.0",
                "latestVersion": "1.3.0",
                "checkResult": "outdated"
              }
            ]
          }
        ]
    """
    click.echo(json.dumps([summary.to_dict() for summary in summaries], indent=2))
