"""
Utility helpers for depscout.

This package provides reusable utilities used across depscout, including:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers
- Async HTTP and GitHub clients
- Semantic version helpers
- Grouping of results for reports

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from depscout.utils.filesystem import (
    read_json_file,
    safe_read_file,
    safe_write_file,
    write_json_file,
)

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from depscout.utils.logger import (
    disable_logging,
    get_logger,
    level_from_verbosity,
    setup_logging,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from depscout.utils.console import (
    colorize_check_result,
    confirm,
    get_raw_console,
    print_error,
    print_message,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# HTTP utilities
# ---------------------------------------------------------------------------

from depscout.utils.http import HTTPClient
from depscout.utils.github import GitHubClient

# ---------------------------------------------------------------------------
# Version and grouping utilities
# ---------------------------------------------------------------------------

from depscout.utils.grouping import group_by
from depscout.utils.version_utils import clean, gtr, valid

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "confirm",
    "print_error",
    "print_message",
    "print_table",
    "print_success",
    "print_warning",
    "get_raw_console",
    "reconfigure_console",
    "colorize_check_result",
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "level_from_verbosity",
    # Filesystem
    "safe_read_file",
    "safe_write_file",
    "read_json_file",
    "write_json_file",
    # HTTP
    "HTTPClient",
    "GitHubClient",
    # Versions / grouping
    "clean",
    "gtr",
    "valid",
    "group_by",
]
