"""
depscout — dependency version scout for GitHub repositories

depscout walks the repositories of a GitHub user, finds dependency
declarations in configured files, and reports which dependencies are
outdated, unpinned, missing upstream, or carry an invalid version.

Supported ecosystems:
    • npm registry packages (``package.json``, ``npm:`` specifiers)
    • deno.land hosted modules (import maps, URL imports)
    • GitHub releases served from ``raw.githubusercontent.com``
"""

from __future__ import annotations

from depscout.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "depscout Contributors"
__license__ = "Apache-2.0"
__description__ = "Scan GitHub repositories for outdated npm, deno.land and GitHub dependencies."

__all__ = [
    "__version__",
]
