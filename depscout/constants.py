"""
Centralized constants for depscout.

This module defines immutable configuration values used across depscout,
including upstream endpoints, network settings, default file rules, and
logging formats. All values are intended to be treated as read-only.
"""

from typing import Final, Mapping, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "depscout/{version}"

# ---------------------------------------------------------------------------
# Upstream endpoints
# ---------------------------------------------------------------------------

#: npm registry package metadata.
NPM_REGISTRY_API: Final[str] = "https://registry.npmjs.org/{package}"

#: deno.land module metadata.
DENO_LAND_API: Final[str] = "https://apiland.deno.dev/v2/modules/{package}"

#: GitHub REST API base URL.
GITHUB_API_URL: Final[str] = "https://api.github.com"

#: GitHub REST API version header value.
GITHUB_API_VERSION: Final[str] = "2022-11-28"

#: Hostname of deno.land module URLs.
DENO_LAND_HOST: Final[str] = "deno.land"

#: Routing prefix for third-party deno.land modules (``/x/<module>``).
DENO_LAND_THIRD_PARTY_PREFIX: Final[str] = "x"

#: Hostname serving raw GitHub file contents.
GITHUB_RAW_HOST: Final[str] = "raw.githubusercontent.com"

#: Prefix of npm specifiers inside import maps and URL imports.
NPM_SPECIFIER_PREFIX: Final[str] = "npm:"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Default number of concurrent in-flight requests.
DEFAULT_MAX_CONCURRENCY: Final[int] = 10

#: Page size used when listing repositories.
GITHUB_PAGE_SIZE: Final[int] = 100

# ---------------------------------------------------------------------------
# Configuration defaults
# ---------------------------------------------------------------------------

#: Default path of the persisted repository file index.
DEFAULT_INDEX_FILE: Final[str] = "file_index.json"

#: Environment variables consulted for a GitHub token, in order.
TOKEN_ENV_VARS: Final[Sequence[str]] = ("DEPSCOUT_GITHUB_TOKEN", "GITHUB_TOKEN")

#: File rules used when the configuration declares none.
DEFAULT_FILE_RULES: Final[Mapping[str, Mapping[str, object]]] = {
    "package.json": {"type": "package.json", "resolve": "npm", "exists": ()},
    "import_map.json": {"type": "importmap", "resolve": "deno", "exists": ()},
    "deps.ts": {"type": "es-url", "resolve": "deno", "exists": ()},
}

#: Dependency blocks scanned in ``package.json`` files, in order.
PACKAGE_JSON_DEPENDENCY_FIELDS: Final[Sequence[str]] = (
    "dependencies",
    "devDependencies",
)

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed file size (in bytes) when reading local files.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
