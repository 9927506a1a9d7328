"""Dependency extraction and checking pipelines.

Three entry points share one shape — extract references, resolve each,
classify each, collect the results:

* :func:`check_deps_record` — ``{"left-pad": "^1.3.0", ...}`` manifests.
  The declared version is the current version.
* :func:`check_deps_import_map` — ``{"imports": {"alias": "url"}}``.
  Current and latest both come from the resolver.
* :func:`check_url_strings_in_text` — quoted ``http(s)`` URLs in
  arbitrary text such as a ``deps.ts`` module.

References are processed one at a time in input order, so results (and
the log lines emitted for them) follow declaration order. Repeated
references produce repeated results; the resolver caches absorb the
duplicate lookups.

:func:`scanner_for` binds each :class:`~depscout.models.FileType` to the
pipeline that scans it.
"""

from __future__ import annotations

import re
import json
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from depscout.models import FileType, VersionCheckSummaryItem
from depscout.core.resolvers import Resolver
from depscout.core.classifier import check_version
from depscout.utils.logger import get_logger
from depscout.constants import PACKAGE_JSON_DEPENDENCY_FIELDS

logger = get_logger("scanner")

#: Optional per-item callback, e.g. for live console output.
ResultCallback = Optional[Callable[[VersionCheckSummaryItem], None]]

#: Quoted http(s) URL; group 2 is the URL without its quotes.
QUOTED_URL_PATTERN = re.compile(
    r"""(["'`])(https?://[\w/:%#$&?()~.=+\-@]+)\1""",
    re.ASCII,
)

__all__ = [
    "QUOTED_URL_PATTERN",
    "check_deps_import_map",
    "check_deps_record",
    "check_url_strings_in_text",
    "extract_quoted_urls",
    "scan_content",
    "scanner_for",
]


def _check(
    package_name: str,
    current: Optional[str],
    latest: Optional[str],
    on_result: ResultCallback,
) -> VersionCheckSummaryItem:
    item = VersionCheckSummaryItem(
        package_name=package_name,
        current_version=current,
        latest_version=latest,
        check_result=check_version(package_name, current, latest),
    )
    if on_result is not None:
        on_result(item)
    return item


async def check_deps_record(
    packages: Mapping[str, Any],
    resolver: Resolver,
    on_result: ResultCallback = None,
) -> List[VersionCheckSummaryItem]:
    """Check a ``name → declared version`` mapping.

    The resolver is called with each package name; its current version
    is ignored in favour of the declared one.

    Args:
        packages: Dependency block such as ``package.json``'s
            ``dependencies``.
        resolver: Resolver for bare package names.
        on_result: Called with each item as soon as it is produced.

    Returns:
        One item per key, in mapping order.
    """
    summary: List[VersionCheckSummaryItem] = []

    for package_name, declared in packages.items():
        current = declared if isinstance(declared, str) else None
        _, latest = await resolver(package_name)
        summary.append(_check(package_name, current, latest, on_result))

    return summary


async def check_deps_import_map(
    import_map: Mapping[str, Any],
    resolver: Resolver,
    on_result: ResultCallback = None,
) -> List[VersionCheckSummaryItem]:
    """Check every entry of an import map's ``imports`` field.

    Other top-level fields (``scopes``, ``tasks``...) are ignored, as
    is a missing or malformed ``imports`` field.

    Returns:
        One item per alias, in mapping order.
    """
    imports = import_map.get("imports")
    if not isinstance(imports, Mapping):
        logger.debug("Import map has no imports mapping")
        return []

    summary: List[VersionCheckSummaryItem] = []

    for alias, locator in imports.items():
        if isinstance(locator, str):
            current, latest = await resolver(locator)
        else:
            current, latest = None, None
        summary.append(_check(alias, current, latest, on_result))

    return summary


def extract_quoted_urls(text: str) -> List[str]:
    """Return every single-, double- or back-quoted http(s) URL in ``text``.

    Quotes are removed and URLs are returned in order of appearance.

    Example:
        >>> extract_quoted_urls('import "https://deno.land/std@0.200.0/fmt/colors.ts";')
        ['https://deno.land/std@0.200.0/fmt/colors.ts']
    """
    return [match.group(2) for match in QUOTED_URL_PATTERN.finditer(text)]


async def check_url_strings_in_text(
    text: str,
    resolver: Resolver,
    on_result: ResultCallback = None,
) -> List[VersionCheckSummaryItem]:
    """Check every quoted URL found in ``text``; each URL is its own key."""
    summary: List[VersionCheckSummaryItem] = []

    for url in extract_quoted_urls(text):
        current, latest = await resolver(url)
        summary.append(_check(url, current, latest, on_result))

    return summary


# ---------------------------------------------------------------------------
# File types
# ---------------------------------------------------------------------------


async def _scan_package_json(
    manifest: Mapping[str, Any],
    resolver: Resolver,
    on_result: ResultCallback = None,
) -> List[VersionCheckSummaryItem]:
    """Check ``dependencies`` then ``devDependencies`` of a package manifest."""
    summary: List[VersionCheckSummaryItem] = []

    for field_name in PACKAGE_JSON_DEPENDENCY_FIELDS:
        block = manifest.get(field_name)
        if isinstance(block, Mapping) and block:
            summary.extend(await check_deps_record(block, resolver, on_result))

    return summary


Scanner = Callable[[Any, Resolver, ResultCallback], Awaitable[List[VersionCheckSummaryItem]]]

_SCANNERS: Dict[FileType, Scanner] = {
    FileType.PACKAGE_JSON: _scan_package_json,
    FileType.IMPORT_MAP: check_deps_import_map,
    FileType.ES_URL: check_url_strings_in_text,
}


def scanner_for(file_type: FileType) -> Scanner:
    """Return the pipeline for ``file_type``; JSON types take the parsed object."""
    return _SCANNERS[file_type]


async def scan_content(
    file_type: FileType,
    content: str,
    resolver: Resolver,
    on_result: ResultCallback = None,
) -> List[VersionCheckSummaryItem]:
    """Scan raw file content with the pipeline for ``file_type``.

    Content that should be a JSON object but is not yields no results
    and a warning rather than an error.
    """
    if not file_type.is_json:
        return await scanner_for(file_type)(content, resolver, on_result)

    try:
        data = json.loads(content)
    except ValueError as exc:
        logger.warning("Cannot parse %s content: %s", file_type.value, exc)
        return []

    if not isinstance(data, dict):
        logger.warning("Expected a JSON object in %s content", file_type.value)
        return []

    return await scanner_for(file_type)(data, resolver, on_result)
