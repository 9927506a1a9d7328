"""
Core functionality exports for depscout.

Importing from here keeps user-facing imports clean and stable:

    from depscout.core import ScanSession, classify
"""

from __future__ import annotations

from depscout.core.cache import VersionCache
from depscout.core.classifier import check_version, classify, describe
from depscout.core.file_index import create_file_index, load_file_index, save_file_index
from depscout.core.resolvers import (
    DenoLandResolver,
    DenoURLResolver,
    GitHubReleaseResolver,
    NpmResolver,
    Resolver,
    decompose_package_name_version,
)
from depscout.core.scanner import (
    check_deps_import_map,
    check_deps_record,
    check_url_strings_in_text,
    extract_quoted_urls,
    scan_content,
)
from depscout.core.session import ScanSession

__all__ = [
    "VersionCache",
    "classify",
    "check_version",
    "describe",
    "create_file_index",
    "load_file_index",
    "save_file_index",
    "Resolver",
    "NpmResolver",
    "DenoLandResolver",
    "GitHubReleaseResolver",
    "DenoURLResolver",
    "decompose_package_name_version",
    "check_deps_record",
    "check_deps_import_map",
    "check_url_strings_in_text",
    "extract_quoted_urls",
    "scan_content",
    "ScanSession",
]
