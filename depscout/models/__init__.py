"""
Unified data model exports for depscout.

Example:
    >>> from depscout.models import CheckResult, VersionCheckSummaryItem
"""

from __future__ import annotations

from depscout.models.summary import (
    REPORT_ORDER,
    CheckResult,
    RepositorySummary,
    VersionCheckSummaryItem,
    VersionPair,
)
from depscout.models.file_index import FileIndex, RepoFile, index_from_dict, index_to_dict
from depscout.models.file_rule import FileRule, FileType

__all__ = [
    "CheckResult",
    "FileIndex",
    "FileRule",
    "FileType",
    "REPORT_ORDER",
    "RepoFile",
    "RepositorySummary",
    "VersionCheckSummaryItem",
    "VersionPair",
    "index_from_dict",
    "index_to_dict",
]
