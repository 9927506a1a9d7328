"""
Check result data models for depscout.

This module defines the outcome of checking one dependency
(:class:`VersionCheckSummaryItem`) and the per-repository aggregate
(:class:`RepositorySummary`). Both are frozen: once a scan produces a
record it is never mutated, only grouped and rendered.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from depscout.utils.grouping import group_by

#: ``(current_version, latest_version)`` as returned by a resolver.
VersionPair = Tuple[Optional[str], Optional[str]]


class CheckResult(str, Enum):
    """Classification of one ``(current, latest)`` version pair.

    Members are listed in evaluation precedence order.
    """

    INVALID_VERSION = "invalid_version"
    NOT_FOUND = "not_found"
    OUTDATED = "outdated"
    NOT_FIXED = "not_fixed"
    LATEST = "latest"

    @property
    def label(self) -> str:
        """Human-readable title, e.g. ``"Not Found"``."""
        return self.value.replace("_", " ").title()

    def __str__(self) -> str:
        return self.value


#: Order in which outcomes are listed in reports (worst first).
REPORT_ORDER: Tuple[CheckResult, ...] = (
    CheckResult.OUTDATED,
    CheckResult.NOT_FOUND,
    CheckResult.INVALID_VERSION,
    CheckResult.NOT_FIXED,
    CheckResult.LATEST,
)


@dataclass(frozen=True)
class VersionCheckSummaryItem:
    """Result of checking a single dependency reference.

    Attributes:
        package_name: Reporting key (package name, import-map alias or URL).
        current_version: Declared version, or ``None`` if unknown.
        latest_version: Latest upstream version, or ``None`` if not found.
        check_result: Classification of the pair.
    """

    package_name: str
    current_version: Optional[str]
    latest_version: Optional[str]
    check_result: CheckResult

    @property
    def needs_fix(self) -> bool:
        return self.check_result is not CheckResult.LATEST

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable representation."""
        return {
            "packageName": self.package_name,
            "currentVersion": self.current_version,
            "latestVersion": self.latest_version,
            "checkResult": self.check_result.value,
        }


@dataclass(frozen=True)
class RepositorySummary:
    """All check results collected for one repository.

    Attributes:
        repo_name: ``owner/name`` of the repository.
        items: Results in scan order.
    """

    repo_name: str
    items: Tuple[VersionCheckSummaryItem, ...] = field(default_factory=tuple)

    @property
    def needs_fix(self) -> bool:
        """True if any dependency is not at its latest pinned version."""
        return any(item.needs_fix for item in self.items)

    def grouped(self) -> Dict[CheckResult, List[VersionCheckSummaryItem]]:
        """Group items by outcome, ordered by :data:`REPORT_ORDER`.

        Every outcome is present as a key, possibly with an empty list.
        """
        groups = group_by(self.items, lambda item: item.check_result)
        return {result: groups.get(result, []) for result in REPORT_ORDER}

    def count(self, result: CheckResult) -> int:
        return sum(1 for item in self.items if item.check_result is result)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "repoName": self.repo_name,
            "summary": [item.to_dict() for item in self.items],
        }
