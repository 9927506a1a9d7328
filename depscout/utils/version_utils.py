"""
Semantic version helpers for depscout.

This module wraps :mod:`semantic_version` with the npm flavour of the
rules depscout needs when comparing a declared version (which may be a
range such as ``^1.2.0`` or ``1.x``) against the latest upstream release.

Only three questions are ever asked:

* :func:`valid` — is this string a single exact semantic version?
* :func:`clean` — normalise a release tag such as ``v1.2.3`` into one.
* :func:`gtr`   — is a version greater than *every* version a range accepts?
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple

from semantic_version import NpmSpec, Version
from semantic_version.base import AllOf, AnyOf, Range

_LEADING_PREFIX = re.compile(r"^[=v]+")
_OPERATOR_SPACE = re.compile(r"(<=|>=|<|>|=|\^|~)\s+")


def valid(version: Optional[str]) -> Optional[str]:
    """Return the normalised form of ``version`` if it is an exact version.

    Surrounding whitespace and a single leading ``v`` are accepted,
    matching npm's strict parsing; ``=1.2.3`` is not a version.

    Examples:
        >>> valid("1.2.3")
        '1.2.3'
        >>> valid(" v1.2.3 ")
        '1.2.3'
        >>> valid("^1.2.3") is None
        True
    """
    if not version:
        return None

    candidate = version.strip()
    if candidate[:1] == "v":
        candidate = candidate[1:]

    try:
        return str(Version(candidate))
    except ValueError:
        return None


def clean(version: Optional[str]) -> Optional[str]:
    """Normalise a release tag into a semantic version.

    Unlike :func:`valid`, any run of leading ``v`` or ``=`` characters
    is stripped.

    Examples:
        >>> clean("v2.0.0")
        '2.0.0'
        >>> clean("release-2") is None
        True
    """
    if not version:
        return None
    return valid(_LEADING_PREFIX.sub("", version.strip()))


def parse_range(expression: str) -> NpmSpec:
    """Parse an npm range expression.

    Whitespace after comparison operators is removed and runs of spaces
    are collapsed before parsing, so ``">= 1.2.3  <2"`` is accepted.

    Raises:
        ValueError: ``expression`` is neither a version nor a range.
    """
    normalized = " ".join(expression.split())
    normalized = _OPERATOR_SPACE.sub(r"\1", normalized)
    return NpmSpec(normalized)


def gtr(version: str, expression: str) -> bool:
    """Return True if ``version`` is greater than every version in a range.

    This follows npm's ``semver.gtr``: the version must fall outside the
    range, and every comparator set of the range must be bounded above
    with the version not below the set's lower bound. A range with an
    open upper end (``>=1.0.0``) is never exceeded.

    Args:
        version: Exact version to test.
        expression: npm range (an exact version is a valid range).

    Returns:
        ``True`` if ``version`` is higher than the range.

    Raises:
        ValueError: ``version`` is not a valid version or ``expression``
            is not a valid range.

    Examples:
        >>> gtr("2.0.0", "^1.0.0")
        True
        >>> gtr("1.5.0", "^1.0.0")
        False
        >>> gtr("1.2.4", "1.2.3")
        True
    """
    target = _to_version(version)
    spec = parse_range(expression)
    sets = _comparator_sets(spec)

    if _contains(spec, sets, target):
        return False

    for comparators in sets:
        if not comparators:
            return False

        high, low = _bounds(comparators)
        if high.operator in (Range.OP_GT, Range.OP_GTE):
            return False

        if low.operator in (Range.OP_EQ, Range.OP_GT) and target <= low.target:
            return False
        if low.operator == Range.OP_GTE and target < low.target:
            return False

    return True


def _contains(spec: NpmSpec, sets: List[List[Range]], target: Version) -> bool:
    """Return True if ``target`` is accepted by ``spec`` under npm's rules.

    A prerelease only satisfies a range that names a prerelease of the
    same ``major.minor.patch``, so ``1.0.0-rc.1`` is outside ``<1.0.0``.
    """
    if target not in spec:
        return False
    if not target.prerelease:
        return True
    return any(
        comparator.target.prerelease
        and comparator.target.truncate() == target.truncate()
        for comparators in sets
        for comparator in comparators
    )


def _to_version(version: str) -> Version:
    normalized = valid(version)
    if normalized is None:
        raise ValueError(f"Invalid version: {version!r}")
    return Version(normalized)


def _comparator_sets(spec: NpmSpec) -> List[List[Range]]:
    """Flatten a parsed spec into its ``||``-separated comparator sets."""
    clause = spec.clause
    groups: Iterable = clause.clauses if isinstance(clause, AnyOf) else (clause,)

    sets: List[List[Range]] = []
    for group in groups:
        if isinstance(group, AllOf):
            sets.append([c for c in group.clauses if isinstance(c, Range)])
        elif isinstance(group, Range):
            sets.append([group])
    return sets


def _bounds(comparators: List[Range]) -> Tuple[Range, Range]:
    """Return the (highest, lowest) comparator of a set by target version."""
    # Sorting keeps tie-breaking independent of frozenset iteration order
    ordered = sorted(comparators, key=lambda c: (c.target, c.operator))
    high = low = ordered[0]
    for comparator in ordered[1:]:
        if comparator.target > high.target:
            high = comparator
        elif comparator.target < low.target:
            low = comparator
    return high, low
