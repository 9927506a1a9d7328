"""Grouping helper used to aggregate check results for reporting."""

from __future__ import annotations

from typing import Callable, Dict, Hashable, Iterable, List, TypeVar

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


def group_by(items: Iterable[T], key: Callable[[T], K]) -> Dict[K, List[T]]:
    """Group ``items`` into lists keyed by ``key(item)``.

    Keys appear in first-seen order and items keep their input order
    within each group.

    Example:
        >>> group_by(["apple", "avocado", "banana"], lambda s: s[0])
        {'a': ['apple', 'avocado'], 'b': ['banana']}
    """
    groups: Dict[K, List[T]] = {}
    for item in items:
        groups.setdefault(key(item), []).append(item)
    return groups
