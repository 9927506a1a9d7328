"""Classification of ``(current, latest)`` version pairs.

:func:`classify` is a pure function; :func:`check_version` classifies
and logs one line describing the decision. Rules, in precedence order:

1. ``invalid_version`` — no current version, a latest version that is
   not a valid semantic version, or a current version that is neither a
   version nor an npm range.
2. ``not_found`` — no latest version.
3. ``outdated`` — latest is above everything the current range accepts.
4. ``not_fixed`` — current is a range or tag rather than an exact version.
5. ``latest`` — everything else.
"""

from __future__ import annotations

from typing import Optional, Tuple

from depscout.models import CheckResult
from depscout.utils.logger import get_logger
from depscout.utils.version_utils import gtr, valid

logger = get_logger("classifier")

__all__ = ["classify", "check_version", "describe"]


def _evaluate(
    current: Optional[str],
    latest: Optional[str],
) -> Tuple[CheckResult, Optional[str]]:
    """Return the result and, for invalid versions, the offending value."""
    if not current:
        return CheckResult.INVALID_VERSION, "null"

    if not latest:
        return CheckResult.NOT_FOUND, None

    latest_valid = valid(latest)
    if latest_valid is None:
        return CheckResult.INVALID_VERSION, latest

    try:
        greater = gtr(latest_valid, current)
    except ValueError:
        return CheckResult.INVALID_VERSION, current

    if greater:
        return CheckResult.OUTDATED, None
    if valid(current) is None:
        return CheckResult.NOT_FIXED, None
    return CheckResult.LATEST, None


def classify(
    package_name: str,
    current: Optional[str],
    latest: Optional[str],
) -> CheckResult:
    """Classify a version pair without side effects.

    Args:
        package_name: Reporting key; does not influence the result.
        current: Declared version or npm range.
        latest: Latest upstream version.

    Examples:
        >>> classify("left-pad", "1.0.0", "1.3.0")
        <CheckResult.OUTDATED: 'outdated'>
        >>> classify("left-pad", "^1.0.0", "1.3.0")
        <CheckResult.NOT_FIXED: 'not_fixed'>
    """
    result, _ = _evaluate(current, latest)
    return result


def describe(
    package_name: str,
    current: Optional[str],
    latest: Optional[str],
) -> str:
    """Return the one-line console message for a version pair."""
    result, offending = _evaluate(current, latest)

    if result is CheckResult.LATEST:
        return f"✅ {package_name}: Latest ({latest})"
    if result is CheckResult.OUTDATED:
        return f"❌ {package_name}: {current} -> {latest} Update available"
    if result is CheckResult.NOT_FOUND:
        return f"❌ {package_name}: not found"
    if result is CheckResult.NOT_FIXED:
        return f"⚠️ {package_name}: Version not fixed ({current})"
    return f"❔ {package_name}: invalid version specifier ({offending or current})"


def check_version(
    package_name: str,
    current: Optional[str],
    latest: Optional[str],
) -> CheckResult:
    """Classify a version pair and log the decision."""
    result = classify(package_name, current, latest)
    logger.info(describe(package_name, current, latest))
    return result
