from __future__ import annotations

from typing import Optional
from unittest.mock import patch

import pytest

from depscout.models import CheckResult
from depscout.core.classifier import check_version, classify, describe


@pytest.mark.unit
class TestClassify:
    """Tests for the pure classification rules."""

    def test_missing_current_is_invalid(self) -> None:
        assert classify("pkg", None, "1.2.3") is CheckResult.INVALID_VERSION

    def test_empty_current_is_invalid(self) -> None:
        assert classify("pkg", "", "1.2.3") is CheckResult.INVALID_VERSION

    def test_missing_latest_is_not_found(self) -> None:
        assert classify("pkg", "1.2.3", None) is CheckResult.NOT_FOUND

    def test_missing_current_wins_over_missing_latest(self) -> None:
        assert classify("pkg", None, None) is CheckResult.INVALID_VERSION

    def test_range_accepting_latest_is_never_outdated(self) -> None:
        result = classify("pkg", "^1.0.0", "1.5.0")
        assert result in (CheckResult.LATEST, CheckResult.NOT_FIXED)
        assert result is CheckResult.NOT_FIXED

    def test_range_below_latest_is_outdated(self) -> None:
        assert classify("pkg", "^1.0.0", "2.0.0") is CheckResult.OUTDATED

    def test_exact_match_is_latest(self) -> None:
        assert classify("pkg", "1.2.3", "1.2.3") is CheckResult.LATEST

    def test_exact_below_latest_is_outdated(self) -> None:
        assert classify("left-pad", "1.0.0", "1.3.0") is CheckResult.OUTDATED

    def test_exact_above_latest_is_latest(self) -> None:
        assert classify("pkg", "2.0.0", "1.0.0") is CheckResult.LATEST

    def test_garbage_current_is_invalid(self) -> None:
        assert classify("pkg", "not-a-version", "1.0.0") is CheckResult.INVALID_VERSION

    def test_invalid_latest_is_invalid(self) -> None:
        assert classify("pkg", "1.0.0", "main") is CheckResult.INVALID_VERSION

    def test_v_prefixed_exact_versions(self) -> None:
        assert classify("pkg", "v1.0.0", "1.0.0") is CheckResult.LATEST
        assert classify("pkg", "v1.0.0", "v1.1.0") is CheckResult.OUTDATED

    def test_equals_prefixed_version_is_not_fixed(self) -> None:
        assert classify("pkg", "=1.2.3", "1.2.3") is CheckResult.NOT_FIXED

    def test_prerelease_latest_above_range_is_outdated(self) -> None:
        assert classify("pkg", "<1.0.0", "1.0.0-rc.1") is CheckResult.OUTDATED

    def test_whitespace_padded_exact_version_is_fixed(self) -> None:
        assert classify("pkg", " 1.0.0 ", "1.0.0") is CheckResult.LATEST

    def test_open_ended_range_is_not_fixed(self) -> None:
        assert classify("pkg", ">=1.0.0", "9.0.0") is CheckResult.NOT_FIXED

    def test_wildcard_is_not_fixed(self) -> None:
        assert classify("pkg", "*", "9.0.0") is CheckResult.NOT_FIXED

    def test_name_does_not_affect_result(self) -> None:
        assert classify("a", "1.0.0", "2.0.0") is classify("b", "1.0.0", "2.0.0")


@pytest.mark.unit
class TestDescribe:
    """Tests for the one-line decision messages."""

    @pytest.mark.parametrize(
        "current, latest, expected",
        [
            ("1.2.3", "1.2.3", "✅ pkg: Latest (1.2.3)"),
            ("1.0.0", "1.3.0", "❌ pkg: 1.0.0 -> 1.3.0 Update available"),
            ("1.0.0", None, "❌ pkg: not found"),
            ("^1.0.0", "1.5.0", "⚠️ pkg: Version not fixed (^1.0.0)"),
            (None, "1.0.0", "❔ pkg: invalid version specifier (null)"),
            ("latest", "1.0.0", "❔ pkg: invalid version specifier (latest)"),
            ("1.0.0", "main", "❔ pkg: invalid version specifier (main)"),
        ],
    )
    def test_messages(
        self,
        current: Optional[str],
        latest: Optional[str],
        expected: str,
    ) -> None:
        assert describe("pkg", current, latest) == expected


@pytest.mark.unit
class TestCheckVersion:
    """Tests for classification with logging."""

    def test_returns_classification(self) -> None:
        assert check_version("pkg", "1.0.0", "2.0.0") is CheckResult.OUTDATED

    def test_logs_decision(self) -> None:
        with patch("depscout.core.classifier.logger") as mock_logger:
            check_version("left-pad", "1.0.0", "1.3.0")

        mock_logger.info.assert_called_once_with(
            "❌ left-pad: 1.0.0 -> 1.3.0 Update available"
        )
