from __future__ import annotations

import pytest

from depscout.models import FileRule, FileType


@pytest.mark.unit
class TestFileType:
    @pytest.mark.parametrize(
        "value, member",
        [
            ("package.json", FileType.PACKAGE_JSON),
            ("importmap", FileType.IMPORT_MAP),
            ("es-url", FileType.ES_URL),
        ],
    )
    def test_values(self, value: str, member: FileType) -> None:
        assert FileType(value) is member

    def test_unknown_value(self) -> None:
        with pytest.raises(ValueError):
            FileType("cargo")

    def test_is_json(self) -> None:
        assert FileType.PACKAGE_JSON.is_json is True
        assert FileType.IMPORT_MAP.is_json is True
        assert FileType.ES_URL.is_json is False


@pytest.mark.unit
class TestFileRule:
    def test_applies_when_file_present(self) -> None:
        rule = FileRule("package.json", FileType.PACKAGE_JSON, "npm")

        assert rule.applies_to({"package.json", "README.md"}) is True
        assert rule.applies_to({"README.md"}) is False

    def test_requires_every_prerequisite(self) -> None:
        rule = FileRule("deps.ts", FileType.ES_URL, "deno", ("deno.json", "mod.ts"))

        assert rule.applies_to(["deps.ts", "deno.json", "mod.ts"]) is True
        assert rule.applies_to(["deps.ts", "deno.json"]) is False

    def test_prerequisite_alone_is_not_enough(self) -> None:
        rule = FileRule("deps.ts", FileType.ES_URL, "deno", ("deno.json",))

        assert rule.applies_to(["deno.json"]) is False

    def test_hashable(self) -> None:
        rule = FileRule("deps.ts", FileType.ES_URL, "deno", ("deno.json",))

        assert {rule: 1}[FileRule("deps.ts", FileType.ES_URL, "deno", ("deno.json",))] == 1
