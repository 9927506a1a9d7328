"""
File rule models for depscout.

A file rule tells the scanner what to do with a file of a given name in
a repository root: how to read dependency references out of it
(:class:`FileType`) and which resolver turns them into versions.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass, field
from typing import Collection, Tuple


class FileType(str, Enum):
    """Supported kinds of dependency declaration files."""

    #: npm manifest; ``dependencies`` and ``devDependencies`` are checked.
    PACKAGE_JSON = "package.json"
    #: Import map (``import_map.json``, ``deno.json``); ``imports`` is checked.
    IMPORT_MAP = "importmap"
    #: Any text file; quoted http(s) URLs are checked.
    ES_URL = "es-url"

    @property
    def is_json(self) -> bool:
        """True if file content must be parsed as a JSON object first."""
        return self is not FileType.ES_URL


@dataclass(frozen=True)
class FileRule:
    """How to scan one file name.

    Attributes:
        file_name: Name of the file in the repository root.
        file_type: Extraction strategy.
        resolve: Resolver name (``"npm"`` or ``"deno"``).
        exists: File names that must all be present in the repository
            root for the rule to apply.
    """

    file_name: str
    file_type: FileType
    resolve: str
    exists: Tuple[str, ...] = field(default_factory=tuple)

    def applies_to(self, file_names: Collection[str]) -> bool:
        """Return True if this rule's file and prerequisites are all present."""
        return self.file_name in file_names and all(
            name in file_names for name in self.exists
        )
