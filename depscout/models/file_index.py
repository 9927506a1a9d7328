"""
Repository file index models for depscout.

A file index maps each repository (``owner/name``) to the entries of its
root directory as returned by the GitHub contents API. Only the fields
depscout needs are kept; everything else in the API payload is dropped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

#: ``owner/name`` → root directory entries.
FileIndex = Dict[str, List["RepoFile"]]


@dataclass(frozen=True)
class RepoFile:
    """One entry of a repository's root directory.

    Attributes:
        name: File name, e.g. ``package.json``.
        path: Path inside the repository.
        type: Entry kind reported by GitHub (``file``, ``dir``, ``symlink``...).
        download_url: Raw download URL; ``None`` for directories.
    """

    name: str
    path: str = ""
    type: str = "file"
    download_url: Optional[str] = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "RepoFile":
        """Build an entry from a GitHub contents API object."""
        name = str(data["name"])
        download_url = data.get("download_url")
        return cls(
            name=name,
            path=str(data.get("path") or name),
            type=str(data.get("type") or "file"),
            download_url=download_url if isinstance(download_url, str) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "type": self.type,
            "download_url": self.download_url,
        }


def index_from_dict(data: Mapping[str, Any]) -> FileIndex:
    """Rebuild a :data:`FileIndex` from its JSON form.

    Raises:
        ValueError: ``data`` does not have the expected shape.
    """
    index: FileIndex = {}
    for repo_name, entries in data.items():
        if not isinstance(entries, list):
            raise ValueError(f"Index entry for {repo_name!r} is not a list")
        try:
            index[repo_name] = [RepoFile.from_api(entry) for entry in entries]
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed index entry for {repo_name!r}: {exc}") from exc
    return index


def index_to_dict(index: FileIndex) -> Dict[str, List[Dict[str, Any]]]:
    return {repo: [entry.to_dict() for entry in entries] for repo, entries in index.items()}
