"""
Filesystem utilities for depscout.

Reading the GitHub token file and reading/writing the repository file
index go through these helpers. All filesystem errors are normalized to
``FileOperationError``.
"""

from __future__ import annotations

import os
import json
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

from depscout.utils.logger import get_logger
from depscout.exceptions import FileOperationError
from depscout.constants import MAX_FILE_SIZE


logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _validated_file(path: Path) -> Path:
    """Ensure ``path`` is an existing regular file and resolve it."""
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation="read",
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation="read",
        )
    return path.resolve()


def _atomic_write(target: Path, content: str) -> None:
    """Write text through a temporary file in the same directory, then replace."""
    target.parent.mkdir(parents=True, exist_ok=True)
    temp_path: Optional[Path] = None

    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=str(target.parent),
            delete=False,
            prefix=f".{target.name}.",
            suffix=".tmp",
        ) as tmp:
            temp_path = Path(tmp.name)
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())

        temp_path.replace(target)

    except OSError as exc:
        if temp_path and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError as cleanup_exc:
                logger.warning(
                    "Failed to clean up temporary file %s: %s",
                    temp_path,
                    cleanup_exc,
                )

        raise FileOperationError(
            f"Atomic write failed: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Read a text file, refusing files larger than ``max_size`` bytes.

    ``~`` in ``file_path`` is expanded.

    Raises:
        FileOperationError: Missing, oversized or unreadable file.
    """
    path = _validated_file(Path(file_path).expanduser())
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def safe_write_file(file_path: PathLike, content: str) -> Path:
    """Atomically write text to ``file_path`` and return the resolved path."""
    path = Path(file_path).expanduser()
    _atomic_write(path, content)
    logger.debug("Wrote %d characters to %s", len(content), path)
    return path.resolve()


def read_json_file(file_path: PathLike) -> Any:
    """Read and decode a JSON file.

    Raises:
        FileOperationError: The file cannot be read or is not valid JSON.
    """
    text = safe_read_file(file_path)
    try:
        return json.loads(text)
    except ValueError as exc:
        raise FileOperationError(
            f"Invalid JSON: {exc}",
            file_path=str(file_path),
            operation="parse",
            original_error=exc,
        ) from exc


def write_json_file(file_path: PathLike, data: Any) -> Path:
    """Serialize ``data`` as indented JSON and write it atomically."""
    return safe_write_file(file_path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")
