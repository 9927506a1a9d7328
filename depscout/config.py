"""Configuration file loader for depscout.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``depscout.toml`` — settings under ``[depscout]`` table
- ``pyproject.toml`` — settings under ``[tool.depscout]`` table

Discovery order:

1. Explicit path from ``--config`` or ``DEPSCOUT_CONFIG``
2. ``depscout.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.depscout]`` section

Example (``depscout.toml``)::

    [depscout]
    username = "octocat"
    token_file = "~/.config/depscout/token"
    index_file = "file_index.json"

    [depscout.files."package.json"]
    type = "package.json"
    resolve = "npm"

    [depscout.files."deps.ts"]
    type = "es-url"
    resolve = "deno"
    exists = ["deno.json"]

When no ``files`` table is given, ``package.json``, ``import_map.json``
and ``deps.ts`` are scanned with their natural resolvers.
"""

from __future__ import annotations

import os
import tomli as tomllib
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from depscout.models import FileRule, FileType
from depscout.exceptions import ConfigError, FileOperationError
from depscout.utils.logger import get_logger
from depscout.utils.filesystem import safe_read_file
from depscout.constants import DEFAULT_FILE_RULES, DEFAULT_INDEX_FILE, TOKEN_ENV_VARS

logger = get_logger("config")

_KNOWN_KEYS = {"username", "token_file", "index_file", "files"}
_KNOWN_RULE_KEYS = {"type", "resolve", "exists"}


def _default_rules() -> Dict[str, FileRule]:
    return {
        name: _parse_rule(name, dict(rule), config_path="<defaults>")
        for name, rule in DEFAULT_FILE_RULES.items()
    }


@dataclass
class DepScoutConfig:
    """Parsed and validated depscout configuration.

    Attributes:
        username: GitHub user whose repositories are indexed.
        token_file: File holding a GitHub token.
        index_file: Where the repository file index is persisted.
        files: File name → scanning rule.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    username: Optional[str] = None
    token_file: Optional[Path] = None
    index_file: Path = field(default_factory=lambda: Path(DEFAULT_INDEX_FILE))
    files: Dict[str, FileRule] = field(default_factory=_default_rules)

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging.

        The token itself is never included.
        """
        return {
            "username": self.username,
            "token_file": str(self.token_file) if self.token_file else None,
            "index_file": str(self.index_file),
            "files": sorted(self.files),
        }

    def read_token(self) -> str:
        """Return the GitHub token.

        Environment variables (``DEPSCOUT_GITHUB_TOKEN``, then
        ``GITHUB_TOKEN``) take precedence over ``token_file``.

        Raises:
            ConfigError: No token source is configured or the token file
                cannot be read.
        """
        for name in TOKEN_ENV_VARS:
            value = os.environ.get(name, "").strip()
            if value:
                logger.debug("Using GitHub token from %s", name)
                return value

        if self.token_file is None:
            raise ConfigError(
                "No GitHub token: set token_file or GITHUB_TOKEN",
                option="token_file",
            )

        try:
            token = safe_read_file(self.token_file).strip()
        except FileOperationError as exc:
            raise ConfigError(
                f"Cannot read token file: {exc.message}",
                config_path=str(self.source_path) if self.source_path else None,
                option="token_file",
            ) from exc

        if not token:
            raise ConfigError(f"Token file {self.token_file} is empty", option="token_file")
        return token


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    depscout_toml = cwd / "depscout.toml"
    if depscout_toml.is_file():
        logger.debug("Found depscout.toml: %s", depscout_toml)
        return depscout_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_depscout_section(pyproject_toml):
        logger.debug("Found [tool.depscout] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_depscout_section(path: Path) -> bool:
    """Check if pyproject.toml contains a [tool.depscout] section.

    Parse errors count as "no section".
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return "depscout" in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> DepScoutConfig:
    """Load and validate depscout configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`DepScoutConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return DepScoutConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("depscout", {})
    else:
        section = raw.get("depscout", {})

    if not section:
        logger.debug("Config file found but no depscout section, using defaults")
        return DepScoutConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _expect_str(section: Mapping[str, Any], key: str, config_path: str) -> str:
    value = section[key]
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(
            f"{key} must be a non-empty string, got {type(value).__name__}",
            config_path=config_path,
            option=key,
        )
    return value.strip()


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> DepScoutConfig:
    """Parse and validate a ``[depscout]`` or ``[tool.depscout]`` table.

    Raises:
        ConfigError: Unknown keys or incorrect types.
    """
    config = DepScoutConfig()

    unknown = set(section.keys()) - _KNOWN_KEYS
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    if "username" in section:
        config.username = _expect_str(section, "username", config_path)

    if "token_file" in section:
        config.token_file = Path(_expect_str(section, "token_file", config_path)).expanduser()

    if "index_file" in section:
        config.index_file = Path(_expect_str(section, "index_file", config_path)).expanduser()

    if "files" in section:
        files = section["files"]
        if not isinstance(files, dict):
            raise ConfigError(
                f"files must be a table, got {type(files).__name__}",
                config_path=config_path,
                option="files",
            )
        config.files = {
            name: _parse_rule(name, rule, config_path=config_path)
            for name, rule in files.items()
        }

    return config


def _parse_rule(name: str, rule: Any, *, config_path: str) -> FileRule:
    """Validate one ``files.<name>`` table into a :class:`FileRule`."""
    option = f"files.{name}"

    if not isinstance(rule, dict):
        raise ConfigError(
            f"{option} must be a table, got {type(rule).__name__}",
            config_path=config_path,
            option=option,
        )

    unknown = set(rule.keys()) - _KNOWN_RULE_KEYS
    if unknown:
        raise ConfigError(
            f"Unknown keys in {option}: {', '.join(sorted(unknown))}",
            config_path=config_path,
            option=option,
        )

    for key in ("type", "resolve"):
        if not isinstance(rule.get(key), str):
            raise ConfigError(
                f"{option}.{key} must be a string",
                config_path=config_path,
                option=f"{option}.{key}",
            )

    try:
        file_type = FileType(rule["type"])
    except ValueError as exc:
        choices = ", ".join(t.value for t in FileType)
        raise ConfigError(
            f"{option}.type must be one of {choices}, got {rule['type']!r}",
            config_path=config_path,
            option=f"{option}.type",
        ) from exc

    exists = rule.get("exists", ())
    if not isinstance(exists, (list, tuple)) or not all(isinstance(e, str) for e in exists):
        raise ConfigError(
            f"{option}.exists must be a list of file names",
            config_path=config_path,
            option=f"{option}.exists",
        )

    # The resolver name is checked when a file is scanned, not here
    return FileRule(
        file_name=name,
        file_type=file_type,
        resolve=rule["resolve"],
        exists=tuple(exists),
    )
