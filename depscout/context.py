"""
Shared context object for depscout CLI commands.

This module defines the Click context object carrying the loaded
configuration and global options to every subcommand.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from depscout.config import DepScoutConfig


class DepScoutContext:
    """Global context object for depscout CLI commands.

    Attributes:
        config_path: Path to the loaded configuration file, if any.
        config: Loaded configuration (defaults until the group callback runs).
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
    """

    __slots__ = ("config_path", "config", "verbose", "color")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.config: DepScoutConfig = DepScoutConfig()
        self.verbose: int = 0
        self.color: bool = True


#: Click decorator for injecting :class:`DepScoutContext` into commands.
pass_context = click.make_pass_decorator(DepScoutContext, ensure=True)
