"""
Console output utilities for depscout using Rich.

This module provides user-facing output helpers for CLI commands.
For diagnostic or debug output, use :mod:`depscout.utils.logger`.

Guidelines:
- print_* functions: user-facing status messages
- print_table / confirm: structured or interactive CLI output
- Logging should never go through this module
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Dict, List, Optional

from rich.table import Table
from rich.theme import Theme
from rich.markup import escape
from rich.console import Console

# ---------------------------------------------------------------------------
# Theme configuration
# ---------------------------------------------------------------------------

DEPSCOUT_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        "highlight": "bold magenta",
    }
)

#: Badge style per check result value.
CHECK_RESULT_STYLES: Dict[str, str] = {
    "latest": "black on green",
    "outdated": "black on red",
    "not_found": "black on red",
    "invalid_version": "black on yellow",
    "not_fixed": "black on yellow",
}

# ---------------------------------------------------------------------------
# Console lifecycle management
# ---------------------------------------------------------------------------

_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    """Return True if colored output should be enabled."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _get_console() -> Console:
    """Return a singleton Rich Console instance."""
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                use_color = _should_use_color()
                _console = Console(
                    theme=DEPSCOUT_THEME,
                    no_color=not use_color,
                    highlight=False,
                )
    return _console


def reconfigure_console() -> None:
    """Reset the global console instance.

    Useful if environment variables (e.g. NO_COLOR) change at runtime.
    """
    global _console
    with _console_lock:
        _console = None


def get_raw_console() -> Console:
    """Return the underlying Rich Console instance."""
    return _get_console()


# ---------------------------------------------------------------------------
# Status message helpers
# ---------------------------------------------------------------------------


def print_message(message: str, *, style: Optional[str] = None) -> None:
    """Print a plain message; ``message`` is not parsed as markup."""
    _get_console().print(escape(message), style=style)


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    """Print a success message."""
    _get_console().print(escape(f"{prefix} {message}"), style="success")


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    """Print an error message."""
    _get_console().print(escape(f"{prefix} {message}"), style="error")


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    """Print a warning message."""
    _get_console().print(escape(f"{prefix} {message}"), style="warning")


# ---------------------------------------------------------------------------
# Structured output
# ---------------------------------------------------------------------------


def print_table(
    data: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    caption: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
) -> None:
    """Render structured data as a Rich table.

    Cell values are rendered as Rich markup, so callers may pass badges
    from :func:`colorize_check_result`; other text should be escaped.

    Args:
        data: List of row dictionaries.
        headers: Column order. Defaults to keys of the first row.
        title: Optional table title.
        caption: Optional table caption.
        column_styles: Per-column style configuration.
    """
    if not data:
        return

    if headers is None:
        headers = list(data[0].keys())

    table = Table(
        title=title,
        caption=caption,
        show_header=True,
        header_style="bold",
    )

    column_styles = column_styles or {}
    for header in headers:
        config = column_styles.get(header, {})
        table.add_column(
            header,
            style=config.get("style"),
            justify=config.get("justify", "default"),
            no_wrap=config.get("no_wrap", False),
            overflow=config.get("overflow", "fold"),
        )

    for row in data:
        table.add_row(*(str(row.get(h, "")) for h in headers))

    _get_console().print(table)


def colorize_check_result(check_result: str, label: Optional[str] = None) -> str:
    """Return a Rich-markup badge for a check result value.

    Args:
        check_result: Check result value, e.g. ``"outdated"``.
        label: Text shown in the badge; defaults to ``check_result``.

    Returns:
        Rich markup string.
    """
    text = escape(label or check_result)
    style = CHECK_RESULT_STYLES.get(check_result)
    return f"[{style}] {text} [/]" if style else text


# ---------------------------------------------------------------------------
# User interaction
# ---------------------------------------------------------------------------


def confirm(message: str, *, default: bool = False) -> bool:
    """Prompt the user for a yes/no confirmation.

    - "y", "yes"   → return True
    - "n", "no"    → return False
    - empty or unrecognized input → return ``default``
    - Ctrl+C / EOF → return False

    Args:
        message: Prompt message shown to the user.
        default: Choice used when the user presses Enter.

    Returns:
        True if confirmed, False otherwise.
    """
    console = _get_console()
    suffix = " [Y/n]: " if default else " [y/N]: "
    console.print(escape(f"{message}{suffix}"), end="", style="info")

    try:
        response = input().strip().lower()
    except (KeyboardInterrupt, EOFError):
        console.print()
        return False

    if response in ("y", "yes"):
        return True
    if response in ("n", "no"):
        return False
    return default
