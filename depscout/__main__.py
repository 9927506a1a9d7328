"""
Executable module for depscout.

Running:
    python -m depscout

is equivalent to:
    depscout
"""

from __future__ import annotations

import sys


def main() -> int:
    """
    Main entrypoint when executing `python -m depscout`.

    Returns:
        Exit code returned by the CLI.
    """
    # Import lazily so dependencies are only loaded during CLI use
    from depscout.cli import main as cli_main

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
