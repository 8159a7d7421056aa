"""Story Personalizer – unified CLI dispatcher.

All subcommands live in ``personalizer/commands/*.py`` and expose a
``register(subparsers)`` function that adds themselves to argparse.
"""
from __future__ import annotations

import argparse
import sys

from personalizer.commands.registry import register_all


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="personalizer",
        description="Story Personalizer - render stories with a custom protagonist name and pronouns",
    )
    sub = parser.add_subparsers(dest="command")
    register_all(sub)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    # Each command stores a ``func`` on the namespace
    rc = args.func(args)
    sys.exit(rc or 0)
