"""CLI commands for partctl.

This package contains all subcommand implementations.
"""

from partctl.cli.commands import delete, edit, show

__all__ = ["delete", "edit", "show"]
