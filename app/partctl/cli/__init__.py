"""CLI package for partctl.

This package contains the Typer application and all subcommands.
"""

from partctl.cli.main import app

__all__ = ["app"]
