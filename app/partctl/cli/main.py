"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from typing import Annotated

import typer

from partctl import __version__
from partctl.cli.commands import delete, edit, show

# Create main Typer app
app = typer.Typer(
    name="partctl",
    help="Reversible filesystem configuration on device graph files.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"partctl version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """partctl - Reversible filesystem configuration for storage devices.

    Describe disks, partitions and filesystems in a graph file, then edit
    or delete devices; every change is validated against the device graph
    before the file is written back.
    """


# Register commands
app.command(name="show")(show.show_graph)
app.command(name="edit")(edit.edit_device)
app.command(name="delete")(delete.delete_device)


if __name__ == "__main__":
    app()
