"""Delete command implementation.

Deletes a disk's partitions, a partition or a btrfs subvolume from a graph
file after asking for confirmation.
"""

from pathlib import Path
from typing import Annotated

import typer

from partctl.actions import DeleteOutcome, delete_action_for
from partctl.cli.commands.common import require_blk_device, write_graphs
from partctl.core.graphfile import require_graphs
from partctl.errors import UnsupportedOperationError
from partctl.graph.btrfs import find_subvolume
from partctl.graph.store import DeviceGraphs
from partctl.models.devices import BlkDevice, Device
from partctl.utils.formatting import console, print_error, print_info, print_success


def delete_device(
    file: Annotated[
        Path,
        typer.Argument(help="Graph file to edit."),
    ],
    device: Annotated[
        str,
        typer.Argument(help="Name of the disk or partition (e.g., /dev/sda1)."),
    ],
    subvolume: Annotated[
        str | None,
        typer.Option(
            "--subvolume",
            "-s",
            help="Delete this subvolume of the device's btrfs filesystem instead.",
        ),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the result here instead of FILE."),
    ] = None,
) -> None:
    """Delete a device and everything built on top of it."""
    graphs = require_graphs(file)
    blk_device = require_blk_device(graphs, device)
    target = _resolve_target(graphs, blk_device, subvolume)

    def confirm(question: str, dependent_devices: list[str]) -> bool:
        if dependent_devices:
            console.print("[warning]The following devices will be deleted too:[/]")
            for name in dependent_devices:
                console.print(f"  [muted]-[/] {name}")
        if yes:
            return True
        return typer.confirm(question, default=False)

    try:
        action = delete_action_for(graphs, target, confirm)
    except UnsupportedOperationError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if action.run() == DeleteOutcome.CANCELLED:
        if action.validation_error is not None:
            print_error(action.validation_error)
            raise typer.Exit(code=1)
        print_info("Aborted.")
        raise typer.Exit(code=0)

    saved = write_graphs(graphs, output or file)
    print_success(f"Deleted {action.device_label}, saved to {saved}")


# === Private helper functions ===


def _resolve_target(graphs: DeviceGraphs, blk_device: BlkDevice, subvolume: str | None) -> Device:
    """Return the device to delete, the block device itself or one of its subvolumes."""
    if subvolume is None:
        return blk_device

    filesystem = graphs.current.filesystem_of(blk_device)
    found = None
    if filesystem is not None and filesystem.is_btrfs:
        found = find_subvolume(graphs.current, filesystem, subvolume.strip("/"))
    if found is None:
        print_error(f"Subvolume not found on {blk_device.name}: {subvolume}")
        raise typer.Exit(code=1)
    return found
