"""Show command implementation.

Displays the devices of a graph file as a tree-shaped table.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from partctl.core.graphfile import require_graphs
from partctl.graph.devicegraph import DeviceGraph
from partctl.models.devices import (
    BtrfsSubvolume,
    Device,
    Disk,
    Encryption,
    Filesystem,
    Partition,
)
from partctl.utils.formatting import console, create_device_table, print_info


def show_graph(
    file: Annotated[
        Path,
        typer.Argument(help="Graph file to display."),
    ],
    subvolumes: Annotated[
        bool,
        typer.Option(
            "--subvolumes/--no-subvolumes",
            help="Include btrfs subvolumes.",
        ),
    ] = True,
) -> None:
    """Show the devices described by a graph file."""
    graphs = require_graphs(file)
    graph = graphs.current

    disks = graph.disks()
    if not disks:
        print_info("The graph file does not describe any disk.")
        return

    table = create_device_table(title=f"Devices ({file.name})")
    for disk in disks:
        _add_rows(table, graph, disk, depth=0, subvolumes=subvolumes)
    console.print(table)

    shadowed = [s for s in graph.subvolumes() if s.shadowed]
    if shadowed:
        console.print(f"\n[shadowed]{len(shadowed)} subvolume(s) shadowed by other mounts[/]")


# === Private helper functions ===


def _add_rows(
    table: Table,
    graph: DeviceGraph,
    device: Device,
    depth: int,
    subvolumes: bool,
) -> None:
    """Add a device and the devices built on it, depth first."""
    if isinstance(device, BtrfsSubvolume) and (device.top_level or not subvolumes):
        # the top-level subvolume is implied by its filesystem
        for child in graph.children(device):
            _add_rows(table, graph, child, depth, subvolumes)
        return

    table.add_row(*_format_row(device, depth))
    for child in graph.children(device):
        _add_rows(table, graph, child, depth + 1, subvolumes)


def _format_row(device: Device, depth: int) -> tuple[str, str, str, str, str]:
    """Format a device as a table row.

    Returns:
        Tuple of (device, kind, filesystem, mount point, details) with Rich markup.
    """
    indent = "  " * depth
    kind = device.kind.value.replace("_", " ")

    if isinstance(device, Disk):
        ptable = device.ptable_type.value if device.ptable_type else "-"
        return (f"{indent}[device]{device.name}[/]", kind, "", "", f"ptable: {ptable}")
    if isinstance(device, Partition):
        partition_id = device.partition_id.value
        return (f"{indent}[device]{device.name}[/]", kind, "", "", f"id: {partition_id}")
    if isinstance(device, Encryption):
        return (f"{indent}[device]{device.name}[/]", kind, "", "", "")
    if isinstance(device, Filesystem):
        details = [f"mount by: {device.mount_by.value}"]
        if device.label:
            details.append(f"label: {device.label}")
        if device.fstab_options:
            details.append(f"options: {','.join(device.fstab_options)}")
        return (
            f"{indent}-",
            kind,
            device.fs_type.value,
            device.mount_point or "",
            ", ".join(details),
        )
    if isinstance(device, BtrfsSubvolume):
        flags = [
            name
            for name, enabled in (
                ("default", device.default),
                ("nocow", device.nocow),
                ("[shadowed]shadowed[/]", device.shadowed),
            )
            if enabled
        ]
        return (f"{indent}{device.path}", kind, "", device.mount_point or "", ", ".join(flags))
    return (f"{indent}{device.sid}", kind, "", "", "")
