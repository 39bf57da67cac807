"""Helpers shared by the graph file commands."""

from pathlib import Path

import typer

from partctl.core.graphfile import GraphFileError, describe_graph, save_graph_file
from partctl.graph.store import DeviceGraphs
from partctl.models.devices import BlkDevice
from partctl.utils.formatting import print_error


def require_blk_device(graphs: DeviceGraphs, name: str) -> BlkDevice:
    """Look up a block device of the current graph or exit with an error.

    Raises:
        typer.Exit: If no block device has that name.
    """
    device = graphs.current.find_by_name(name)
    if device is None:
        print_error(f"Device not found: {name}")
        raise typer.Exit(code=1)
    return device


def write_graphs(graphs: DeviceGraphs, path: Path) -> Path:
    """Write the current graph to a graph file or exit with an error.

    Raises:
        typer.Exit: If the file cannot be written.
    """
    try:
        return save_graph_file(describe_graph(graphs.current), path)
    except GraphFileError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
