"""Graph file I/O operations.

This module provides functions for loading and saving device graph
descriptions in TOML format, validated with Pydantic models, and for
converting them to and from DeviceGraph objects.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any

import tomli_w
from pydantic import ValidationError

from partctl.errors import PartctlError
from partctl.graph.btrfs import find_subvolume, top_level_subvolume
from partctl.graph.devicegraph import DeviceGraph
from partctl.graph.store import DeviceGraphs
from partctl.models.devices import BlkDevice, Filesystem
from partctl.models.graphfile import (
    DiskEntry,
    EncryptionEntry,
    FilesystemEntry,
    GraphFile,
    PartitionEntry,
    SubvolumeEntry,
)
from partctl.subvolumes.shadowing import refresh_subvolumes_shadowing

logger = logging.getLogger(__name__)


class GraphFileError(PartctlError):
    """Base exception for graph file errors."""


class GraphFileNotFoundError(GraphFileError):
    """Raised when the graph file is not found."""


class GraphFileParseError(GraphFileError):
    """Raised when the graph file cannot be parsed."""


class GraphFileValidationError(GraphFileError):
    """Raised when the graph file content is invalid."""


def load_graph_file(path: Path) -> GraphFile:
    """Load and validate a graph file.

    Args:
        path: Path to the TOML graph file.

    Returns:
        Validated GraphFile object.

    Raises:
        GraphFileNotFoundError: If the file doesn't exist.
        GraphFileParseError: If the TOML syntax is invalid.
        GraphFileValidationError: If the content doesn't match the schema.
    """
    if not path.exists():
        raise GraphFileNotFoundError(f"Graph file not found: {path}")

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise GraphFileParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise GraphFileError(f"Failed to read graph file: {e}") from e

    try:
        return GraphFile.model_validate(data)
    except ValidationError as e:
        raise GraphFileValidationError(f"Invalid graph file content: {e}") from e


def save_graph_file(graph_file: GraphFile, path: Path) -> Path:
    """Save a graph file.

    The file is written atomically by first writing to a temporary file
    in the same directory and then using os.replace() for atomic rename.

    Args:
        graph_file: The GraphFile object to save.
        path: Destination path.

    Returns:
        Path where the graph file was saved.

    Raises:
        GraphFileError: If the file cannot be written.
    """
    import os
    from tempfile import NamedTemporaryFile

    path.parent.mkdir(parents=True, exist_ok=True)
    data: dict[str, Any] = graph_file.model_dump(mode="json", exclude_none=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(mode="wb", dir=path.parent, delete=False, suffix=".tmp") as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise GraphFileError(f"Failed to write graph file: {e}") from e

    return path


# === GraphFile -> DeviceGraph ===


def build_graph(graph_file: GraphFile) -> DeviceGraph:
    """Create a device graph from its file description.

    Subvolume shadowing is computed on the resulting graph.

    Raises:
        StructuralError: If the description breaks a graph invariant.
    """
    graph = DeviceGraph()

    for disk_entry in graph_file.disks:
        disk = graph.create_disk(disk_entry.name, disk_entry.size, disk_entry.ptable)
        for part_entry in disk_entry.partitions:
            partition = graph.create_partition(
                disk, part_entry.name, part_entry.size, part_entry.id
            )
            _build_contents(graph, partition, part_entry.encryption, part_entry.filesystem)
        _build_contents(graph, disk, disk_entry.encryption, disk_entry.filesystem)

    refresh_subvolumes_shadowing(graph)
    logger.debug("Built device graph with %d devices", len(graph))
    return graph


def _build_contents(
    graph: DeviceGraph,
    blk: BlkDevice,
    encryption: EncryptionEntry | None,
    fs_entry: FilesystemEntry | None,
) -> None:
    if fs_entry is not None:
        filesystem = graph.create_filesystem(blk, fs_entry.type)
        filesystem.mount_point = fs_entry.mount_point
        filesystem.mount_by = fs_entry.mount_by
        filesystem.label = fs_entry.label
        filesystem.fstab_options = list(fs_entry.fstab_options)
        _build_subvolumes(graph, filesystem, fs_entry.subvolumes)
    if encryption is not None:
        graph.add_encryption(blk, encryption.name, encryption.password)


def _build_subvolumes(
    graph: DeviceGraph,
    filesystem: Filesystem,
    entries: list[SubvolumeEntry],
) -> None:
    if not filesystem.is_btrfs:
        return
    top_level = top_level_subvolume(graph, filesystem)

    # shorter paths first so nested subvolumes find their parent
    for entry in sorted(entries, key=lambda e: e.path.count("/")):
        parent = top_level
        head = entry.path
        while "/" in head:
            head = head.rsplit("/", 1)[0]
            candidate = find_subvolume(graph, filesystem, head)
            if candidate is not None:
                parent = candidate
                break
        subvolume = graph.create_subvolume(parent, entry.path, nocow=entry.nocow)
        subvolume.default = entry.default
        subvolume.mount_point = entry.mount_point


# === DeviceGraph -> GraphFile ===


def describe_graph(graph: DeviceGraph) -> GraphFile:
    """Describe a device graph as a GraphFile.

    Shadowed flags are derived data and are not stored.
    """
    disks: list[DiskEntry] = []
    for disk in graph.disks():
        partitions = [
            PartitionEntry(
                name=partition.name,
                size=partition.size,
                id=partition.partition_id,
                encryption=_describe_encryption(graph, partition),
                filesystem=_describe_filesystem(graph, partition),
            )
            for partition in graph.partitions_of(disk)
        ]
        disks.append(
            DiskEntry(
                name=disk.name,
                size=disk.size,
                ptable=disk.ptable_type,
                partitions=partitions,
                encryption=None if partitions else _describe_encryption(graph, disk),
                filesystem=None if partitions else _describe_filesystem(graph, disk),
            )
        )
    return GraphFile(disks=disks)


def _describe_encryption(graph: DeviceGraph, blk: BlkDevice) -> EncryptionEntry | None:
    encryption = graph.encryption_of(blk)
    if encryption is None:
        return None
    return EncryptionEntry(name=encryption.name, password=encryption.password)


def _describe_filesystem(graph: DeviceGraph, blk: BlkDevice) -> FilesystemEntry | None:
    filesystem = graph.filesystem_of(blk)
    if filesystem is None:
        return None
    subvolumes = [
        SubvolumeEntry(
            path=subvolume.path,
            default=subvolume.default,
            nocow=subvolume.nocow,
            mount_point=subvolume.mount_point,
        )
        for subvolume in graph.subvolumes_of(filesystem)
        if not subvolume.top_level
    ]
    return FilesystemEntry(
        type=filesystem.fs_type,
        mount_point=filesystem.mount_point,
        mount_by=filesystem.mount_by,
        label=filesystem.label,
        fstab_options=list(filesystem.fstab_options),
        subvolumes=subvolumes,
    )


def require_graphs(path: Path) -> DeviceGraphs:
    """Load a graph file as probed graph or exit with a helpful error message.

    This is a convenience wrapper for CLI commands.

    Args:
        path: Path to the graph file.

    Returns:
        DeviceGraphs whose probed graph is the file content and whose
        current graph is a copy of it.

    Raises:
        typer.Exit: If the graph file cannot be loaded.
    """
    import typer

    from partctl.utils.formatting import print_error

    try:
        return DeviceGraphs(build_graph(load_graph_file(path)))
    except GraphFileNotFoundError as e:
        print_error(f"Graph file not found: {path}")
        raise typer.Exit(code=1) from e
    except PartctlError as e:
        print_error(f"Failed to load graph file: {e}")
        raise typer.Exit(code=1) from e
