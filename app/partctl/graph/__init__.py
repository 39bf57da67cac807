"""Device graph storage.

This module provides the device graph arena, the probed/current snapshot
holder, partition table id resolution and btrfs subvolume helpers.
"""

from partctl.graph.btrfs import (
    DEFAULT_SUBVOLUME_PATH,
    add_subvolumes,
    default_subvolume,
    ensure_default_subvolume,
    subvolume_mount_point,
    top_level_subvolume,
)
from partctl.graph.devicegraph import DeviceGraph
from partctl.graph.partition_table import PartitionTable
from partctl.graph.store import DeviceGraphs

__all__ = [
    "DEFAULT_SUBVOLUME_PATH",
    "DeviceGraph",
    "DeviceGraphs",
    "PartitionTable",
    "add_subvolumes",
    "default_subvolume",
    "ensure_default_subvolume",
    "subvolume_mount_point",
    "top_level_subvolume",
]
