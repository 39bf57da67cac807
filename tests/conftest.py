"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path

import pytest
from partctl.core.product import ProductConfig
from partctl.graph.devicegraph import DeviceGraph
from partctl.graph.store import DeviceGraphs
from partctl.models.types import FilesystemType, MountByType, PartitionTableType

GiB = 1024**3


@pytest.fixture
def gpt_graph() -> DeviceGraph:
    """Device graph with a GPT disk holding two partitions.

    /dev/sda1 carries an ext4 filesystem mounted at /home (label "home",
    mounted by label); /dev/sda2 is empty.
    """
    graph = DeviceGraph()
    disk = graph.create_disk("/dev/sda", 500 * GiB, PartitionTableType.GPT)
    sda1 = graph.create_partition(disk, "/dev/sda1", 100 * GiB)
    filesystem = graph.create_filesystem(sda1, FilesystemType.EXT4)
    filesystem.mount_point = "/home"
    filesystem.label = "home"
    filesystem.mount_by = MountByType.LABEL
    graph.create_partition(disk, "/dev/sda2", 200 * GiB)
    return graph


@pytest.fixture
def graphs(gpt_graph: DeviceGraph) -> DeviceGraphs:
    """DeviceGraphs whose probed graph is gpt_graph."""
    return DeviceGraphs(gpt_graph)


@pytest.fixture
def product() -> ProductConfig:
    """Product configuration for an x86_64 machine with the fallback subvolumes."""
    return ProductConfig(arch="x86_64")


@pytest.fixture
def graph_toml() -> str:
    """Sample graph file content."""
    return """\
[[disks]]
name = "/dev/sda"
size = 536870912000
ptable = "gpt"

[[disks.partitions]]
name = "/dev/sda1"
size = 536870912
id = "esp"

[disks.partitions.filesystem]
type = "vfat"
mount_point = "/boot/efi"

[[disks.partitions]]
name = "/dev/sda2"
size = 107374182400

[disks.partitions.filesystem]
type = "btrfs"
mount_point = "/"
label = "system"

[[disks.partitions.filesystem.subvolumes]]
path = "@"
default = true

[[disks.partitions.filesystem.subvolumes]]
path = "@/home"
mount_point = "/home"

[[disks.partitions.filesystem.subvolumes]]
path = "@/var"
nocow = true
mount_point = "/var"

[[disks.partitions]]
name = "/dev/sda3"
size = 214748364800

[[disks]]
name = "/dev/sdb"
size = 1099511627776
ptable = "msdos"
"""


@pytest.fixture
def graph_file(tmp_path: Path, graph_toml: str) -> Path:
    """Graph file written to a temporary directory."""
    path = tmp_path / "graph.toml"
    path.write_text(graph_toml)
    return path
