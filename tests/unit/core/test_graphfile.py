"""Unit tests for graph file I/O operations.

Tests for loading, saving and converting graph files.
"""

import tomllib
from pathlib import Path

import pytest
import typer
from partctl.core.graphfile import (
    GraphFileNotFoundError,
    GraphFileParseError,
    GraphFileValidationError,
    build_graph,
    describe_graph,
    load_graph_file,
    require_graphs,
    save_graph_file,
)
from partctl.graph.btrfs import find_subvolume
from partctl.models.devices import Encryption
from partctl.models.graphfile import (
    DiskEntry,
    EncryptionEntry,
    FilesystemEntry,
    GraphFile,
    PartitionEntry,
    SubvolumeEntry,
)
from partctl.models.types import FilesystemType, MountByType, PartitionId, PartitionTableType


@pytest.fixture
def sample_graph_file() -> GraphFile:
    """Graph file with an encrypted btrfs root and an ext4 /var."""
    return GraphFile(
        disks=[
            DiskEntry(
                name="/dev/sda",
                size=1000,
                ptable=PartitionTableType.GPT,
                partitions=[
                    PartitionEntry(
                        name="/dev/sda1",
                        size=600,
                        encryption=EncryptionEntry(name="/dev/mapper/cr_sda1", password="pw"),
                        filesystem=FilesystemEntry(
                            type=FilesystemType.BTRFS,
                            mount_point="/",
                            subvolumes=[
                                SubvolumeEntry(path="@", default=True),
                                SubvolumeEntry(path="@/var/lib", mount_point="/var/lib"),
                                SubvolumeEntry(path="@/var/lib/machines"),
                            ],
                        ),
                    ),
                    PartitionEntry(
                        name="/dev/sda2",
                        size=400,
                        filesystem=FilesystemEntry(
                            type=FilesystemType.EXT4,
                            mount_point="/var",
                            mount_by=MountByType.LABEL,
                            label="var",
                            fstab_options=["noatime"],
                        ),
                    ),
                ],
            ),
            DiskEntry(
                name="/dev/sdb",
                filesystem=FilesystemEntry(type=FilesystemType.XFS, mount_point="/srv"),
            ),
        ]
    )


class TestLoadGraphFile:
    """Tests for load_graph_file function."""

    def test_load_valid(self, graph_file: Path) -> None:
        """load_graph_file loads a valid graph file."""
        loaded = load_graph_file(graph_file)

        assert [d.name for d in loaded.disks] == ["/dev/sda", "/dev/sdb"]
        assert loaded.disks[0].partitions[0].id == PartitionId.ESP
        assert len(loaded.disks[0].partitions[1].filesystem.subvolumes) == 3

    def test_missing_file(self, tmp_path: Path) -> None:
        """load_graph_file raises GraphFileNotFoundError for missing file."""
        with pytest.raises(GraphFileNotFoundError):
            load_graph_file(tmp_path / "nonexistent.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """load_graph_file raises GraphFileParseError for invalid TOML."""
        path = tmp_path / "graph.toml"
        path.write_text("invalid [ toml content")

        with pytest.raises(GraphFileParseError):
            load_graph_file(path)

    def test_invalid_content(self, tmp_path: Path) -> None:
        """load_graph_file raises GraphFileValidationError for bad content."""
        path = tmp_path / "graph.toml"
        # partitions without a partition table
        path.write_text(
            '[[disks]]\nname = "/dev/sda"\n\n[[disks.partitions]]\nname = "/dev/sda1"\n'
        )

        with pytest.raises(GraphFileValidationError):
            load_graph_file(path)


class TestSaveGraphFile:
    """Tests for save_graph_file function."""

    def test_save_creates_parent_directories(
        self, tmp_path: Path, sample_graph_file: GraphFile
    ) -> None:
        """save_graph_file creates parent directories if needed."""
        path = tmp_path / "nested" / "graph.toml"

        result = save_graph_file(sample_graph_file, path)

        assert result == path
        assert path.exists()
        assert list(path.parent.glob("*.tmp")) == []

    def test_save_omits_unset_values(self, tmp_path: Path, sample_graph_file: GraphFile) -> None:
        """Unset optional values are not written."""
        path = tmp_path / "graph.toml"
        save_graph_file(sample_graph_file, path)

        with open(path, "rb") as f:
            data = tomllib.load(f)

        assert "ptable" not in data["disks"][1]
        assert data["disks"][0]["partitions"][1]["filesystem"]["mount_by"] == "label"

    def test_save_then_load(self, tmp_path: Path, sample_graph_file: GraphFile) -> None:
        """save_graph_file preserves all graph data."""
        path = tmp_path / "graph.toml"
        save_graph_file(sample_graph_file, path)

        assert load_graph_file(path) == sample_graph_file


class TestBuildGraph:
    """Tests for build_graph function."""

    def test_structure(self, sample_graph_file: GraphFile) -> None:
        """Disks, partitions, encryption and filesystems are created."""
        graph = build_graph(sample_graph_file)

        sda1 = graph.find_by_name("/dev/sda1")
        encryption = graph.encryption_of(sda1)
        filesystem = graph.filesystem_of(sda1)
        assert isinstance(encryption, Encryption)
        assert encryption.password == "pw"
        assert filesystem is not None
        assert graph.parents(filesystem) == [encryption]
        assert graph.filesystem_of(graph.find_by_name("/dev/sdb")).mount_point == "/srv"

    def test_nested_subvolumes(self, sample_graph_file: GraphFile) -> None:
        """Subvolumes are nested under their closest existing parent."""
        graph = build_graph(sample_graph_file)
        filesystem = graph.filesystem_of(graph.find_by_name("/dev/sda1"))

        default = find_subvolume(graph, filesystem, "@")
        var_lib = find_subvolume(graph, filesystem, "@/var/lib")
        machines = find_subvolume(graph, filesystem, "@/var/lib/machines")

        assert default is not None and default.default
        assert graph.parents(var_lib) == [default]
        assert graph.parents(machines) == [var_lib]

    def test_shadowing_computed(self, sample_graph_file: GraphFile) -> None:
        """Shadowing is resolved on the built graph."""
        graph = build_graph(sample_graph_file)
        filesystem = graph.filesystem_of(graph.find_by_name("/dev/sda1"))

        var_lib = find_subvolume(graph, filesystem, "@/var/lib")

        assert var_lib is not None
        assert var_lib.shadowed

    def test_unsupported_partition_id_resolved(self) -> None:
        """Partition ids are resolved through the partition table."""
        graph_file = GraphFile(
            disks=[
                DiskEntry(
                    name="/dev/dasda",
                    ptable=PartitionTableType.DASD,
                    partitions=[PartitionEntry(name="/dev/dasda1", id=PartitionId.ESP)],
                )
            ]
        )

        graph = build_graph(graph_file)

        assert graph.find_by_name("/dev/dasda1").partition_id == PartitionId.LINUX


class TestDescribeGraph:
    """Tests for describe_graph function."""

    def test_round_trip(self, sample_graph_file: GraphFile) -> None:
        """Describing a built graph gives back the original description."""
        assert describe_graph(build_graph(sample_graph_file)) == sample_graph_file

    def test_top_level_not_listed(self, sample_graph_file: GraphFile) -> None:
        """The implicit top-level subvolume is not written out."""
        described = describe_graph(build_graph(sample_graph_file))
        filesystem = described.disks[0].partitions[0].filesystem

        assert filesystem is not None
        assert "" not in [s.path for s in filesystem.subvolumes]


class TestRequireGraphs:
    """Tests for require_graphs function."""

    def test_loads_probed_and_current(self, graph_file: Path) -> None:
        """The file content becomes the probed graph, current is a copy."""
        graphs = require_graphs(graph_file)

        assert graphs.current is not graphs.probed
        assert graphs.current.find_by_name("/dev/sda2") is not None

    def test_missing_file_exits(self, tmp_path: Path) -> None:
        """A missing file exits with code 1."""
        with pytest.raises(typer.Exit) as exc_info:
            require_graphs(tmp_path / "missing.toml")

        assert exc_info.value.exit_code == 1
