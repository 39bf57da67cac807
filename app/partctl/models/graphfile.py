"""Graph file models describing a device graph in TOML.

This module defines the Pydantic models representing a graph file: a
list of disks, each with partitions, optional encryption, filesystem and
btrfs subvolumes. For example::

    [[disks]]
    name = "/dev/sda"
    ptable = "gpt"

    [[disks.partitions]]
    name = "/dev/sda1"
    id = "linux"

    [disks.partitions.filesystem]
    type = "btrfs"
    mount_point = "/"

    [[disks.partitions.filesystem.subvolumes]]
    path = "@"
    default = true
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator

from partctl.models.types import FilesystemType, MountByType, PartitionId, PartitionTableType


class SubvolumeEntry(BaseModel):
    """Btrfs subvolume other than the top-level one."""

    model_config = ConfigDict(extra="forbid")

    path: Annotated[str, Field(min_length=1, description="Path below the top-level subvolume")]
    default: Annotated[bool, Field(description="Default subvolume of the filesystem")] = False
    nocow: Annotated[bool, Field(description="Copy-on-write disabled")] = False
    mount_point: Annotated[str | None, Field(description="Subvolume mount point")] = None


class FilesystemEntry(BaseModel):
    """Filesystem of a disk, partition or encryption layer."""

    model_config = ConfigDict(extra="forbid")

    type: Annotated[FilesystemType, Field(description="Filesystem type")]
    mount_point: Annotated[str | None, Field(description="Mount point")] = None
    mount_by: Annotated[MountByType, Field(description="fstab mount-by strategy")] = (
        MountByType.UUID
    )
    label: Annotated[str, Field(description="Filesystem label")] = ""
    fstab_options: Annotated[
        list[str],
        Field(default_factory=list, description="Options written to /etc/fstab"),
    ]
    subvolumes: Annotated[
        list[SubvolumeEntry],
        Field(default_factory=list, description="Btrfs subvolumes"),
    ]

    @model_validator(mode="after")
    def validate_subvolumes(self) -> FilesystemEntry:
        """Only btrfs has subvolumes, with at most one default."""
        if self.subvolumes and not self.type.supports_subvolumes:
            msg = f"{self.type.value} filesystems cannot have subvolumes"
            raise ValueError(msg)
        if sum(1 for s in self.subvolumes if s.default) > 1:
            msg = "A btrfs filesystem has at most one default subvolume"
            raise ValueError(msg)
        paths = [s.path for s in self.subvolumes]
        if len(paths) != len(set(paths)):
            msg = "Duplicate subvolume paths"
            raise ValueError(msg)
        return self


class EncryptionEntry(BaseModel):
    """Encryption layer of a block device."""

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, description="Device mapper name")]
    password: Annotated[str, Field(description="Encryption password")] = ""


class PartitionEntry(BaseModel):
    """Partition of a disk."""

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, description="Kernel device name")]
    size: Annotated[int, Field(ge=0, description="Size in bytes")] = 0
    id: Annotated[PartitionId, Field(description="Partition id")] = PartitionId.LINUX
    encryption: Annotated[EncryptionEntry | None, Field(description="Encryption layer")] = None
    filesystem: Annotated[FilesystemEntry | None, Field(description="Filesystem")] = None


class DiskEntry(BaseModel):
    """Disk, either partitioned or directly formatted."""

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, description="Kernel device name")]
    size: Annotated[int, Field(ge=0, description="Size in bytes")] = 0
    ptable: Annotated[PartitionTableType | None, Field(description="Partition table type")] = None
    partitions: Annotated[
        list[PartitionEntry],
        Field(default_factory=list, description="Partitions"),
    ]
    encryption: Annotated[EncryptionEntry | None, Field(description="Encryption layer")] = None
    filesystem: Annotated[FilesystemEntry | None, Field(description="Filesystem")] = None

    @model_validator(mode="after")
    def validate_layout(self) -> DiskEntry:
        """Partitions need a partition table and exclude a disk-level filesystem."""
        if self.partitions and self.ptable is None:
            msg = f"{self.name}: partitions require a partition table"
            raise ValueError(msg)
        if self.partitions and (self.filesystem is not None or self.encryption is not None):
            msg = f"{self.name}: a partitioned disk cannot hold a filesystem"
            raise ValueError(msg)
        return self


class GraphFile(BaseModel):
    """Complete description of a device graph."""

    model_config = ConfigDict(extra="forbid")

    disks: Annotated[list[DiskEntry], Field(default_factory=list, description="Disks")]

    @model_validator(mode="after")
    def validate_unique_names(self) -> GraphFile:
        """Device names must be unique across the whole graph."""
        names: list[str] = []
        for disk in self.disks:
            names.append(disk.name)
            names.extend(p.name for p in disk.partitions)
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            msg = f"Duplicate device names: {sorted(duplicates)}"
            raise ValueError(msg)
        return self
