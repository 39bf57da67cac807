"""Data models for partctl.

This module exports the device variants and value types used throughout
the application.
"""

from partctl.models.devices import (
    BlkDevice,
    BtrfsSubvolume,
    Device,
    DeviceKind,
    Disk,
    Encryption,
    Filesystem,
    Partition,
    display_name,
)
from partctl.models.types import (
    FilesystemType,
    MountByType,
    PartitionId,
    PartitionTableType,
    Role,
)

__all__ = [
    "BlkDevice",
    "BtrfsSubvolume",
    "Device",
    "DeviceKind",
    "Disk",
    "Encryption",
    "Filesystem",
    "FilesystemType",
    "MountByType",
    "Partition",
    "PartitionId",
    "PartitionTableType",
    "Role",
    "display_name",
]
