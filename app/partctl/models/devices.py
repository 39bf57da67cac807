"""Device variants stored in a device graph.

Every device carries a ``sid``, a stable identifier that survives deep
copies of the graph, so the same physical or planned device can be
located in any snapshot by identity.

The set of variants is closed: ``Disk``, ``Partition`` and
``Encryption`` are block devices (``BlkDevice``), able to hold a
filesystem; ``Filesystem`` and ``BtrfsSubvolume`` sit on top of them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar

from partctl.models.types import FilesystemType, MountByType, PartitionId, PartitionTableType


class DeviceKind(str, Enum):
    """Tag identifying the concrete variant of a device."""

    DISK = "disk"
    PARTITION = "partition"
    ENCRYPTION = "encryption"
    FILESYSTEM = "filesystem"
    BTRFS_SUBVOLUME = "btrfs_subvolume"


@dataclass(slots=True)
class Device:
    """Common base of every node in the device graph.

    Attributes:
        sid: Stable identifier, shared by all copies of the device.
    """

    kind: ClassVar[DeviceKind]

    sid: int


@dataclass(slots=True)
class BlkDevice(Device):
    """Named block device, able to hold a filesystem or an encryption layer.

    Attributes:
        name: Kernel device name (e.g., /dev/sda1).
        size: Size in bytes.
    """

    name: str
    size: int = 0

    @property
    def basename(self) -> str:
        """Last component of the device name (e.g., 'sda1')."""
        return self.name.rsplit("/", 1)[-1]


@dataclass(slots=True)
class Disk(BlkDevice):
    """Whole disk, optionally carrying a partition table."""

    kind: ClassVar[DeviceKind] = DeviceKind.DISK

    ptable_type: PartitionTableType | None = None


@dataclass(slots=True)
class Partition(BlkDevice):
    """Partition of a disk."""

    kind: ClassVar[DeviceKind] = DeviceKind.PARTITION

    partition_id: PartitionId = PartitionId.LINUX


@dataclass(slots=True)
class Encryption(BlkDevice):
    """Encryption layer placed between a block device and its filesystem."""

    kind: ClassVar[DeviceKind] = DeviceKind.ENCRYPTION

    password: str = field(default="", repr=False)


@dataclass(slots=True)
class Filesystem(Device):
    """Filesystem created on a block device.

    Attributes:
        fs_type: Type of the filesystem.
        mount_point: Mount point, None when not mounted. The reserved
            value "swap" is used by swap areas.
        mount_by: How the filesystem is referenced in /etc/fstab.
        label: Filesystem label.
        fstab_options: Options written to /etc/fstab.
    """

    kind: ClassVar[DeviceKind] = DeviceKind.FILESYSTEM

    fs_type: FilesystemType = FilesystemType.EXT4
    mount_point: str | None = None
    mount_by: MountByType = MountByType.UUID
    label: str = ""
    fstab_options: list[str] = field(default_factory=list)

    @property
    def is_btrfs(self) -> bool:
        """Whether the filesystem supports btrfs subvolumes."""
        return self.fs_type.supports_subvolumes

    @property
    def is_root(self) -> bool:
        """Whether the filesystem is mounted at /."""
        return self.mount_point == "/"


@dataclass(slots=True)
class BtrfsSubvolume(Device):
    """Subvolume of a btrfs filesystem.

    Attributes:
        path: Subvolume path relative to the top-level subvolume.
        mount_point: Mount point derived from the filesystem mount point.
        top_level: Whether this is the top-level subvolume (path "").
        default: Whether this is the default subvolume of the filesystem.
        nocow: Whether copy-on-write is disabled.
        shadowed: Whether another filesystem hides the mount point.
    """

    kind: ClassVar[DeviceKind] = DeviceKind.BTRFS_SUBVOLUME

    path: str = ""
    mount_point: str | None = None
    top_level: bool = False
    default: bool = False
    nocow: bool = False
    shadowed: bool = False


def display_name(device: Device) -> str | None:
    """Return the name of a device, or None for unnamed kinds."""
    if isinstance(device, BlkDevice):
        return device.name
    return None
