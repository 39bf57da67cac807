"""Enumerations describing storage device attributes.

This module defines the value types shared by the device graph, the
filesystem controller and the fstab option helpers: filesystem types,
mount-by strategies, partition ids, partition table types and roles.
"""

from enum import Enum


class PartitionId(str, Enum):
    """Logical partition type identifier.

    The on-disk representation depends on the partition table; see
    ``partctl.graph.partition_table`` for the per-table resolution.
    """

    LINUX = "linux"
    SWAP = "swap"
    LVM = "lvm"
    RAID = "raid"
    ESP = "esp"
    BIOS_BOOT = "bios_boot"
    PREP = "prep"
    WINDOWS_BASIC_DATA = "windows_basic_data"
    NTFS = "ntfs"
    DOS32 = "dos32"

    @property
    def is_windows_system(self) -> bool:
        """Whether the id belongs to the family of Windows data partitions."""
        return self in WINDOWS_SYSTEM_IDS


WINDOWS_SYSTEM_IDS: tuple[PartitionId, ...] = (
    PartitionId.WINDOWS_BASIC_DATA,
    PartitionId.NTFS,
    PartitionId.DOS32,
)


class PartitionTableType(str, Enum):
    """Supported partition table types."""

    GPT = "gpt"
    MSDOS = "msdos"
    DASD = "dasd"


class MountByType(str, Enum):
    """Strategy used to reference a filesystem in /etc/fstab.

    Attributes:
        DEVICE: Kernel device name (e.g., /dev/sda1).
        UUID: Filesystem UUID.
        LABEL: Filesystem label.
        ID: Stable udev id link.
        PATH: Stable udev path link.
    """

    DEVICE = "device"
    UUID = "uuid"
    LABEL = "label"
    ID = "id"
    PATH = "path"


# fstab options understood by every filesystem able to be mounted
_COMMON_OPTIONS: tuple[str, ...] = (
    "auto",
    "noauto",
    "ro",
    "rw",
    "user",
    "nouser",
    "noatime",
    "atime",
)

_EXT_OPTIONS: tuple[str, ...] = (
    *_COMMON_OPTIONS,
    "acl",
    "noacl",
    "user_xattr",
    "nouser_xattr",
    "usrquota",
    "grpquota",
    "data=",
)


class FilesystemType(str, Enum):
    """Filesystem types that can be created on a block device."""

    BTRFS = "btrfs"
    EXT2 = "ext2"
    EXT3 = "ext3"
    EXT4 = "ext4"
    XFS = "xfs"
    SWAP = "swap"
    VFAT = "vfat"
    NTFS = "ntfs"

    @property
    def is_swap(self) -> bool:
        """Whether the filesystem is a swap area."""
        return self is FilesystemType.SWAP

    @property
    def supports_subvolumes(self) -> bool:
        """Whether the filesystem can hold btrfs subvolumes."""
        return self is FilesystemType.BTRFS

    @property
    def default_partition_id(self) -> PartitionId:
        """Partition id usually associated with this filesystem type."""
        return _DEFAULT_PARTITION_IDS.get(self, PartitionId.LINUX)

    @property
    def supported_fstab_options(self) -> tuple[str, ...]:
        """fstab options (or option prefixes ending in '=') this type understands."""
        return _SUPPORTED_FSTAB_OPTIONS.get(self, ())

    @property
    def iocharset(self) -> str:
        """Default charset for file names, meaningful for vfat only."""
        return "iso8859-1" if self is FilesystemType.VFAT else ""

    @property
    def codepage(self) -> str:
        """Default codepage for short FAT names, meaningful for vfat only."""
        return "437" if self is FilesystemType.VFAT else ""


_DEFAULT_PARTITION_IDS: dict[FilesystemType, PartitionId] = {
    FilesystemType.SWAP: PartitionId.SWAP,
    FilesystemType.VFAT: PartitionId.DOS32,
    FilesystemType.NTFS: PartitionId.NTFS,
}

_SUPPORTED_FSTAB_OPTIONS: dict[FilesystemType, tuple[str, ...]] = {
    FilesystemType.BTRFS: (*_COMMON_OPTIONS, "acl", "noacl", "user_xattr", "nouser_xattr"),
    FilesystemType.EXT2: _EXT_OPTIONS,
    FilesystemType.EXT3: _EXT_OPTIONS,
    FilesystemType.EXT4: _EXT_OPTIONS,
    FilesystemType.XFS: (*_COMMON_OPTIONS, "usrquota", "grpquota"),
    FilesystemType.SWAP: ("pri=",),
    FilesystemType.VFAT: (*_COMMON_OPTIONS, "iocharset=", "codepage=", "utf8="),
    FilesystemType.NTFS: (*_COMMON_OPTIONS, "iocharset="),
}


class Role(str, Enum):
    """Coarse intent for a block device, mapped to a concrete configuration.

    Attributes:
        SWAP: Swap area.
        EFI_BOOT: EFI system partition mounted at /boot/efi.
        RAW: Unformatted device meant for raw consumption (e.g., LVM PV).
        SYSTEM: Operating system filesystem.
        DATA: Data filesystem.
    """

    SWAP = "swap"
    EFI_BOOT = "efi_boot"
    RAW = "raw"
    SYSTEM = "system"
    DATA = "data"
