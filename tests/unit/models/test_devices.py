"""Unit tests for device variants."""

from partctl.models.devices import (
    BlkDevice,
    BtrfsSubvolume,
    DeviceKind,
    Disk,
    Encryption,
    Filesystem,
    Partition,
    display_name,
)
from partctl.models.types import FilesystemType, MountByType, PartitionId


class TestDeviceVariants:
    """Tests for the device dataclasses."""

    def test_kinds(self) -> None:
        """Every variant carries its kind tag."""
        assert Disk(sid=1, name="/dev/sda").kind == DeviceKind.DISK
        assert Partition(sid=2, name="/dev/sda1").kind == DeviceKind.PARTITION
        assert Encryption(sid=3, name="/dev/mapper/cr_sda1").kind == DeviceKind.ENCRYPTION
        assert Filesystem(sid=4).kind == DeviceKind.FILESYSTEM
        assert BtrfsSubvolume(sid=5).kind == DeviceKind.BTRFS_SUBVOLUME

    def test_block_device_capability(self) -> None:
        """Disks, partitions and encryption layers are block devices."""
        assert isinstance(Disk(sid=1, name="/dev/sda"), BlkDevice)
        assert isinstance(Partition(sid=2, name="/dev/sda1"), BlkDevice)
        assert isinstance(Encryption(sid=3, name="/dev/mapper/cr"), BlkDevice)
        assert not isinstance(Filesystem(sid=4), BlkDevice)

    def test_basename(self) -> None:
        """basename strips the directory part of the name."""
        assert Partition(sid=1, name="/dev/nvme0n1p2").basename == "nvme0n1p2"

    def test_defaults(self) -> None:
        """New devices get sensible defaults."""
        partition = Partition(sid=1, name="/dev/sda1")
        filesystem = Filesystem(sid=2)

        assert partition.partition_id == PartitionId.LINUX
        assert filesystem.fs_type == FilesystemType.EXT4
        assert filesystem.mount_by == MountByType.UUID
        assert filesystem.mount_point is None
        assert filesystem.fstab_options == []

    def test_password_hidden_from_repr(self) -> None:
        """The encryption password is never shown."""
        encryption = Encryption(sid=1, name="/dev/mapper/cr_sda1", password="secret")
        assert "secret" not in repr(encryption)

    def test_filesystem_predicates(self) -> None:
        """is_root and is_btrfs reflect mount point and type."""
        filesystem = Filesystem(sid=1, fs_type=FilesystemType.BTRFS, mount_point="/")
        assert filesystem.is_root
        assert filesystem.is_btrfs

        filesystem.mount_point = "/home"
        assert not filesystem.is_root


class TestDisplayName:
    """Tests for display_name."""

    def test_named_device(self) -> None:
        """Block devices are shown by name."""
        assert display_name(Disk(sid=1, name="/dev/sda")) == "/dev/sda"

    def test_unnamed_device(self) -> None:
        """Filesystems and subvolumes have no name."""
        assert display_name(Filesystem(sid=1)) is None
        assert display_name(BtrfsSubvolume(sid=2, path="@")) is None
