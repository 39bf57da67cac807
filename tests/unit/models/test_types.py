"""Unit tests for storage value types.

Tests for FilesystemType, PartitionId and the other enumerations.
"""

import pytest
from partctl.models.types import FilesystemType, MountByType, PartitionId, Role


class TestFilesystemType:
    """Tests for FilesystemType properties."""

    @pytest.mark.parametrize(
        ("fs_type", "expected"),
        [
            (FilesystemType.SWAP, PartitionId.SWAP),
            (FilesystemType.VFAT, PartitionId.DOS32),
            (FilesystemType.NTFS, PartitionId.NTFS),
            (FilesystemType.EXT4, PartitionId.LINUX),
            (FilesystemType.BTRFS, PartitionId.LINUX),
            (FilesystemType.XFS, PartitionId.LINUX),
        ],
    )
    def test_default_partition_id(self, fs_type: FilesystemType, expected: PartitionId) -> None:
        """Each filesystem type maps to its usual partition id."""
        assert fs_type.default_partition_id == expected

    def test_only_btrfs_supports_subvolumes(self) -> None:
        """Subvolumes are a btrfs feature."""
        assert FilesystemType.BTRFS.supports_subvolumes
        assert not any(t.supports_subvolumes for t in FilesystemType if t != FilesystemType.BTRFS)

    def test_is_swap(self) -> None:
        """Only the swap type is a swap area."""
        assert FilesystemType.SWAP.is_swap
        assert not FilesystemType.EXT4.is_swap

    def test_vfat_charset_defaults(self) -> None:
        """vfat has a default iocharset and codepage, other types don't."""
        assert FilesystemType.VFAT.iocharset == "iso8859-1"
        assert FilesystemType.VFAT.codepage == "437"
        assert FilesystemType.EXT4.iocharset == ""
        assert FilesystemType.EXT4.codepage == ""

    def test_swap_only_supports_priority(self) -> None:
        """Swap areas understand the pri= option only."""
        assert FilesystemType.SWAP.supported_fstab_options == ("pri=",)

    def test_from_string(self) -> None:
        """Types are created from their string value."""
        assert FilesystemType("btrfs") is FilesystemType.BTRFS


class TestPartitionId:
    """Tests for PartitionId."""

    @pytest.mark.parametrize(
        "partition_id",
        [PartitionId.WINDOWS_BASIC_DATA, PartitionId.NTFS, PartitionId.DOS32],
    )
    def test_windows_family(self, partition_id: PartitionId) -> None:
        """Windows data ids belong to the Windows family."""
        assert partition_id.is_windows_system

    @pytest.mark.parametrize("partition_id", [PartitionId.LINUX, PartitionId.ESP, PartitionId.LVM])
    def test_not_windows_family(self, partition_id: PartitionId) -> None:
        """Other ids are not part of the Windows family."""
        assert not partition_id.is_windows_system


class TestEnums:
    """Tests for the remaining enumerations."""

    def test_mount_by_values(self) -> None:
        """All mount-by strategies are available."""
        assert {m.value for m in MountByType} == {"device", "uuid", "label", "id", "path"}

    def test_role_values(self) -> None:
        """All roles are available."""
        assert {r.value for r in Role} == {"swap", "efi_boot", "raw", "system", "data"}
