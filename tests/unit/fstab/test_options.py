"""Unit tests for fstab option editing."""

import pytest
from partctl.fstab.options import (
    get_flag,
    get_quota,
    get_value,
    set_flag,
    set_quota,
    set_value,
    supported,
)
from partctl.models.devices import Filesystem
from partctl.models.types import FilesystemType


def _fs(fs_type: FilesystemType, *options: str) -> Filesystem:
    return Filesystem(sid=1, fs_type=fs_type, fstab_options=list(options))


class TestFlags:
    """Tests for boolean options."""

    def test_set_flag(self) -> None:
        """Enabling a flag adds its checked value."""
        filesystem = _fs(FilesystemType.EXT4, "rw")

        assert set_flag(filesystem, "read_only", True)

        assert filesystem.fstab_options == ["ro"]
        assert get_flag(filesystem, "read_only")

    def test_clear_flag(self) -> None:
        """Disabling a flag removes both values of the pair."""
        filesystem = _fs(FilesystemType.EXT4, "noatime", "acl")

        set_flag(filesystem, "noatime", False)

        assert filesystem.fstab_options == ["acl"]
        assert not get_flag(filesystem, "noatime")

    def test_unsupported_flag(self) -> None:
        """Options unknown to the filesystem type are not added."""
        filesystem = _fs(FilesystemType.SWAP)

        assert not set_flag(filesystem, "acl", True)
        assert filesystem.fstab_options == []

    def test_unknown_flag(self) -> None:
        """Unknown flag names raise KeyError."""
        with pytest.raises(KeyError):
            set_flag(_fs(FilesystemType.EXT4), "turbo", True)


class TestQuota:
    """Tests for quota options."""

    def test_enable(self) -> None:
        """Quota adds both user and group quota options."""
        filesystem = _fs(FilesystemType.XFS)

        assert set_quota(filesystem, True)

        assert filesystem.fstab_options == ["usrquota", "grpquota"]
        assert get_quota(filesystem)

    def test_disable(self) -> None:
        """Disabling quota removes both options."""
        filesystem = _fs(FilesystemType.EXT4, "usrquota", "grpquota", "noatime")

        set_quota(filesystem, False)

        assert filesystem.fstab_options == ["noatime"]

    def test_unsupported(self) -> None:
        """btrfs handles quota on its own."""
        assert not set_quota(_fs(FilesystemType.BTRFS), True)


class TestValues:
    """Tests for key=value options."""

    def test_journal_default(self) -> None:
        """The ext journal mode defaults to ordered."""
        assert get_value(_fs(FilesystemType.EXT4), "data") == "ordered"

    def test_set_journal(self) -> None:
        """Setting a value replaces the previous one."""
        filesystem = _fs(FilesystemType.EXT4, "data=ordered")

        set_value(filesystem, "data", "writeback")

        assert filesystem.fstab_options == ["data=writeback"]
        assert get_value(filesystem, "data") == "writeback"

    def test_invalid_value(self) -> None:
        """Values outside the allowed set are rejected."""
        with pytest.raises(ValueError, match="Invalid value"):
            set_value(_fs(FilesystemType.EXT4), "data", "fast")

    def test_iocharset_drops_utf8(self) -> None:
        """Setting the iocharset removes a utf8= option."""
        filesystem = _fs(FilesystemType.VFAT, "utf8=true", "noauto")

        set_value(filesystem, "iocharset", "utf8")

        assert filesystem.fstab_options == ["noauto", "iocharset=utf8"]

    def test_vfat_defaults(self) -> None:
        """vfat gets its default iocharset and codepage."""
        filesystem = _fs(FilesystemType.VFAT)
        assert get_value(filesystem, "iocharset") == "iso8859-1"
        assert get_value(filesystem, "codepage") == "437"

    def test_empty_value_removes(self) -> None:
        """An empty value removes the option."""
        filesystem = _fs(FilesystemType.VFAT, "codepage=850")

        set_value(filesystem, "codepage", "")

        assert filesystem.fstab_options == []

    def test_swap_priority(self) -> None:
        """Swap priority defaults to 42 and can be changed."""
        filesystem = _fs(FilesystemType.SWAP)
        assert get_value(filesystem, "pri") == "42"

        set_value(filesystem, "pri", "10")

        assert filesystem.fstab_options == ["pri=10"]

    def test_unsupported_value(self) -> None:
        """Options unknown to the filesystem type are not added."""
        filesystem = _fs(FilesystemType.XFS)

        assert not set_value(filesystem, "data", "journal")
        assert filesystem.fstab_options == []

    def test_supported_without_filesystem(self) -> None:
        """Nothing is supported without a filesystem."""
        assert not supported(None, "ro")
