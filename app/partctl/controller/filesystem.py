"""Filesystem configuration controller.

This module provides the FilesystemController class, which applies the
edits of one interactive session (format, role, mount point, encryption)
directly on the current device graph while keeping them reversible.

Every operation whose precondition is not met (no filesystem, device is
not a partition, ...) is a logged no-op rather than an error: callers are
expected to hide controls that make no sense, but the graph is never left
in an inconsistent state when they don't.
"""

import logging
from dataclasses import dataclass

from partctl.controller.session import ControllerSession, PreservedAttributes
from partctl.core.product import ProductConfig
from partctl.errors import UnsupportedOperationError
from partctl.graph.btrfs import add_subvolumes, ensure_default_subvolume, subvolume_mount_point
from partctl.graph.devicegraph import DeviceGraph
from partctl.graph.store import DeviceGraphs
from partctl.models.devices import BlkDevice, BtrfsSubvolume, Filesystem, Partition
from partctl.models.types import FilesystemType, MountByType, PartitionId, Role
from partctl.subvolumes.shadowing import SWAP_MOUNT_POINT, refresh_subvolumes_shadowing

logger = logging.getLogger(__name__)

DEFAULT_FS = FilesystemType.BTRFS
DEFAULT_DATA_FS = FilesystemType.XFS
DEFAULT_PARTITION_ID = PartitionId.LINUX


@dataclass(frozen=True, slots=True)
class RoleSettings:
    """Canonical configuration applied for a role.

    Attributes:
        partition_id: Partition id to set (partitions only).
        fs_type: Filesystem to create, None to leave the device unformatted.
        mount_point: Mount point of the new filesystem.
        mount_by: Mount-by strategy, None to keep the filesystem default.
    """

    partition_id: PartitionId
    fs_type: FilesystemType | None = None
    mount_point: str | None = None
    mount_by: MountByType | None = None


ROLE_SETTINGS: dict[Role, RoleSettings] = {
    Role.SWAP: RoleSettings(
        partition_id=PartitionId.SWAP,
        fs_type=FilesystemType.SWAP,
        mount_point=SWAP_MOUNT_POINT,
        mount_by=MountByType.DEVICE,
    ),
    Role.EFI_BOOT: RoleSettings(
        partition_id=PartitionId.ESP,
        fs_type=FilesystemType.VFAT,
        mount_point="/boot/efi",
    ),
    Role.RAW: RoleSettings(partition_id=PartitionId.LVM),
    Role.SYSTEM: RoleSettings(partition_id=DEFAULT_PARTITION_ID, fs_type=DEFAULT_FS),
    Role.DATA: RoleSettings(partition_id=DEFAULT_PARTITION_ID, fs_type=DEFAULT_DATA_FS),
}


class FilesystemController:
    """Applies filesystem edits of one session to the current device graph.

    Mutations land directly on ``graphs.current``; the session keeps the
    snapshots needed to tell new devices apart and to undo a reformat.

    Attributes:
        graphs: Probed and current device graphs.
        session: State of the edit in progress.
        product: Product settings for btrfs proposals.

    Example:
        >>> session = ControllerSession.start(graphs, partition)
        >>> controller = FilesystemController(graphs, session)
        >>> controller.new_filesystem(FilesystemType.EXT4)
        >>> controller.set_mount_point("/home")
        >>> controller.revert_to_no_format()  # back to the original filesystem
    """

    def __init__(
        self,
        graphs: DeviceGraphs,
        session: ControllerSession,
        product: ProductConfig | None = None,
    ) -> None:
        """Initialize the FilesystemController.

        Args:
            graphs: Device graphs to work on.
            session: Session of the block device being edited.
            product: Product settings. Defaults to the built-in configuration.
        """
        self._graphs = graphs
        self._session = session
        self._product = product if product is not None else ProductConfig()

    @property
    def graphs(self) -> DeviceGraphs:
        return self._graphs

    @property
    def session(self) -> ControllerSession:
        return self._session

    @property
    def product(self) -> ProductConfig:
        return self._product

    @property
    def graph(self) -> DeviceGraph:
        """The current device graph, the only one ever mutated."""
        return self._graphs.current

    @property
    def blk_device(self) -> BlkDevice:
        """Block device being edited.

        Raises:
            DeviceNotFoundError: If the device is gone from the current graph.
        """
        device = self.graph.find(self._session.device_sid)
        if not isinstance(device, BlkDevice):
            raise UnsupportedOperationError(f"Device {device.sid} is not a block device")
        return device

    @property
    def filesystem(self) -> Filesystem | None:
        return self.graph.filesystem_of(self.blk_device)

    @property
    def filesystem_type(self) -> FilesystemType | None:
        filesystem = self.filesystem
        return filesystem.fs_type if filesystem is not None else None

    @property
    def mount_point(self) -> str | None:
        filesystem = self.filesystem
        return filesystem.mount_point if filesystem is not None else None

    @property
    def partition_id(self) -> PartitionId | None:
        device = self.blk_device
        return device.partition_id if isinstance(device, Partition) else None

    @property
    def to_be_formatted(self) -> bool:
        """Whether the device holds a filesystem created during this session."""
        filesystem = self.filesystem
        return filesystem is not None and self._is_new(filesystem.sid)

    @property
    def to_be_encrypted(self) -> bool:
        """Whether finalizing the session would add an encryption layer."""
        if not self._can_change_encryption():
            return False
        return self._session.encrypt and not self.graph.is_encrypted(self.blk_device)

    # === Operations ===

    def new_filesystem(self, fs_type: FilesystemType | str) -> None:
        """Replace the filesystem of the device by a new one of the given type.

        Mount point, mount-by and label are carried over, except that a swap
        filesystem always gets the "swap" mount point and a "swap" mount point
        is cleared when switching to a non-swap type. When the replaced
        filesystem pre-dates the session, a backup of the graph is taken
        first so ``revert_to_no_format()`` can bring it back.

        Args:
            fs_type: Type of the new filesystem.
        """
        fs_type = FilesystemType(fs_type)

        mount_point = self.mount_point
        filesystem = self.filesystem
        mount_by = filesystem.mount_by if filesystem is not None else None
        label = filesystem.label if filesystem is not None else None

        if fs_type.is_swap:
            mount_point = SWAP_MOUNT_POINT
        elif mount_point == SWAP_MOUNT_POINT:
            mount_point = ""

        if filesystem is not None and not self._is_new(filesystem.sid):
            logger.debug("Backing up device graph before reformatting %s", self.blk_device.name)
            self._session.backup = self.graph.copy()
            self._session.preserved = PreservedAttributes(
                mount_point=filesystem.mount_point,
                mount_by=filesystem.mount_by,
                label=filesystem.label,
            )

        logger.info("Formatting %s as %s", self.blk_device.name, fs_type.value)
        self._delete_filesystem()
        self._create_filesystem(fs_type)
        self._assign_fs_attrs(mount_by=mount_by, label=label)
        self.set_partition_id(fs_type.default_partition_id)
        self._assign_mount_point(mount_point)
        self._refresh_shadowing()

    def apply_role(self, role: Role | str) -> None:
        """Configure the device according to a coarse role.

        Any filesystem is deleted and any pending encryption request is
        cleared before the canonical settings of the role are applied. The
        raw role only sets the partition id and leaves the device unformatted.

        Args:
            role: Role to apply.
        """
        role = Role(role)
        settings = ROLE_SETTINGS[role]
        logger.info("Applying role %s to %s", role.value, self.blk_device.name)

        self._session.role = role
        self._delete_filesystem()
        self._session.encrypt = False
        self.set_partition_id(settings.partition_id)

        if settings.fs_type is not None:
            self._create_filesystem(settings.fs_type)
            self._assign_fs_attrs(mount_by=settings.mount_by)
            self._assign_mount_point(settings.mount_point)

        self._refresh_shadowing()

    def set_mount_point(self, mount_point: str | None) -> None:
        """Change the mount point of the filesystem.

        For btrfs, subvolumes that were not probed are dropped, the proposed
        subvolumes are added when the filesystem becomes root, and every
        subvolume mount point is recomputed. Shadowing is refreshed after
        any effective change.

        Args:
            mount_point: New mount point.
        """
        if self._assign_mount_point(mount_point):
            self._refresh_shadowing()

    def revert_to_no_format(self) -> None:
        """Undo the formatting done during this session.

        A filesystem created during the session is either replaced by the
        backup of the original one (restoring the whole graph as it was
        before the reformat) or simply deleted when nothing was there before.
        Does nothing when the filesystem pre-dates the session.
        """
        filesystem = self.filesystem
        if filesystem is None:
            logger.debug("No filesystem on %s, nothing to revert", self.blk_device.name)
            return
        if not self._is_new(filesystem.sid):
            return

        if self._session.backup is not None:
            self._restore_filesystem()
        else:
            logger.info("Dropping new filesystem of %s", self.blk_device.name)
            self._delete_filesystem()

        self._refresh_shadowing()

    def set_partition_id(self, partition_id: PartitionId | str | None) -> None:
        """Set the partition id, resolved through the partition table.

        Does nothing if the device is not a partition.

        Args:
            partition_id: Requested logical partition id.
        """
        device = self.blk_device
        if not isinstance(device, Partition) or partition_id is None:
            logger.debug("Not setting partition id on %s", device.name)
            return

        try:
            ptable = self.graph.partition_table_of(device)
        except UnsupportedOperationError as e:
            logger.debug("Ignoring partition id change: %s", e)
            return

        device.partition_id = ptable.partition_id_for(PartitionId(partition_id))

    def set_label(self, label: str) -> None:
        filesystem = self.filesystem
        if filesystem is not None:
            filesystem.label = label

    def set_mount_by(self, mount_by: MountByType | str) -> None:
        filesystem = self.filesystem
        if filesystem is not None:
            filesystem.mount_by = MountByType(mount_by)

    def finalize_encryption(self) -> None:
        """Apply the pending encryption toggle to the device graph.

        Adding encryption needs a password set on the session; the layer is
        inserted between the device and its filesystem. Removing encryption
        reconnects the filesystem directly to the device. Calling this again
        without changing the session changes nothing.
        """
        if not self._can_change_encryption():
            return

        device = self.blk_device
        if self.to_be_encrypted:
            if not self._session.encrypt_password:
                logger.warning("Encryption of %s requested without a password", device.name)
                return
            name = self._encryption_name(device)
            self.graph.add_encryption(device, name, self._session.encrypt_password)
            logger.info("Encrypting %s as %s", device.name, name)
        elif self.graph.is_encrypted(device) and not self._session.encrypt:
            self.graph.remove_encryption(device)
            logger.info("Removing encryption from %s", device.name)

    # === Internals ===

    def _is_new(self, sid: int) -> bool:
        return not self._session.initial.exists(sid)

    def _can_change_encryption(self) -> bool:
        filesystem = self.filesystem
        return filesystem is None or self._is_new(filesystem.sid)

    def _delete_filesystem(self) -> None:
        filesystem = self.filesystem
        if filesystem is not None:
            self.graph.remove_with_descendants(filesystem)

    def _create_filesystem(self, fs_type: FilesystemType) -> Filesystem:
        filesystem = self.graph.create_filesystem(self.blk_device, fs_type)
        if filesystem.is_btrfs:
            ensure_default_subvolume(self.graph, filesystem, self._product.default_subvolume)
        return filesystem

    def _restore_filesystem(self) -> None:
        backup = self._session.backup
        preserved = self._session.preserved
        if backup is None:
            return

        logger.info("Restoring original filesystem of %s", self.blk_device.name)
        backup.copy_into(self.graph)
        self._session.drop_backup()
        self._session.encrypt = self.graph.is_encrypted(self.blk_device)

        if preserved is not None:
            self._assign_fs_attrs(mount_by=preserved.mount_by, label=preserved.label)
            self._assign_mount_point(preserved.mount_point)

    def _assign_fs_attrs(
        self,
        mount_by: MountByType | None = None,
        label: str | None = None,
    ) -> None:
        filesystem = self.filesystem
        if filesystem is None:
            return
        if mount_by is not None:
            filesystem.mount_by = mount_by
        if label is not None:
            filesystem.label = label

    def _assign_mount_point(self, mount_point: str | None) -> bool:
        """Assign the mount point without refreshing shadowing.

        Returns:
            True if the mount point actually changed.
        """
        filesystem = self.filesystem
        if filesystem is None or filesystem.mount_point == mount_point:
            return False

        if filesystem.is_btrfs:
            self._delete_not_probed_subvolumes(filesystem)

        filesystem.mount_point = mount_point

        if filesystem.is_btrfs:
            if filesystem.is_root:
                self._add_proposed_subvolumes(filesystem)
            self._update_subvolume_mount_points(filesystem)

        logger.debug("Mount point of %s set to %r", self.blk_device.name, mount_point)
        return True

    def _subvolumes(self, filesystem: Filesystem) -> list[BtrfsSubvolume]:
        # top-level and default subvolumes are never touched
        return [
            s for s in self.graph.subvolumes_of(filesystem) if not s.top_level and not s.default
        ]

    def _delete_not_probed_subvolumes(self, filesystem: Filesystem) -> None:
        probed = self._graphs.probed
        while True:
            subvolume = next(
                (s for s in self._subvolumes(filesystem) if not probed.exists(s.sid)),
                None,
            )
            if subvolume is None:
                return
            self.graph.remove_with_descendants(subvolume)

    def _add_proposed_subvolumes(self, filesystem: Filesystem) -> None:
        specs = self._product.proposed_subvolumes()
        add_subvolumes(self.graph, filesystem, specs, self._product.arch)

    def _update_subvolume_mount_points(self, filesystem: Filesystem) -> None:
        for subvolume in self._subvolumes(filesystem):
            subvolume.mount_point = subvolume_mount_point(self.graph, filesystem, subvolume.path)

    def _refresh_shadowing(self) -> None:
        refresh_subvolumes_shadowing(self.graph)

    def _encryption_name(self, device: BlkDevice) -> str:
        base = f"/dev/mapper/cr_{device.basename}"
        name = base
        suffix = 1
        while self.graph.find_by_name(name) is not None:
            suffix += 1
            name = f"{base}_{suffix}"
        return name
