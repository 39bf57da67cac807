"""State of a single interactive filesystem edit."""

from __future__ import annotations

from dataclasses import dataclass, field

from partctl.graph.devicegraph import DeviceGraph
from partctl.graph.store import DeviceGraphs
from partctl.models.devices import BlkDevice
from partctl.models.types import MountByType, Role


@dataclass(frozen=True, slots=True)
class PreservedAttributes:
    """Filesystem attributes captured before a pre-existing filesystem is reformatted.

    Attributes:
        mount_point: Mount point of the original filesystem.
        mount_by: Mount-by strategy of the original filesystem.
        label: Label of the original filesystem.
    """

    mount_point: str | None
    mount_by: MountByType | None
    label: str | None


@dataclass(slots=True)
class ControllerSession:
    """Short-lived state held while one block device is being edited.

    A session owns no device: it references the target by sid and keeps
    its own snapshots. Sessions are discarded when the edit ends; undoing a
    reformat requires an explicit ``revert_to_no_format()`` call on the
    controller before that.

    Attributes:
        device_sid: Sid of the block device being edited.
        initial: Copy of the current graph taken when the session started,
            used to tell devices created during the session apart.
        encrypt: Whether the user wants the device to be encrypted.
        encrypt_password: Password for a new encryption layer.
        role: Role requested for the device, if any.
        backup: Copy of the current graph taken before reformatting a
            pre-existing filesystem. Dropped once restored.
        preserved: Attributes of the filesystem captured with the backup.
    """

    device_sid: int
    initial: DeviceGraph
    encrypt: bool = False
    encrypt_password: str = field(default="", repr=False)
    role: Role | None = None
    backup: DeviceGraph | None = None
    preserved: PreservedAttributes | None = None

    @classmethod
    def start(cls, graphs: DeviceGraphs, device: BlkDevice) -> ControllerSession:
        """Begin editing a block device of the current graph.

        Args:
            graphs: Device graphs the edit works on.
            device: Block device to edit.

        Returns:
            New session referencing the device, with the pending encryption
            flag matching the device's current state.
        """
        current = graphs.current
        return cls(
            device_sid=device.sid,
            initial=current.copy(),
            encrypt=current.is_encrypted(device),
        )

    def drop_backup(self) -> None:
        """Forget the backup snapshot and the attributes captured with it."""
        self.backup = None
        self.preserved = None
