"""Confirm-then-delete actions for devices of the current graph.

Each device kind able to be deleted has its own action class. The base
class runs the common flow: validate, ask the presentation layer for
confirmation, delete, refresh subvolume shadowing (removing a device can
unshadow subvolumes anywhere in the graph).
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Protocol

from partctl.errors import UnsupportedOperationError
from partctl.graph.devicegraph import DeviceGraph
from partctl.graph.store import DeviceGraphs
from partctl.models.devices import BtrfsSubvolume, Device, Disk, Partition, display_name
from partctl.subvolumes.shadowing import refresh_subvolumes_shadowing

logger = logging.getLogger(__name__)


class DeleteOutcome(str, Enum):
    """Result of running a delete action.

    Attributes:
        CANCELLED: Validation failed or the user declined; graph untouched.
        COMPLETED: The device was deleted.
    """

    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Confirmer(Protocol):
    """Presentation-layer callback answering a yes/no question."""

    def __call__(self, question: str, dependent_devices: list[str]) -> bool:
        """Ask the user to confirm a deletion.

        Args:
            question: Question naming the device to delete.
            dependent_devices: Names of devices that would be deleted too.

        Returns:
            True if the user confirmed.
        """
        ...


class DeleteDevice(ABC):
    """Abstract base class for deleting a device from the current graph.

    Subclasses implement ``delete()`` and may override ``validate()`` to
    forbid the deletion; in that case they set ``validation_error``.

    Attributes:
        device: Device to delete.
        validation_error: Why validation failed, None if it did not.
    """

    def __init__(self, graphs: DeviceGraphs, device: Device, confirmer: Confirmer) -> None:
        """Initialize the action.

        Args:
            graphs: Device graphs; only the current one is modified.
            device: Device of the current graph to delete.
            confirmer: Callback obtaining the user decision.
        """
        self._graphs = graphs
        self._confirmer = confirmer
        self.device = device
        self.validation_error: str | None = None

    @property
    def device_graph(self) -> DeviceGraph:
        return self._graphs.current

    @property
    def device_label(self) -> str:
        return display_name(self.device) or f"device {self.device.sid}"

    def run(self) -> DeleteOutcome:
        """Validate, confirm and delete the device.

        Returns:
            CANCELLED if validation failed or the user declined, leaving the
            graph untouched; COMPLETED otherwise.
        """
        if not self.validate():
            logger.info("Deletion of %s not allowed: %s", self.device_label, self.validation_error)
            return DeleteOutcome.CANCELLED
        if not self.confirm():
            logger.debug("Deletion of %s cancelled by user", self.device_label)
            return DeleteOutcome.CANCELLED

        self.delete()
        refresh_subvolumes_shadowing(self.device_graph)
        logger.info("Deleted %s", self.device_label)
        return DeleteOutcome.COMPLETED

    def validate(self) -> bool:
        """Check whether the device can be deleted. Always allowed by default."""
        return True

    def confirm(self) -> bool:
        """Ask the presentation layer whether to go ahead."""
        return self._confirmer(f"Really delete {self.device_label}?", self.dependent_devices())

    def dependent_devices(self) -> list[str]:
        """Names of all devices that depend on the one being deleted.

        Unnamed devices (filesystems, subvolumes) are left out.
        """
        names = (display_name(d) for d in self.device_graph.descendants(self.device))
        return sorted(name for name in names if name is not None)

    @abstractmethod
    def delete(self) -> None:
        """Remove the device from the current graph."""


class DeleteDisk(DeleteDevice):
    """Deletes every partition of a disk, keeping the disk itself."""

    device: Disk

    def validate(self) -> bool:
        if not self.device_graph.children(self.device):
            self.validation_error = f"{self.device_label} does not contain partitions"
            return False
        return True

    def delete(self) -> None:
        logger.debug("Deleting partitions of %s", self.device_label)
        self.device_graph.remove_descendants(self.device)


class DeletePartition(DeleteDevice):
    """Deletes a partition and everything built on top of it."""

    device: Partition

    def delete(self) -> None:
        self.device_graph.remove_with_descendants(self.device)


class DeleteBtrfsSubvolume(DeleteDevice):
    """Deletes a btrfs subvolume and the subvolumes nested in it."""

    device: BtrfsSubvolume

    @property
    def device_label(self) -> str:
        return f"subvolume {self.device.path or '(top level)'}"

    def validate(self) -> bool:
        if self.device.top_level or self.device.default:
            self.validation_error = f"The {self.device_label} is required by its filesystem"
            return False
        return True

    def delete(self) -> None:
        self.device_graph.remove_with_descendants(self.device)


DELETE_ACTIONS: dict[type[Device], type[DeleteDevice]] = {
    Disk: DeleteDisk,
    Partition: DeletePartition,
    BtrfsSubvolume: DeleteBtrfsSubvolume,
}


def delete_action_for(graphs: DeviceGraphs, device: Device, confirmer: Confirmer) -> DeleteDevice:
    """Build the delete action matching the kind of a device.

    Args:
        graphs: Device graphs; only the current one is modified.
        device: Device of the current graph to delete.
        confirmer: Callback obtaining the user decision.

    Returns:
        Delete action for the device.

    Raises:
        UnsupportedOperationError: If the device kind cannot be deleted on its own.
    """
    action_class = DELETE_ACTIONS.get(type(device))
    if action_class is None:
        raise UnsupportedOperationError(f"Cannot delete a device of kind {device.kind.value}")
    return action_class(graphs, device, confirmer)
