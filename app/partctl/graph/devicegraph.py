"""In-memory device graph.

This module provides the DeviceGraph class, an arena of devices keyed by
their stable ``sid`` and connected by "built on top of" edges. Snapshots
are independent deep copies sharing only identifiers, never structure,
so mutating one snapshot can never leak into another.
"""

from __future__ import annotations

import copy
import itertools
import logging
from collections.abc import Iterable, Iterator
from typing import TypeVar

from partctl.errors import DeviceNotFoundError, StructuralError, UnsupportedOperationError
from partctl.graph.partition_table import PartitionTable
from partctl.models.devices import (
    BlkDevice,
    BtrfsSubvolume,
    Device,
    Disk,
    Encryption,
    Filesystem,
    Partition,
)
from partctl.models.types import FilesystemType, PartitionId, PartitionTableType

logger = logging.getLogger(__name__)

D = TypeVar("D", bound=Device)


class _SidAllocator:
    """Process-wide allocator of device identifiers.

    Shared by every graph so that a device created in one snapshot never
    reuses the id of a device that only exists in another snapshot.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._floor = 0

    def next(self) -> int:
        sid = next(self._counter)
        while sid <= self._floor:
            sid = next(self._counter)
        return sid

    def reserve(self, sid: int) -> None:
        self._floor = max(self._floor, sid)


_sids = _SidAllocator()


class DeviceGraph:
    """Directed acyclic graph of storage devices.

    Devices are stored by sid; edges are kept as sid lists in both
    directions. Every public mutation keeps the graph acyclic and keeps
    the "one filesystem per block device" invariant.

    Example:
        >>> graph = DeviceGraph()
        >>> disk = graph.create_disk("/dev/sda", ptable_type=PartitionTableType.GPT)
        >>> part = graph.create_partition(disk, "/dev/sda1")
        >>> fs = graph.create_filesystem(part, FilesystemType.EXT4)
        >>> snapshot = graph.copy()
        >>> snapshot.exists(fs.sid)
        True
    """

    def __init__(self) -> None:
        """Create an empty device graph."""
        self._devices: dict[int, Device] = {}
        self._children: dict[int, list[int]] = {}
        self._parents: dict[int, list[int]] = {}

    # === Snapshots ===

    def copy(self) -> DeviceGraph:
        """Return a structurally independent deep copy preserving sids."""
        other = DeviceGraph()
        self.copy_into(other)
        return other

    def copy_into(self, other: DeviceGraph) -> None:
        """Replace the whole content of another graph with a copy of this one.

        The target object keeps its identity, so references held by callers
        (e.g., the current snapshot) stay valid.

        Args:
            other: Graph whose content is overwritten.
        """
        other._devices = copy.deepcopy(self._devices)
        other._children = {sid: list(sids) for sid, sids in self._children.items()}
        other._parents = {sid: list(sids) for sid, sids in self._parents.items()}

    def exists(self, sid: int) -> bool:
        """Check whether a device with the given sid is part of this graph."""
        return sid in self._devices

    def __contains__(self, sid: object) -> bool:
        return sid in self._devices

    def __len__(self) -> int:
        return len(self._devices)

    # === Lookup ===

    def find(self, sid: int) -> Device:
        """Return the device with the given sid.

        Raises:
            DeviceNotFoundError: If no such device exists in this graph.
        """
        try:
            return self._devices[sid]
        except KeyError:
            raise DeviceNotFoundError(f"Device {sid} not found in device graph") from None

    def find_by_name(self, name: str) -> BlkDevice | None:
        """Return the block device with the given name, if any."""
        for device in self._devices.values():
            if isinstance(device, BlkDevice) and device.name == name:
                return device
        return None

    def devices(self) -> Iterator[Device]:
        """Iterate over all devices, in creation order."""
        return iter(list(self._devices.values()))

    def of_type(self, cls: type[D]) -> list[D]:
        """Return all devices that are instances of the given class."""
        return [device for device in self._devices.values() if isinstance(device, cls)]

    def disks(self) -> list[Disk]:
        return self.of_type(Disk)

    def filesystems(self) -> list[Filesystem]:
        return self.of_type(Filesystem)

    def subvolumes(self) -> list[BtrfsSubvolume]:
        return self.of_type(BtrfsSubvolume)

    # === Structure ===

    def children(self, device: Device) -> list[Device]:
        """Return the devices directly built on top of the given one."""
        return [self._devices[sid] for sid in self._children.get(device.sid, [])]

    def parents(self, device: Device) -> list[Device]:
        """Return the devices the given one is directly built on."""
        return [self._devices[sid] for sid in self._parents.get(device.sid, [])]

    def descendants(self, device: Device) -> list[Device]:
        """Return every device depending (directly or not) on the given one.

        Devices are returned in breadth-first order without duplicates.
        """
        return [self._devices[sid] for sid in self._walk(device.sid, self._children)]

    def ancestors(self, device: Device) -> list[Device]:
        """Return every device the given one depends on."""
        return [self._devices[sid] for sid in self._walk(device.sid, self._parents)]

    def add(self, device: D, parents: Iterable[Device] = ()) -> D:
        """Insert a device built on top of the given parents.

        Raises:
            StructuralError: If the sid is already used or a parent is missing.
        """
        if device.sid in self._devices:
            raise StructuralError(f"Device {device.sid} already present in device graph")

        _sids.reserve(device.sid)
        self._devices[device.sid] = device
        self._children[device.sid] = []
        self._parents[device.sid] = []
        for parent in parents:
            self.link(parent, device)
        return device

    def link(self, parent: Device, child: Device) -> None:
        """Add a "built on top of" edge from parent to child.

        Raises:
            DeviceNotFoundError: If either device is not in the graph.
            StructuralError: If the edge would create a cycle.
        """
        self.find(parent.sid)
        self.find(child.sid)
        if parent.sid == child.sid or parent.sid in self._walk(child.sid, self._children):
            raise StructuralError(f"Linking {parent.sid} -> {child.sid} would create a cycle")
        if child.sid not in self._children[parent.sid]:
            self._children[parent.sid].append(child.sid)
            self._parents[child.sid].append(parent.sid)

    def unlink(self, parent: Device, child: Device) -> None:
        """Remove the edge between parent and child, if present."""
        if child.sid in self._children.get(parent.sid, []):
            self._children[parent.sid].remove(child.sid)
            self._parents[child.sid].remove(parent.sid)

    def remove_device(self, device: Device) -> None:
        """Remove a single device and all its edges.

        Raises:
            DeviceNotFoundError: If the device is not in the graph.
        """
        self.find(device.sid)
        for child_sid in self._children.pop(device.sid):
            self._parents[child_sid].remove(device.sid)
        for parent_sid in self._parents.pop(device.sid):
            self._children[parent_sid].remove(device.sid)
        del self._devices[device.sid]

    def remove_descendants(self, device: Device) -> None:
        """Remove every device depending on the given one, keeping the device."""
        descendants = self.descendants(device)
        for descendant in reversed(descendants):
            self.remove_device(descendant)
        if descendants:
            logger.debug("Removed %d descendants of device %d", len(descendants), device.sid)

    def remove_with_descendants(self, device: Device) -> None:
        """Remove a device together with everything depending on it."""
        self.remove_descendants(device)
        self.remove_device(device)

    # === Block devices ===

    def create_disk(
        self,
        name: str,
        size: int = 0,
        ptable_type: PartitionTableType | None = None,
    ) -> Disk:
        """Create a disk, optionally carrying a partition table."""
        return self.add(Disk(sid=_sids.next(), name=name, size=size, ptable_type=ptable_type))

    def create_partition(
        self,
        disk: Disk,
        name: str,
        size: int = 0,
        partition_id: PartitionId = PartitionId.LINUX,
    ) -> Partition:
        """Create a partition on a disk.

        The requested id is resolved through the disk's partition table.

        Raises:
            UnsupportedOperationError: If the disk has no partition table.
        """
        if disk.ptable_type is None:
            raise UnsupportedOperationError(f"{disk.name} has no partition table")
        resolved = PartitionTable(disk.ptable_type).partition_id_for(partition_id)
        partition = Partition(sid=_sids.next(), name=name, size=size, partition_id=resolved)
        return self.add(partition, parents=[disk])

    def partitions_of(self, disk: Disk) -> list[Partition]:
        return [child for child in self.children(disk) if isinstance(child, Partition)]

    def partition_table_of(self, partition: Partition) -> PartitionTable:
        """Return the partition table the partition belongs to.

        Raises:
            UnsupportedOperationError: If the partition is not on a partitioned disk.
        """
        for parent in self.parents(partition):
            if isinstance(parent, Disk) and parent.ptable_type is not None:
                return PartitionTable(parent.ptable_type)
        raise UnsupportedOperationError(f"{partition.name} is not part of a partition table")

    # === Encryption ===

    def encryption_of(self, blk: BlkDevice) -> Encryption | None:
        """Return the encryption layer directly on top of a block device."""
        for child in self.children(blk):
            if isinstance(child, Encryption):
                return child
        return None

    def is_encrypted(self, blk: BlkDevice) -> bool:
        return self.encryption_of(blk) is not None

    def add_encryption(self, blk: BlkDevice, name: str, password: str) -> Encryption:
        """Insert an encryption layer between a block device and its children.

        The devices previously on top of ``blk`` (usually its filesystem) are
        moved on top of the new encryption layer.

        Raises:
            StructuralError: If the device is already encrypted.
        """
        if self.is_encrypted(blk):
            raise StructuralError(f"{blk.name} is already encrypted")
        children = self.children(blk)
        encryption = self.add(Encryption(sid=_sids.next(), name=name, password=password))
        for child in children:
            self.unlink(blk, child)
            self.link(encryption, child)
        self.link(blk, encryption)
        logger.debug("Encryption %s added on top of %s", name, blk.name)
        return encryption

    def remove_encryption(self, blk: BlkDevice) -> None:
        """Remove the encryption layer of a block device.

        The devices on top of the encryption layer are reconnected directly
        to the block device. Does nothing if the device is not encrypted.
        """
        encryption = self.encryption_of(blk)
        if encryption is None:
            return
        children = self.children(encryption)
        self.remove_device(encryption)
        for child in children:
            self.link(blk, child)
        logger.debug("Encryption %s removed from %s", encryption.name, blk.name)

    # === Filesystems ===

    def filesystem_of(self, blk: BlkDevice) -> Filesystem | None:
        """Return the filesystem of a block device, looking through encryption."""
        holder: BlkDevice = self.encryption_of(blk) or blk
        for child in self.children(holder):
            if isinstance(child, Filesystem):
                return child
        return None

    def blk_device_of(self, filesystem: Filesystem) -> BlkDevice | None:
        """Return the block device a filesystem is directly created on."""
        for parent in self.parents(filesystem):
            if isinstance(parent, BlkDevice):
                return parent
        return None

    def create_filesystem(self, blk: BlkDevice, fs_type: FilesystemType) -> Filesystem:
        """Create a filesystem on a block device.

        The filesystem goes on top of the encryption layer when the device is
        encrypted. Btrfs filesystems get their top-level subvolume right away.

        Raises:
            StructuralError: If the device already holds a filesystem.
        """
        if self.filesystem_of(blk) is not None:
            raise StructuralError(f"{blk.name} already holds a filesystem")
        holder: BlkDevice = self.encryption_of(blk) or blk
        filesystem = self.add(Filesystem(sid=_sids.next(), fs_type=fs_type), parents=[holder])
        if fs_type.supports_subvolumes:
            top_level = BtrfsSubvolume(sid=_sids.next(), path="", top_level=True)
            self.add(top_level, parents=[filesystem])
        logger.debug("Created %s filesystem on %s", fs_type.value, blk.name)
        return filesystem

    # === Btrfs subvolumes ===

    def subvolumes_of(self, filesystem: Filesystem) -> list[BtrfsSubvolume]:
        """Return every subvolume of a btrfs filesystem, top-level included."""
        return [d for d in self.descendants(filesystem) if isinstance(d, BtrfsSubvolume)]

    def filesystem_owning(self, subvolume: BtrfsSubvolume) -> Filesystem | None:
        """Return the btrfs filesystem a subvolume belongs to."""
        for ancestor in self.ancestors(subvolume):
            if isinstance(ancestor, Filesystem):
                return ancestor
        return None

    def create_subvolume(
        self,
        parent: BtrfsSubvolume,
        path: str,
        nocow: bool = False,
    ) -> BtrfsSubvolume:
        """Create a subvolume nested in another one."""
        return self.add(
            BtrfsSubvolume(sid=_sids.next(), path=path, nocow=nocow),
            parents=[parent],
        )

    # === Internals ===

    def _walk(self, start: int, edges: dict[int, list[int]]) -> list[int]:
        seen: set[int] = set()
        order: list[int] = []
        queue = list(edges.get(start, []))
        while queue:
            sid = queue.pop(0)
            if sid in seen:
                continue
            seen.add(sid)
            order.append(sid)
            queue.extend(edges.get(sid, []))
        return order
