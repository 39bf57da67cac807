"""Detection of btrfs subvolumes hidden by other mounted filesystems.

A subvolume is shadowed when another filesystem, or a subvolume of another
filesystem, is mounted at or above the subvolume mount point: once that
mount is active, the subvolume content would be hidden below it.
"""

import logging

from partctl.graph.devicegraph import DeviceGraph

logger = logging.getLogger(__name__)

# Reserved mount point of swap areas, never part of the directory tree
SWAP_MOUNT_POINT = "swap"


def is_shadowing(mount_point: str | None, other_mount_point: str | None) -> bool:
    """Check whether ``other_mount_point`` hides ``mount_point``.

    Paths are compared by whole components, so "/boot" shadows "/boot/grub2"
    but not "/bootinger". A mount at "/" shadows nothing.

    Args:
        mount_point: Mount point that could be hidden.
        other_mount_point: Mount point that could hide it.

    Returns:
        True if ``other_mount_point`` is equal to or an ancestor of
        ``mount_point``.
    """
    if not mount_point or not other_mount_point:
        return False
    if SWAP_MOUNT_POINT in (mount_point, other_mount_point):
        return False
    if other_mount_point == "/":
        return False
    return f"{mount_point}/".startswith(f"{other_mount_point}/")


def _active_mount_points(graph: DeviceGraph) -> list[tuple[str, int]]:
    """Collect (mount point, owning filesystem sid) pairs of the whole graph."""
    mount_points: list[tuple[str, int]] = []

    for filesystem in graph.filesystems():
        if filesystem.mount_point and filesystem.mount_point != SWAP_MOUNT_POINT:
            mount_points.append((filesystem.mount_point, filesystem.sid))

    for subvolume in graph.subvolumes():
        if not subvolume.mount_point:
            continue
        owner = graph.filesystem_owning(subvolume)
        if owner is not None:
            mount_points.append((subvolume.mount_point, owner.sid))

    return mount_points


def refresh_subvolumes_shadowing(graph: DeviceGraph) -> None:
    """Recompute the shadowed flag of every subvolume in the graph.

    This is a full-graph pass: the result only depends on the current mount
    points, never on previously computed flags, so running it twice in a
    row yields the same flags.

    Args:
        graph: Graph whose subvolumes are updated in place.
    """
    mount_points = _active_mount_points(graph)
    shadowed_count = 0

    for subvolume in graph.subvolumes():
        owner = graph.filesystem_owning(subvolume)
        owner_sid = owner.sid if owner is not None else None
        subvolume.shadowed = any(
            sid != owner_sid and is_shadowing(subvolume.mount_point, other)
            for other, sid in mount_points
        )
        if subvolume.shadowed:
            shadowed_count += 1

    logger.debug("Shadowing refreshed: %d subvolumes shadowed", shadowed_count)
