"""Btrfs subvolume helpers operating on a device graph.

A btrfs filesystem owns exactly one top-level subvolume (path "") and at
most one default subvolume. Proposed subvolumes are created below the
default subvolume, so their paths carry its path as prefix (e.g., "@/home")
while their mount points do not (e.g., "/home").
"""

from __future__ import annotations

import logging
import posixpath
from typing import TYPE_CHECKING

from partctl.errors import StructuralError
from partctl.models.devices import BtrfsSubvolume, Filesystem

if TYPE_CHECKING:
    from partctl.graph.devicegraph import DeviceGraph
    from partctl.subvolumes.specification import SubvolSpecification

logger = logging.getLogger(__name__)

# Path of the default subvolume created together with a new btrfs filesystem
DEFAULT_SUBVOLUME_PATH = "@"


def top_level_subvolume(graph: DeviceGraph, filesystem: Filesystem) -> BtrfsSubvolume:
    """Return the top-level subvolume of a btrfs filesystem.

    Raises:
        StructuralError: If the filesystem does not have exactly one.
    """
    top_levels = [s for s in graph.subvolumes_of(filesystem) if s.top_level]
    if len(top_levels) != 1:
        msg = f"Btrfs filesystem {filesystem.sid} has {len(top_levels)} top-level subvolumes"
        raise StructuralError(msg)
    return top_levels[0]


def default_subvolume(graph: DeviceGraph, filesystem: Filesystem) -> BtrfsSubvolume:
    """Return the default subvolume, which is the top-level one unless set."""
    for subvolume in graph.subvolumes_of(filesystem):
        if subvolume.default:
            return subvolume
    return top_level_subvolume(graph, filesystem)


def find_subvolume(graph: DeviceGraph, filesystem: Filesystem, path: str) -> BtrfsSubvolume | None:
    for subvolume in graph.subvolumes_of(filesystem):
        if subvolume.path == path:
            return subvolume
    return None


def ensure_default_subvolume(
    graph: DeviceGraph,
    filesystem: Filesystem,
    path: str = DEFAULT_SUBVOLUME_PATH,
) -> BtrfsSubvolume:
    """Make the subvolume at ``path`` the default one, creating it if needed.

    An empty path makes the top-level subvolume the default.

    Args:
        graph: Graph holding the filesystem.
        filesystem: Btrfs filesystem.
        path: Path of the default subvolume.

    Returns:
        The default subvolume.
    """
    top_level = top_level_subvolume(graph, filesystem)
    subvolume = top_level if not path else find_subvolume(graph, filesystem, path)
    if subvolume is None:
        subvolume = graph.create_subvolume(top_level, path)

    for other in graph.subvolumes_of(filesystem):
        other.default = other.sid == subvolume.sid
    return subvolume


def subvolume_prefix(graph: DeviceGraph, filesystem: Filesystem) -> str:
    """Return the path prefix proposed subvolumes get (e.g., "@/")."""
    path = default_subvolume(graph, filesystem).path
    return f"{path}/" if path else ""


def subvolume_mount_point(graph: DeviceGraph, filesystem: Filesystem, path: str) -> str | None:
    """Compute the mount point of a subvolume from the filesystem mount point.

    Args:
        graph: Graph holding the filesystem.
        filesystem: Btrfs filesystem.
        path: Subvolume path, possibly prefixed by the default subvolume path.

    Returns:
        Filesystem mount point joined with the unprefixed path, or None when
        the filesystem is not mounted.
    """
    if not filesystem.mount_point:
        return None
    prefix = subvolume_prefix(graph, filesystem)
    relative = path.removeprefix(prefix) if prefix else path
    return posixpath.join(filesystem.mount_point, relative.lstrip("/"))


def add_subvolumes(
    graph: DeviceGraph,
    filesystem: Filesystem,
    specs: list[SubvolSpecification],
    arch: str,
) -> list[BtrfsSubvolume]:
    """Create the subvolumes of the given specifications that are missing.

    Specifications not meant for ``arch`` are skipped, as are the ones whose
    subvolume already exists.

    Returns:
        Newly created subvolumes.
    """
    parent = default_subvolume(graph, filesystem)
    prefix = subvolume_prefix(graph, filesystem)
    added: list[BtrfsSubvolume] = []

    for spec in specs:
        if not spec.applies_to(arch):
            continue
        path = prefix + spec.path
        if find_subvolume(graph, filesystem, path) is not None:
            continue
        added.append(graph.create_subvolume(parent, path, nocow=not spec.copy_on_write))

    if added:
        logger.debug(
            "Added %d proposed subvolumes to filesystem %d", len(added), filesystem.sid
        )
    return added


def delete_subvolume(graph: DeviceGraph, filesystem: Filesystem, path: str) -> None:
    """Delete a subvolume and the subvolumes nested in it, if it exists."""
    subvolume = find_subvolume(graph, filesystem, path)
    if subvolume is not None:
        graph.remove_with_descendants(subvolume)
