"""Actions on devices of the current graph."""

from partctl.actions.delete import (
    Confirmer,
    DeleteBtrfsSubvolume,
    DeleteDevice,
    DeleteDisk,
    DeleteOutcome,
    DeletePartition,
    delete_action_for,
)

__all__ = [
    "Confirmer",
    "DeleteBtrfsSubvolume",
    "DeleteDevice",
    "DeleteDisk",
    "DeleteOutcome",
    "DeletePartition",
    "delete_action_for",
]
