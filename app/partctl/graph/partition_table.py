"""Partition tables and partition id resolution.

Not every partition table type can represent every logical partition id.
A requested id is resolved to the closest id the table actually supports,
so callers never have to know the on-disk limitations.
"""

import logging
from dataclasses import dataclass

from partctl.models.types import WINDOWS_SYSTEM_IDS, PartitionId, PartitionTableType

logger = logging.getLogger(__name__)

SUPPORTED_PARTITION_IDS: dict[PartitionTableType, frozenset[PartitionId]] = {
    PartitionTableType.GPT: frozenset(
        {
            PartitionId.LINUX,
            PartitionId.SWAP,
            PartitionId.LVM,
            PartitionId.RAID,
            PartitionId.ESP,
            PartitionId.BIOS_BOOT,
            PartitionId.PREP,
            PartitionId.WINDOWS_BASIC_DATA,
        }
    ),
    PartitionTableType.MSDOS: frozenset(
        {
            PartitionId.LINUX,
            PartitionId.SWAP,
            PartitionId.LVM,
            PartitionId.RAID,
            PartitionId.ESP,
            PartitionId.PREP,
            PartitionId.NTFS,
            PartitionId.DOS32,
        }
    ),
    PartitionTableType.DASD: frozenset(
        {
            PartitionId.LINUX,
            PartitionId.SWAP,
            PartitionId.LVM,
            PartitionId.RAID,
        }
    ),
}


@dataclass(frozen=True, slots=True)
class PartitionTable:
    """Partition table of a disk.

    Attributes:
        table_type: Type of the partition table (gpt, msdos, dasd).
    """

    table_type: PartitionTableType

    def supports(self, partition_id: PartitionId) -> bool:
        """Check whether the table can store the given partition id."""
        return partition_id in SUPPORTED_PARTITION_IDS[self.table_type]

    def partition_id_for(self, partition_id: PartitionId) -> PartitionId:
        """Resolve a logical partition id to the closest supported one.

        Supported ids are returned unchanged. Windows data ids fall back to
        the first supported member of the Windows family (basic data, NTFS,
        FAT32). Anything else falls back to the Linux id.

        Args:
            partition_id: Requested logical partition id.

        Returns:
            Partition id that can be written to this table.
        """
        if self.supports(partition_id):
            return partition_id

        if partition_id.is_windows_system:
            for candidate in WINDOWS_SYSTEM_IDS:
                if self.supports(candidate):
                    logger.debug(
                        "Partition id %s not supported by %s, using %s",
                        partition_id.value,
                        self.table_type.value,
                        candidate.value,
                    )
                    return candidate

        logger.debug(
            "Partition id %s not supported by %s, using linux",
            partition_id.value,
            self.table_type.value,
        )
        return PartitionId.LINUX
