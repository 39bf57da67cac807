"""fstab option editing for filesystems."""

from partctl.fstab.options import (
    FLAG_OPTIONS,
    get_flag,
    get_quota,
    get_value,
    set_flag,
    set_quota,
    set_value,
    supported,
)

__all__ = [
    "FLAG_OPTIONS",
    "get_flag",
    "get_quota",
    "get_value",
    "set_flag",
    "set_quota",
    "set_value",
    "supported",
]
