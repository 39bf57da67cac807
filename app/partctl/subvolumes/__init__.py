"""Btrfs subvolume proposals and shadowing detection."""

from partctl.subvolumes.shadowing import is_shadowing, refresh_subvolumes_shadowing
from partctl.subvolumes.specification import SubvolSpecification, fallback_list

__all__ = [
    "SubvolSpecification",
    "fallback_list",
    "is_shadowing",
    "refresh_subvolumes_shadowing",
]
