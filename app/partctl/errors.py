"""Exception hierarchy for partctl.

Controller operations never raise for unmet preconditions (they degrade
to no-ops); these exceptions come from the graph primitives and from the
outer configuration and file layers.
"""


class PartctlError(Exception):
    """Base exception for all partctl errors."""


class DeviceNotFoundError(PartctlError):
    """Raised when a device id is not present in a device graph."""


class StructuralError(PartctlError):
    """Raised when a mutation would break a device graph invariant."""


class UnsupportedOperationError(PartctlError):
    """Raised when an operation is invoked on a device kind that cannot support it."""
