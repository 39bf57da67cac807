"""partctl - transactional filesystem configuration on an in-memory device graph."""

__version__ = "0.1.0"
