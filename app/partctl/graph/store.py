"""Holder of the probed and current device graph snapshots."""

from partctl.graph.devicegraph import DeviceGraph


class DeviceGraphs:
    """The two device graphs an editing tool works with.

    ``probed`` describes the system as detected and is only read, to tell
    pre-existing devices apart from planned ones. ``current`` is the graph
    every edit mutates. An instance is passed explicitly to every
    controller and action; there is no process-wide default.

    Attributes:
        probed: Read-only snapshot of the detected system.
        current: Mutable snapshot holding the planned configuration.
    """

    def __init__(self, probed: DeviceGraph, current: DeviceGraph | None = None) -> None:
        """Initialize DeviceGraphs.

        Args:
            probed: Graph describing the detected system.
            current: Working graph. Defaults to a copy of ``probed``.
        """
        self._probed = probed
        self._current = current if current is not None else probed.copy()

    @property
    def probed(self) -> DeviceGraph:
        return self._probed

    @property
    def current(self) -> DeviceGraph:
        return self._current
