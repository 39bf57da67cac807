"""Unit tests for DeviceGraphs."""

from partctl.graph.devicegraph import DeviceGraph
from partctl.graph.store import DeviceGraphs


class TestDeviceGraphs:
    """Tests for the probed/current holder."""

    def test_current_defaults_to_copy(self, gpt_graph: DeviceGraph) -> None:
        """The current graph starts as an independent copy of the probed one."""
        graphs = DeviceGraphs(gpt_graph)

        assert graphs.probed is gpt_graph
        assert graphs.current is not gpt_graph
        assert {d.sid for d in graphs.current.devices()} == {d.sid for d in gpt_graph.devices()}

    def test_current_mutations_leave_probed_alone(self, gpt_graph: DeviceGraph) -> None:
        """Editing the current graph never touches the probed one."""
        graphs = DeviceGraphs(gpt_graph)

        graphs.current.remove_with_descendants(graphs.current.find_by_name("/dev/sda1"))

        assert graphs.probed.find_by_name("/dev/sda1") is not None

    def test_explicit_current(self, gpt_graph: DeviceGraph) -> None:
        """An explicit current graph is used as is."""
        current = gpt_graph.copy()
        graphs = DeviceGraphs(gpt_graph, current)
        assert graphs.current is current
