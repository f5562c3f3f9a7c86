from __future__ import annotations

from bpm_sdk.contracts import Node, NodeStatus


class DummyTester:
    """Tester that always passes."""

    def test(self, node: Node) -> bool:
        return True


class RecordingLifecycleHandler:
    """LifecycleHandler that records which phases ran, for dispatch tests."""

    def __init__(self, *, status: NodeStatus = "stopped") -> None:
        self.calls: list[tuple[str, str]] = []
        self._status: NodeStatus = status

    def start(self, node: Node) -> None:
        self.calls.append(("start", node.id))

    def stop(self, node: Node) -> None:
        self.calls.append(("stop", node.id))

    def status(self, node: Node) -> NodeStatus:
        self.calls.append(("status", node.id))
        return self._status

    def remove_data(self, node: Node) -> None:
        self.calls.append(("remove_data", node.id))

    def remove_runtime(self, node: Node) -> None:
        self.calls.append(("remove_runtime", node.id))


class RecordingUpgrader:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def upgrade(self, node: Node) -> None:
        self.calls.append(node.id)
