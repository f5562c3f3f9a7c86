from bpm_sdk.contracts import Container
from bpm_sdk.orchestration import DockerUpgrader
from bpm_sdk.runtime.fakes import FakeRuntimeClient

CONTAINERS = (
    Container(name="client", image="client:2.0"),
    Container(name="indexer", image="indexer:2.0"),
)


def test_upgrade_recreates_only_previously_running_containers(node):
    client = FakeRuntimeClient(networks=["bpm"])
    client.add_container("bpm-node1-client", image="client:1.0", running=True)
    client.add_container("bpm-node1-indexer", image="indexer:1.0", running=False)

    DockerUpgrader(CONTAINERS, client_factory=lambda timeout: client).upgrade(node)

    assert client.container_names() == ["bpm-node1-client"]
    assert client.running("bpm-node1-client")
    assert client.config_of("bpm-node1-client").image == "client:2.0"
    removed = [call.kwargs["name"] for call in client.calls if call.name == "remove_container"]
    assert removed == ["bpm-node1-client", "bpm-node1-indexer"]


def test_upgrade_without_containers_is_a_no_op(node):
    client = FakeRuntimeClient(networks=["bpm"])

    DockerUpgrader(CONTAINERS, client_factory=lambda timeout: client).upgrade(node)

    assert client.mutating_calls == []
    assert client.closed


def test_upgrade_uses_upgrade_time_budget(node):
    budgets = []
    client = FakeRuntimeClient(networks=["bpm"])

    def factory(timeout):
        budgets.append(timeout)
        return client

    DockerUpgrader(CONTAINERS, client_factory=factory).upgrade(node)

    assert budgets == [300.0]
