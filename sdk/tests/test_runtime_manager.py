import pytest

from bpm_sdk.contracts import Container, Mount, PhaseTimeoutError, RuntimeClientError
from bpm_sdk.runtime import (
    LOG_DRIVER,
    LOG_MAX_FILE,
    LOG_MAX_SIZE,
    RESTART_POLICY,
    BasicManager,
    Deadline,
    TransientContainerError,
)
from bpm_sdk.runtime.fakes import FakeRuntimeClient

CLIENT = Container(
    name="client",
    image="client:latest",
    mounts=(Mount(type="volume", source="data", target="/data"),),
)


def test_ensure_network_twice_mutates_once(node):
    client = FakeRuntimeClient()
    manager = BasicManager(node, client)

    manager.ensure_network("bpm")
    client.reset_calls()
    manager.ensure_network("bpm")

    assert client.networks == {"bpm"}
    assert client.mutating_calls == []


def test_ensure_container_running_twice_mutates_once(node):
    client = FakeRuntimeClient(networks=["bpm"])
    manager = BasicManager(node, client)

    manager.ensure_container_running(CLIENT)
    assert [call.name for call in client.mutating_calls] == ["create_container", "start_container"]

    client.reset_calls()
    manager.ensure_container_running(CLIENT)

    assert client.mutating_calls == []
    assert client.running("bpm-node1-client")


def test_ensure_container_running_always_pulls(node):
    client = FakeRuntimeClient(networks=["bpm"])
    manager = BasicManager(node, client)

    manager.ensure_container_running(CLIENT)
    manager.ensure_container_running(CLIENT)

    assert client.call_names().count("pull_image") == 2


def test_ensure_container_running_starts_stopped_container(node):
    client = FakeRuntimeClient(networks=["bpm"])
    client.add_container("bpm-node1-client", running=False)
    manager = BasicManager(node, client)

    manager.ensure_container_running(CLIENT)

    assert [call.name for call in client.mutating_calls] == ["start_container"]
    assert manager.is_running(CLIENT)


def test_created_container_gets_operational_defaults(node):
    client = FakeRuntimeClient(networks=["bpm"])
    BasicManager(node, client).ensure_container_running(CLIENT)

    config = client.config_of("bpm-node1-client")

    assert config.restart_policy == RESTART_POLICY == "unless-stopped"
    assert config.log_driver == LOG_DRIVER == "json-file"
    assert config.log_options == {"max-size": LOG_MAX_SIZE, "max-file": LOG_MAX_FILE}
    assert config.network == "bpm"
    assert config.mounts == (Mount(type="volume", source="bpm-node1-data", target="/data"),)


def test_mount_sources_are_rendered_and_resolved(node):
    container = Container(
        name="client",
        image="client:latest",
        mounts=(
            Mount(type="bind", source="{{ node.str_parameters['data-dir'] }}", target="/data"),
            Mount(type="bind", source="/etc/ssl", target="/ssl"),
            Mount(type="volume", source="bpm-node1-chain", target="/chain"),
        ),
    )
    client = FakeRuntimeClient(networks=["bpm"])

    BasicManager(node, client).ensure_container_running(container)

    assert client.config_of("bpm-node1-client").mounts == (
        Mount(type="bind", source=str(node.node_directory / "data"), target="/data"),
        Mount(type="bind", source="/etc/ssl", target="/ssl"),
        Mount(type="volume", source="bpm-node1-chain", target="/chain"),
    )


def test_command_file_is_split_into_arguments(node):
    cmd_file = node.configs_directory / "client.cmd"
    cmd_file.parent.mkdir(parents=True)
    cmd_file.write_text("--name\n  node1  \n\n--rpc\n\n", encoding="utf-8")
    client = FakeRuntimeClient(networks=["bpm"])

    BasicManager(node, client).ensure_container_running(
        Container(name="client", image="client:latest", cmd_file="configs/client.cmd")
    )

    assert client.config_of("bpm-node1-client").command == ("--name", "node1", "--rpc")


def test_literal_command_wins_over_command_file(node):
    client = FakeRuntimeClient(networks=["bpm"])

    BasicManager(node, client).ensure_container_running(
        Container(name="client", image="client:latest", cmd=("--dev",), cmd_file="configs/missing.cmd")
    )

    assert client.config_of("bpm-node1-client").command == ("--dev",)


def test_env_file_lines_become_environment(node):
    env_file = node.node_directory / "client.env"
    env_file.parent.mkdir(parents=True)
    env_file.write_text("A=1\n\nB=two\n", encoding="utf-8")
    client = FakeRuntimeClient(networks=["bpm"])

    BasicManager(node, client).ensure_container_running(
        Container(name="client", image="client:latest", env_file="client.env")
    )

    assert client.config_of("bpm-node1-client").environment == ("A=1", "B=two")


def test_prefixed_names_are_not_prefixed_again(node):
    client = FakeRuntimeClient(networks=["bpm"])
    manager = BasicManager(node, client)

    manager.ensure_container_running(Container(name="bpm-node1-client", image="client:latest"))

    assert client.container_names() == ["bpm-node1-client"]
    assert manager.does_exist("client")


@pytest.mark.parametrize(
    "remove",
    [
        lambda manager: manager.remove_container("client"),
        lambda manager: manager.stop_container("client"),
        lambda manager: manager.remove_network("bpm"),
        lambda manager: manager.remove_volume("data"),
    ],
)
def test_removing_missing_resources_is_a_no_op(node, remove):
    client = FakeRuntimeClient()

    remove(BasicManager(node, client))

    assert client.mutating_calls == []


def test_remove_container_stops_before_removing(node):
    client = FakeRuntimeClient()
    client.add_container("bpm-node1-client", running=True)

    BasicManager(node, client).remove_container(CLIENT)

    assert [call.name for call in client.mutating_calls] == ["stop_container", "remove_container"]
    assert client.mutating_calls[-1].kwargs["remove_volumes"] is True
    assert client.container_names() == []


def test_remove_volume_after_container_removal(node):
    client = FakeRuntimeClient(networks=["bpm"])
    manager = BasicManager(node, client)
    manager.ensure_container_running(CLIENT)

    manager.remove_container(CLIENT)
    manager.remove_volume("data")

    assert client.volumes == set()
    assert not manager.does_volume_exist("data")


def test_queries_treat_not_found_as_false(node):
    manager = BasicManager(node, FakeRuntimeClient())

    assert manager.does_exist("client") is False
    assert manager.is_running("client") is False
    assert manager.does_network_exist("bpm") is False
    assert manager.does_volume_exist("data") is False


def test_queries_propagate_other_runtime_errors(node):
    client = FakeRuntimeClient(failures={"inspect_container": RuntimeClientError("daemon unavailable")})

    with pytest.raises(RuntimeClientError, match="daemon unavailable"):
        BasicManager(node, client).is_running("client")


def test_list_names_strips_leading_slash(node):
    client = FakeRuntimeClient(volumes=["bpm-node1-data"])
    client.add_container("bpm-node1-client")

    manager = BasicManager(node, client)

    assert manager.list_names() == ["bpm-node1-client"]
    assert manager.list_volume_ids() == ["bpm-node1-data"]


def test_run_transient_returns_output_and_removes_container(node):
    client = FakeRuntimeClient(networks=["bpm"], logs={"bpm-node1-init": "initialised\n"})

    output = BasicManager(node, client).run_transient(Container(name="init", image="init:1"))

    assert output == "initialised\n"
    assert client.container_names() == []


def test_run_transient_raises_on_non_zero_exit_with_output(node):
    client = FakeRuntimeClient(
        networks=["bpm"],
        exit_codes={"bpm-node1-init": 3},
        logs={"bpm-node1-init": "boom"},
    )

    with pytest.raises(TransientContainerError) as excinfo:
        BasicManager(node, client).run_transient(Container(name="init", image="init:1"))

    assert excinfo.value.status == 3
    assert "boom" in str(excinfo.value)
    assert client.container_names() == []


def test_run_transient_removes_container_when_wait_fails(node):
    client = FakeRuntimeClient(
        networks=["bpm"],
        failures={"wait_container": RuntimeClientError("connection reset")},
    )

    with pytest.raises(RuntimeClientError, match="connection reset"):
        BasicManager(node, client).run_transient(Container(name="init", image="init:1"))

    assert client.container_names() == []


def test_run_transient_bounds_the_wait_by_the_remaining_budget(node):
    client = FakeRuntimeClient(networks=["bpm"])
    manager = BasicManager(node, client, deadline=Deadline(30.0, phase="upgrade"))

    manager.run_transient(Container(name="init", image="init:1"))

    [wait] = [call for call in client.calls if call.name == "wait_container"]
    assert 0 < wait.kwargs["timeout"] <= 30.0


def test_expired_deadline_stops_before_runtime_calls(node):
    client = FakeRuntimeClient()
    manager = BasicManager(node, client, deadline=Deadline(0.0, phase="start"))

    with pytest.raises(PhaseTimeoutError, match="start exceeded"):
        manager.ensure_network("bpm")

    assert client.calls == []


def test_run_transient_cleanup_failure_does_not_hide_the_original_error(node, caplog):
    client = FakeRuntimeClient(
        networks=["bpm"],
        failures={
            "wait_container": RuntimeClientError("connection reset"),
            "remove_container": RuntimeClientError("removal in progress"),
        },
    )

    with pytest.raises(RuntimeClientError, match="connection reset"):
        BasicManager(node, client).run_transient(Container(name="init", image="init:1"))

    assert "Failed to remove transient container 'bpm-node1-init'" in caplog.text
