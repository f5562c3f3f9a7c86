from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path

from bpm_sdk.configuration import PhaseTimeouts, SdkSettings
from bpm_sdk.contracts import Container, Node, NodeStatus, RuntimeClient
from bpm_sdk.orchestration.monitoring import (
    FILEBEAT_CONTAINER_NAME,
    filebeat_container,
    render_monitoring_config,
)
from bpm_sdk.runtime.deadline import Deadline
from bpm_sdk.runtime.docker_client import DockerRuntimeClient
from bpm_sdk.runtime.filesystem import make_directory, remove_tree
from bpm_sdk.runtime.manager import DEFAULT_DOCKER_NETWORK, DOCKER_NETWORK_PARAMETER, BasicManager

logger = logging.getLogger("bpm_sdk.lifecycle")

DATA_DIRECTORY_PARAMETER = "data-dir"
DEFAULT_DATA_DIRECTORY = "data"

ClientFactory = Callable[[float], RuntimeClient]


def docker_client_factory(settings: SdkSettings | None = None) -> ClientFactory:
    """Return a factory that opens a fresh Docker connection per phase."""
    base_url = settings.docker_base_url if settings is not None else None

    def connect(timeout: float) -> RuntimeClient:
        return DockerRuntimeClient.connect(timeout, base_url=base_url)

    return connect


@contextmanager
def phase_manager(
    node: Node,
    phase: str,
    client_factory: ClientFactory,
    timeouts: PhaseTimeouts,
) -> Iterator[BasicManager]:
    """Open a runtime client for one phase and bound its calls by the phase budget."""
    seconds = getattr(timeouts, phase)
    client = client_factory(seconds)
    try:
        yield BasicManager(node, client, deadline=Deadline(seconds, phase=phase))
    finally:
        client.close()


def data_directory(node: Node) -> Path:
    return node.resolve_path(node.string_parameter(DATA_DIRECTORY_PARAMETER, DEFAULT_DATA_DIRECTORY))


def docker_network(node: Node) -> str:
    return node.string_parameter(DOCKER_NETWORK_PARAMETER, DEFAULT_DOCKER_NETWORK)


class DockerLifecycleHandler:
    """
    Run a node as plain docker containers next to a filebeat sidecar.

    Containers are processed one at a time in declaration order.
    """

    def __init__(
        self,
        containers: Sequence[Container],
        *,
        client_factory: ClientFactory | None = None,
        timeouts: PhaseTimeouts | None = None,
    ) -> None:
        self._containers = tuple(containers)
        self._client_factory = client_factory or docker_client_factory()
        self._timeouts = timeouts or PhaseTimeouts()

    def start(self, node: Node) -> None:
        make_directory(node.logs_directory)
        make_directory(data_directory(node))
        make_directory(node.monitoring_directory)

        with self._phase(node, "start") as manager:
            manager.ensure_network(docker_network(node))

            render_monitoring_config(node, self._containers)
            manager.ensure_container_running(filebeat_container(node))

            for container in self._containers:
                manager.ensure_container_running(container)

    def stop(self, node: Node) -> None:
        with self._phase(node, "stop") as manager:
            for container in self._containers:
                manager.stop_container(container)
            manager.stop_container(FILEBEAT_CONTAINER_NAME)

    def status(self, node: Node) -> NodeStatus:
        with self._phase(node, "status") as manager:
            if not manager.does_network_exist(docker_network(node)):
                return "incomplete"

            running = sum(1 for container in self._containers if manager.is_running(container))

        if running == 0:
            return "stopped"
        if running == len(self._containers):
            return "running"
        return "incomplete"

    def remove_data(self, node: Node) -> None:
        """
        Remove the node's volumes and its data directory.

        Containers mounting the volumes must have been removed first (remove-runtime).
        """
        with self._phase(node, "remove_data") as manager:
            for container in self._containers:
                for mount in container.volume_mounts():
                    manager.remove_volume(manager.resolve_mount(mount).source)

        remove_tree(data_directory(node))

    def remove_runtime(self, node: Node) -> None:
        with self._phase(node, "remove_runtime") as manager:
            for container in self._containers:
                manager.remove_container(container)
            manager.remove_container(FILEBEAT_CONTAINER_NAME)

    def _phase(self, node: Node, phase: str) -> AbstractContextManager[BasicManager]:
        return phase_manager(node, phase, self._client_factory, self._timeouts)
